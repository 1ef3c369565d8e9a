"""Shared fixtures: a mocked requests session and canned Canvas responses."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from canvas_grade_updater.updater import BulkGradeUpdater

HOST = "https://canvas.test/api/v1/"
API_KEY = "secret-token"
COURSE_ID = 42
ASSIGNMENT_ID = 7


def make_response(status_code: int = 200, json_data: Any = None, headers: dict[str, str] | None = None) -> MagicMock:
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    if json_data is None:
        response.json.side_effect = ValueError("No JSON body")
    else:
        response.json.return_value = json_data
    return response


def request_calls(session: MagicMock, url_suffix: str) -> list[Any]:
    """Calls to session.request whose URL ends with ``url_suffix``."""
    return [c for c in session.request.call_args_list if c.args[1].endswith(url_suffix)]


def sent_json(call: Any) -> Any:
    """Decode the JSON body of a recorded session.request call."""
    return json.loads(call.kwargs["data"])


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = make_response(200, [])
    return session


@pytest.fixture
def updater(session: MagicMock) -> BulkGradeUpdater:
    """Initialized updater with the init calls cleared from the mock."""
    updater = BulkGradeUpdater(host=HOST, session=session).initialize(API_KEY, COURSE_ID, ASSIGNMENT_ID)
    session.reset_mock()
    return updater
