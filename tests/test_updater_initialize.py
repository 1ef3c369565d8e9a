"""Tests for BulkGradeUpdater.initialize."""

from __future__ import annotations

import pytest
import requests
from conftest import API_KEY, ASSIGNMENT_ID, COURSE_ID, HOST, make_response, request_calls, sent_json

from canvas_grade_updater.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    InvalidCredentialError,
    NotFoundError,
)
from canvas_grade_updater.updater import BulkGradeUpdater


def _route(statuses: dict[str, int]):
    def route(method, url, **kwargs):
        for suffix, status in statuses.items():
            if url.endswith(suffix):
                return make_response(status)
        return make_response(200, {})

    return route


@pytest.mark.parametrize(
    "api_key, course_id, assignment_id, parameter",
    [
        (123, COURSE_ID, ASSIGNMENT_ID, "api_key"),
        (None, COURSE_ID, ASSIGNMENT_ID, "api_key"),
        (API_KEY, 4.2, ASSIGNMENT_ID, "course_id"),
        (API_KEY, None, ASSIGNMENT_ID, "course_id"),
        (API_KEY, True, ASSIGNMENT_ID, "course_id"),
        (API_KEY, COURSE_ID, [7], "assignment_id"),
        (API_KEY, COURSE_ID, {"id": 7}, "assignment_id"),
    ],
)
def test_invalid_arguments_fail_before_any_request(session, api_key, course_id, assignment_id, parameter):
    updater = BulkGradeUpdater(host=HOST, session=session)

    with pytest.raises(InvalidArgumentError) as exc_info:
        updater.initialize(api_key, course_id, assignment_id)

    assert exc_info.value.parameter == parameter
    assert parameter in str(exc_info.value)
    session.request.assert_not_called()


def test_successful_initialize_returns_self_and_sets_endpoints(session):
    updater = BulkGradeUpdater(host=HOST, session=session)

    assert updater.initialize(API_KEY, "42", 7) is updater
    assert updater.api_key == API_KEY
    assert updater.course_id == "42"
    assert updater.assignment_id == 7
    assert updater.submissions_endpoint == "courses/42/assignments/7/submissions"
    assert updater.update_endpoint == "courses/42/assignments/7/submissions/update_grades"


def test_initialize_checks_credential_course_and_assignment(session):
    BulkGradeUpdater(host=HOST, session=session).initialize(API_KEY, COURSE_ID, ASSIGNMENT_ID)

    calls = [c.args for c in session.request.call_args_list]
    assert calls == [
        ("GET", f"{HOST}courses"),
        ("GET", f"{HOST}courses/{COURSE_ID}"),
        ("GET", f"{HOST}courses/{COURSE_ID}/assignments/{ASSIGNMENT_ID}"),
    ]


@pytest.mark.parametrize("status", [400, 401, 403, 404, 500])
def test_credential_failure_is_collapsed(session, status):
    session.request.side_effect = _route({"/courses": status})
    updater = BulkGradeUpdater(host=HOST, session=session)

    with pytest.raises(InvalidCredentialError, match="Invalid or unauthorized API key") as exc_info:
        updater.initialize(API_KEY, COURSE_ID, ASSIGNMENT_ID)

    assert exc_info.value.__cause__ is None
    assert exc_info.value.__suppress_context__
    assert updater.api_key == ""
    assert session.request.call_count == 1


def test_network_failure_on_credential_check_is_collapsed(session):
    session.request.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(InvalidCredentialError):
        BulkGradeUpdater(host=HOST, session=session).initialize(API_KEY, COURSE_ID, ASSIGNMENT_ID)


def test_course_failure_propagates_typed_error(session):
    session.request.side_effect = _route({f"/courses/{COURSE_ID}": 403})
    updater = BulkGradeUpdater(host=HOST, session=session)

    with pytest.raises(ForbiddenError) as exc_info:
        updater.initialize(API_KEY, COURSE_ID, ASSIGNMENT_ID)

    assert exc_info.value.path == f"courses/{COURSE_ID}"
    assert updater.submissions_endpoint == ""


def test_assignment_failure_propagates_typed_error(session):
    session.request.side_effect = _route({f"/assignments/{ASSIGNMENT_ID}": 404})
    updater = BulkGradeUpdater(host=HOST, session=session)

    with pytest.raises(NotFoundError):
        updater.initialize(API_KEY, COURSE_ID, ASSIGNMENT_ID)

    assert updater.submissions_endpoint == ""


def test_initialize_again_overwrites_configuration(session):
    updater = BulkGradeUpdater(host=HOST, session=session).initialize(API_KEY, COURSE_ID, ASSIGNMENT_ID)
    updater.initialize("other-key", 99, 100)

    assert updater.api_key == "other-key"
    assert updater.submissions_endpoint == "courses/99/assignments/100/submissions"


def test_initialize_for_another_assignment_drops_queued_edits(session):
    updater = BulkGradeUpdater(host=HOST, session=session).initialize(API_KEY, 1, 2)
    updater.add_student(1001, 97, "x")
    updater.last_failed_uploads = ["1001"]

    updater.initialize(API_KEY, 1, 3)
    assert updater.grade_data == {}
    assert updater.last_failed_uploads == []

    updater.add_student(1002, 80)
    session.reset_mock()
    updater.send_update()

    batch = request_calls(session, "courses/1/assignments/3/submissions/update_grades")
    assert len(batch) == 1
    assert sent_json(batch[0]) == {"grade_data": {"1002": {"posted_grade": "80"}}}


def test_initialize_for_same_assignment_keeps_queued_edits(session):
    updater = BulkGradeUpdater(host=HOST, session=session).initialize(API_KEY, 1, 2)
    updater.add_student(1001, 97)

    updater.initialize("rotated-key", "1", "2")

    assert updater.grade_data == {"1001": {"posted_grade": "97"}}
    assert updater.api_key == "rotated-key"


def test_instances_do_not_share_state(session):
    first = BulkGradeUpdater(host=HOST, session=session).initialize(API_KEY, 1, 2)
    second = BulkGradeUpdater(host=HOST, session=session).initialize("other-key", 3, 4)

    first.add_student(1001, 90)

    assert second.grade_data == {}
    assert first.api_key == API_KEY
    assert first.submissions_endpoint == "courses/1/assignments/2/submissions"
