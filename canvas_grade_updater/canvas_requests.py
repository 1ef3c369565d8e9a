"""Authenticated Canvas REST requests with typed status errors."""

from __future__ import annotations

import json
import logging
from typing import Any

import requests

from canvas_grade_updater.exceptions import (
    BadRequestError,
    CanvasRequestError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    UnexpectedStatusError,
)

logger = logging.getLogger(__name__)

DEFAULT_CANVAS_HOST: str = "https://sit.instructure.com/api/v1/"

_STATUS_ERRORS: dict[int, tuple[type[CanvasRequestError], str]] = {
    400: (BadRequestError, "Bad request to {path}"),
    401: (UnauthorizedError, "Unauthorized request to {path}"),
    403: (ForbiddenError, "Forbidden request to {path}"),
    404: (NotFoundError, "No resource found at {path}"),
}


def build_url(host: str, path: str) -> str:
    """Join the API host and a relative path with exactly one slash between them.

    Args:
        host: API root, with or without a trailing slash.
        path: Endpoint path, with or without a leading slash.

    Returns:
        Absolute URL.
    """
    return host.rstrip("/") + "/" + path.lstrip("/")


def auth_headers(api_key: str) -> dict[str, str]:
    """Headers sent with every Canvas API call."""
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def check_response(response: requests.Response, path: str) -> requests.Response:
    """Return the response if it is 2xx, otherwise raise the matching error.

    Args:
        response: Response to inspect.
        path: Path reported in the error.

    Returns:
        The same response.

    Raises:
        CanvasRequestError: Subclass chosen by status code.
    """
    status = response.status_code
    if 200 <= status < 300:
        return response

    if status in _STATUS_ERRORS:
        error_cls, template = _STATUS_ERRORS[status]
        raise error_cls(template.format(path=path), path=path, status_code=status)
    raise UnexpectedStatusError(f"Unexpected HTTP response code '{status}'", path=path, status_code=status)


def make_request(
    session: requests.Session,
    host: str,
    path: str,
    api_key: str,
    data: Any = None,
    method: str = "POST",
    timeout: float | None = None,
) -> requests.Response:
    """Make an authenticated Canvas REST request.

    Args:
        session: HTTP session used to send the request.
        host: API root URL.
        path: Endpoint path relative to ``host``.
        api_key: Bearer token.
        data: JSON-serializable body. Ignored for GET.
        method: HTTP method (default: POST).
        timeout: Request timeout in seconds, or None to wait indefinitely.

    Returns:
        The raw 2xx response.

    Raises:
        CanvasRequestError: If Canvas answers with a non-2xx status.
        requests.RequestException: For network errors.
    """
    url = build_url(host, path)
    body = None
    if method.upper() != "GET":
        body = json.dumps(data if data is not None else {})

    logger.debug("%s %s", method.upper(), url)
    response = session.request(method.upper(), url, headers=auth_headers(api_key), data=body, timeout=timeout)
    return check_response(response, path)
