"""Upload submission comments to Canvas as text-file attachments.

Canvas file uploads are a two-step protocol:
1. POST the file metadata to the submission's comment-files endpoint to get an
   upload URL and the form parameters that must accompany the upload.
2. POST a multipart form with those parameters and the file content to the
   upload URL. Canvas answers 201 with the file record, or a 3xx whose
   ``Location`` points at the file record.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

import requests

from canvas_grade_updater.canvas_requests import auth_headers, check_response, make_request
from canvas_grade_updater.exceptions import CommentUploadError
from canvas_grade_updater.types import UploadTarget

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_FOLDER: str = "autograder/comments"


def comment_file_name(assignment_id: str | int, student_id: str | int) -> str:
    """File name used for a student's comment attachment."""
    return f"{assignment_id}-{student_id}.txt"


def request_upload_target(
    session: requests.Session,
    host: str,
    api_key: str,
    submissions_endpoint: str,
    student_id: str,
    file_name: str,
    content: bytes,
    parent_folder_path: str = DEFAULT_COMMENT_FOLDER,
    timeout: float | None = None,
) -> UploadTarget:
    """Allocate a comment file on Canvas (step 1).

    Raises:
        CanvasRequestError: If Canvas rejects the file-creation request.
        CommentUploadError: If the response lacks ``upload_url``/``upload_params``.
    """
    response = make_request(
        session,
        host,
        f"{submissions_endpoint}/{student_id}/comments/files",
        api_key,
        {
            "name": file_name,
            "content_type": "text/plain",
            "parent_folder_path": parent_folder_path,
            "size": len(content),
        },
        timeout=timeout,
    )
    try:
        payload = response.json()
        return UploadTarget(upload_url=payload["upload_url"], upload_params=dict(payload["upload_params"]))
    except (ValueError, KeyError, TypeError) as e:
        raise CommentUploadError(f"Malformed upload target for student {student_id}: {e}", student_id) from e


def upload_file_content(
    session: requests.Session,
    target: UploadTarget,
    api_key: str,
    student_id: str,
    file_name: str,
    content: bytes,
    timeout: float | None = None,
) -> int | str:
    """Send the file content to the upload URL (step 2) and return the new file id.

    The upload URL gets no Authorization header. On a redirect the file record
    is fetched from ``Location``, resolved against the upload URL, with the API key.

    Raises:
        CommentUploadError: If the upload is rejected or no file id comes back.
        CanvasRequestError: If fetching the redirected file record fails.
    """
    response = session.post(
        target["upload_url"],
        data=target["upload_params"],
        files={"file": (file_name, content, "text/plain")},
        allow_redirects=False,
        timeout=timeout,
    )
    status = response.status_code

    if 300 <= status < 400:
        location = response.headers.get("Location")
        if not location:
            raise CommentUploadError(f"Upload redirect for student {student_id} has no Location", student_id, status)
        location = urljoin(target["upload_url"], location)
        response = check_response(
            session.get(location, headers=auth_headers(api_key), timeout=timeout),
            location,
        )
    elif status != 201:
        raise CommentUploadError(f"Upload for student {student_id} returned HTTP {status}", student_id, status)

    try:
        return response.json()["id"]
    except (ValueError, KeyError, TypeError) as e:
        raise CommentUploadError(f"Upload for student {student_id} returned no file id", student_id, status) from e


def upload_comment_file(
    session: requests.Session,
    host: str,
    api_key: str,
    submissions_endpoint: str,
    assignment_id: str | int,
    student_id: str,
    comment: str,
    parent_folder_path: str = DEFAULT_COMMENT_FOLDER,
    timeout: float | None = None,
) -> int | str:
    """Upload one student's comment as a text file attached to their submission.

    Args:
        session: HTTP session.
        host: API root URL.
        api_key: Bearer token.
        submissions_endpoint: ``courses/{c}/assignments/{a}/submissions``.
        assignment_id: Assignment id, used in the file name.
        student_id: Student whose submission receives the file.
        comment: Comment text to upload.
        parent_folder_path: Canvas folder the file is created in.
        timeout: Request timeout in seconds, or None.

    Returns:
        The Canvas file id.

    Raises:
        CommentUploadError: If either step fails at the upload level.
        CanvasRequestError: If a Canvas API call returns a non-2xx status.
        requests.RequestException: For network errors.
    """
    file_name = comment_file_name(assignment_id, student_id)
    content = comment.encode("utf-8")

    target = request_upload_target(
        session,
        host,
        api_key,
        submissions_endpoint,
        student_id,
        file_name,
        content,
        parent_folder_path,
        timeout,
    )
    file_id = upload_file_content(session, target, api_key, student_id, file_name, content, timeout)
    logger.debug("Uploaded comment for student %s as file %s", student_id, file_id)
    return file_id
