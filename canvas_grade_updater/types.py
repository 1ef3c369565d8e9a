"""Type definitions for the grade updater."""

from __future__ import annotations

from typing import NotRequired, TypedDict


class GradeEdit(TypedDict):
    """Pending grade/comment change for one student, as sent in ``grade_data``."""

    posted_grade: str
    text_comment: NotRequired[str]
    file_ids: NotRequired[list[int | str]]


class UploadTarget(TypedDict):
    """Canvas response to a file-creation request."""

    upload_url: str
    upload_params: dict[str, str]


class GradeRow(TypedDict):
    """One row read from the grades CSV."""

    student_id: str
    grade: str
    comment: str


class UpdateReport(TypedDict):
    """Summary of one workflow run."""

    course_id: str
    assignment_id: str
    queued: list[str]
    invalid_rows: list[str]
    failed_comment_uploads: list[str]
    status_code: int | None
