"""Exception classes raised by the grade updater."""

from __future__ import annotations


class GradeUpdaterError(Exception):
    """Base exception for all grade updater errors."""


class InvalidArgumentError(GradeUpdaterError, TypeError):
    """A caller-supplied argument has the wrong type.

    Raised synchronously, before any network request is made.
    """

    def __init__(self, parameter: str, expected: str):
        super().__init__(f"{parameter} must be {expected}.")
        self.parameter = parameter


class InvalidCredentialError(GradeUpdaterError):
    """The API key was rejected while listing courses."""


class NotInitializedError(GradeUpdaterError):
    """An operation was attempted before `initialize` completed."""


class StudentNotQueuedError(GradeUpdaterError):
    """`update_student` was called for a student that was never added."""

    def __init__(self, student_id: str | int):
        super().__init__(f"Student {student_id} does not exist in queued data.")
        self.student_id = student_id


class CanvasRequestError(GradeUpdaterError):
    """A Canvas REST call returned a non-2xx status."""

    def __init__(self, message: str, path: str, status_code: int):
        super().__init__(message)
        self.path = path
        self.status_code = status_code

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} (Path: {self.path}, Status Code: {self.status_code})"


class BadRequestError(CanvasRequestError):
    """HTTP 400."""


class UnauthorizedError(CanvasRequestError):
    """HTTP 401."""


class ForbiddenError(CanvasRequestError):
    """HTTP 403."""


class NotFoundError(CanvasRequestError):
    """HTTP 404."""


class UnexpectedStatusError(CanvasRequestError):
    """Any other non-2xx status."""


class CommentUploadError(GradeUpdaterError):
    """Uploading a comment as a file failed for one student."""

    def __init__(self, message: str, student_id: str, status_code: int | None = None):
        super().__init__(message)
        self.student_id = student_id
        self.status_code = status_code
