"""Bulk grade updates for one Canvas assignment.

Example:
    updater = BulkGradeUpdater().initialize(api_key, course_id, assignment_id)
    updater.add_student(1001, 97, "-3, no name.")
    updater.add_student(1002, 100, "Full marks.")
    updater.send_update()
"""

from __future__ import annotations

import copy
import logging
import math
from numbers import Real
from typing import Any, Final

import requests
from tqdm import tqdm

from canvas_grade_updater.canvas_requests import DEFAULT_CANVAS_HOST, make_request
from canvas_grade_updater.comment_files import DEFAULT_COMMENT_FOLDER, upload_comment_file
from canvas_grade_updater.exceptions import (
    CanvasRequestError,
    CommentUploadError,
    InvalidArgumentError,
    InvalidCredentialError,
    NotInitializedError,
    StudentNotQueuedError,
)
from canvas_grade_updater.types import GradeEdit

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()
"""Marks an omitted ``comment`` in `BulkGradeUpdater.update_student`."""


def _is_id(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def format_grade(grade: Real) -> str:
    """Render a numeric grade the way Canvas expects ``posted_grade``.

    Integral values drop the fractional part, so ``97.0`` becomes ``"97"``.
    """
    if isinstance(grade, float) and grade.is_integer():
        return str(int(grade))
    return str(grade)


class BulkGradeUpdater:
    """Queue grade/comment edits for one assignment and submit them in one request.

    The constructor alone does not make the updater usable; call `initialize`.
    """

    def __init__(
        self,
        host: str = DEFAULT_CANVAS_HOST,
        session: requests.Session | None = None,
        comment_folder: str = DEFAULT_COMMENT_FOLDER,
        timeout: float | None = None,
        show_progress: bool = False,
    ):
        self.host = host
        self.session = session if session is not None else requests.Session()
        self.comment_folder = comment_folder
        self.timeout = timeout
        self.show_progress = show_progress

        self.api_key = ""
        self.course_id: str | int = 0
        self.assignment_id: str | int = 0
        self.submissions_endpoint = ""
        self.update_endpoint = ""
        self.grade_data: dict[str, GradeEdit] = {}
        self.last_failed_uploads: list[str] = []

    def _request(self, path: str, data: Any = None, method: str = "POST", api_key: str | None = None) -> requests.Response:
        return make_request(
            self.session,
            self.host,
            path,
            api_key if api_key is not None else self.api_key,
            data,
            method,
            timeout=self.timeout,
        )

    def _require_initialized(self, action: str) -> None:
        if not self.submissions_endpoint:
            raise NotInitializedError(
                f"Did not initialize (call initialize), or initialization failed. Cannot {action}."
            )

    def initialize(self, api_key: str, course_id: str | int, assignment_id: str | int) -> BulkGradeUpdater:
        """Validate access to the assignment and configure this updater.

        Args:
            api_key: API key of the user to act as.
            course_id: ID of the course with the assignment.
            assignment_id: ID of the assignment to grade.

        Returns:
            This updater, ready to queue edits.

        Raises:
            InvalidArgumentError: If an argument has the wrong type.
            InvalidCredentialError: If the API key cannot list courses.
            CanvasRequestError: If the course or assignment is not accessible.
        """
        if not isinstance(api_key, str):
            raise InvalidArgumentError("api_key", "a string")
        if not _is_id(course_id):
            raise InvalidArgumentError("course_id", "a string or integer")
        if not _is_id(assignment_id):
            raise InvalidArgumentError("assignment_id", "a string or integer")

        try:
            self._request("courses", method="GET", api_key=api_key)
        except (CanvasRequestError, requests.RequestException):
            raise InvalidCredentialError("Invalid or unauthorized API key.") from None

        self._request(f"courses/{course_id}", method="GET", api_key=api_key)
        self._request(f"courses/{course_id}/assignments/{assignment_id}", method="GET", api_key=api_key)

        submissions_endpoint = f"courses/{course_id}/assignments/{assignment_id}/submissions"
        if submissions_endpoint != self.submissions_endpoint:
            # Edits queued for another assignment must never reach this one.
            self.grade_data.clear()
            self.last_failed_uploads = []

        self.api_key = api_key
        self.course_id = course_id
        self.assignment_id = assignment_id
        self.submissions_endpoint = submissions_endpoint
        self.update_endpoint = f"{self.submissions_endpoint}/update_grades"
        logger.info("Initialized grade updater for course %s, assignment %s", course_id, assignment_id)
        return self

    def add_student(self, student_id: str | int, grade: Real, comment: str | None = None) -> None:
        """Queue a grade for a student, replacing any earlier edit for them.

        Args:
            student_id: ID of the student to grade.
            grade: Grade to give the student.
            comment: Optional comment to leave on the submission.
        """
        self._require_initialized("add student")
        if not _is_id(student_id):
            raise InvalidArgumentError("student_id", "a string or integer")
        if not _is_number(grade):
            raise InvalidArgumentError("grade", "a number")
        if comment is not None and not isinstance(comment, str):
            raise InvalidArgumentError("comment", "a string")

        edit = GradeEdit(posted_grade=format_grade(grade))
        if comment:
            edit["text_comment"] = comment
        self.grade_data[str(student_id)] = edit

    def update_student(
        self,
        student_id: str | int,
        grade: Real | None = None,
        comment: str | None | _Unset = UNSET,
    ) -> None:
        """Change a queued student's grade or comment.

        An empty string or None removes the comment; omitting it leaves it as is.

        Raises:
            StudentNotQueuedError: If the student was never added.
            InvalidArgumentError: If grade or comment has the wrong type.
        """
        key = str(student_id)
        if key not in self.grade_data:
            raise StudentNotQueuedError(student_id)
        if grade is not None and not _is_number(grade):
            raise InvalidArgumentError("grade", "a number")
        if not isinstance(comment, (str, _Unset)) and comment is not None:
            raise InvalidArgumentError("comment", "a string")

        edit = self.grade_data[key]
        if grade is not None:
            edit["posted_grade"] = format_grade(grade)
        if comment is None or comment == "":
            edit.pop("text_comment", None)
        elif isinstance(comment, str):
            edit["text_comment"] = comment

    @property
    def pending_edits(self) -> dict[str, GradeEdit]:
        """Copy of the queued edits keyed by student id."""
        return copy.deepcopy(self.grade_data)

    def clear(self) -> None:
        """Drop all queued edits."""
        self.grade_data.clear()

    def _upload_comments_as_files(self) -> list[str]:
        failed: list[str] = []
        students = [sid for sid, edit in self.grade_data.items() if edit.get("text_comment")]

        for student_id in tqdm(students, desc="Uploading comments", unit="student", disable=not self.show_progress):
            edit = self.grade_data[student_id]
            try:
                file_id = upload_comment_file(
                    self.session,
                    self.host,
                    self.api_key,
                    self.submissions_endpoint,
                    self.assignment_id,
                    student_id,
                    edit["text_comment"],
                    parent_folder_path=self.comment_folder,
                    timeout=self.timeout,
                )
            except (CommentUploadError, CanvasRequestError, requests.RequestException) as e:
                logger.debug("Comment upload failed for student %s: %s", student_id, e)
                failed.append(student_id)
                continue

            del edit["text_comment"]
            edit["file_ids"] = [file_id]

        if failed:
            logger.warning(
                "Failed to convert the following students' comments to files:\n- %s",
                "\n- ".join(failed),
            )
        return failed

    def send_update(self, comments_as_files: bool = False) -> requests.Response | None:
        """Submit all queued edits in one request.

        Args:
            comments_as_files: Upload each comment as a text file attached to
                the submission instead of sending it as a text comment.
                Students whose upload fails keep their text comment.

        Returns:
            Response of the batch update, or None if nothing was queued.

        Raises:
            NotInitializedError: If `initialize` has not completed.
            CanvasRequestError: If the batch update is rejected.
        """
        self._require_initialized("send update")
        self.last_failed_uploads = []
        if not self.grade_data:
            return None

        if comments_as_files:
            self.last_failed_uploads = self._upload_comments_as_files()

        response = self._request(self.update_endpoint, {"grade_data": self.pending_edits})
        logger.info("Submitted grades for %d student(s)", len(self.grade_data))
        return response
