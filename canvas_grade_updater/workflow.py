"""High-level workflow: grades CSV in, one Canvas batch update out."""

from __future__ import annotations

import math
from pathlib import Path

from canvas_grade_updater.configs import load_config
from canvas_grade_updater.csv_utils import read_grade_rows
from canvas_grade_updater.reporting import save_report
from canvas_grade_updater.types import GradeRow, UpdateReport
from canvas_grade_updater.updater import BulkGradeUpdater


def _parse_grade(value: str) -> int | float:
    """Parse a CSV grade cell as a number.

    Raises:
        ValueError: If the value is not numeric or not finite.
    """
    try:
        return int(value)
    except ValueError:
        grade = float(value)
    if not math.isfinite(grade):
        raise ValueError(f"Grade is not finite: {value}")
    return grade


def queue_rows(updater: BulkGradeUpdater, rows: list[GradeRow]) -> tuple[list[str], list[str]]:
    """Add every CSV row with a numeric grade to the updater.

    Args:
        updater: Initialized updater.
        rows: Rows read from the grades CSV.

    Returns:
        Tuple of (queued student IDs, messages for skipped rows). A student
        listed more than once appears once; the last row wins.
    """
    queued: list[str] = []
    invalid_rows: list[str] = []

    for row in rows:
        try:
            grade = _parse_grade(row["grade"])
        except ValueError:
            invalid_rows.append(f"Student {row['student_id']}: grade '{row['grade']}' is not a number")
            continue

        updater.add_student(row["student_id"], grade, row["comment"] or None)
        queued.append(row["student_id"])

    return list(dict.fromkeys(queued)), invalid_rows


def run(config_path: Path) -> UpdateReport:
    """Main workflow function.

    Reads configuration and the grades CSV, validates access to the
    assignment, queues every student and submits one batch update.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Report of queued students, skipped rows and failed comment uploads.

    Raises:
        FileNotFoundError: If config or CSV files don't exist.
        GradeUpdaterError: If Canvas rejects the credential, assignment or update.
    """
    config = load_config(config_path)

    rows = read_grade_rows(
        config.grades.csv,
        config.grades.student_id,
        config.grades.grade,
        config.grades.comment,
    )
    print(f"Loaded {len(rows)} grade row(s) from {config.grades.csv}")

    updater = BulkGradeUpdater(
        host=config.canvas.host,
        comment_folder=config.upload.comment_folder,
        timeout=config.upload.request_timeout_seconds,
        show_progress=True,
    ).initialize(config.canvas.api_key, config.canvas.course_id, config.canvas.assignment_id)
    print(f"Target: course {config.canvas.course_id} / assignment {config.canvas.assignment_id}")

    queued, invalid_rows = queue_rows(updater, rows)
    for message in invalid_rows:
        print(f"Skipping row - {message}")

    response = updater.send_update(comments_as_files=config.upload.comments_as_files)

    report = UpdateReport(
        course_id=str(config.canvas.course_id),
        assignment_id=str(config.canvas.assignment_id),
        queued=queued,
        invalid_rows=invalid_rows,
        failed_comment_uploads=list(updater.last_failed_uploads),
        status_code=response.status_code if response is not None else None,
    )

    if config.report_path:
        save_report(report, config.report_path)

    print(f"✓ Submitted grades for {len(queued)} student(s)")
    return report
