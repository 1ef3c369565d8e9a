"""Report generation utilities for YAML and CSV formats."""

from __future__ import annotations

import csv
from pathlib import Path

import yaml

from canvas_grade_updater.types import UpdateReport


def _save_report_as_yaml(report: UpdateReport, report_path: Path) -> None:
    """Save update report to YAML file.

    Raises:
        OSError: If report cannot be written.
    """
    with open(report_path, "w") as f:
        yaml.dump(dict(report), f, default_flow_style=False, sort_keys=False)
    print(f"Wrote update report to {report_path} (YAML format)")


def _save_report_as_csv(report: UpdateReport, report_path: Path) -> None:
    """Save update report to CSV file, one row per queued student.

    Raises:
        OSError: If report cannot be written.
    """
    failed = set(report["failed_comment_uploads"])

    with open(report_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)

        writer.writerow(["Course ID", "Assignment ID", "Student ID", "Comment Upload Failed", "Status Code"])

        for student_id in report["queued"]:
            writer.writerow(
                [
                    report["course_id"],
                    report["assignment_id"],
                    student_id,
                    "yes" if student_id in failed else "",
                    report["status_code"] if report["status_code"] is not None else "",
                ]
            )

    print(f"Wrote update report to {report_path} (CSV format)")


def save_report(report: UpdateReport, report_path: Path) -> None:
    """Save update report to file (YAML or CSV based on extension).

    Args:
        report: Update report.
        report_path: Path to save the report.

    Raises:
        OSError: If report cannot be written.
        ValueError: If file extension is not supported.
    """
    suffix = report_path.suffix.lower()

    if suffix in [".yaml", ".yml"]:
        _save_report_as_yaml(report, report_path)
    elif suffix == ".csv":
        _save_report_as_csv(report, report_path)
    else:
        raise ValueError(f"Unsupported report file extension: {suffix}. Supported formats: .yaml, .yml, .csv")
