"""Reading grade rows from CSV files."""

from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path

from canvas_grade_updater.types import GradeRow


def _validate_csv_file(csv_file: Path) -> None:
    """Validate that CSV file exists.

    Raises:
        FileNotFoundError: If CSV file doesn't exist.
    """
    if not csv_file.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_file}")


def _validate_columns(fieldnames: Sequence[str], columns: list[str]) -> None:
    """Validate that required columns exist in CSV headers.

    Raises:
        KeyError: If required columns are not found.
    """
    missing_columns = [col for col in columns if col not in fieldnames]
    if missing_columns:
        raise KeyError(f"Columns {missing_columns} not found in CSV headers: {list(fieldnames)}")


def read_grade_rows(
    csv_file: str | Path,
    student_id_column: str,
    grade_column: str,
    comment_column: str | None = None,
    encoding: str = "utf-8",
    delimiter: str = ",",
) -> list[GradeRow]:
    """Read student IDs, grades and optional comments from a CSV.

    Rows with an empty student ID are skipped. Values are returned as stripped
    strings; parsing the grade is left to the caller.

    Args:
        csv_file: Path to the CSV file.
        student_id_column: Column holding the student ID.
        grade_column: Column holding the grade.
        comment_column: Optional column holding the comment.
        encoding: File encoding (default: 'utf-8').
        delimiter: CSV delimiter (default: ',').

    Returns:
        Grade rows in file order.

    Raises:
        FileNotFoundError: If CSV file doesn't exist.
        KeyError: If column names are not found in CSV headers.
    """
    csv_file_path = Path(csv_file)
    _validate_csv_file(csv_file_path)

    columns = [student_id_column, grade_column]
    if comment_column:
        columns.append(comment_column)

    rows: list[GradeRow] = []

    with open(csv_file_path, encoding=encoding, newline="") as file:
        reader = csv.DictReader(file, delimiter=delimiter)

        assert reader.fieldnames is not None, "CSV file has no headers"
        _validate_columns(reader.fieldnames, columns)

        for row in reader:
            student_id = (row[student_id_column] or "").strip()
            if not student_id:
                continue

            rows.append(
                GradeRow(
                    student_id=student_id,
                    grade=(row[grade_column] or "").strip(),
                    comment=(row[comment_column] or "").strip() if comment_column else "",
                )
            )

    return rows
