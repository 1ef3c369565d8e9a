"""Configuration models for the Canvas grade updater."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from canvas_grade_updater.canvas_requests import DEFAULT_CANVAS_HOST
from canvas_grade_updater.comment_files import DEFAULT_COMMENT_FOLDER

API_KEY_ENV_VAR: str = "CANVAS_API_KEY"


class CanvasConfig(BaseModel):
    """Canvas connection and assignment selection.

    Attributes:
        api_key: Canvas API token. Falls back to $CANVAS_API_KEY when omitted.
        host: API root URL.
        course_id: Course containing the assignment.
        assignment_id: Assignment to grade.
    """

    api_key: str
    host: str = DEFAULT_CANVAS_HOST
    course_id: int | str
    assignment_id: int | str

    @model_validator(mode="before")
    @classmethod
    def api_key_from_env(cls, data: Any) -> Any:
        """Fill api_key from the environment if the config leaves it out."""
        if isinstance(data, dict) and not data.get("api_key"):
            env_key = os.environ.get(API_KEY_ENV_VAR)
            if not env_key:
                raise ValueError(f"api_key is not set in the config or ${API_KEY_ENV_VAR}")
            data = {**data, "api_key": env_key}
        return data


class GradesCsvConfig(BaseModel):
    """Where to read grades from and which CSV columns hold them.

    Attributes:
        csv: Path to the CSV file.
        student_id: Column with the Canvas student ID.
        grade: Column with the numeric grade.
        comment: Optional column with the submission comment.
    """

    csv: Path
    student_id: str
    grade: str
    comment: str | None = None

    @field_validator("csv", mode="before")
    @classmethod
    def convert_csv_to_path(cls, v: Any) -> Path:
        """Convert csv to Path object."""
        return Path(v) if not isinstance(v, Path) else v


class UploadConfig(BaseModel):
    """Submission settings.

    Attributes:
        comments_as_files: Upload comments as text-file attachments.
        comment_folder: Canvas folder for comment files.
        request_timeout_seconds: Per-request timeout, or None for no timeout.
    """

    comments_as_files: bool = False
    comment_folder: str = DEFAULT_COMMENT_FOLDER
    request_timeout_seconds: float | None = None


class Config(BaseModel):
    """Top-level configuration for the grade update workflow.

    Attributes:
        canvas: Canvas credentials and assignment.
        grades: Grades CSV location and columns.
        upload: Submission settings.
        report_path: Optional path to save the run report.
    """

    canvas: CanvasConfig
    grades: GradesCsvConfig
    upload: UploadConfig = Field(default_factory=UploadConfig)
    report_path: Path | None = None

    @field_validator("report_path", mode="before")
    @classmethod
    def convert_report_path_to_path(cls, v: Any) -> Path | None:
        """Convert report_path to Path object."""
        if v is None:
            return None
        return Path(v) if not isinstance(v, Path) else v


def load_config(path: Path) -> Config:
    """Load YAML configuration and parse into Config model.

    Args:
        path: Path to YAML config.

    Returns:
        Parsed Config object with full validation.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If YAML is malformed.
        pydantic.ValidationError: If config structure is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        yaml_data = yaml.safe_load(f)

    return Config.model_validate(yaml_data)
