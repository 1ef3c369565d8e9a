"""Command-line interface for the Canvas grade updater."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from canvas_grade_updater.workflow import run


@click.command()
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
@click.option("--verbose", "-v", is_flag=True, help="Log every Canvas request.")
def main(config_path: Path, verbose: bool) -> None:
    """CLI entry point for the Canvas grade updater.

    Args:
        config_path: Path to the YAML configuration file.
        verbose: Enable debug logging.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    try:
        report = run(config_path)
        print(f"Successfully updated {len(report['queued'])} student grade(s).")
        if report["failed_comment_uploads"]:
            print(f"{len(report['failed_comment_uploads'])} comment(s) were sent as text instead of files.")
    except Exception as e:
        print(f"Error: {e}")
        raise


if __name__ == "__main__":
    main()
