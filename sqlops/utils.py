"""
Utility functions for SQL Ops.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from .models import OperationResult, TablePurpose, TableSelection
from .runner import mask_passwords


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, log_settings.get('level', 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def format_selection_display(selection: TableSelection) -> list[str]:
    """One line per non-empty purpose, e.g. ``skip-tables: cache, sessions``."""
    parts = []
    for purpose in TablePurpose:
        tables = selection.for_purpose(purpose)
        if tables:
            parts.append(f"{purpose.option_name}: {', '.join(tables)}")
    return parts


def print_dry_run_info(database: str, selection: TableSelection, command: str) -> None:
    """Log what a dump would do in dry-run mode."""
    logging.info(f"Would dump database: {database}")

    lines = format_selection_display(selection)
    if not lines:
        logging.info("  - All tables (structure and data)")
    for line in lines:
        logging.info(f"  - {line}")

    logging.info(f"  Command: {mask_passwords(command)}")


def log_result(result: OperationResult) -> None:
    """Log the result of an operation."""
    if result.success:
        logging.info(f"  ✓ {result.operation}: {result.message}")
    else:
        logging.error(f"  ✗ {result.operation}: {result.message}")
        if result.command:
            logging.error(f"    command: {mask_passwords(result.command)}")
