"""
Dump file naming for SQL Ops.
"""

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol

from .models import is_auto_result_file

AUTO_TEMPLATE = "@DATABASE_@DATE.sql"
DATE_FORMAT = "%Y%m%d_%H%M%S"


class BackupLocator(Protocol):
    """Provides the directory auto-named dumps are written to."""

    def prepare_backup_dir(self, database: str) -> Optional[str]:
        ...


class BackupDirectory:
    """Backup locator rooted at a configured directory.

    Each database gets its own subdirectory, created on demand unless
    ``create`` is off (dry runs).
    """

    def __init__(self, base_dir: Optional[str] = None, create: bool = True):
        self.base_dir = base_dir
        self.create = create

    def prepare_backup_dir(self, database: str) -> Optional[str]:
        if not self.base_dir:
            return None
        backup_dir = Path(self.base_dir).expanduser() / (database or "default")
        if not self.create:
            return str(backup_dir)
        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logging.warning(f"Could not create backup directory '{backup_dir}': {e}")
            return None
        return str(backup_dir)


class DumpFileNamer:
    """Turns a requested result file into a concrete path."""

    def __init__(self, locator: Optional[BackupLocator] = None):
        self.locator = locator or BackupDirectory()

    def name(
        self,
        requested_path: Any,
        database: str,
        now: Optional[datetime] = None
    ) -> Optional[str]:
        """Return the dump path, or None to write to standard output.

        ``requested_path`` may be a path template, ``"auto"``/True to build
        ``<backup dir>/@DATABASE_@DATE.sql``, or a false value.
        """
        if not requested_path:
            return None

        if is_auto_result_file(requested_path):
            backup_dir = self.locator.prepare_backup_dir(database) or tempfile.gettempdir()
            requested_path = os.path.join(backup_dir, AUTO_TEMPLATE)

        now = now or datetime.now(timezone.utc)
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)

        return (
            str(requested_path)
            .replace('@DATABASE', database)
            .replace('@DATE', now.strftime(DATE_FORMAT))
        )
