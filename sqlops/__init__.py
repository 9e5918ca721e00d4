"""
SQL Ops
=======
Builds and runs database client commands with support for:
- Skip / structure-only / explicit table selection
- Wildcard table patterns resolved against the live database
- Auto-named, dated dump files
- Gzip compression
- Superuser credentials for database creation
"""

from .command_builder import CommandBuilder
from .config import ConfigLoader
from .connection import DatabaseConnection, MySQLCatalog
from .credentials import elevate
from .drivers import DRIVERS, Driver, MySQLDriver, get_driver, params_to_options
from .dump_file import BackupDirectory, DumpFileNamer
from .errors import (
    CatalogUnavailable,
    CreateDatabaseFailure,
    DecompressFailure,
    DumpFailure,
    QueryFailure,
    SqlOpsError,
    UnknownDriverError,
)
from .main import main
from .models import (
    CommandOutcome,
    ConnectionSpec,
    DumpCommand,
    DumpRequest,
    OperationResult,
    QueryCommand,
    RawTableRequest,
    TablePurpose,
    TableSelection,
)
from .operations import SqlOperations
from .runner import ShellRunner, mask_passwords
from .table_selection import TableSelectionResolver
from .utils import format_selection_display, print_dry_run_info, setup_logging

__version__ = "1.0.0"

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "CommandBuilder",
    "ConfigLoader",
    "DatabaseConnection",
    "DumpFileNamer",
    "BackupDirectory",
    "MySQLCatalog",
    "ShellRunner",
    "SqlOperations",
    "TableSelectionResolver",
    # Drivers
    "DRIVERS",
    "Driver",
    "MySQLDriver",
    "get_driver",
    "params_to_options",
    # Models
    "CommandOutcome",
    "ConnectionSpec",
    "DumpCommand",
    "DumpRequest",
    "OperationResult",
    "QueryCommand",
    "RawTableRequest",
    "TablePurpose",
    "TableSelection",
    # Errors
    "CatalogUnavailable",
    "CreateDatabaseFailure",
    "DecompressFailure",
    "DumpFailure",
    "QueryFailure",
    "SqlOpsError",
    "UnknownDriverError",
    # Utilities
    "elevate",
    "format_selection_display",
    "mask_passwords",
    "print_dry_run_info",
    "setup_logging",
]
