"""
Exceptions raised by SQL Ops.
"""

from typing import Optional


class SqlOpsError(RuntimeError):
    """Base exception; carries the attempted shell command when there is one."""

    kind = "error"

    def __init__(self, message: str, command: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.command = command


class CatalogUnavailable(SqlOpsError):
    """The table listing for the database could not be obtained."""

    kind = "catalog_unavailable"


class DecompressFailure(SqlOpsError):
    """A compressed query input file could not be expanded."""

    kind = "decompress_failure"


class DumpFailure(SqlOpsError):
    """The dump process exited non-zero."""

    kind = "dump_failure"


class QueryFailure(SqlOpsError):
    """The query process exited non-zero."""

    kind = "query_failure"


class CreateDatabaseFailure(SqlOpsError):
    """The create-database statement failed."""

    kind = "create_database_failure"


class UnknownDriverError(SqlOpsError, ValueError):
    """No driver is registered for the connection's declared driver."""

    kind = "unknown_driver"
