"""
Data models and enums for SQL Ops.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


class TablePurpose(Enum):
    """The three table-selection buckets of a dump."""
    SKIP = "skip-tables"
    STRUCTURE = "structure-tables"
    TABLES = "tables"

    @property
    def option_name(self) -> str:
        return self.value

    @property
    def key_option(self) -> str:
        return f"{self.value}-key"

    @property
    def list_option(self) -> str:
        return f"{self.value}-list"


@dataclass(frozen=True)
class ConnectionSpec:
    """Fields describing how to reach a database server.

    A password of None means "not set": the client falls back to its own
    credential file (.my.cnf, .pgpass).
    """
    driver: str
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    database: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    KNOWN_FIELDS = ('driver', 'host', 'port', 'username', 'password', 'database')

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConnectionSpec":
        if not data.get('driver'):
            raise ValueError("Connection is missing required field 'driver'")
        known = {k: data[k] for k in cls.KNOWN_FIELDS if k in data}
        known['database'] = known.get('database') or ""
        extra = {k: v for k, v in data.items() if k not in cls.KNOWN_FIELDS}
        return cls(**known, extra=extra)

    def derive(self, **changes: Any) -> "ConnectionSpec":
        return replace(self, **changes)


@dataclass
class RawTableRequest:
    """Unresolved table configuration for skip/structure/tables.

    ``keyed`` maps each purpose to ``{key: [patterns]}``, ``key_selectors``
    holds the comma-separated candidate keys and ``flat_lists`` the
    ``<purpose>-list`` option. A flat list of "" is configured-empty,
    None is not configured.
    """
    keyed: dict[TablePurpose, dict[str, Any]] = field(default_factory=dict)
    key_selectors: dict[TablePurpose, Optional[str]] = field(default_factory=dict)
    flat_lists: dict[TablePurpose, Optional[str]] = field(default_factory=dict)

    @classmethod
    def from_options(cls, options: Optional[dict[str, Any]]) -> "RawTableRequest":
        """Build from option names such as ``skip-tables-key``."""
        options = options or {}
        request = cls()
        for purpose in TablePurpose:
            request.keyed[purpose] = options.get(purpose.option_name) or {}
            request.key_selectors[purpose] = options.get(purpose.key_option)
            request.flat_lists[purpose] = options.get(purpose.list_option)
        return request


@dataclass(frozen=True)
class TableSelection:
    """Resolved, catalog-validated, sorted table names per purpose."""
    skip: tuple[str, ...] = ()
    structure: tuple[str, ...] = ()
    tables: tuple[str, ...] = ()

    def for_purpose(self, purpose: TablePurpose) -> tuple[str, ...]:
        return {
            TablePurpose.SKIP: self.skip,
            TablePurpose.STRUCTURE: self.structure,
            TablePurpose.TABLES: self.tables,
        }[purpose]


AUTO_RESULT_FILE = "auto"


def is_auto_result_file(value: Any) -> bool:
    """True for the "auto" sentinel or a bare boolean flag."""
    return value is True or value == AUTO_RESULT_FILE


@dataclass
class DumpRequest:
    """Per-invocation dump settings."""
    result_file: Any = None
    gzip: bool = False
    table_selection: TableSelection = field(default_factory=TableSelection)


@dataclass(frozen=True)
class DumpCommand:
    """A ready-to-run dump shell command."""
    command: str
    output_path: Optional[str] = None


@dataclass(frozen=True)
class QueryCommand:
    """A ready-to-run query shell command."""
    command: str
    input_file: str
    result_file: Optional[str] = None


@dataclass
class CommandOutcome:
    """Exit status and captured output of a shell command."""
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class OperationResult:
    """Outcome reported for a dump, query, create or drop operation."""
    operation: str
    success: bool = False
    message: str = ""
    command: Optional[str] = None
    output_path: Optional[str] = None
    error_kind: Optional[str] = None
    output: str = ""
