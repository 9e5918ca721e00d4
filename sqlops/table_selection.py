"""
Table selection resolution for SQL Ops.

Turns skip/structure/tables configuration, which may contain ``*`` wildcards
and may be given under several option names, into concrete table names that
exist in the live catalog.
"""

import logging
import re
from typing import Any, Callable, Iterable, Optional, Protocol

from .models import RawTableRequest, TablePurpose, TableSelection


class TableCatalog(Protocol):
    """Anything that can list the tables of the connected database."""

    def list_tables(self) -> list[str]:
        ...


# A lookup strategy returns the raw table list for a purpose, or None to
# let the next strategy try.
LookupStrategy = Callable[[RawTableRequest, TablePurpose], Optional[list[str]]]


def _split_keys(selector: Optional[str]) -> list[str]:
    if not selector:
        return []
    return [key.strip() for key in str(selector).split(',')]


def _as_table_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [name.strip() for name in value.split(',') if name.strip()]
    return [str(name) for name in (value or [])]


def lookup_keyed(request: RawTableRequest, purpose: TablePurpose) -> Optional[list[str]]:
    """Check each candidate key in order against the purpose's own map and,
    for skip/structure, the ``tables`` map. The first hit wins."""
    own = request.keyed.get(purpose) or {}
    shared = request.keyed.get(TablePurpose.TABLES) or {}
    for key in _split_keys(request.key_selectors.get(purpose)):
        if key in own:
            return _as_table_list(own[key])
        if purpose is not TablePurpose.TABLES and key in shared:
            return _as_table_list(shared[key])
    return None


def lookup_flat_list(request: RawTableRequest, purpose: TablePurpose) -> Optional[list[str]]:
    """Comma-separated ``<purpose>-list`` option; "" means configured-empty."""
    table_list = request.flat_lists.get(purpose)
    if table_list is None:
        return None
    if not table_list:
        return []
    return _as_table_list(table_list)


DEFAULT_STRATEGIES: tuple[LookupStrategy, ...] = (lookup_keyed, lookup_flat_list)


class TableSelectionResolver:
    """Resolves a RawTableRequest against a table catalog."""

    def __init__(self, strategies: Iterable[LookupStrategy] = DEFAULT_STRATEGIES):
        self.strategies = tuple(strategies)

    def get_raw_table_list(
        self,
        request: Optional[RawTableRequest],
        purpose: TablePurpose
    ) -> list[str]:
        """Return the first list found by the lookup strategies, else []."""
        if request is None:
            return []
        for strategy in self.strategies:
            tables = strategy(request, purpose)
            if tables is not None:
                return tables
        return []

    def get_table_selection(self, request: Optional[RawTableRequest]) -> dict[TablePurpose, list[str]]:
        """Raw (unexpanded) table lists for every purpose."""
        return {purpose: self.get_raw_table_list(request, purpose) for purpose in TablePurpose}

    @staticmethod
    def compile_wildcard(pattern: str) -> re.Pattern:
        """Compile ``*`` as "zero or more characters", everything else literal."""
        parts = (re.escape(part) for part in pattern.split('*'))
        return re.compile('.*'.join(parts), re.IGNORECASE | re.DOTALL)

    def expand_wildcard_tables(self, tables: Iterable[str], db_tables: list[str]) -> set[str]:
        """Catalog names matching any wildcard entry in ``tables``."""
        expanded: set[str] = set()
        for table in tables:
            if '*' not in table:
                continue
            compiled = self.compile_wildcard(table)
            matches = {name for name in db_tables if compiled.fullmatch(name)}
            logging.debug(f"Pattern '{table}' matched {len(matches)} table(s)")
            expanded |= matches
        return expanded

    def expand_and_filter_tables(self, tables: list[str], db_tables: list[str]) -> tuple[str, ...]:
        """Expand wildcards, drop names missing from the catalog, sort and de-duplicate."""
        existing = set(db_tables)
        candidates = set(tables) | self.expand_wildcard_tables(tables, db_tables)
        return tuple(sorted(name for name in candidates if name in existing))

    def resolve(self, request: Optional[RawTableRequest], catalog: TableCatalog) -> TableSelection:
        """Resolve all three purposes against the live catalog.

        CatalogUnavailable from the catalog propagates unchanged.
        """
        raw = self.get_table_selection(request)
        db_tables = list(catalog.list_tables())

        resolved = {
            purpose: self.expand_and_filter_tables(names, db_tables)
            for purpose, names in raw.items()
        }
        selection = TableSelection(
            skip=resolved[TablePurpose.SKIP],
            structure=resolved[TablePurpose.STRUCTURE],
            tables=resolved[TablePurpose.TABLES],
        )
        logging.info(
            f"Table selection: {len(selection.skip)} skip, "
            f"{len(selection.structure)} structure-only, {len(selection.tables)} explicit"
        )
        return selection
