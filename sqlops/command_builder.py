"""
Shell command assembly for SQL Ops.

Builds dump, query, create and drop commands from a driver's fragments.
Nothing here executes a command; see ``operations`` for that.
"""

import shlex
from typing import Callable, Optional

from .drivers import Driver
from .models import DumpCommand, QueryCommand, TableSelection

GZIP_FILTER = 'gzip -f'
GZIP_SUFFIX = '.gz'

QueryHook = Callable[[str], str]


class CommandBuilder:
    """Assembles executable command strings for one driver."""

    def __init__(self, driver: Driver, extra: str = "", hide_password: bool = True):
        self.driver = driver
        self.extra = extra or ""
        self.hide_password = hide_password

    def connect(self, hide_password: bool = False) -> str:
        """Command that opens an interactive client session.

        The password stays inline by default: the command is printed for the
        user and must outlive any temporary option file.
        """
        parts = [
            self.driver.connect_command(),
            self.driver.credentials_fragment(hide_password),
            self.extra,
        ]
        return ' '.join(part for part in parts if part).strip()

    def build_dump(
        self,
        selection: TableSelection,
        gzip: bool = False,
        output_path: Optional[str] = None
    ) -> DumpCommand:
        """Dump command, optionally piped through gzip and redirected to a file."""
        command = self.driver.dump_fragment(selection, self.hide_password)
        suffix = ''

        if gzip:
            command += f" | {GZIP_FILTER}"
            suffix += GZIP_SUFFIX

        if output_path:
            output_path += suffix
            command += f" > {shlex.quote(output_path)}"

        return DumpCommand(command=command, output_path=output_path or None)

    def prepare_query_text(
        self,
        query: str,
        prefix_hook: Optional[QueryHook] = None
    ) -> str:
        """Apply table-prefix substitution, then the driver's formatting."""
        if prefix_hook is not None:
            query = prefix_hook(query)
        return self.driver.query_format(query)

    def build_query(self, input_file: str, result_file: Optional[str] = None) -> QueryCommand:
        """Command feeding ``input_file`` to the client in silent mode."""
        parts = [
            self.driver.connect_command(),
            self.driver.credentials_fragment(self.hide_password),
            self.driver.silent_fragment(),
            self.extra,
            self.driver.query_file,
            shlex.quote(input_file),
        ]
        command = ' '.join(part for part in parts if part)

        if result_file:
            command += f" > {shlex.quote(result_file)}"

        return QueryCommand(command=command, input_file=input_file, result_file=result_file or None)

    def build_create_database(self, name: str, quoted: bool = False) -> str:
        return self.driver.create_database_statement(name, quoted)

    @staticmethod
    def build_drop_tables(tables: list[str]) -> Optional[str]:
        """A single ``DROP TABLE`` naming every table, or None when empty."""
        if not tables:
            return None
        return 'DROP TABLE ' + ', '.join(tables)
