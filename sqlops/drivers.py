"""
Database driver capabilities for SQL Ops.

A driver knows the command-line syntax of one database backend. The rest of
the package only calls the methods of the ``Driver`` protocol.
"""

import logging
import os
import shlex
import tempfile
from typing import Any, Optional, Protocol, runtime_checkable

from .connection import MySQLCatalog
from .errors import UnknownDriverError
from .models import ConnectionSpec, TableSelection


def params_to_options(parameters: dict[str, Any]) -> str:
    """Render ``{'user': 'x'}`` as ``--user=x`` with shell-quoted values."""
    return ' '.join(
        f"--{key}={shlex.quote(str(value))}"
        for key, value in parameters.items()
        if value is not None and value != ""
    )


@runtime_checkable
class Driver(Protocol):
    """Primitive command fragments and catalog lookups for one backend."""

    spec: ConnectionSpec
    query_file: str

    def scheme(self) -> str:
        """The backend name, as used in the connection's ``driver`` field."""

    def connect_command(self) -> str:
        """The client binary used to connect."""

    def credentials_fragment(self, hide_password: bool = True) -> str:
        """Connection parameters; with hide_password the password stays off the command line."""

    def silent_fragment(self) -> str:
        """Flags suppressing headers and formatting in query output."""

    def dump_fragment(self, selection: TableSelection, hide_password: bool = True) -> str:
        """Dump command honoring skip, structure-only and explicit tables."""

    def create_database_statement(self, name: str, quoted: bool = False) -> str:
        """SQL that (re)creates the database."""

    def query_format(self, query: str) -> str:
        """Backend-specific rewrite of query text before it is run."""

    def database_exists(self) -> bool:
        """Whether the spec's database exists on the server."""

    def list_tables(self) -> list[str]:
        """Live table names of the spec's database."""

    def close(self) -> None:
        """Remove any credential files written for built commands."""


def option_file_value(value: str) -> str:
    """Double-quote a value for a MySQL option file."""
    escaped = value.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


class MySQLDriver:
    """MySQL/MariaDB via the ``mysql`` and ``mysqldump`` clients.

    Hidden passwords are written to a private ``[client]`` option file passed
    with ``--defaults-extra-file``, which the clients require as their first
    option. The file lives until ``close()``.
    """

    query_file = '<'
    DUMP_OPTIONS = '--no-autocommit --single-transaction --opt -Q'

    def __init__(self, spec: ConnectionSpec, catalog: Optional[MySQLCatalog] = None):
        self.spec = spec
        self.catalog = catalog or MySQLCatalog(spec)
        self.option_file: Optional[str] = None

    def scheme(self) -> str:
        return self.spec.driver

    def connect_command(self) -> str:
        return 'mysql'

    def write_option_file(self) -> str:
        """Write the password to a temp option file readable only by us."""
        if self.option_file is None:
            fd, path = tempfile.mkstemp(suffix='.cnf', prefix='sqlops-')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(f"[client]\npassword={option_file_value(self.spec.password)}\n")
            logging.debug(f"Wrote client option file {path}")
            self.option_file = path
        return self.option_file

    def close(self) -> None:
        if self.option_file and os.path.exists(self.option_file):
            os.unlink(self.option_file)
        self.option_file = None

    def credentials_fragment(self, hide_password: bool = True) -> str:
        password = self.spec.password or None
        parameters = {}
        if hide_password and password is not None:
            parameters['defaults-extra-file'] = self.write_option_file()
            password = None
        parameters.update({
            'user': self.spec.username,
            'password': password,
            'host': self.spec.host,
            'port': self.spec.port,
        })
        fragment = params_to_options(parameters)
        if self.spec.database:
            fragment = f"{fragment} {shlex.quote(self.spec.database)}".strip()
        return fragment

    def silent_fragment(self) -> str:
        return '--silent'

    def dump_fragment(self, selection: TableSelection, hide_password: bool = True) -> str:
        credentials = self.credentials_fragment(hide_password)
        base = f"mysqldump {credentials} {self.DUMP_OPTIONS}"

        if selection.tables:
            names = ' '.join(shlex.quote(t) for t in selection.tables)
            return f"{base} --tables {names}"

        database = self.spec.database
        ignored = [*selection.skip, *selection.structure]
        command = base
        if ignored:
            command += ' ' + ' '.join(
                shlex.quote(f"--ignore-table={database}.{t}") for t in ignored
            )

        if selection.structure:
            names = ' '.join(shlex.quote(t) for t in selection.structure)
            command = f"({command} && {base} --no-data {names})"
        return command

    def create_database_statement(self, name: str, quoted: bool = False) -> str:
        identifier = f"`{name}`" if quoted else name
        return (
            f"DROP DATABASE IF EXISTS {identifier}; "
            f"CREATE DATABASE {identifier} /*!40100 DEFAULT CHARACTER SET utf8mb4 */;"
        )

    def query_format(self, query: str) -> str:
        return query

    def database_exists(self) -> bool:
        return self.catalog.database_exists()

    def list_tables(self) -> list[str]:
        return self.catalog.list_tables()


DRIVERS: dict[str, type] = {
    'mysql': MySQLDriver,
}


def get_driver(spec: ConnectionSpec) -> Driver:
    """Instantiate the driver registered for ``spec.driver``."""
    driver_class = DRIVERS.get(spec.driver)
    if driver_class is None:
        raise UnknownDriverError(
            f"Unsupported database driver '{spec.driver}'. "
            f"Available: {', '.join(sorted(DRIVERS))}"
        )
    return driver_class(spec)
