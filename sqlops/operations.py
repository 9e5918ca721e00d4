"""
Dump, query, create and drop orchestration for SQL Ops.
"""

import gzip
import logging
import os
import shutil
import tempfile
import zlib
from contextlib import ExitStack, closing, contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Optional

from .command_builder import CommandBuilder, QueryHook
from .credentials import elevate
from .drivers import Driver, get_driver
from .dump_file import DumpFileNamer
from .errors import (
    CreateDatabaseFailure,
    DecompressFailure,
    DumpFailure,
    QueryFailure,
    SqlOpsError,
)
from .models import (
    CommandOutcome,
    ConnectionSpec,
    DumpCommand,
    DumpRequest,
    OperationResult,
    RawTableRequest,
    TableSelection,
)
from .runner import ShellRunner
from .table_selection import TableSelectionResolver

GZIP_MAGIC = b'\x1f\x8b'


def is_gzip_file(path: str) -> bool:
    """True when the file starts with the gzip magic number."""
    try:
        with open(path, 'rb') as f:
            return f.read(2) == GZIP_MAGIC
    except OSError:
        return False


@contextmanager
def temporary_file(suffix: str = '.sql') -> Iterator[str]:
    """Yield a fresh temp file path, removed on exit whatever happens."""
    fd, path = tempfile.mkstemp(suffix=suffix, prefix='sqlops-')
    os.close(fd)
    try:
        yield path
    finally:
        if os.path.exists(path):
            os.unlink(path)


@contextmanager
def saved_query(query: str) -> Iterator[str]:
    """Persist query text to a scoped temp file."""
    with temporary_file() as path:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(query)
        yield path


@contextmanager
def decompressed(path: str) -> Iterator[str]:
    """Expand a gzip file into a scoped temp file, leaving the original alone."""
    with temporary_file() as target:
        try:
            with gzip.open(path, 'rb') as source, open(target, 'wb') as out:
                shutil.copyfileobj(source, out)
        except (OSError, EOFError, zlib.error) as e:
            raise DecompressFailure(f"Failed to decompress input file '{path}': {e}") from e
        logging.debug(f"Decompressed '{path}' to '{target}'")
        yield target


class SqlOperations:
    """Runs dump, query, create and drop operations against one connection."""

    def __init__(
        self,
        spec: ConnectionSpec,
        runner: Optional[ShellRunner] = None,
        driver: Optional[Driver] = None,
        resolver: Optional[TableSelectionResolver] = None,
        namer: Optional[DumpFileNamer] = None,
        query_settings: Optional[dict[str, Any]] = None,
        superuser: Optional[dict[str, Any]] = None,
        prefix_hook: Optional[QueryHook] = None,
        driver_factory: Callable[[ConnectionSpec], Driver] = get_driver
    ):
        self.spec = spec
        self.runner = runner or ShellRunner()
        self.driver_factory = driver_factory
        self.driver = driver or driver_factory(spec)
        self.resolver = resolver or TableSelectionResolver()
        self.namer = namer or DumpFileNamer()
        self.query_settings = query_settings or {}
        self.superuser = superuser or {}
        self.prefix_hook = prefix_hook
        self.builder = CommandBuilder(
            self.driver,
            extra=self.query_settings.get('extra', ''),
            hide_password=self.query_settings.get('hide_password', True)
        )

    def close(self) -> None:
        """Remove credential files the driver wrote for built commands."""
        self.driver.close()

    def _run(self, command: str, capture: bool = False) -> CommandOutcome:
        try:
            return self.runner.run(command, capture=capture)
        finally:
            self.close()

    def _failure(self, operation: str, error: SqlOpsError) -> OperationResult:
        logging.error(f"{operation} failed: {error.message}")
        return OperationResult(
            operation=operation,
            success=False,
            message=error.message,
            command=error.command,
            error_kind=error.kind
        )

    def resolve_tables(self, raw_request: Optional[RawTableRequest]) -> TableSelection:
        return self.resolver.resolve(raw_request, self.driver)

    def connect_command(self) -> str:
        return self.builder.connect()

    def build_dump(self, request: DumpRequest, now: Optional[datetime] = None) -> DumpCommand:
        output_path = self.namer.name(request.result_file, self.spec.database, now)
        return self.builder.build_dump(request.table_selection, request.gzip, output_path)

    def dump(
        self,
        raw_request: Optional[RawTableRequest] = None,
        result_file: Any = None,
        gzip_output: bool = False,
        now: Optional[datetime] = None
    ) -> OperationResult:
        """Dump the database; CatalogUnavailable propagates to the caller."""
        request = DumpRequest(
            result_file=result_file,
            gzip=gzip_output,
            table_selection=self.resolve_tables(raw_request)
        )
        logging.info(f"Dumping {self.driver.scheme()} database '{self.spec.database}'")
        dump_command = self.build_dump(request, now)
        outcome = self._run(dump_command.command)

        if not outcome.success:
            self._remove_partial(dump_command.output_path)
            error = DumpFailure(
                f"Database dump failed (exit status {outcome.returncode})",
                command=dump_command.command
            )
            return self._failure('dump', error)

        if dump_command.output_path:
            logging.info(f"Database dump saved to {dump_command.output_path}")
        return OperationResult(
            operation='dump',
            success=True,
            message="Database dump complete",
            command=dump_command.command,
            output_path=dump_command.output_path
        )

    def _remove_partial(self, output_path: Optional[str]) -> None:
        if output_path and os.path.exists(output_path):
            logging.warning(f"Removing incomplete dump file {output_path}")
            os.unlink(output_path)

    def query(
        self,
        query: Optional[str] = None,
        input_file: Optional[str] = None,
        result_file: Optional[str] = None,
        capture: bool = False
    ) -> OperationResult:
        """Run query text or an SQL file through the command-line client.

        Exactly one of ``query`` and ``input_file`` must be given. Gzipped
        input files are expanded first.
        """
        if (query is None) == (input_file is None):
            raise ValueError("Provide exactly one of query or input_file")

        with ExitStack() as stack:
            try:
                source = input_file
                if input_file and is_gzip_file(input_file):
                    source = stack.enter_context(decompressed(input_file))
            except DecompressFailure as e:
                return self._failure('query', e)

            if query is not None:
                if self.prefix_hook is not None and self.query_settings.get('db_prefix'):
                    hook = self.prefix_hook
                else:
                    hook = None
                query = self.builder.prepare_query_text(query, hook)
                logging.debug(f"sql-query: {query}")
                source = stack.enter_context(saved_query(query))

            query_command = self.builder.build_query(source, result_file)
            outcome = self._run(query_command.command, capture=capture)

        if not outcome.success:
            message = f"Query failed (exit status {outcome.returncode})"
            if outcome.stderr:
                message += f": {outcome.stderr.strip()}"
            return self._failure('query', QueryFailure(message, command=query_command.command))

        if input_file and self.query_settings.get('file_delete'):
            logging.info(f"Deleting query input file {input_file}")
            os.unlink(input_file)

        return OperationResult(
            operation='query',
            success=True,
            message="Query complete",
            command=query_command.command,
            output_path=query_command.result_file,
            output=outcome.stdout
        )

    def drop(self, tables: list[str]) -> OperationResult:
        """Drop the given tables with a single statement."""
        sql = self.builder.build_drop_tables(tables)
        if sql is None:
            logging.info("No tables to drop")
            return OperationResult(operation='drop', success=True, message="No tables to drop")

        logging.info(f"Dropping {len(tables)} table(s) from '{self.spec.database}'")
        result = self.query(sql)
        result.operation = 'drop'
        return result

    def elevated_spec(self) -> ConnectionSpec:
        target = elevate(
            self.spec,
            self.superuser.get('name'),
            self.superuser.get('password')
        )
        # CREATE DATABASE must not connect to the schema it is creating.
        if target.database:
            target = target.derive(database="")
        return target

    def create_db(self, quoted: bool = False) -> OperationResult:
        """(Re)create the database, using superuser credentials when configured."""
        name = self.spec.database
        elevated = SqlOperations(
            self.elevated_spec(),
            runner=self.runner,
            query_settings=self.query_settings,
            driver_factory=self.driver_factory
        )
        with closing(elevated):
            sql = elevated.builder.build_create_database(name, quoted)
            logging.info(f"Creating database '{name}'")
            result = elevated.query(sql)

        if not result.success:
            return self._failure(
                'create',
                CreateDatabaseFailure(
                    f"Could not create database '{name}': {result.message}",
                    command=result.command
                )
            )
        result.operation = 'create'
        result.message = f"Database '{name}' created"
        return result

    def drop_or_create(self) -> OperationResult:
        """Drop every table if the database exists, otherwise create it."""
        if self.driver.database_exists():
            return self.drop(self.driver.list_tables())
        return self.create_db()
