#!/usr/bin/env python3
"""
SQL Ops - CLI Entry Point
=========================
Builds and runs database client commands:
- dump with skip / structure-only / explicit table selection
- wildcard table patterns resolved against the live database
- query from text or (gzipped) SQL file
- create database with superuser credentials
- drop all tables or create the database before a restore
"""

import argparse
import logging
import sys
from contextlib import closing
from typing import Any, Optional

import yaml

from .config import ConfigLoader
from .dump_file import BackupDirectory, DumpFileNamer
from .errors import SqlOpsError
from .models import DumpRequest, RawTableRequest, TablePurpose
from .operations import SqlOperations
from .runner import ShellRunner
from .utils import format_selection_display, log_result, print_dry_run_info, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='SQL Ops - database dump and query command builder'
    )
    parser.add_argument(
        '-c', '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '-C', '--connection',
        default=ConfigLoader.DEFAULT_CONNECTION,
        help='Connection name from the configuration (default: default)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show the commands that would run without running them'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    dump = subparsers.add_parser('dump', help='Dump the database')
    dump.add_argument(
        '--result-file',
        help="Write the dump here; 'auto' builds a dated file in the backup directory"
    )
    dump.add_argument('--gzip', action='store_true', default=None, help='Compress the dump')
    add_table_arguments(dump)

    tables = subparsers.add_parser('tables', help='Show the resolved table selection')
    add_table_arguments(tables)

    query = subparsers.add_parser('query', help='Run a query')
    query.add_argument('query', nargs='?', help='SQL to run')
    query.add_argument('--file', dest='input_file', help='SQL file to run, may be gzipped')
    query.add_argument('--result-file', help='Save query output to this file')
    query.add_argument('--extra', help='Extra options for the database client')
    query.add_argument('--file-delete', action='store_true', default=None,
                       help='Delete the input file after a successful query')

    create = subparsers.add_parser('create', help='Create the database')
    create.add_argument('--quoted', action='store_true', help='Quote the database name')

    subparsers.add_parser('drop-or-create', help='Drop all tables, or create the database')
    subparsers.add_parser('connect', help='Print the command that opens a client session')

    return parser


def add_table_arguments(parser: argparse.ArgumentParser) -> None:
    for purpose in TablePurpose:
        parser.add_argument(
            f'--{purpose.key_option}',
            dest=purpose.key_option,
            help=f'Comma-separated keys into the {purpose.option_name} configuration'
        )
        parser.add_argument(
            f'--{purpose.list_option}',
            dest=purpose.list_option,
            help=f'Comma-separated {purpose.option_name} (wildcards allowed)'
        )


def merge_table_options(config_options: dict[str, Any], args: argparse.Namespace) -> RawTableRequest:
    """Command-line table options override the configuration file."""
    options = dict(config_options)
    for purpose in TablePurpose:
        for name in (purpose.key_option, purpose.list_option):
            value = getattr(args, name, None)
            if value is not None:
                options[name] = value
    return RawTableRequest.from_options(options)


def override(settings: dict[str, Any], **values: Optional[Any]) -> dict[str, Any]:
    merged = dict(settings)
    merged.update({k: v for k, v in values.items() if v is not None})
    return merged


def run_command(config: ConfigLoader, args: argparse.Namespace) -> int:
    spec = config.get_connection(args.connection)
    dump_settings = config.get_dump_settings()
    query_settings = config.get_query_settings()
    if args.command == 'query':
        query_settings = override(query_settings, extra=args.extra, file_delete=args.file_delete)

    operations = SqlOperations(
        spec,
        runner=ShellRunner(simulate=args.dry_run),
        namer=DumpFileNamer(BackupDirectory(
            dump_settings.get('backup_dir'),
            create=not args.dry_run
        )),
        query_settings=query_settings,
        superuser=config.get_superuser()
    )
    with closing(operations):
        return dispatch(operations, config, args, dump_settings)


def dispatch(
    operations: SqlOperations,
    config: ConfigLoader,
    args: argparse.Namespace,
    dump_settings: dict[str, Any]
) -> int:
    if args.command == 'connect':
        print(operations.connect_command())
        return 0

    if args.command == 'tables':
        selection = operations.resolve_tables(merge_table_options(config.get_table_options(), args))
        for line in format_selection_display(selection) or ["No tables selected"]:
            print(line)
        return 0

    if args.command == 'dump':
        raw_request = merge_table_options(config.get_table_options(), args)
        dump_settings = override(dump_settings, result_file=args.result_file, gzip=args.gzip)
        if args.dry_run:
            request = DumpRequest(
                result_file=dump_settings.get('result_file'),
                gzip=bool(dump_settings.get('gzip', False)),
                table_selection=operations.resolve_tables(raw_request)
            )
            print_dry_run_info(operations.spec.database, request.table_selection,
                               operations.build_dump(request).command)
            return 0
        result = operations.dump(
            raw_request,
            result_file=dump_settings.get('result_file'),
            gzip_output=bool(dump_settings.get('gzip', False))
        )
    elif args.command == 'query':
        if (args.query is None) == (args.input_file is None):
            logging.error("Provide either a query or --file, not both")
            return 1
        result = operations.query(args.query, args.input_file, args.result_file)
    elif args.command == 'create':
        result = operations.create_db(quoted=args.quoted)
    else:
        result = operations.drop_or_create()

    log_result(result)
    return 0 if result.success else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = ConfigLoader(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file '{args.config}' not found")
        return 1
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        return 1

    # Setup logging
    log_settings = dict(config.get_logging_settings())
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    try:
        return run_command(config, args)
    except (SqlOpsError, ValueError) as e:
        logging.error(f"Fatal error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
