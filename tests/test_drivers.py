"""
Unit tests for drivers.py
"""

import os
from pathlib import Path
from unittest import mock

import pytest

from sqlops.drivers import DRIVERS, Driver, MySQLDriver, get_driver, params_to_options
from sqlops.errors import UnknownDriverError
from sqlops.models import ConnectionSpec, TableSelection

BASE = "mysqldump --user=root --password=secret --host=localhost --port=3306 shop " \
       "--no-autocommit --single-transaction --opt -Q"


@pytest.fixture
def spec():
    return ConnectionSpec(
        driver="mysql",
        host="localhost",
        port=3306,
        username="root",
        password="secret",
        database="shop"
    )


@pytest.fixture
def driver(spec):
    drv = MySQLDriver(spec, catalog=mock.MagicMock())
    yield drv
    drv.close()


class TestParamsToOptions:
    """Tests for params_to_options helper."""

    def test_basic(self):
        assert params_to_options({"user": "root", "port": 3306}) == "--user=root --port=3306"

    def test_values_are_quoted(self):
        assert params_to_options({"password": "se cret'"}) == "--password='se cret'\"'\"''"

    def test_empty_values_skipped(self):
        assert params_to_options({"user": "root", "password": None, "host": ""}) == "--user=root"


class TestGetDriver:
    """Tests for driver selection."""

    def test_mysql(self, spec):
        driver = get_driver(spec)
        assert isinstance(driver, MySQLDriver)
        assert isinstance(driver, Driver)
        assert driver.spec is spec

    def test_unknown_driver(self, spec):
        with pytest.raises(UnknownDriverError) as exc_info:
            get_driver(spec.derive(driver="oracle"))
        assert "oracle" in str(exc_info.value)

    def test_unknown_driver_is_value_error(self, spec):
        with pytest.raises(ValueError):
            get_driver(spec.derive(driver="oracle"))

    def test_registry(self):
        assert DRIVERS["mysql"] is MySQLDriver


class TestMySQLDriver:
    """Tests for MySQL command fragments."""

    def test_scheme(self, driver):
        assert driver.scheme() == "mysql"

    def test_connect_command(self, driver):
        assert driver.connect_command() == "mysql"

    def test_credentials_inline_password(self, driver):
        assert driver.credentials_fragment(hide_password=False) == \
            "--user=root --password=secret --host=localhost --port=3306 shop"

    def test_credentials_hidden_by_default(self, driver):
        fragment = driver.credentials_fragment()

        assert "secret" not in fragment
        assert fragment == (
            f"--defaults-extra-file={driver.option_file} "
            "--user=root --host=localhost --port=3306 shop"
        )
        assert Path(driver.option_file).read_text() == '[client]\npassword="secret"\n'

    def test_option_file_escapes_quotes(self, spec):
        drv = MySQLDriver(spec.derive(password='a"b\\c'), catalog=mock.MagicMock())
        drv.credentials_fragment()
        try:
            assert Path(drv.option_file).read_text() == '[client]\npassword="a\\"b\\\\c"\n'
        finally:
            drv.close()

    def test_option_file_reused_and_removed_on_close(self, driver):
        driver.credentials_fragment()
        path = driver.option_file
        driver.credentials_fragment()
        assert driver.option_file == path

        driver.close()

        assert not os.path.exists(path)
        assert driver.option_file is None

    def test_credentials_without_database_or_password(self, spec):
        driver = MySQLDriver(spec.derive(database="", password=None), catalog=mock.MagicMock())
        assert driver.credentials_fragment() == "--user=root --host=localhost --port=3306"
        assert driver.option_file is None

    def test_silent(self, driver):
        assert driver.silent_fragment() == "--silent"

    def test_dump_everything(self, driver):
        assert driver.dump_fragment(TableSelection(), hide_password=False) == BASE

    def test_dump_explicit_tables(self, driver):
        selection = TableSelection(skip=("cache",), tables=("node", "users"))
        assert driver.dump_fragment(selection, hide_password=False) == f"{BASE} --tables node users"

    def test_dump_skip_tables(self, driver):
        selection = TableSelection(skip=("cache", "sessions"))
        assert driver.dump_fragment(selection, hide_password=False) == \
            f"{BASE} --ignore-table=shop.cache --ignore-table=shop.sessions"

    def test_dump_structure_tables(self, driver):
        selection = TableSelection(skip=("cache",), structure=("watchdog",))
        assert driver.dump_fragment(selection, hide_password=False) == (
            f"({BASE} --ignore-table=shop.cache --ignore-table=shop.watchdog"
            f" && {BASE} --no-data watchdog)"
        )

    def test_dump_keeps_password_off_command_line(self, driver):
        command = driver.dump_fragment(TableSelection(structure=("watchdog",)))

        assert "secret" not in command
        assert command.count(f"mysqldump --defaults-extra-file={driver.option_file} ") == 2

    def test_create_database_unquoted(self, driver):
        assert driver.create_database_statement("shop") == (
            "DROP DATABASE IF EXISTS shop; "
            "CREATE DATABASE shop /*!40100 DEFAULT CHARACTER SET utf8mb4 */;"
        )

    def test_create_database_quoted(self, driver):
        assert "CREATE DATABASE `shop`" in driver.create_database_statement("shop", quoted=True)

    def test_query_format_identity(self, driver):
        assert driver.query_format("SELECT 1") == "SELECT 1"

    def test_catalog_delegation(self, driver):
        driver.catalog.list_tables.return_value = ["a"]
        driver.catalog.database_exists.return_value = True
        assert driver.list_tables() == ["a"]
        assert driver.database_exists() is True
