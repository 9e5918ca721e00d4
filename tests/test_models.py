"""
Unit tests for models.py
"""

import pytest

from sqlops.models import (
    CommandOutcome,
    ConnectionSpec,
    DumpRequest,
    OperationResult,
    RawTableRequest,
    TablePurpose,
    TableSelection,
    is_auto_result_file,
)


class TestTablePurpose:
    """Tests for TablePurpose enum."""

    def test_option_names(self):
        assert TablePurpose.SKIP.option_name == "skip-tables"
        assert TablePurpose.SKIP.key_option == "skip-tables-key"
        assert TablePurpose.STRUCTURE.list_option == "structure-tables-list"
        assert TablePurpose.TABLES.key_option == "tables-key"

    def test_from_string(self):
        assert TablePurpose("tables") == TablePurpose.TABLES


class TestConnectionSpec:
    """Tests for ConnectionSpec dataclass."""

    def test_from_dict(self):
        spec = ConnectionSpec.from_dict({
            "driver": "mysql",
            "host": "localhost",
            "username": "root",
            "database": None,
            "charset": "utf8"
        })
        assert spec.host == "localhost"
        assert spec.database == ""
        assert spec.password is None
        assert spec.extra == {"charset": "utf8"}

    def test_from_dict_requires_driver(self):
        with pytest.raises(ValueError):
            ConnectionSpec.from_dict({"host": "localhost"})

    def test_derive_returns_copy(self):
        spec = ConnectionSpec(driver="mysql", username="root")
        derived = spec.derive(username="admin")
        assert derived.username == "admin"
        assert spec.username == "root"

    def test_frozen(self):
        spec = ConnectionSpec(driver="mysql")
        with pytest.raises(AttributeError):
            spec.username = "x"


class TestRawTableRequest:
    """Tests for RawTableRequest."""

    def test_from_options(self):
        request = RawTableRequest.from_options({
            "skip-tables": {"a": ["cache"]},
            "skip-tables-key": "a",
            "tables-list": "node"
        })
        assert request.keyed[TablePurpose.SKIP] == {"a": ["cache"]}
        assert request.keyed[TablePurpose.TABLES] == {}
        assert request.key_selectors[TablePurpose.SKIP] == "a"
        assert request.key_selectors[TablePurpose.STRUCTURE] is None
        assert request.flat_lists[TablePurpose.TABLES] == "node"

    def test_from_none(self):
        request = RawTableRequest.from_options(None)
        assert all(request.flat_lists[p] is None for p in TablePurpose)


class TestTableSelection:
    """Tests for TableSelection."""

    def test_defaults_empty(self):
        selection = TableSelection()
        assert selection.skip == ()
        assert selection.structure == ()
        assert selection.tables == ()

    def test_for_purpose(self):
        selection = TableSelection(skip=("a",), structure=("b",), tables=("c",))
        assert selection.for_purpose(TablePurpose.SKIP) == ("a",)
        assert selection.for_purpose(TablePurpose.STRUCTURE) == ("b",)
        assert selection.for_purpose(TablePurpose.TABLES) == ("c",)

    def test_equality(self):
        assert TableSelection(skip=("a",)) == TableSelection(skip=("a",))


class TestDumpRequest:
    """Tests for DumpRequest and the auto result file sentinel."""

    def test_defaults(self):
        request = DumpRequest()
        assert request.result_file is None
        assert request.gzip is False
        assert request.table_selection == TableSelection()

    def test_is_auto_result_file(self):
        assert is_auto_result_file("auto") is True
        assert is_auto_result_file(True) is True
        assert is_auto_result_file("/tmp/x.sql") is False
        assert is_auto_result_file(None) is False


class TestOutcomes:
    """Tests for CommandOutcome and OperationResult."""

    def test_command_outcome_success(self):
        assert CommandOutcome(command="true", returncode=0).success is True
        assert CommandOutcome(command="false", returncode=1).success is False

    def test_operation_result_defaults(self):
        result = OperationResult(operation="dump")
        assert result.success is False
        assert result.command is None
        assert result.error_kind is None
        assert result.output == ""
