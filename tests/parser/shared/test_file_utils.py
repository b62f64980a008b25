"""
Tests for shared cube file helpers and types.
"""

import pytest

from dbcube.parser.shared.file_utils import (
    extract_database_name,
    extract_table_name,
    fallback_name,
    find_line_number,
    resolve_table_name,
)
from dbcube.parser.shared.types import ExecutionOrder, ValidationResult


class TestNameExtraction:
    """Tests for annotation name extraction."""

    def test_extract_table_name(self, users_table):
        """Test the @table name is read."""
        assert extract_table_name(users_table) == "users"

    def test_single_quoted_and_unquoted(self):
        """Test single quotes and bare names are accepted."""
        assert extract_table_name("@table('order-items')") == "order-items"
        assert extract_database_name("@database(main)") == "main"

    def test_no_annotation(self):
        """Test None is returned without an annotation."""
        assert extract_table_name('@database("main");') is None

    @pytest.mark.parametrize(
        "file_name, category, expected",
        [
            ("users.table.cube", "table", "users"),
            ("01_users.seeder.cube", "seeder", "01_users"),
            ("users.cube", "table", "users"),
        ],
    )
    def test_fallback_name(self, file_name, category, expected):
        """Test the cube suffix is dropped from the file name."""
        assert fallback_name(file_name, category) == expected

    def test_resolve_prefers_annotation(self, write_cube, users_table):
        """Test the declared name wins over the file name."""
        path = write_cube("01_people.table.cube", users_table)
        assert resolve_table_name(path, "table") == "users"

    def test_resolve_unreadable_file(self, temp_dir):
        """Test missing files fall back to the file name."""
        assert resolve_table_name(temp_dir / "ghosts.table.cube", "table") == "ghosts"

    def test_find_line_number(self, write_cube, users_table):
        """Test the first matching line is returned, or 1."""
        path = write_cube("users.table.cube", users_table)
        assert find_line_number(path, "@columns") == 8
        assert find_line_number(path, "@nothing") == 1


class TestExecutionOrder:
    """Tests for ExecutionOrder serialization."""

    def test_to_dict_omits_cycle_nodes(self):
        """Test only the persisted fields are serialized."""
        order = ExecutionOrder(tables=["a", "b"], timestamp="t", cycle_nodes=["a", "b"])

        assert order.is_cyclic
        assert order.to_dict() == {"tables": ["a", "b"], "seeders": [], "timestamp": "t"}

    def test_from_dict_tolerates_missing_fields(self):
        """Test missing lists default to empty."""
        order = ExecutionOrder.from_dict({"tables": ["a"]})
        assert order.seeders == []
        assert order.timestamp == ""

    def test_from_dict_rejects_non_lists(self):
        """Test non-list fields are rejected."""
        with pytest.raises(ValueError):
            ExecutionOrder.from_dict({"seeders": "users"})


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_empty_result_is_valid(self):
        """Test a result without errors is valid."""
        assert ValidationResult().is_valid
        assert ValidationResult().to_dict() == {"is_valid": True, "errors": []}
