"""
Tests for failure propagation between dependent tables.
"""

from dbcube.engine.failure_tracker import FailedSet


class TestFailedSet:
    """Tests for FailedSet."""

    def test_membership(self):
        """Test added names are members."""
        failed = FailedSet()
        failed.add("users")
        failed.add("users")

        assert "users" in failed
        assert "orders" not in failed
        assert len(failed) == 1

    def test_iteration_is_sorted(self):
        """Test iteration yields names in sorted order."""
        assert list(FailedSet(["users", "accounts"])) == ["accounts", "users"]

    def test_blocking_keeps_declaration_order(self):
        """Test blocking dependencies are de-duplicated in declaration order."""
        failed = FailedSet(["users", "products"])
        assert failed.blocking(["products", "customers", "users", "products"]) == ["products", "users"]


class TestDependencyError:
    """Tests for FailedSet.dependency_error."""

    def test_no_failed_dependencies(self, write_cube, orders_table):
        """Test None is returned when nothing the table needs has failed."""
        path = write_cube("orders.table.cube", orders_table)
        assert FailedSet(["products"]).dependency_error("orders", path, ["users"]) is None

    def test_error_points_at_reference(self, write_cube, orders_table):
        """Test the error names the failed tables and the referencing line."""
        path = write_cube("orders.table.cube", orders_table)
        error = FailedSet(["users"]).dependency_error("orders", path, ["users"])

        assert error.item_name == "orders"
        assert error.message == (
            "Cannot create table 'orders' because it depends on failed table(s): users"
        )
        assert error.file_path == str(path)
        assert error.line_number == 13

    def test_action_verb(self, write_cube, orders_table):
        """Test the verb used in the message can be changed."""
        path = write_cube("orders.table.cube", orders_table)
        error = FailedSet(["users"]).dependency_error("orders", path, ["users"], action="refresh")

        assert error.message.startswith("Cannot refresh table 'orders'")

    def test_unreadable_file_points_at_first_line(self, temp_dir):
        """Test a missing file still yields an error on line 1."""
        error = FailedSet(["users"]).dependency_error(
            "orders", temp_dir / "missing.table.cube", ["users"]
        )
        assert error.line_number == 1
