"""
Tests for dependency graph building and execution order resolution.
"""

import json
from pathlib import Path

import pytest

from dbcube.parser.analysis.dependency_graph import (
    DependencyGraph,
    DependencyGraphBuilder,
    DependencyResolver,
)
from dbcube.parser.shared.exceptions import DependencyError
from dbcube.parser.shared.types import TableDependency


def graph_of(*tables: tuple[str, list[str]]) -> DependencyGraph:
    graph = DependencyGraph()
    for name, dependencies in tables:
        graph.add_table(name, dependencies)
    return graph


class TestDependencyGraph:
    """Tests for DependencyGraph ordering."""

    def test_dependencies_come_first(self):
        """Test a chain given in reverse encounter order is sorted."""
        graph = graph_of(("c", ["b"]), ("b", ["a"]), ("a", []))
        result = graph.topological_order()

        assert result.order == ["a", "b", "c"]
        assert not result.is_cyclic

    def test_independent_tables_keep_encounter_order(self):
        """Test ties are broken by encounter order."""
        graph = graph_of(("zebra", []), ("apple", []), ("mango", []))
        assert graph.topological_order().order == ["zebra", "apple", "mango"]

    def test_diamond(self):
        """Test a table depending on two tables comes after both."""
        graph = graph_of(("orders", ["users", "products"]), ("users", []), ("products", []))
        order = graph.topological_order().order

        assert order.index("orders") > order.index("users")
        assert order.index("orders") > order.index("products")

    def test_unknown_references_are_ignored(self):
        """Test references to tables outside the set do not block ordering."""
        graph = graph_of(("orders", ["external_table"]), ("users", []))
        result = graph.topological_order()

        assert result.order == ["orders", "users"]
        assert graph.edges == []

    def test_cycle_is_completed_with_every_node_once(self):
        """Test cycle members are appended exactly once, in encounter order."""
        graph = graph_of(("a", ["b"]), ("b", ["a"]), ("c", []))
        result = graph.topological_order()

        assert result.order == ["c", "a", "b"]
        assert result.cycle_nodes == ["a", "b"]
        assert result.is_cyclic

    def test_self_reference_is_a_cycle(self):
        """Test a table referencing itself cannot be sorted normally."""
        result = graph_of(("tree", ["tree"])).topological_order()
        assert result.order == ["tree"]
        assert result.cycle_nodes == ["tree"]

    def test_duplicate_names_are_rejected(self):
        """Test add_table returns False for a name already in the graph."""
        graph = DependencyGraph()
        assert graph.add_table("users", [])
        assert not graph.add_table("users", ["orders"])
        assert graph.dependencies["users"] == []

    def test_to_dict(self):
        """Test the dictionary view of the graph."""
        graph = graph_of(("orders", ["users"]), ("users", []))
        data = graph.to_dict()

        assert data["nodes"] == ["orders", "users"]
        assert data["edges"] == [("users", "orders")]
        assert data["dependents"]["users"] == ["orders"]
        assert data["execution_order"] == ["users", "orders"]
        assert data["cycle_nodes"] == []


class TestDependencyGraphBuilder:
    """Tests for DependencyGraphBuilder."""

    def test_collect(self, write_cube, users_table, orders_table):
        """Test table names and references are read from files."""
        users = write_cube("dbcube/users.table.cube", users_table)
        orders = write_cube("dbcube/orders.table.cube", orders_table)

        collected = DependencyGraphBuilder().collect([orders, users])

        assert [(table.table_name, table.dependencies) for table in collected] == [
            ("orders", ["users"]),
            ("users", []),
        ]
        assert collected[0].file_path == orders.resolve()

    def test_collect_falls_back_to_file_name(self, write_cube):
        """Test files without @table are named after the file."""
        path = write_cube("dbcube/legacy.table.cube", '@database("main");\n')
        assert DependencyGraphBuilder().collect([path])[0].table_name == "legacy"

    def test_build_records_duplicates(self, caplog):
        """Test later declarations of a table name are kept aside and logged."""
        tables = [
            TableDependency("users", Path("a.table.cube"), []),
            TableDependency("users", Path("b.table.cube"), ["orders"]),
        ]
        graph = DependencyGraphBuilder().build(tables)

        assert graph.nodes == ["users"]
        assert [table.file_path for table in graph.duplicates] == [Path("b.table.cube")]
        assert "declared more than once" in caplog.text

    def test_build_wraps_failures(self):
        """Test unexpected failures become DependencyError."""
        with pytest.raises(DependencyError, match="Failed to build dependency graph"):
            DependencyGraphBuilder().build([object()])


class TestDependencyResolver:
    """Tests for DependencyResolver."""

    def test_resolve_orders_and_saves(self, store, write_cube, make_table_cube):
        """Test files listed dependents-first are ordered and persisted."""
        files = [
            write_cube("dbcube/c.table.cube", make_table_cube("c", ["b"])),
            write_cube("dbcube/b.table.cube", make_table_cube("b", ["a"])),
            write_cube("dbcube/a.table.cube", make_table_cube("a")),
        ]

        order = DependencyResolver(store).resolve(files, "table")

        assert order.tables == ["a", "b", "c"]
        assert order.seeders == []
        assert order.timestamp
        saved = json.loads(store.order_file.read_text(encoding="utf-8"))
        assert saved == {"tables": ["a", "b", "c"], "seeders": [], "timestamp": order.timestamp}

    def test_resolve_seeders_fills_seeders_only(self, store, write_cube, users_seeder):
        """Test seeder resolution leaves tables empty."""
        path = write_cube("dbcube/users.seeder.cube", users_seeder)
        order = DependencyResolver(store).resolve([path], "seeder")

        assert order.tables == []
        assert order.seeders == ["users"]

    def test_resolve_cycle_warns(self, store, write_cube, make_table_cube, caplog):
        """Test a cycle still yields every table and is logged."""
        files = [
            write_cube("dbcube/a.table.cube", make_table_cube("a", ["b"])),
            write_cube("dbcube/b.table.cube", make_table_cube("b", ["a"])),
        ]
        order = DependencyResolver(store).resolve(files, "table")

        assert order.tables == ["a", "b"]
        assert order.cycle_nodes == ["a", "b"]
        assert "Circular dependency" in caplog.text

    def test_resolve_empty(self, store):
        """Test an empty set of files yields and saves an empty order."""
        order = DependencyResolver(store).resolve([], "table")
        assert order.tables == []
        assert store.order_file.exists()

    def test_resolve_keeps_order_when_save_fails(
        self, store, temp_dir, write_cube, make_table_cube, caplog
    ):
        """Test an unwritable state folder is logged and the order is still returned."""
        (temp_dir / ".dbcube").write_text("not a folder", encoding="utf-8")
        files = [
            write_cube("dbcube/b.table.cube", make_table_cube("b", ["a"])),
            write_cube("dbcube/a.table.cube", make_table_cube("a")),
        ]
        resolver = DependencyResolver(store)

        order = resolver.resolve(files, "table")

        assert order.tables == ["a", "b"]
        assert resolver.saved_to is None
        assert "Failed to save execution order" in caplog.text

    def test_resolve_records_saved_path(self, store):
        """Test a successful save exposes the written file."""
        resolver = DependencyResolver(store)
        resolver.resolve([], "table")
        assert resolver.saved_to == store.order_file
