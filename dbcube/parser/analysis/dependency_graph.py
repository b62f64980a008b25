"""
Dependency graph building and analysis functionality.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from dbcube.engine.exceptions import OrderStoreError
from dbcube.parser.shared.exceptions import DependencyError
from dbcube.parser.shared.file_utils import resolve_table_name
from dbcube.parser.shared.types import CubeCategory, ExecutionOrder, FilePath, TableDependency

from .foreign_keys import extract_dependencies

if TYPE_CHECKING:
    from dbcube.engine.order_store import ExecutionOrderStore

logger = logging.getLogger(__name__)


@dataclass
class SortResult:
    """Topological order plus the nodes that were appended because of a cycle."""

    order: list[str]
    cycle_nodes: list[str] = field(default_factory=list)

    @property
    def is_cyclic(self) -> bool:
        return bool(self.cycle_nodes)


class DependencyGraph:
    """
    Directed graph of tables.

    Edges run from a dependency to the table that references it. References
    to names that are not nodes are kept in ``dependencies`` but ignored for
    ordering.
    """

    def __init__(self) -> None:
        self.nodes: list[str] = []
        self.dependencies: dict[str, list[str]] = {}
        self.dependents: dict[str, list[str]] = {}
        self.duplicates: list[TableDependency] = []

    def add_table(self, table_name: str, dependencies: Iterable[str]) -> bool:
        """
        Add a table node. Returns False when the name is already known.
        """
        if table_name in self.dependencies:
            return False
        self.nodes.append(table_name)
        self.dependencies[table_name] = list(dependencies)
        self.dependents[table_name] = []
        return True

    @property
    def edges(self) -> list[tuple[str, str]]:
        """(dependency, dependent) pairs between known tables."""
        return [
            (dependency, table)
            for table in self.nodes
            for dependency in self.dependencies[table]
            if dependency in self.dependents
        ]

    def _link(self) -> dict[str, int]:
        for dependents in self.dependents.values():
            dependents.clear()
        in_degree = {node: 0 for node in self.nodes}
        for dependency, table in self.edges:
            self.dependents[dependency].append(table)
            in_degree[table] += 1
        return in_degree

    def topological_order(self) -> SortResult:
        """
        Order tables so that every table comes after the tables it references.

        Uses Kahn's algorithm seeded in encounter order. Nodes caught in a
        cycle are appended afterwards, in encounter order, so that every table
        appears exactly once.
        """
        in_degree = self._link()
        queue = deque(node for node in self.nodes if in_degree[node] == 0)
        order: list[str] = []

        while queue:
            current = queue.popleft()
            order.append(current)
            for dependent in self.dependents[current]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        cycle_nodes: list[str] = []
        if len(order) < len(self.nodes):
            placed = set(order)
            cycle_nodes = [node for node in self.nodes if node not in placed]
            order.extend(cycle_nodes)

        return SortResult(order=order, cycle_nodes=cycle_nodes)

    def to_dict(self) -> dict[str, Any]:
        result = self.topological_order()
        return {
            "nodes": list(self.nodes),
            "edges": self.edges,
            "dependencies": {node: list(deps) for node, deps in self.dependencies.items()},
            "dependents": {node: list(deps) for node, deps in self.dependents.items()},
            "execution_order": result.order,
            "cycle_nodes": result.cycle_nodes,
        }


class DependencyGraphBuilder:
    """Handles dependency graph construction from cube files."""

    def collect(self, cube_files: Iterable[FilePath], category: CubeCategory = "table") -> list[TableDependency]:
        """
        Read the table name and foreign-key references of each cube file.

        Args:
            cube_files: Cube file paths, in discovery order
            category: Cube category, used for the file-name fallback

        Returns:
            One TableDependency per file, in input order
        """
        table_dependencies = []
        for file_path in cube_files:
            path = Path(file_path).resolve()
            table_dependencies.append(
                TableDependency(
                    table_name=resolve_table_name(path, category),
                    file_path=path,
                    dependencies=extract_dependencies(path),
                )
            )
        return table_dependencies

    def build(self, table_dependencies: Iterable[TableDependency]) -> DependencyGraph:
        """
        Build a dependency graph.

        The first file declaring a table name defines its node; later files
        with the same name are recorded in ``graph.duplicates`` and logged.

        Raises:
            DependencyError: If graph building fails
        """
        try:
            graph = DependencyGraph()
            for table in table_dependencies:
                if not graph.add_table(table.table_name, table.dependencies):
                    graph.duplicates.append(table)
                    logger.warning(
                        f"Table '{table.table_name}' is declared more than once; "
                        f"ignoring {table.file_path} for ordering"
                    )
            return graph
        except Exception as e:
            raise DependencyError(f"Failed to build dependency graph: {e}") from e


class DependencyResolver:
    """Computes and persists the execution order of cube files."""

    def __init__(self, store: "ExecutionOrderStore", builder: DependencyGraphBuilder | None = None):
        self.store = store
        self.builder = builder or DependencyGraphBuilder()
        self.saved_to: Path | None = None

    def resolve(self, cube_files: Iterable[FilePath], category: CubeCategory = "table") -> ExecutionOrder:
        """
        Resolve table dependencies and save the resulting execution order.

        Args:
            cube_files: Cube file paths
            category: "table" fills ``tables``, "seeder" fills ``seeders``

        Returns:
            The ExecutionOrder; ``cycle_nodes`` is set when a cycle forced completion.
            A failed save is logged and leaves ``saved_to`` as None.
        """
        graph = self.builder.build(self.builder.collect(cube_files, category))
        result = graph.topological_order()

        if result.is_cyclic:
            logger.warning(
                f"Circular dependency between tables: {', '.join(result.cycle_nodes)}; "
                "appending them in discovery order"
            )
        logger.debug(f"Execution order: {' -> '.join(result.order)}")

        execution_order = ExecutionOrder(
            tables=result.order if category == "table" else [],
            seeders=result.order if category == "seeder" else [],
            timestamp=datetime.now(UTC).isoformat(),
            cycle_nodes=result.cycle_nodes,
        )
        try:
            self.saved_to = self.store.save(execution_order)
        except OrderStoreError as e:
            self.saved_to = None
            logger.error(f"{e}; continuing with the order computed for this run")
        return execution_order
