"""
Failure propagation between dependent tables.

Once a table fails (validation, an unmet dependency or an execution error),
every later table referencing it must be skipped before the schema engine is
called for it.
"""

import logging
from typing import Iterable, Iterator

from dbcube.parser.analysis.foreign_keys import find_reference_line
from dbcube.parser.shared.types import FilePath, ValidationError

logger = logging.getLogger(__name__)


class FailedSet:
    """Table names that failed during one run. Only ever grows."""

    def __init__(self, names: Iterable[str] = ()):
        self._names: set[str] = set(names)

    def add(self, table_name: str) -> None:
        if table_name not in self._names:
            logger.debug(f"Marking table as failed: {table_name}")
        self._names.add(table_name)

    def __contains__(self, table_name: object) -> bool:
        return table_name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def blocking(self, dependencies: Iterable[str]) -> list[str]:
        """Failed dependencies, in declaration order and without repeats."""
        blocked: list[str] = []
        for dependency in dependencies:
            if dependency in self._names and dependency not in blocked:
                blocked.append(dependency)
        return blocked

    def dependency_error(
        self,
        table_name: str,
        file_path: FilePath,
        dependencies: Iterable[str],
        action: str = "create",
    ) -> ValidationError | None:
        """
        Build the error for a table whose prerequisites failed.

        The error points at the line declaring the first failed dependency.

        Args:
            table_name: Table about to be processed
            file_path: Its cube file
            dependencies: Tables it references
            action: Verb used in the message ("create", "refresh", ...)

        Returns:
            A ValidationError, or None when no dependency failed
        """
        blocked = self.blocking(dependencies)
        if not blocked:
            return None

        return ValidationError(
            item_name=table_name,
            message=(
                f"Cannot {action} table '{table_name}' because it depends on "
                f"failed table(s): {', '.join(blocked)}"
            ),
            file_path=str(file_path),
            line_number=find_reference_line(file_path, blocked[0]),
        )
