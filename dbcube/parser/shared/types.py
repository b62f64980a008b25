"""
Common type definitions for the parser module.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

# File paths
FilePath = str | Path

# Cube file categories that take part in dependency ordering
CubeCategory = Literal["table", "seeder"]


@dataclass(frozen=True)
class ValidationError:
    """A single problem found in a cube file."""

    item_name: str
    message: str
    file_path: str
    line_number: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_name": self.item_name,
            "message": self.message,
            "file_path": self.file_path,
            "line_number": self.line_number,
        }


@dataclass
class ValidationResult:
    """Outcome of validating one cube file."""

    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [error.to_dict() for error in self.errors],
        }


@dataclass
class TableDependency:
    """A table declared by a cube file and the tables it references."""

    table_name: str
    file_path: Path
    dependencies: list[str] = field(default_factory=list)


@dataclass
class ExecutionOrder:
    """
    Dependency-respecting sequence of table (or seeder) names.

    Only ``tables``, ``seeders`` and ``timestamp`` are persisted. ``cycle_nodes``
    lists the names that could not be sorted and were appended at the end.
    """

    tables: list[str] = field(default_factory=list)
    seeders: list[str] = field(default_factory=list)
    timestamp: str = ""
    cycle_nodes: list[str] = field(default_factory=list)

    @property
    def is_cyclic(self) -> bool:
        return bool(self.cycle_nodes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tables": list(self.tables),
            "seeders": list(self.seeders),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExecutionOrder":
        tables = data.get("tables") or []
        seeders = data.get("seeders") or []
        if not isinstance(tables, list) or not isinstance(seeders, list):
            raise ValueError("'tables' and 'seeders' must be lists")
        return cls(
            tables=[str(name) for name in tables],
            seeders=[str(name) for name in seeders],
            timestamp=str(data.get("timestamp", "")),
        )
