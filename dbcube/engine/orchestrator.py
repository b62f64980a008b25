"""
Orchestration of schema engine runs over cube files.

Each operation discovers its cube files, orders them, validates each one,
skips tables whose prerequisites failed, and only then calls the external
schema engine. A non-OK engine status halts the remaining sequence.
"""

import json
import logging
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dbcube.parser.analysis.dependency_graph import DependencyResolver
from dbcube.parser.analysis.foreign_keys import extract_dependencies
from dbcube.parser.processing.file_discovery import CubeFileDiscovery
from dbcube.parser.shared.constants import DEFAULT_TRIGGERS_FOLDER
from dbcube.parser.shared.exceptions import FileDiscoveryError
from dbcube.parser.shared.file_utils import (
    extract_database_name,
    find_line_number,
    item_name_for,
    read_cube_file,
    resolve_table_name,
)
from dbcube.parser.shared.types import ValidationError
from dbcube.parser.validation.cube_validator import CubeValidator

from .config import ProjectConfig
from .exceptions import SchemaEngineError
from .failure_tracker import FailedSet
from .order_store import ExecutionOrderStore
from .schema_engine import EngineResponse, SchemaEngine, SubprocessSchemaEngine

logger = logging.getLogger(__name__)

# Engine metadata removed from generated queries before they are executed
STRIPPED_QUERY_KEYS = {"fresh": "_type", "refresh": "database_type"}


@dataclass
class ProcessSummary:
    """Outcome of one operation over a set of cube files."""

    operation_name: str
    database_name: str
    started_at: float = field(default_factory=time.monotonic)
    processed_items: list[str] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)
    error_count: int = 0
    halted: bool = False
    elapsed: float = 0.0

    @property
    def success_count(self) -> int:
        return len(self.processed_items)

    @property
    def failed(self) -> bool:
        return self.halted or self.error_count > 0

    def record_success(self, item_name: str) -> None:
        self.processed_items.append(item_name)

    def record_error(self, error: ValidationError) -> None:
        self.errors.append(error)
        self.error_count += 1

    def finish(self) -> "ProcessSummary":
        self.elapsed = time.monotonic() - self.started_at
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation_name,
            "database": self.database_name,
            "processed": list(self.processed_items),
            "success_count": self.success_count,
            "error_count": self.error_count,
            "halted": self.halted,
            "elapsed": round(self.elapsed, 3),
            "errors": [error.to_dict() for error in self.errors],
        }


class ProgressReporter:
    """Receives progress events. The base class ignores them."""

    def operation_started(self, operation_name: str, database_name: str) -> None:
        pass

    def item_started(self, item_name: str, current: int, total: int) -> None:
        pass

    def item_succeeded(self, item_name: str) -> None:
        pass

    def item_failed(self, item_name: str, message: str) -> None:
        pass

    def operation_finished(self, summary: ProcessSummary) -> None:
        pass


class EngineHalted(Exception):
    """Internal signal: the schema engine answered with a non-OK status."""

    def __init__(self, response: EngineResponse):
        super().__init__(response.message or f"Schema engine returned status {response.status}")
        self.response = response


def compact_json(value: Any) -> str:
    """Serialize engine payloads on a single line without escaped whitespace."""
    text = json.dumps(value, ensure_ascii=False)
    text = re.sub(r"[\r\n\t]", "", text)
    text = re.sub(r"\\[rnt]", "", text)
    return re.sub(r"\s{2,}", " ", text)


class Schema:
    """
    Runs database, table, seeder and trigger operations for one database.

    Table runs resolve foreign-key dependencies first and persist the order;
    seeder runs reuse the persisted table order.
    """

    def __init__(
        self,
        name: str,
        config: ProjectConfig,
        engine: SchemaEngine | None = None,
        store: ExecutionOrderStore | None = None,
        reporter: ProgressReporter | None = None,
        validator: CubeValidator | None = None,
    ):
        """
        Initialize the schema runner.

        Args:
            name: Database name used in reports and passed to the engine
            config: Project configuration
            engine: Schema engine; defaults to the configured subprocess engine
            store: Execution order store; defaults to one under the project root
            reporter: Progress reporter; defaults to a silent one
            validator: Cube validator
        """
        self.name = name
        self.config = config
        self.engine = engine or SubprocessSchemaEngine(name, config.engine)
        self.store = store or ExecutionOrderStore(config.project_root)
        self.reporter = reporter or ProgressReporter()
        self.validator = validator or CubeValidator()
        self.resolver = DependencyResolver(self.store)

    def _discover(self, category: str) -> list[Path]:
        cube_files = CubeFileDiscovery(self.config.cubes_path).discover(category)
        if not cube_files:
            raise FileDiscoveryError(f"There are no {category} cubes to execute in {self.config.cubes_path}")
        return cube_files

    def validate_cube(self, file_path: Path) -> ValidationError | None:
        """
        Validate a cube file and the database it targets.

        Returns:
            The first problem found, or None when the file can be processed
        """
        result = self.validator.validate(file_path)
        if not result.is_valid:
            return result.errors[0]

        database_line = find_line_number(file_path, "@database")
        try:
            database_name = extract_database_name(read_cube_file(file_path))
        except (OSError, UnicodeDecodeError) as e:
            return ValidationError(
                item_name=item_name_for(file_path),
                message=f"Error reading database directive: {e}",
                file_path=str(file_path),
                line_number=database_line,
            )

        if database_name is None:
            return ValidationError(
                item_name=item_name_for(file_path),
                message="Error reading database directive: no database name declared",
                file_path=str(file_path),
                line_number=database_line,
            )

        if not self.config.has_database(database_name):
            available = ", ".join(self.config.database_names()) or "none found"
            return ValidationError(
                item_name=item_name_for(file_path),
                message=(
                    f"Database configuration '{database_name}' not found in project.toml. "
                    f"Available: {available}"
                ),
                file_path=str(file_path),
                line_number=database_line,
            )

        return None

    def _check(self, response: EngineResponse) -> EngineResponse:
        if not response.ok:
            raise EngineHalted(response)
        return response

    def _halt(self, summary: ProcessSummary, item_name: str, file_path: Path | None, halted: EngineHalted) -> None:
        logger.error(f"Schema engine stopped the run at {item_name}: {halted}")
        self.reporter.item_failed(item_name, str(halted))
        summary.record_error(
            ValidationError(
                item_name=item_name,
                message=str(halted),
                file_path=str(file_path) if file_path else "",
            )
        )
        summary.halted = True

    def _finish(self, summary: ProcessSummary) -> ProcessSummary:
        summary.finish()
        self.reporter.operation_finished(summary)
        logger.info(
            f"{summary.operation_name}: {summary.success_count} succeeded, "
            f"{summary.error_count} failed in {summary.elapsed:.1f}s"
        )
        return summary

    def create_database(self) -> ProcessSummary:
        """Ask the schema engine to create the database."""
        summary = ProcessSummary("create database", self.name)
        self.reporter.operation_started(summary.operation_name, self.name)
        self.reporter.item_started("Database", 1, 1)

        try:
            self._check(self.engine.create_database(str(self.config.project_root)))
        except EngineHalted as halted:
            self._halt(summary, "Database", None, halted)
        except Exception as e:
            self.reporter.item_failed("Database", str(e))
            summary.record_error(ValidationError(item_name="Database", message=str(e), file_path=""))
        else:
            self.reporter.item_succeeded("Database")
            summary.record_success(self.name)

        return self._finish(summary)

    def fresh_tables(self) -> ProcessSummary:
        """Drop and recreate every table, in dependency order."""
        return self._run_tables(mode="fresh", action="create", operation_name="fresh tables")

    def refresh_tables(self) -> ProcessSummary:
        """Alter every table towards its cube definition, in dependency order."""
        return self._run_tables(mode="refresh", action="refresh", operation_name="refresh tables")

    def _run_tables(self, mode: str, action: str, operation_name: str) -> ProcessSummary:
        cube_files = self._discover("table")
        order = self.resolver.resolve(cube_files, "table")
        ordered_files = self.store.reorder(cube_files, "table", order)

        summary = ProcessSummary(operation_name, self.name)
        self.reporter.operation_started(operation_name, self.name)
        failed = FailedSet()

        for index, file_path in enumerate(ordered_files):
            table_name = resolve_table_name(file_path, "table")
            self.reporter.item_started(table_name, index + 1, len(ordered_files))

            try:
                error = self.validate_cube(file_path)
                if error is None:
                    error = failed.dependency_error(
                        table_name, file_path, extract_dependencies(file_path), action=action
                    )
                if error is not None:
                    self.reporter.item_failed(table_name, error.message)
                    summary.record_error(error)
                    failed.add(table_name)
                    continue

                self._process_table(table_name, file_path, mode)

            except EngineHalted as halted:
                self._halt(summary, table_name, file_path, halted)
                break
            except Exception as e:
                logger.debug(f"Processing {table_name} failed", exc_info=True)
                self.reporter.item_failed(table_name, str(e))
                summary.record_error(
                    ValidationError(item_name=table_name, message=str(e), file_path=str(file_path))
                )
                failed.add(table_name)
                continue

            self.reporter.item_succeeded(table_name)
            summary.record_success(table_name)

        return self._finish(summary)

    def _process_table(self, table_name: str, file_path: Path, mode: str) -> None:
        parsed = self._check(self.engine.parse_table(str(file_path), mode))
        parsed_data = parsed.data or {}
        actions = parsed_data.get("actions", [])

        # fresh generation takes no mode
        generate_mode = None if mode == "fresh" else mode
        queries = self._check(self.engine.generate(compact_json(actions), generate_mode))
        payload = dict(queries.data or {})
        payload.pop(STRIPPED_QUERY_KEYS[mode], None)

        self._check(self.engine.execute(json.dumps(payload, ensure_ascii=False), mode))

        create_query = next(
            (query for query in payload.get("regular_queries") or [] if "CREATE" in query), None
        )
        if create_query is None:
            return
        saved = self.engine.save_query(parsed_data.get("table", table_name), create_query)
        if not saved.ok:
            raise SchemaEngineError(
                f"Could not save the CREATE query of table '{table_name}': "
                f"{saved.message or f'status {saved.status}'}"
            )

    def execute_seeders(self) -> ProcessSummary:
        """Run every seeder, following the saved table order."""
        cube_files = self._discover("seeder")
        ordered_files = self.store.reorder(cube_files, "seeder")
        return self._run_simple(
            ordered_files,
            category="seeder",
            operation_name="seeders",
            call=lambda file_path: self.engine.seeder(str(file_path)),
        )

    def execute_triggers(self) -> ProcessSummary:
        """Run every trigger in discovery order."""
        cube_files = self._discover("trigger")
        path_exit = str(self.config.cubes_path / DEFAULT_TRIGGERS_FOLDER)
        return self._run_simple(
            cube_files,
            category="trigger",
            operation_name="triggers",
            call=lambda file_path: self.engine.trigger(str(file_path), path_exit),
        )

    def _run_simple(self, cube_files: list[Path], category: str, operation_name: str, call) -> ProcessSummary:
        summary = ProcessSummary(operation_name, self.name)
        self.reporter.operation_started(operation_name, self.name)

        for index, file_path in enumerate(cube_files):
            item_name = resolve_table_name(file_path, category)
            self.reporter.item_started(item_name, index + 1, len(cube_files))

            try:
                error = self.validate_cube(file_path)
                if error is not None:
                    self.reporter.item_failed(item_name, error.message)
                    summary.record_error(error)
                    continue
                self._check(call(file_path))
            except EngineHalted as halted:
                self._halt(summary, item_name, file_path, halted)
                break
            except Exception as e:
                logger.debug(f"Processing {item_name} failed", exc_info=True)
                self.reporter.item_failed(item_name, str(e))
                summary.record_error(
                    ValidationError(item_name=item_name, message=str(e), file_path=str(file_path))
                )
                continue

            self.reporter.item_succeeded(item_name)
            summary.record_success(item_name)

        return self._finish(summary)
