"""
Boundary to the external schema engine.

The schema engine parses cube files, generates SQL and executes it. dbcube
only hands it validated, ordered file paths and reads back a status code, a
message and a payload.
"""

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .config import EngineConfig
from .exceptions import SchemaEngineError

logger = logging.getLogger(__name__)

STATUS_OK = 200
ENGINE_PROGRAM = "schema_engine"


@dataclass
class EngineResponse:
    """Answer of one schema engine call."""

    status: int
    message: str = ""
    data: Any = field(default=None)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "EngineResponse":
        try:
            status = int(payload["status"])
        except (KeyError, TypeError, ValueError) as e:
            raise SchemaEngineError(f"Schema engine response has no valid status: {payload!r}") from e
        return cls(status=status, message=str(payload.get("message", "")), data=payload.get("data"))


class SchemaEngine(ABC):
    """Something that can run schema engine actions."""

    @abstractmethod
    def run(self, args: list[str]) -> EngineResponse:
        """
        Run one schema engine action.

        Args:
            args: Command-line style arguments, e.g. ["--action", "seeder", ...]

        Returns:
            The engine's response

        Raises:
            SchemaEngineError: If the engine cannot be reached or answers garbage
        """

    def create_database(self, project_path: str) -> EngineResponse:
        return self.run(["--action", "create_database", "--path", project_path])

    def parse_table(self, schema_path: str, mode: str) -> EngineResponse:
        return self.run(["--action", "parse_table", "--mode", mode, "--schema-path", schema_path])

    def generate(self, dml: str, mode: str | None = None) -> EngineResponse:
        mode_args = ["--mode", mode] if mode else []
        return self.run(["--action", "generate", *mode_args, "--dml", dml])

    def execute(self, dml: str, mode: str) -> EngineResponse:
        return self.run(["--action", "execute", "--mode", mode, "--dml", dml])

    def save_query(self, table: str, query: str) -> EngineResponse:
        return self.run(["--action", "save_query", "--table", table, "--query", query])

    def seeder(self, schema_path: str) -> EngineResponse:
        return self.run(["--action", "seeder", "--schema-path", schema_path])

    def trigger(self, schema_path: str, path_exit: str) -> EngineResponse:
        return self.run(["--action", "trigger", "--path-exit", path_exit, "--schema-path", schema_path])


class SubprocessSchemaEngine(SchemaEngine):
    """Runs the schema engine as a child process speaking JSON on stdout."""

    def __init__(self, database_name: str, config: EngineConfig | None = None):
        self.database_name = database_name
        self.config = config or EngineConfig()

    def run(self, args: list[str]) -> EngineResponse:
        command = [*self.config.command, ENGINE_PROGRAM, "--database", self.database_name, *args]
        logger.debug(f"Running schema engine: {' '.join(command[:6])} ...")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise SchemaEngineError(f"Schema engine not found: {self.config.command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise SchemaEngineError(f"Schema engine timed out after {self.config.timeout}s") from e
        except OSError as e:
            raise SchemaEngineError(f"Could not start schema engine: {e}") from e

        output = result.stdout.strip()
        if not output:
            raise SchemaEngineError(
                f"Schema engine exited with code {result.returncode} without a response: "
                f"{result.stderr.strip()}"
            )

        try:
            payload = json.loads(output.splitlines()[-1])
        except json.JSONDecodeError as e:
            raise SchemaEngineError(f"Schema engine returned invalid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise SchemaEngineError(f"Schema engine returned {type(payload).__name__}, expected an object")

        return EngineResponse.from_dict(payload)
