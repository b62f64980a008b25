"""
Project configuration management.

This module loads the project configuration from project.toml and applies
environment variable overrides for the external schema engine.
"""

import logging
import os
import shlex
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dbcube.parser.shared.constants import DEFAULT_CUBES_FOLDER

from .exceptions import ConfigurationError

PROJECT_CONFIG_FILE = "project.toml"
DEFAULT_ENGINE_COMMAND = ["dbcube-engine"]
DEFAULT_ENGINE_TIMEOUT = 300


@dataclass
class EngineConfig:
    """How to invoke the external schema engine."""

    command: list[str] = field(default_factory=lambda: list(DEFAULT_ENGINE_COMMAND))
    timeout: float = DEFAULT_ENGINE_TIMEOUT


@dataclass
class ProjectConfig:
    """Configuration of one dbcube project."""

    project_root: Path
    cubes_folder: str = DEFAULT_CUBES_FOLDER
    engine: EngineConfig = field(default_factory=EngineConfig)
    databases: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def cubes_path(self) -> Path:
        return self.project_root / self.cubes_folder

    def database_names(self) -> list[str]:
        return sorted(self.databases)

    def has_database(self, name: str) -> bool:
        return name in self.databases


class ProjectConfigManager:
    """Manages project configuration from project.toml and the environment."""

    def __init__(self, project_root: str | Path | None = None) -> None:
        self.project_root = Path(project_root).resolve() if project_root else Path.cwd()
        self.logger = logging.getLogger(self.__class__.__name__)

    def load_config(self) -> ProjectConfig:
        """
        Load project configuration.

        Returns:
            ProjectConfig with environment overrides applied

        Raises:
            ConfigurationError: If project.toml is missing or invalid
        """
        toml_config = self._load_toml_config()
        env_config = self._load_env_config()
        return self._create_project_config(self._merge_configs(toml_config, env_config))

    def _load_toml_config(self) -> dict[str, Any]:
        """Load configuration from project.toml."""
        toml_file = self.project_root / PROJECT_CONFIG_FILE
        if not toml_file.exists():
            raise ConfigurationError(f"{PROJECT_CONFIG_FILE} not found in {self.project_root}")

        try:
            with open(toml_file, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Could not read {toml_file}: {e}") from e

    def _load_env_config(self) -> dict[str, Any]:
        """Load engine overrides from environment variables."""
        engine: dict[str, Any] = {}

        command = os.getenv("DBCUBE_ENGINE_COMMAND")
        if command:
            engine["command"] = shlex.split(command)

        timeout = os.getenv("DBCUBE_ENGINE_TIMEOUT")
        if timeout:
            try:
                engine["timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(f"DBCUBE_ENGINE_TIMEOUT must be a number, got '{timeout}'") from e

        if engine:
            self.logger.debug(f"Engine overrides from environment: {sorted(engine)}")
        return {"engine": engine} if engine else {}

    def _merge_configs(self, toml_config: dict[str, Any], env_config: dict[str, Any]) -> dict[str, Any]:
        """Merge TOML and environment configurations."""
        merged = dict(toml_config)
        engine = dict(merged.get("engine") or {})
        engine.update(env_config.get("engine", {}))
        merged["engine"] = engine
        return merged

    def _create_project_config(self, config_dict: dict[str, Any]) -> ProjectConfig:
        """Create ProjectConfig from dictionary."""
        engine_dict = config_dict.get("engine") or {}
        if not isinstance(engine_dict, dict):
            raise ConfigurationError("[engine] must be a table")

        command = engine_dict.get("command", DEFAULT_ENGINE_COMMAND)
        if isinstance(command, str):
            command = shlex.split(command)
        if not command or not all(isinstance(part, str) for part in command):
            raise ConfigurationError("engine.command must be a non-empty string or list of strings")

        try:
            timeout = float(engine_dict.get("timeout", DEFAULT_ENGINE_TIMEOUT))
        except (TypeError, ValueError) as e:
            raise ConfigurationError("engine.timeout must be a number") from e

        databases = config_dict.get("databases") or {}
        if not isinstance(databases, dict):
            raise ConfigurationError("[databases] must be a table of database configurations")

        return ProjectConfig(
            project_root=self.project_root,
            cubes_folder=str(config_dict.get("cubes_folder", DEFAULT_CUBES_FOLDER)),
            engine=EngineConfig(command=list(command), timeout=timeout),
            databases=dict(databases),
        )


def load_project_config(project_root: str | Path | None = None) -> ProjectConfig:
    """
    Convenience function to load the project configuration.

    Args:
        project_root: Project root directory (defaults to current directory)

    Returns:
        ProjectConfig object
    """
    manager = ProjectConfigManager(project_root)
    return manager.load_config()
