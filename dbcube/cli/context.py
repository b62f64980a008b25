"""
Command context for shared setup across CLI commands.
"""

import typer
from pathlib import Path
from typing import Optional

from dbcube.engine.config import ProjectConfig, load_project_config
from dbcube.engine.order_store import ExecutionOrderStore
from .utils import setup_logging


class CommandContext:
    """
    Shared context for CLI commands.

    Handles common setup: loading config, setting up logging and resolving
    the database to operate on.
    """

    def __init__(
        self,
        project_folder: str,
        verbose: bool = False,
        database: Optional[str] = None,
    ):
        """
        Initialize command context from parameters.

        Args:
            project_folder: Path to the project folder
            verbose: Enable verbose output
            database: Database name; optional when exactly one is configured
        """
        # Set up logging
        self.verbose = verbose
        setup_logging(self.verbose)

        # Resolve project folder to absolute path
        self.project_path = Path(project_folder).resolve()
        self.requested_database = database
        self._config: Optional[ProjectConfig] = None

    @property
    def config(self) -> ProjectConfig:
        """Project configuration, loaded on first use."""
        if self._config is None:
            self._config = load_project_config(self.project_path)
        return self._config

    @property
    def store(self) -> ExecutionOrderStore:
        return ExecutionOrderStore(self.project_path)

    def database_name(self) -> str:
        """
        Name of the database to operate on.

        Raises:
            ValueError: If no database was given and it cannot be inferred
        """
        if self.requested_database:
            return self.requested_database
        names = self.config.database_names()
        if len(names) == 1:
            return names[0]
        if not names:
            raise ValueError("No databases configured in project.toml")
        raise ValueError(
            f"Several databases configured ({', '.join(names)}); choose one with --database"
        )

    def handle_error(self, error: Exception, show_traceback: bool = None) -> None:
        """
        Handle errors consistently across commands.

        Args:
            error: The exception that occurred
            show_traceback: Whether to show traceback (defaults to verbose mode)
        """
        if show_traceback is None:
            show_traceback = self.verbose

        error_prefix = typer.style("Error: ", fg=typer.colors.RED, bold=True)
        typer.echo(f"{error_prefix}{error}", err=True)
        if show_traceback:
            import traceback
            traceback.print_exc()
        raise typer.Exit(1)
