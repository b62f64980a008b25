"""
Schema run command implementations: database, tables, seeders and triggers.
"""

from typing import Callable, Optional

import typer

from dbcube.cli.context import CommandContext
from dbcube.cli.formatting import ConsoleReporter
from dbcube.engine.orchestrator import ProcessSummary, Schema


def _run_schema_operation(
    project_folder: str,
    verbose: bool,
    database: Optional[str],
    operation: Callable[[Schema], ProcessSummary],
) -> None:
    ctx = CommandContext(project_folder=project_folder, verbose=verbose, database=database)

    try:
        schema = Schema(
            ctx.database_name(),
            ctx.config,
            store=ctx.store,
            reporter=ConsoleReporter(),
        )
        summary = operation(schema)
    except Exception as e:
        ctx.handle_error(e)
        return

    if summary.failed:
        raise typer.Exit(1)


def cmd_create_database(project_folder: str, verbose: bool = False, database: Optional[str] = None) -> None:
    """Create the database through the schema engine."""
    _run_schema_operation(project_folder, verbose, database, Schema.create_database)


def cmd_fresh(project_folder: str, verbose: bool = False, database: Optional[str] = None) -> None:
    """Recreate all tables in dependency order."""
    _run_schema_operation(project_folder, verbose, database, Schema.fresh_tables)


def cmd_refresh(project_folder: str, verbose: bool = False, database: Optional[str] = None) -> None:
    """Update all tables towards their cube definitions in dependency order."""
    _run_schema_operation(project_folder, verbose, database, Schema.refresh_tables)


def cmd_seed(project_folder: str, verbose: bool = False, database: Optional[str] = None) -> None:
    """Run all seeders following the saved table order."""
    _run_schema_operation(project_folder, verbose, database, Schema.execute_seeders)


def cmd_trigger(project_folder: str, verbose: bool = False, database: Optional[str] = None) -> None:
    """Install all triggers."""
    _run_schema_operation(project_folder, verbose, database, Schema.execute_triggers)
