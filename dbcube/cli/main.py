"""
dbcube CLI Main Module

Command-line interface for validating, ordering and running cube files.
"""

from typing import Any, Literal

import typer

from dbcube.cli.commands import (
    cmd_create_database,
    cmd_fresh,
    cmd_order,
    cmd_refresh,
    cmd_seed,
    cmd_trigger,
    cmd_validate,
)
from dbcube.cli.utils import OUTPUT_FORMATS

OutputFormat = Literal["text", "json", "yaml"]


class AlphabeticalOrderGroup(typer.core.TyperGroup):
    """Custom Typer Group that lists commands in alphabetical order."""

    def list_commands(self, ctx: typer.Context) -> list[str]:
        return sorted(self.commands.keys())


def validate_format(value: str) -> OutputFormat:
    """Validate format option (text, json or yaml)."""
    if value not in OUTPUT_FORMATS:
        raise typer.BadParameter(
            typer.style("Error: ", fg=typer.colors.RED, bold=True)
            + f"Invalid format '{value}'. Must be one of: {', '.join(OUTPUT_FORMATS)}."
        )
    return value  # type: ignore[return-value]


app = typer.Typer(
    name="dbcube",
    help="dbcube - validate, order and run cube schema files",
    add_completion=False,
    rich_markup_mode="rich",
    cls=AlphabeticalOrderGroup,
    invoke_without_command=True,
)


@app.callback()
def main_callback(ctx: typer.Context) -> None:
    """Main CLI callback - shows help when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


# Common option definitions to reduce duplication
PROJECT_FOLDER_ARG = typer.Argument(None, help="Path to the project folder containing project.toml")
VERBOSE_OPTION = typer.Option(False, "-v", "--verbose", help="Enable verbose output")
DATABASE_OPTION = typer.Option(
    None, "-d", "--database", help="Database to operate on (defaults to the only configured one)"
)
FORMAT_OPTION = typer.Option(
    "text", "-f", "--format", help="Output format: text, json or yaml", callback=validate_format
)


def _check_required_argument(ctx: typer.Context, arg_name: str, arg_value: Any) -> None:
    """Check if a required argument is provided, show help if not."""
    if arg_value is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


@app.command()
def validate(
    ctx: typer.Context,
    project_folder: str | None = PROJECT_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    output_format: str = FORMAT_OPTION,
) -> None:
    """Validate every cube file of the project."""
    _check_required_argument(ctx, "project_folder", project_folder)
    cmd_validate(project_folder=project_folder, verbose=verbose, output_format=output_format)


@app.command()
def order(
    ctx: typer.Context,
    project_folder: str | None = PROJECT_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    seeders: bool = typer.Option(False, "--seeders", help="Order seeder files instead of tables"),
    strict: bool = typer.Option(False, "--strict", help="Exit with an error on circular dependencies"),
    output_format: str = FORMAT_OPTION,
) -> None:
    """Resolve foreign-key dependencies and save the execution order."""
    _check_required_argument(ctx, "project_folder", project_folder)
    cmd_order(
        project_folder=project_folder,
        verbose=verbose,
        seeders=seeders,
        strict=strict,
        output_format=output_format,
    )


@app.command("create-database")
def create_database(
    ctx: typer.Context,
    project_folder: str | None = PROJECT_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    database: str | None = DATABASE_OPTION,
) -> None:
    """Create the database through the schema engine."""
    _check_required_argument(ctx, "project_folder", project_folder)
    cmd_create_database(project_folder=project_folder, verbose=verbose, database=database)


@app.command()
def fresh(
    ctx: typer.Context,
    project_folder: str | None = PROJECT_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    database: str | None = DATABASE_OPTION,
) -> None:
    """Drop and recreate all tables in dependency order."""
    _check_required_argument(ctx, "project_folder", project_folder)
    cmd_fresh(project_folder=project_folder, verbose=verbose, database=database)


@app.command()
def refresh(
    ctx: typer.Context,
    project_folder: str | None = PROJECT_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    database: str | None = DATABASE_OPTION,
) -> None:
    """Update all tables towards their cube definitions."""
    _check_required_argument(ctx, "project_folder", project_folder)
    cmd_refresh(project_folder=project_folder, verbose=verbose, database=database)


@app.command()
def seed(
    ctx: typer.Context,
    project_folder: str | None = PROJECT_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    database: str | None = DATABASE_OPTION,
) -> None:
    """Run seeders following the saved table order."""
    _check_required_argument(ctx, "project_folder", project_folder)
    cmd_seed(project_folder=project_folder, verbose=verbose, database=database)


@app.command()
def trigger(
    ctx: typer.Context,
    project_folder: str | None = PROJECT_FOLDER_ARG,
    verbose: bool = VERBOSE_OPTION,
    database: str | None = DATABASE_OPTION,
) -> None:
    """Install triggers."""
    _check_required_argument(ctx, "project_folder", project_folder)
    cmd_trigger(project_folder=project_folder, verbose=verbose, database=database)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
