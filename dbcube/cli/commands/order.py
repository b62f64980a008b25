"""
Order command implementation.
"""

import typer

from dbcube.cli.context import CommandContext
from dbcube.cli.utils import dump_structured
from dbcube.parser.analysis.dependency_graph import DependencyResolver
from dbcube.parser.processing.file_discovery import CubeFileDiscovery


def cmd_order(
    project_folder: str,
    verbose: bool = False,
    seeders: bool = False,
    strict: bool = False,
    output_format: str = "text",
) -> None:
    """Resolve foreign-key dependencies and save the execution order."""
    ctx = CommandContext(project_folder=project_folder, verbose=verbose)
    category = "seeder" if seeders else "table"

    try:
        cube_files = CubeFileDiscovery(ctx.config.cubes_path).discover(category)
        resolver = DependencyResolver(ctx.store)
        order = resolver.resolve(cube_files, category)
    except Exception as e:
        ctx.handle_error(e)
        return

    names = order.seeders if seeders else order.tables
    if output_format != "text":
        typer.echo(dump_structured({**order.to_dict(), "cycle_nodes": order.cycle_nodes}, output_format))
    else:
        typer.echo(f"Execution order for {len(names)} {category}(s):")
        for index, name in enumerate(names, start=1):
            typer.echo(f"  {index:>3}. {name}")
        if resolver.saved_to is not None:
            typer.echo(f"\nSaved to {resolver.saved_to}")

    if resolver.saved_to is None:
        warning = typer.style("Warning: ", fg=typer.colors.YELLOW, bold=True)
        typer.echo(f"{warning}execution order could not be saved to {ctx.store.order_file}", err=True)

    if order.is_cyclic:
        warning = typer.style("Warning: ", fg=typer.colors.YELLOW, bold=True)
        typer.echo(
            f"{warning}circular dependency between: {', '.join(order.cycle_nodes)}",
            err=True,
        )
        if strict:
            raise typer.Exit(1)
