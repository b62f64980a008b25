"""
Validate command implementation.
"""

import typer

from dbcube.cli.context import CommandContext
from dbcube.cli.formatting import print_errors
from dbcube.cli.utils import dump_structured
from dbcube.parser.processing.file_discovery import CubeFileDiscovery
from dbcube.parser.shared.constants import CUBE_CATEGORIES
from dbcube.parser.validation.cube_validator import CubeValidator


def cmd_validate(
    project_folder: str,
    verbose: bool = False,
    output_format: str = "text",
) -> None:
    """Execute the validate command over every cube file of the project."""
    ctx = CommandContext(project_folder=project_folder, verbose=verbose)

    try:
        discovery = CubeFileDiscovery(ctx.config.cubes_path)
        cube_files = [path for category in CUBE_CATEGORIES for path in discovery.discover(category)]
    except Exception as e:
        ctx.handle_error(e)
        return

    validator = CubeValidator()
    results = [(path, validator.validate(path)) for path in cube_files]
    invalid = [(path, result) for path, result in results if not result.is_valid]

    if output_format != "text":
        report = {
            "files": [
                {"file": str(path), **result.to_dict()} for path, result in results
            ],
            "valid": len(results) - len(invalid),
            "invalid": len(invalid),
        }
        typer.echo(dump_structured(report, output_format))
    else:
        typer.echo(f"Validating {len(cube_files)} cube file(s) in {ctx.config.cubes_path}")
        for path, result in results:
            mark = typer.style("✓", fg=typer.colors.GREEN) if result.is_valid else typer.style("✗", fg=typer.colors.RED)
            typer.echo(f"  {mark} {path.relative_to(ctx.config.cubes_path.absolute())}")
        print_errors(error for _, result in invalid for error in result.errors)
        if not invalid:
            typer.echo("\n✅ All cube files are valid!")

    if invalid:
        raise typer.Exit(1)
