"""
Console rendering of progress, summaries and errors.
"""

from pathlib import Path
from typing import Iterable

import typer

from dbcube.engine.orchestrator import ProcessSummary, ProgressReporter
from dbcube.parser.shared.types import ValidationError

RULE_WIDTH = 60
ERROR_COLUMN = 7


def _rule(color: str = typer.colors.BRIGHT_BLACK) -> str:
    return typer.style("─" * RULE_WIDTH, fg=color)


def code_context(file_path: str, line_number: int, context_lines: int = 2) -> list[str]:
    """
    Lines around ``line_number`` with the offending one marked.

    Returns a single placeholder line when the file cannot be read.
    """
    try:
        lines = Path(file_path).read_text(encoding="utf-8").split("\n")
    except (OSError, UnicodeDecodeError):
        return [typer.style("   (unable to show code context)", fg=typer.colors.BRIGHT_BLACK)]

    start = max(0, line_number - context_lines - 1)
    end = min(len(lines), line_number + context_lines)
    rendered = []
    for index in range(start, end):
        number = typer.style(str(index + 1).rjust(4), fg=typer.colors.BRIGHT_BLACK)
        marker = typer.style("<-", fg=typer.colors.RED) if index + 1 == line_number else "  "
        rendered.append(f"{number} {marker}       {lines[index]}")
    return rendered


def format_error(error: ValidationError) -> list[str]:
    """Render one error as [error] / [code] lines followed by source context."""
    output = [f"{typer.style('[error]', fg=typer.colors.RED)} {typer.style(error.message, fg=typer.colors.RED)}", ""]
    if error.file_path:
        location = f"{error.file_path}:{error.line_number}:{ERROR_COLUMN}"
        output.append(f"{typer.style('[code]', fg=typer.colors.CYAN)} {typer.style(location, fg=typer.colors.YELLOW)}")
        output.extend(code_context(error.file_path, error.line_number))
    return output


def print_errors(errors: Iterable[ValidationError]) -> None:
    errors = list(errors)
    if not errors:
        return
    typer.echo(f"\n🚫 {typer.style('ERRORS FOUND', fg=typer.colors.RED, bold=True)}")
    typer.echo(_rule(typer.colors.RED))
    for index, error in enumerate(errors):
        for line in format_error(error):
            typer.echo(line)
        if index < len(errors) - 1:
            typer.echo("")


class ConsoleReporter(ProgressReporter):
    """Prints progress of schema runs to the terminal."""

    ICONS = {
        "create database": "🗄️",
        "fresh tables": "🗑️",
        "refresh tables": "🔄",
        "seeders": "🌱",
        "triggers": "⚡",
    }

    def operation_started(self, operation_name: str, database_name: str) -> None:
        icon = self.ICONS.get(operation_name, "🗑️")
        typer.echo(f"\n{icon} {typer.style('EXECUTING ' + operation_name.upper(), fg=typer.colors.GREEN, bold=True)}")
        typer.echo(_rule())
        typer.echo(f"{typer.style('┌─', fg=typer.colors.BLUE)} {typer.style(f'Database: {database_name}', bold=True)}")

    def item_started(self, item_name: str, current: int, total: int) -> None:
        counter = typer.style(f"[{current}/{total}]", fg=typer.colors.BRIGHT_BLACK)
        typer.echo(
            f"{typer.style('├─', fg=typer.colors.BLUE)} {typer.style(item_name, fg=typer.colors.CYAN)} {counter} ",
            nl=False,
        )

    def item_succeeded(self, item_name: str) -> None:
        typer.echo(f"{typer.style('✓', fg=typer.colors.GREEN)} {typer.style('OK', fg=typer.colors.BRIGHT_BLACK)}")

    def item_failed(self, item_name: str, message: str) -> None:
        typer.echo(typer.style("✗", fg=typer.colors.RED))

    def operation_finished(self, summary: ProcessSummary) -> None:
        title = f"SUMMARY OF {summary.operation_name.upper()}"
        typer.echo(f"\n📊 {typer.style(title, fg=typer.colors.GREEN, bold=True)}")
        typer.echo(_rule())

        if summary.success_count:
            green = typer.colors.GREEN
            typer.echo(f"{typer.style('┌─', fg=green)} {typer.style('Successful processing:', bold=True)}")
            typer.echo(f"{typer.style('├─', fg=green)} Items processed: {summary.success_count}")
            typer.echo(f"{typer.style('├─', fg=green)} Database: {summary.database_name}")
            typer.echo(f"{typer.style('├─', fg=green)} {typer.style('Items updated:', fg=typer.colors.YELLOW)}")
            for index, item in enumerate(summary.processed_items):
                connector = "└─" if index == len(summary.processed_items) - 1 else "├─"
                typer.echo(f"{typer.style('│  ', fg=green)} {connector} {typer.style(item, fg=typer.colors.CYAN)}")

        if summary.error_count:
            typer.echo(
                f"{typer.style('├─', fg=typer.colors.RED)} "
                f"{typer.style(f'Errors: {summary.error_count}', fg=typer.colors.RED, bold=True)}"
            )
        if summary.halted:
            typer.echo(f"{typer.style('├─', fg=typer.colors.RED)} Stopped by the schema engine")

        typer.echo(f"{typer.style('├─', fg=typer.colors.BLUE)} Total time: {summary.elapsed:.1f}s")
        status = (
            typer.style("✅ Completed", fg=typer.colors.GREEN)
            if summary.success_count
            else typer.style("⚠️  No changes", fg=typer.colors.YELLOW)
        )
        typer.echo(f"{typer.style('└─', fg=typer.colors.BLUE)} {status}")

        print_errors(summary.errors)
