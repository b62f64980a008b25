"""
CLI command implementations.
"""

from dbcube.cli.commands.order import cmd_order
from dbcube.cli.commands.run import cmd_create_database, cmd_fresh, cmd_refresh, cmd_seed, cmd_trigger
from dbcube.cli.commands.validate import cmd_validate

__all__ = [
    "cmd_create_database",
    "cmd_fresh",
    "cmd_order",
    "cmd_refresh",
    "cmd_seed",
    "cmd_trigger",
    "cmd_validate",
]
