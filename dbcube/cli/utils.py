"""
CLI utility functions.

Pure, stateless utility functions used across CLI commands.
"""

import json
import logging
from typing import Any

import yaml

OUTPUT_FORMATS = ("text", "json", "yaml")


def setup_logging(verbose: bool = False) -> None:
    """
    Set up logging configuration.

    Args:
        verbose: If True, set logging level to DEBUG, otherwise INFO
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s - %(name)s - %(message)s")


def dump_structured(data: Any, output_format: str) -> str:
    """
    Render data as JSON or YAML text.

    Raises:
        ValueError: If the format is not json or yaml
    """
    if output_format == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    if output_format == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported output format '{output_format}'")
