"""
Shared file utilities for reading cube files.
"""

import logging
import re
from pathlib import Path

from .constants import CUBE_FILE_SUFFIXES
from .types import FilePath

logger = logging.getLogger(__name__)

TABLE_NAME_PATTERN = re.compile(r"""@table\(\s*["']?([\w-]+)["']?\s*\)""")
DATABASE_NAME_PATTERN = re.compile(r"""@database\(\s*["']?([\w-]+)["']?\s*\)""")


def read_cube_file(file_path: FilePath) -> str:
    """
    Read a cube file as UTF-8 text.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    return Path(file_path).read_text(encoding="utf-8")


def item_name_for(file_path: FilePath) -> str:
    """Name used in diagnostics: the file name without its last extension."""
    return Path(file_path).stem


def extract_table_name(content: str) -> str | None:
    """Return the name declared with @table("..."), if any."""
    match = TABLE_NAME_PATTERN.search(content)
    return match.group(1) if match else None


def extract_database_name(content: str) -> str | None:
    """Return the name declared with @database("..."), if any."""
    match = DATABASE_NAME_PATTERN.search(content)
    return match.group(1) if match else None


def fallback_name(file_path: FilePath, category: str) -> str:
    """Derive a table name from the file name by dropping the cube suffix."""
    name = Path(file_path).name
    suffix = CUBE_FILE_SUFFIXES.get(category, ".cube")
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return Path(file_path).stem


def resolve_table_name(file_path: FilePath, category: str) -> str:
    """
    Determine the table name a cube file declares.

    Falls back to the file name when the file cannot be read or has no
    @table annotation.
    """
    try:
        declared = extract_table_name(read_cube_file(file_path))
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read {file_path} for its table name: {e}")
        declared = None
    return declared or fallback_name(file_path, category)


def find_line_number(file_path: FilePath, *needles: str) -> int:
    """Return the 1-based line of the first line containing any of ``needles``, or 1."""
    try:
        lines = read_cube_file(file_path).split("\n")
    except (OSError, UnicodeDecodeError):
        return 1
    for index, line in enumerate(lines):
        if any(needle in line for needle in needles):
            return index + 1
    return 1
