"""
Foreign-key reference extraction.

Scans cube text for ``foreign: { ... }`` objects and collects the table names
they reference. This is a best-effort line scan based on brace counting.
"""

import logging
import re

from dbcube.parser.shared.file_utils import find_line_number, read_cube_file
from dbcube.parser.shared.types import FilePath

logger = logging.getLogger(__name__)

FOREIGN_OPENER_PATTERN = re.compile(r"foreign\s*:\s*\{")
TABLE_REFERENCE_PATTERN = re.compile(r"""table\s*:\s*["']([^"']+)["']""")


def extract_foreign_key_references(content: str) -> list[str]:
    """
    Extract referenced table names from cube text.

    Args:
        content: Cube file content

    Returns:
        Referenced table names in the order they appear (duplicates kept)
    """
    references: list[str] = []
    inside_foreign_key = False
    depth = 0

    for line in content.split("\n"):
        if FOREIGN_OPENER_PATTERN.search(line):
            inside_foreign_key = True
            depth = 1
            same_line = TABLE_REFERENCE_PATTERN.search(line)
            if same_line:
                references.append(same_line.group(1))
                inside_foreign_key = False
                depth = 0
            continue

        if not inside_foreign_key:
            continue

        depth += line.count("{") - line.count("}")
        match = TABLE_REFERENCE_PATTERN.search(line)
        if match:
            references.append(match.group(1))
        if depth == 0:
            inside_foreign_key = False

    return references


def extract_dependencies(file_path: FilePath) -> list[str]:
    """
    Extract the tables a cube file references through foreign keys.

    An unreadable file has no dependencies; the problem is logged and
    surfaces again when the file is validated.
    """
    try:
        content = read_cube_file(file_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read dependencies from {file_path}: {e}")
        return []
    return extract_foreign_key_references(content)


def find_reference_line(file_path: FilePath, table_name: str) -> int:
    """Line number of the first ``table: "<name>"`` declaration, or 1."""
    return find_line_number(file_path, f'table: "{table_name}"', f"table: '{table_name}'")
