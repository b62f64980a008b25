"""
File discovery functionality for finding cube files.
"""

import logging
import re
from pathlib import Path

from dbcube.parser.shared.constants import CUBE_FILE_SUFFIXES
from dbcube.parser.shared.exceptions import FileDiscoveryError

# Configure logging
logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r"^[+-]?\d+")


def numeric_prefix(file_path: Path) -> int:
    """Integer at the start of the file name; 0 when there is none."""
    match = _LEADING_NUMBER.match(file_path.name.lstrip())
    return int(match.group(0)) if match else 0


class CubeFileDiscovery:
    """Handles discovery of table, seeder and trigger cube files."""

    def __init__(self, cubes_folder: Path):
        """
        Initialize the file discovery.

        Args:
            cubes_folder: Path to the folder holding the cube files
        """
        self.cubes_folder = cubes_folder

    def discover(self, category: str) -> list[Path]:
        """
        Discover all cube files of one category below the cubes folder.

        Files are sorted by path and then, stably, by their numeric prefix
        (``01_users.table.cube`` before ``02_orders.table.cube``).

        Args:
            category: "table", "seeder" or "trigger"

        Returns:
            Absolute paths of the discovered files

        Raises:
            FileDiscoveryError: If the category is unknown or discovery fails
        """
        suffix = CUBE_FILE_SUFFIXES.get(category)
        if suffix is None:
            raise FileDiscoveryError(f"Unknown cube category: {category}")

        try:
            if not self.cubes_folder.exists():
                raise FileDiscoveryError(f"Cubes folder not found: {self.cubes_folder}")

            cube_files = [
                path.absolute()
                for path in self.cubes_folder.rglob(f"*{suffix}")
                if path.is_file()
            ]

            # Sort for consistent ordering
            cube_files.sort()
            cube_files.sort(key=numeric_prefix)

            logger.debug(f"Discovered {len(cube_files)} {category} cube files")
            return cube_files

        except Exception as e:
            if isinstance(e, FileDiscoveryError):
                raise
            raise FileDiscoveryError(f"Failed to discover {category} cube files: {e}") from e
