"""
Shared utilities and common types for the parser module.
"""

from .types import *
from .exceptions import *
from .constants import *
from .file_utils import (
    extract_database_name,
    extract_table_name,
    item_name_for,
    read_cube_file,
    resolve_table_name,
)

__all__ = [
    # Types
    "CubeCategory",
    "ExecutionOrder",
    "TableDependency",
    "ValidationError",
    "ValidationResult",
    # Exceptions
    "ParserError",
    "DependencyError",
    "FileDiscoveryError",
    # Constants
    "CUBE_FILE_SUFFIXES",
    "DEFAULT_CUBES_FOLDER",
    # Utilities
    "extract_database_name",
    "extract_table_name",
    "item_name_for",
    "read_cube_file",
    "resolve_table_name",
]
