"""
Parser Module

Validation, foreign-key analysis and dependency ordering for cube files.
"""

from .analysis import DependencyGraph, DependencyGraphBuilder, DependencyResolver, extract_dependencies
from .processing import CubeFileDiscovery
from .shared import (
    DependencyError,
    ExecutionOrder,
    FileDiscoveryError,
    ParserError,
    TableDependency,
    ValidationError,
    ValidationResult,
)
from .validation import CubeValidator

__all__ = [
    "CubeFileDiscovery",
    "CubeValidator",
    "DependencyError",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "DependencyResolver",
    "ExecutionOrder",
    "FileDiscoveryError",
    "ParserError",
    "TableDependency",
    "ValidationError",
    "ValidationResult",
    "extract_dependencies",
]
