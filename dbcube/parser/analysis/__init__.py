"""
Analysis layer for foreign-key dependencies and execution ordering.
"""

from .dependency_graph import DependencyGraph, DependencyGraphBuilder, DependencyResolver, SortResult
from .foreign_keys import extract_dependencies, extract_foreign_key_references, find_reference_line

__all__ = [
    "DependencyGraph",
    "DependencyGraphBuilder",
    "DependencyResolver",
    "SortResult",
    "extract_dependencies",
    "extract_foreign_key_references",
    "find_reference_line",
]
