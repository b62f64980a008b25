"""
dbcube Module

Validation and dependency ordering of cube schema files, and the runs that
hand them to the external schema engine.
"""

from .engine import ExecutionOrderStore, FailedSet, Schema
from .parser import (
    CubeFileDiscovery,
    CubeValidator,
    DependencyGraphBuilder,
    DependencyResolver,
    ExecutionOrder,
    ValidationError,
    ValidationResult,
    extract_dependencies,
)

__all__ = [
    "CubeFileDiscovery",
    "CubeValidator",
    "DependencyGraphBuilder",
    "DependencyResolver",
    "ExecutionOrder",
    "ExecutionOrderStore",
    "FailedSet",
    "Schema",
    "ValidationError",
    "ValidationResult",
    "extract_dependencies",
]
