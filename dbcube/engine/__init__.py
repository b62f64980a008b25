"""
Execution side of dbcube: configuration, persisted ordering, failure
propagation and the runs that drive the external schema engine.
"""

from .config import EngineConfig, ProjectConfig, ProjectConfigManager, load_project_config
from .exceptions import ConfigurationError, EngineError, OrderStoreError, SchemaEngineError
from .failure_tracker import FailedSet
from .order_store import ExecutionOrderStore
from .orchestrator import ProcessSummary, ProgressReporter, Schema
from .schema_engine import EngineResponse, SchemaEngine, SubprocessSchemaEngine

__all__ = [
    "ConfigurationError",
    "EngineConfig",
    "EngineError",
    "EngineResponse",
    "ExecutionOrderStore",
    "FailedSet",
    "OrderStoreError",
    "ProcessSummary",
    "ProgressReporter",
    "ProjectConfig",
    "ProjectConfigManager",
    "Schema",
    "SchemaEngine",
    "SchemaEngineError",
    "SubprocessSchemaEngine",
    "load_project_config",
]
