"""
Custom exceptions for the engine module.
"""


class EngineError(Exception):
    """Base exception for all engine-related errors."""

    pass


class ConfigurationError(EngineError):
    """Raised when the project configuration is missing or invalid."""

    pass


class SchemaEngineError(EngineError):
    """Raised when the external schema engine cannot be run or answers garbage."""

    pass


class OrderStoreError(EngineError):
    """Raised when the execution order cannot be saved."""

    pass
