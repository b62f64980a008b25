"""
Custom exceptions for the parser module.
"""


class ParserError(Exception):
    """Base exception for all parser-related errors."""

    pass


class DependencyError(ParserError):
    """Raised when dependency analysis fails."""

    pass


class FileDiscoveryError(ParserError):
    """Raised when cube file discovery fails."""

    pass
