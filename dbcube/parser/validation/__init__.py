"""
Validation layer for cube files.
"""

from .cube_validator import CubeValidator, is_option_compatible
from .line_scanner import CubeSource, tokenize_options

__all__ = [
    "CubeSource",
    "CubeValidator",
    "is_option_compatible",
    "tokenize_options",
]
