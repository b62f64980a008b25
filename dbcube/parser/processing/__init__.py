"""
Processing layer for cube file discovery.
"""

from .file_discovery import CubeFileDiscovery, numeric_prefix

__all__ = ["CubeFileDiscovery", "numeric_prefix"]
