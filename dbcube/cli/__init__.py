"""
Command-line interface for dbcube.
"""
