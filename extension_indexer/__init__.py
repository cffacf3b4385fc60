"""
Extension Indexer

Scans a platform core and its plugins for extension points and their
implementations, and writes a JSON index and a human-readable catalogue.
"""

__version__ = "0.1.0"
