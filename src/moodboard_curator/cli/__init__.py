"""
Command-line interface for interactive curation.
"""

from .curate import main

__all__ = ["main"]
