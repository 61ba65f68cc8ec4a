"""
CLI layer for unitwork.

Entry point::

    unitwork --help
"""

from unitwork.cli.app import app

__all__ = ["app"]
