"""Utility functions for cazdo.

This package provides utility modules:
- threading: Worker pool sizing for work item fetches
- browser: Opening work item pages
"""

from .threading import (
    is_free_threading_enabled,
    get_python_threading_mode,
    get_optimal_worker_count,
    get_threading_info,
)
from .browser import open_url

__all__ = [
    # Threading
    "is_free_threading_enabled",
    "get_python_threading_mode",
    "get_optimal_worker_count",
    "get_threading_info",
    # Browser
    "open_url",
]
