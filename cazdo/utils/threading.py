"""Threading utilities for sizing the work item fetch pool."""

import os
import sys
from typing import Any, Dict, Optional

from cazdo.constants import MAX_FETCH_WORKERS


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with free-threading enabled.

    Returns:
        True if running on Python 3.13+ with the GIL disabled
    """
    is_gil_enabled = getattr(sys, "_is_gil_enabled", None)
    if is_gil_enabled is None:
        return False
    return not is_gil_enabled()


def get_python_threading_mode() -> str:
    """Describe the current threading mode for debug output."""
    if not hasattr(sys, "_is_gil_enabled"):
        return "GIL-enabled (Python < 3.13)"
    return "free-threading" if is_free_threading_enabled() else "GIL-enabled"


def get_optimal_worker_count(user_specified: Optional[int] = None) -> int:
    """Calculate the number of fetch workers.

    Fetches are network bound, so the count follows the I/O heuristic
    ``cpu_count + 4`` and is capped to stay polite to the Azure DevOps API.

    Args:
        user_specified: User-specified worker count, if provided

    Returns:
        Number of workers for the fetch pool
    """
    if user_specified is not None and user_specified > 0:
        return user_specified

    cpu_count = os.cpu_count() or 1
    return min(MAX_FETCH_WORKERS, cpu_count + 4)


def get_threading_info() -> Dict[str, Any]:
    """Collect threading details shown by ``--debug``."""
    return {
        "mode": get_python_threading_mode(),
        "free_threading": is_free_threading_enabled(),
        "cpu_count": os.cpu_count() or 1,
        "fetch_workers": get_optimal_worker_count(),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }
