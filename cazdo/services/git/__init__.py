"""Git-related services for cazdo."""

from .operations import GitOperations

__all__ = [
    "GitOperations",
]
