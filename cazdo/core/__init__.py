"""Session engine for cazdo."""

from .dispatcher import CommandDispatcher
from .session import BranchSession, SessionSnapshot, SessionState, StatusMessage

__all__ = [
    "BranchSession",
    "CommandDispatcher",
    "SessionSnapshot",
    "SessionState",
    "StatusMessage",
]
