"""Outbound commands emitted by the session"""
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class CheckoutCommand:
    """Switch the working tree to a branch."""
    branch_name: str


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a local branch."""
    branch_name: str
    force: bool = False


@dataclass(frozen=True)
class OpenUrlCommand:
    """Open a work item page in the browser."""
    url: str


Command = Union[CheckoutCommand, DeleteCommand, OpenUrlCommand]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of running a command against git or the browser."""
    command: Command
    success: bool
    error: Optional[str] = None
    commit_sha: Optional[str] = None  # Tip of a deleted branch
