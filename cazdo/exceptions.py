"""Custom exceptions for cazdo"""

from enum import Enum
from typing import Optional


class CazdoError(Exception):
    """Base exception for all cazdo errors."""
    pass


class ConfigError(CazdoError):
    """Exception raised when configuration is missing or invalid."""
    pass


class GitOperationError(CazdoError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class BranchNotFoundError(GitOperationError):
    """Exception raised when a branch is not found."""

    def __init__(self, branch: str):
        super().__init__("find_branch", branch, "Branch not found")


class BranchProtectedError(GitOperationError):
    """Exception raised when attempting to modify a protected branch."""

    def __init__(self, branch: str):
        super().__init__("modify_branch", branch, "Branch is protected")


class CurrentBranchError(GitOperationError):
    """Exception raised when attempting to delete the checked-out branch."""

    def __init__(self, branch: str):
        super().__init__("delete_branch", branch, "Branch is currently checked out")


class NoBranchesError(GitOperationError):
    """Exception raised when the repository has no local branches."""

    def __init__(self):
        super().__init__("list_branches", message="No branches found in repository")


class BrowserError(CazdoError):
    """Exception raised when a URL cannot be handed to a browser."""

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        self.message = message
        error_msg = f"Could not open {url}"
        if message:
            error_msg += f": {message}"
        super().__init__(error_msg)


class ProviderErrorKind(Enum):
    """Classification of work item provider failures."""
    NETWORK = "network"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN = "unknown"


class ProviderError(CazdoError):
    """Exception raised when a work item cannot be fetched."""

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: Optional[str] = None,
        work_item_id: Optional[int] = None,
    ):
        self.kind = kind
        self.message = message
        self.work_item_id = work_item_id

        error_msg = "Azure DevOps request failed"
        if work_item_id is not None:
            error_msg += f" for work item #{work_item_id}"
        error_msg += f" ({kind.value})"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)
