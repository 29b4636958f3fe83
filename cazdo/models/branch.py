"""Branch model and related enums"""
from enum import Enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class BranchRef:
    """A local branch as reported by git."""
    name: str
    is_current: bool = False


@dataclass(frozen=True)
class Branch:
    """A local branch with its derived protection flag and work item id.

    Instances are never mutated; a changed branch list is a new tuple.
    """
    name: str
    is_current: bool
    is_protected: bool
    work_item_id: Optional[int] = None


class ActionKind(Enum):
    """Destructive branch actions."""
    DELETE = "delete"
    FORCE_DELETE = "force_delete"


@dataclass(frozen=True)
class ConfirmableAction:
    """An action waiting for the user to confirm or cancel it."""
    kind: ActionKind
    target_branch: str


@dataclass(frozen=True)
class DeletedBranch:
    """A branch deleted during the session, kept for the restore hint."""
    name: str
    commit_sha: str

    @property
    def short_sha(self) -> str:
        return self.commit_sha[:7]

    @property
    def restore_command(self) -> str:
        return f"git checkout -b {self.name} {self.commit_sha}"


class RemoteStatus(Enum):
    """Relationship between a local branch and its upstream."""
    UP_TO_DATE = "up-to-date"
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"
    LOCAL_ONLY = "local-only"


@dataclass(frozen=True)
class BranchSummary:
    """Remote tracking and last commit information for a branch."""
    remote_status: RemoteStatus
    ahead: int = 0
    behind: int = 0
    last_commit_author: Optional[str] = None
    last_commit_time: Optional[datetime] = None
