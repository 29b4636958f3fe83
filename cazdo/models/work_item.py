"""Work item model and fetch state"""
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from cazdo.exceptions import ProviderError, ProviderErrorKind


class WorkItemType(Enum):
    """Azure DevOps work item types."""
    BUG = "Bug"
    PRODUCT_BACKLOG_ITEM = "Product Backlog Item"
    USER_STORY = "User Story"
    TASK = "Task"
    FEATURE = "Feature"
    EPIC = "Epic"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str) -> "WorkItemType":
        for member in cls:
            if member is not cls.OTHER and member.value.lower() == value.lower():
                return member
        return cls.OTHER

    @property
    def icon(self) -> str:
        return _TYPE_ICONS[self]


_TYPE_ICONS = {
    WorkItemType.BUG: "🐞",
    WorkItemType.PRODUCT_BACKLOG_ITEM: "📘",
    WorkItemType.USER_STORY: "📖",
    WorkItemType.TASK: "📒",
    WorkItemType.FEATURE: "🏆",
    WorkItemType.EPIC: "👑",
    WorkItemType.OTHER: "📄",
}


class WorkItemState(Enum):
    """Azure DevOps work item states."""
    NEW = "New"
    APPROVED = "Approved"
    COMMITTED = "Committed"
    ACTIVE = "Active"
    RESOLVED = "Resolved"
    CLOSED = "Closed"
    REMOVED = "Removed"
    DONE = "Done"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str) -> "WorkItemState":
        for member in cls:
            if member is not cls.OTHER and member.value.lower() == value.lower():
                return member
        return cls.OTHER

    @property
    def icon(self) -> str:
        return _STATE_ICONS[self]

    @property
    def color(self) -> str:
        return _STATE_COLORS[self]


_STATE_ICONS = {
    WorkItemState.NEW: "🆕",
    WorkItemState.APPROVED: "👍",
    WorkItemState.COMMITTED: "🎯",
    WorkItemState.ACTIVE: "🔵",
    WorkItemState.RESOLVED: "☑️",
    WorkItemState.CLOSED: "✔️",
    WorkItemState.REMOVED: "🗑️",
    WorkItemState.DONE: "✅",
    WorkItemState.OTHER: "⚪",
}

_STATE_COLORS = {
    WorkItemState.NEW: "grey70",
    WorkItemState.APPROVED: "grey70",
    WorkItemState.COMMITTED: "blue",
    WorkItemState.ACTIVE: "cyan",
    WorkItemState.RESOLVED: "yellow",
    WorkItemState.CLOSED: "green",
    WorkItemState.DONE: "green",
    WorkItemState.REMOVED: "bright_black",
    WorkItemState.OTHER: "white",
}


# Rich text fields shown below the title, in display order
DESCRIPTION_FIELD = "System.Description"
ACCEPTANCE_CRITERIA_FIELD = "Microsoft.VSTS.Common.AcceptanceCriteria"
EXTRA_RICH_TEXT_FIELDS = [
    ("Microsoft.VSTS.TCM.ReproSteps", "Repro Steps"),
    ("Microsoft.VSTS.TCM.SystemInfo", "System Info"),
    ("Microsoft.VSTS.Common.Resolution", "Resolution"),
    ("Microsoft.VSTS.Build.FoundIn", "Found In"),
    ("Microsoft.VSTS.Build.IntegrationBuild", "Integration Build"),
]


@dataclass(frozen=True)
class RichTextField:
    """A named HTML field of a work item."""
    name: str
    value: str


@dataclass(frozen=True)
class WorkItemDetails:
    """Snapshot of one successful work item fetch."""
    id: int
    type: WorkItemType
    title: str
    state: WorkItemState
    description: Optional[str] = None
    acceptance_criteria: Optional[str] = None
    url: Optional[str] = None
    type_name: str = ""
    state_name: str = ""
    assigned_to: Optional[str] = None
    tags: Tuple[str, ...] = ()
    extra_fields: Tuple[RichTextField, ...] = ()

    @property
    def rich_text_fields(self) -> Tuple[RichTextField, ...]:
        """Description, acceptance criteria and extra fields that have content."""
        fields = []
        if self.description:
            fields.append(RichTextField("Description", self.description))
        if self.acceptance_criteria:
            fields.append(RichTextField("Acceptance Criteria", self.acceptance_criteria))
        fields.extend(self.extra_fields)
        return tuple(fields)

    @classmethod
    def from_json(cls, payload: Dict[str, Any], work_item_id: int) -> "WorkItemDetails":
        """Build details from an Azure DevOps work item response.

        Raises:
            ProviderError: if a required field is missing
        """
        fields = payload.get("fields")
        if not isinstance(fields, dict):
            raise ProviderError(
                ProviderErrorKind.UNKNOWN, "Missing 'fields' in work item response", work_item_id
            )

        def required(name: str) -> str:
            value = fields.get(name)
            if not isinstance(value, str):
                raise ProviderError(
                    ProviderErrorKind.UNKNOWN, f"Missing '{name}' field", work_item_id
                )
            return value

        def rich_text(name: str) -> Optional[str]:
            value = fields.get(name)
            if isinstance(value, str) and value.strip():
                return value
            return None

        title = required("System.Title")
        type_name = required("System.WorkItemType")
        state_name = required("System.State")

        assigned = fields.get("System.AssignedTo")
        assigned_to = assigned.get("displayName") if isinstance(assigned, dict) else None

        raw_tags = fields.get("System.Tags") or ""
        tags = tuple(tag.strip() for tag in raw_tags.split(";") if tag.strip())

        url = payload.get("_links", {}).get("html", {}).get("href")

        extra = []
        for field_name, display in EXTRA_RICH_TEXT_FIELDS:
            value = rich_text(field_name)
            if value is not None:
                extra.append(RichTextField(display, value))

        return cls(
            id=work_item_id,
            type=WorkItemType.parse(type_name),
            title=title,
            state=WorkItemState.parse(state_name),
            description=rich_text(DESCRIPTION_FIELD),
            acceptance_criteria=rich_text(ACCEPTANCE_CRITERIA_FIELD),
            url=url,
            type_name=type_name,
            state_name=state_name,
            assigned_to=assigned_to,
            tags=tags,
            extra_fields=tuple(extra),
        )


class FetchStatus(Enum):
    """Lifecycle of a work item fetch."""
    NOT_REQUESTED = "not_requested"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchEntry:
    """Cache entry for one work item id.

    ``generation`` identifies the fetch attempt that produced (or will
    produce) this entry.
    """
    status: FetchStatus = FetchStatus.NOT_REQUESTED
    generation: int = 0
    details: Optional[WorkItemDetails] = None
    error: Optional[ProviderError] = None
    timestamp: Optional[datetime] = field(default=None, compare=False)

    @property
    def is_ready(self) -> bool:
        return self.status is FetchStatus.READY

    @property
    def is_pending(self) -> bool:
        return self.status is FetchStatus.PENDING

    @property
    def is_failed(self) -> bool:
        return self.status is FetchStatus.FAILED


NOT_REQUESTED = FetchEntry()
