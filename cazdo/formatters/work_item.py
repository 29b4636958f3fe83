"""Work item details formatting."""

import textwrap
from typing import List, Optional

from rich.text import Text

from cazdo.constants import Styles
from cazdo.exceptions import ProviderError, ProviderErrorKind
from cazdo.formatters.html import html_to_lines
from cazdo.models.work_item import FetchEntry, FetchStatus, WorkItemDetails

INDENT = "  "
FIELD_INDENT = "    "

ERROR_LABELS = {
    ProviderErrorKind.NETWORK: "Network error",
    ProviderErrorKind.NOT_FOUND: "Work item not found",
    ProviderErrorKind.UNAUTHORIZED: "Not authorized",
    ProviderErrorKind.UNKNOWN: "Error",
}


def _wrap(text: str, width: int, indent: str = INDENT) -> List[str]:
    wrapped = textwrap.wrap(text, width=max(width - len(indent), 10))
    return [f"{indent}{line}" for line in wrapped] or [indent]


def format_provider_error(error: Optional[ProviderError]) -> str:
    """Short description of a failed fetch."""
    if error is None:
        return "Error: unknown failure"
    label = ERROR_LABELS.get(error.kind, "Error")
    if error.message:
        return f"{label}: {error.message}"
    return label


def format_work_item_lines(details: WorkItemDetails, width: int) -> List[Text]:
    """
    Lay out a fetched work item for the details pane.

    The line count of the result is the scrollable content height, so the
    session and the renderer must call this with the same width.

    Args:
        details: Work item to render
        width: Available width in cells

    Returns:
        One rich Text per screen line
    """
    type_name = details.type_name or details.type.value
    state_name = details.state_name or details.state.value

    lines = [
        Text(""),
        Text.assemble(
            INDENT,
            (f"#{details.id} ", f"bold {Styles.ACCENT}"),
            f"{details.type.icon} {type_name}",
        ),
    ]

    meta = Text.assemble(INDENT, (f"{details.state.icon} {state_name}", details.state.color))
    if details.assigned_to:
        meta.append("  •  ", style=Styles.MUTED)
        meta.append(details.assigned_to, style=Styles.TEXT)
    if details.tags:
        meta.append("  •  ", style=Styles.MUTED)
        meta.append(", ".join(details.tags), style=Styles.TAGS)
    lines.append(meta)

    lines.append(Text(""))
    for line in _wrap(details.title, width):
        lines.append(Text(line, style=Styles.TITLE))

    field_width = max(width - len(FIELD_INDENT) - len(INDENT), 10)
    for field in details.rich_text_fields:
        lines.append(Text(""))
        lines.append(Text(f"{INDENT}{field.name}:", style=Styles.MUTED))
        for rendered in html_to_lines(field.value, field_width):
            lines.append(Text(f"{FIELD_INDENT}{rendered}" if rendered else ""))

    return lines


def format_detail_lines(
    work_item_id: Optional[int], entry: Optional[FetchEntry], width: int
) -> List[Text]:
    """Lines for the details pane in every fetch state."""
    if work_item_id is None:
        return [Text(""), Text(f"{INDENT}No work item linked to this branch", style=f"italic {Styles.MUTED}")]

    if entry is None or entry.status in (FetchStatus.NOT_REQUESTED, FetchStatus.PENDING):
        return [Text(""), Text(f"{INDENT}Loading work item #{work_item_id}...", style=Styles.WARNING)]

    if entry.status is FetchStatus.FAILED:
        lines = [Text("")]
        for line in _wrap(format_provider_error(entry.error), width):
            lines.append(Text(line, style="red"))
        lines.append(Text(""))
        lines.append(Text(f"{INDENT}Press r to retry", style=Styles.MUTED))
        return lines

    return format_work_item_lines(entry.details, width)
