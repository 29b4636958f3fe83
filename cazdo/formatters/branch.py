"""Branch list and branch info formatting utilities."""

from typing import List, Optional, Tuple

from rich.text import Text

from cazdo.constants import (
    SYMBOL_CURRENT_BRANCH,
    SYMBOL_OTHER_BRANCH,
    SYMBOL_PROTECTED,
    Styles,
)
from cazdo.formatters.date import format_relative_time
from cazdo.models.branch import Branch, BranchSummary, RemoteStatus


def format_branch_name(branch: Branch) -> str:
    """
    Format a branch list entry as plain text.

    Args:
        branch: Branch to format

    Returns:
        Current marker, name, lock for protected branches and ``[#id]`` suffix
    """
    prefix = SYMBOL_CURRENT_BRANCH if branch.is_current else SYMBOL_OTHER_BRANCH
    protected = SYMBOL_PROTECTED if branch.is_protected else ""
    work_item = f" [#{branch.work_item_id}]" if branch.work_item_id is not None else ""
    return f"{prefix}{branch.name}{protected}{work_item}"


def get_branch_style(branch: Branch) -> str:
    if branch.is_current:
        return Styles.CURRENT_BRANCH
    if branch.is_protected:
        return Styles.MUTED
    return ""


def format_branch_label(branch: Branch) -> Text:
    """Styled branch list entry."""
    return Text(format_branch_name(branch), style=get_branch_style(branch))


def format_remote_status(summary: BranchSummary) -> Tuple[str, str]:
    """
    Format remote tracking status.

    Returns:
        Tuple of (text, rich style)
    """
    if summary.remote_status is RemoteStatus.LOCAL_ONLY:
        return "local only", Styles.MUTED
    if summary.remote_status is RemoteStatus.UP_TO_DATE:
        return "up to date", Styles.SUCCESS
    if summary.remote_status is RemoteStatus.AHEAD:
        return f"↑{summary.ahead}", Styles.WARNING
    if summary.remote_status is RemoteStatus.BEHIND:
        return f"↓{summary.behind}", Styles.WARNING
    return f"↑{summary.ahead} ↓{summary.behind}", Styles.WARNING


def format_branch_info(branch: Optional[Branch], summary: Optional[BranchSummary]) -> List[Text]:
    """Lines for the branch info panel below the work item details."""
    if branch is None:
        return [Text("  No branch selected", style=Styles.MUTED)]

    lines = [Text.assemble("  ", (branch.name, Styles.CURRENT_BRANCH))]
    if summary is None:
        lines.append(Text("  Loading...", style=Styles.MUTED))
        return lines

    remote_text, remote_style = format_remote_status(summary)
    line = Text.assemble(("  Remote: ", Styles.MUTED), (remote_text, remote_style))
    if summary.last_commit_author and summary.last_commit_time:
        line.append("  │  ", style=Styles.MUTED)
        line.append(summary.last_commit_author, style=Styles.TEXT)
        line.append(", ", style=Styles.MUTED)
        line.append(format_relative_time(summary.last_commit_time), style=Styles.MUTED)
    lines.append(line)
    return lines
