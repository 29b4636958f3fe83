"""Formatting utilities for cazdo.

This package provides the functions that turn models into display text,
organized into logical modules:
- date: Relative time formatting
- branch: Branch list and branch info formatting
- html: Work item HTML to plain text
- work_item: Work item details pane
"""

# Date formatters
from .date import format_relative_time

# Branch formatters
from .branch import (
    format_branch_name,
    format_branch_label,
    format_branch_info,
    format_remote_status,
    get_branch_style,
)

# HTML
from .html import html_to_lines

# Work item formatters
from .work_item import (
    format_detail_lines,
    format_provider_error,
    format_work_item_lines,
)

__all__ = [
    # Date
    "format_relative_time",
    # Branch
    "format_branch_name",
    "format_branch_label",
    "format_branch_info",
    "format_remote_status",
    "get_branch_style",
    # HTML
    "html_to_lines",
    # Work item
    "format_detail_lines",
    "format_provider_error",
    "format_work_item_lines",
]
