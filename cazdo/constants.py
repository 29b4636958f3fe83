"""Shared constants for cazdo."""

# Environment variable holding the Azure DevOps personal access token
PAT_ENV_VAR = "CAZDO_PAT"

# Azure DevOps REST API version used for every request
API_VERSION = "7.0"

DEFAULT_PROTECTED_BRANCHES = ["main", "master"]


# Symbol constants
SYMBOL_CURRENT_BRANCH = "* "
SYMBOL_OTHER_BRANCH = "  "
SYMBOL_PROTECTED = " \U0001F512"
SYMBOL_SELECTED = "► "


# Scrolling
LINE_SCROLL_AMOUNT = 1
PAGE_SCROLL_DIVISOR = 2


# How long a footer status message stays visible
STATUS_DURATION_SECS = 3.0


# Upper bound on concurrent work item requests
MAX_FETCH_WORKERS = 8


# Rich styles shared by the CLI and the TUI
class Styles:
    """Rich style strings."""

    ACCENT = "cyan"
    MUTED = "bright_black"
    TEXT = "white"
    ERROR = "bold red"
    SUCCESS = "green"
    WARNING = "yellow"
    CURRENT_BRANCH = "bold green"
    TAGS = "magenta"
    TITLE = "bold underline white"


# Keys accepted to confirm a pending deletion
CONFIRM_KEYS = ("y", "enter")


# Key hints shown in the footer
KEY_HINTS = [
    ("j/k", "navigate"),
    ("enter", "checkout"),
    ("J/K", "scroll"),
    ("o", "open"),
    ("r", "refresh"),
    ("d/D", "delete"),
    ("p", "protected"),
    ("q", "quit"),
]
