"""Open URLs in the user's browser."""

import webbrowser

from cazdo.exceptions import BrowserError
from cazdo.logging_config import get_logger

logger = get_logger(__name__)


def open_url(url: str) -> None:
    """Hand a URL to the system browser without waiting for it.

    Raises:
        BrowserError: if no browser could be launched
    """
    logger.debug(f"Opening {url}")
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        raise BrowserError(url, str(e)) from e
    if not opened:
        raise BrowserError(url, "no browser available")
