"""Convert work item HTML fields to wrapped plain text lines."""

import textwrap
from html.parser import HTMLParser
from typing import List, Optional

BLOCK_TAGS = {
    "p", "div", "section", "article", "blockquote", "table", "tr",
    "h1", "h2", "h3", "h4", "h5", "h6",
}
PARAGRAPH_TAGS = {"p", "blockquote", "table", "h1", "h2", "h3", "h4", "h5", "h6"}
MIN_WRAP_WIDTH = 10


class _HtmlTextExtractor(HTMLParser):
    """Collects text from HTML, one entry per output line."""

    def __init__(self, width: int):
        super().__init__(convert_charrefs=True)
        self.width = max(width, MIN_WRAP_WIDTH)
        self.lines: List[str] = []
        self._text: List[str] = []
        self._lists: List[List] = []  # [is_ordered, item_counter] per nesting level
        self._item_prefix: Optional[str] = None
        self._pre_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag == "br":
            self._flush()
        elif tag in BLOCK_TAGS:
            self._flush()
        elif tag in ("ul", "ol"):
            self._flush()
            self._lists.append([tag == "ol", 0])
        elif tag == "li":
            self._flush()
            indent = "  " * max(len(self._lists) - 1, 0)
            if self._lists and self._lists[-1][0]:
                self._lists[-1][1] += 1
                self._item_prefix = f"{indent}{self._lists[-1][1]}. "
            else:
                self._item_prefix = f"{indent}• "
        elif tag == "pre":
            self._flush()
            self._pre_depth += 1
        elif tag in ("td", "th"):
            self._text.append(" ")

    def handle_endtag(self, tag):
        if tag in BLOCK_TAGS or tag == "li":
            self._flush()
            if tag in PARAGRAPH_TAGS:
                self._blank()
        elif tag in ("ul", "ol"):
            self._flush()
            if self._lists:
                self._lists.pop()
            if not self._lists:
                self._blank()
        elif tag == "pre":
            self._flush()
            self._pre_depth = max(self._pre_depth - 1, 0)
            self._blank()

    def handle_data(self, data):
        self._text.append(data)

    def _flush(self):
        text = "".join(self._text)
        self._text = []

        if self._pre_depth:
            for line in text.strip("\n").split("\n"):
                self.lines.append(line.rstrip())
            return

        words = " ".join(text.split())
        if not words:
            # An item prefix waits for the item's first text
            return

        if self._item_prefix is not None:
            initial = self._item_prefix
            subsequent = " " * len(initial)
            self._item_prefix = None
        else:
            initial = subsequent = "  " * len(self._lists)

        self.lines.extend(
            textwrap.wrap(
                words,
                width=self.width,
                initial_indent=initial,
                subsequent_indent=subsequent,
                break_on_hyphens=False,
            )
        )

    def _blank(self):
        if self.lines and self.lines[-1] != "":
            self.lines.append("")

    def result(self) -> List[str]:
        self._flush()
        lines = self.lines
        while lines and lines[-1] == "":
            lines.pop()
        while lines and lines[0] == "":
            lines.pop(0)
        return lines


def html_to_lines(html: str, width: int = 80) -> List[str]:
    """
    Render an HTML fragment as wrapped plain text.

    Paragraphs are separated by blank lines, list items get bullets or
    numbers, and ``<pre>`` blocks keep their line breaks.

    Args:
        html: HTML (or plain text) from a work item field
        width: Maximum line width

    Returns:
        Lines of text without trailing newlines
    """
    parser = _HtmlTextExtractor(width)
    parser.feed(html)
    parser.close()
    return parser.result()
