"""Interactive TUI for cazdo using Textual."""

import asyncio
from typing import Dict, List, Optional

from textual import events, work
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Static
from rich.text import Text

from .__version__ import __version__
from .constants import KEY_HINTS, SYMBOL_SELECTED, Styles
from .core.dispatcher import CommandDispatcher
from .core.session import BranchSession, SessionSnapshot
from .formatters import format_branch_info, format_branch_label, format_detail_lines
from .models.branch import BranchSummary
from .models.commands import Command, DeleteCommand
from .services.git import GitOperations
from .ui.widgets import NonExpandingHeader
from .logging_config import get_logger

logger = get_logger(__name__)

STATUS_REFRESH_INTERVAL = 0.5


def _list_window(count: int, selected: int, height: int) -> range:
    """Indexes of the branch rows to draw so the selection stays visible."""
    if height <= 0 or count <= height:
        return range(count)
    start = min(max(selected - height // 2, 0), count - height)
    return range(start, start + height)


def _join(lines: List[Text]) -> Text:
    return Text("\n").join(lines)


class CazdoApp(App):
    """Branch list on the left, work item details on the right."""

    TITLE = "cazdo"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        background: $surface;
    }

    #body {
        height: 1fr;
    }

    #branch-list {
        width: 40%;
        height: 100%;
        border: round $primary;
        padding: 0 1;
    }

    #right-pane {
        width: 1fr;
        height: 100%;
    }

    #details {
        height: 1fr;
        border: round $primary;
    }

    #branch-info {
        height: auto;
        border: round $primary;
    }

    #footer-bar {
        dock: bottom;
        height: 1;
        background: $panel;
        padding: 0 1;
    }
    """

    def __init__(self, session: BranchSession, git_ops: GitOperations, dispatcher: Optional[CommandDispatcher] = None):
        super().__init__()
        self.session = session
        self.git_ops = git_ops
        self.dispatcher = dispatcher or CommandDispatcher(git_ops)
        self.summaries: Dict[str, BranchSummary] = {}
        self._loading_summaries = set()
        self.session.coordinator.on_update = self._on_work_item_update

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield NonExpandingHeader(show_clock=True, icon="")
        with Horizontal(id="body"):
            yield Static(id="branch-list")
            with Vertical(id="right-pane"):
                yield Static(id="details")
                yield Static(id="branch-info")
        yield Static(id="footer-bar")

    def on_mount(self) -> None:
        self.query_one("#details", Static).border_title = "Work Item"
        self.query_one("#branch-info", Static).border_title = "Branch"
        self.set_interval(STATUS_REFRESH_INTERVAL, self._expire_status)
        self.session.start()
        self.call_after_refresh(self._sync_viewport)
        self.render_session()

    def on_resize(self, event: events.Resize) -> None:
        self.call_after_refresh(self._sync_viewport)

    def _sync_viewport(self) -> None:
        region = self.query_one("#details", Static).content_region
        self.session.set_viewport(region.height, region.width)
        self.render_session()

    def on_key(self, event: events.Key) -> None:
        """Route every key through the session state machine."""
        event.stop()
        event.prevent_default()

        command = self.session.handle_key(event.key)
        if command is not None:
            self.run_command(command)
        if self.session.should_quit:
            self.shutdown()
            return
        self.render_session()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        event.stop()
        self.session.handle_mouse_scroll(down=True)
        self.render_session()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        event.stop()
        self.session.handle_mouse_scroll(down=False)
        self.render_session()

    def _on_work_item_update(self, work_item_id: int) -> None:
        """Called on a fetch thread when a cache entry changes."""
        self.call_from_thread(self.render_session)

    def _expire_status(self) -> None:
        if self.session.status is not None and self.session.active_status() is None:
            self.render_session()

    @work(thread=False)
    async def run_command(self, command: Command) -> None:
        """Run a git or browser command off the event loop and apply its result."""
        result = await asyncio.to_thread(self.dispatcher.execute, command)
        self.session.apply_result(result)
        if result.success and not isinstance(command, DeleteCommand):
            # Checkout changes which branch is current, so summaries may be stale
            self.summaries.clear()
        self.render_session()

    @work(thread=False)
    async def load_summary(self, branch_name: str) -> None:
        """Load remote status and last commit for a branch in the background."""
        try:
            summary = await asyncio.to_thread(self.git_ops.get_branch_summary, branch_name)
        finally:
            self._loading_summaries.discard(branch_name)
        if summary is not None:
            self.summaries[branch_name] = summary
            self.render_session()

    def render_session(self) -> None:
        snapshot = self.session.snapshot()
        self._render_branches(snapshot)
        self._render_details(snapshot)
        self._render_branch_info(snapshot)
        self._render_footer(snapshot)

    def _render_branches(self, snapshot: SessionSnapshot) -> None:
        widget = self.query_one("#branch-list", Static)
        title = f"Branches ({len(snapshot.branches)})"
        if snapshot.show_protected:
            title += " [all]"
        widget.border_title = title

        if not snapshot.branches:
            widget.update(Text("No branches to show (press p)", style=Styles.MUTED))
            return

        lines = []
        for index in _list_window(len(snapshot.branches), snapshot.selected_index, widget.content_region.height):
            branch = snapshot.branches[index]
            label = format_branch_label(branch)
            if index == snapshot.selected_index:
                line = Text(SYMBOL_SELECTED, style=Styles.ACCENT)
                line.append_text(label)
                line.stylize("reverse")
            else:
                line = Text(" " * len(SYMBOL_SELECTED))
                line.append_text(label)
            lines.append(line)
        widget.update(_join(lines))

    def _render_details(self, snapshot: SessionSnapshot) -> None:
        widget = self.query_one("#details", Static)
        branch = snapshot.selected_branch
        work_item_id = branch.work_item_id if branch is not None else None
        region = widget.content_region

        lines = format_detail_lines(work_item_id, snapshot.selected_entry, max(region.width, 1))
        start = snapshot.detail_scroll_offset
        if region.height > 0:
            lines = lines[start:start + region.height]
        widget.update(_join(lines))

    def _render_branch_info(self, snapshot: SessionSnapshot) -> None:
        branch = snapshot.selected_branch
        summary = None
        if branch is not None:
            summary = self.summaries.get(branch.name)
            if summary is None and branch.name not in self._loading_summaries:
                self._loading_summaries.add(branch.name)
                self.load_summary(branch.name)
        self.query_one("#branch-info", Static).update(_join(format_branch_info(branch, summary)))

    def _render_footer(self, snapshot: SessionSnapshot) -> None:
        widget = self.query_one("#footer-bar", Static)
        if snapshot.pending_action is not None:
            widget.update(
                Text.assemble(
                    (f"Delete branch '{snapshot.pending_action.target_branch}'? ", Styles.WARNING),
                    ("y", f"bold {Styles.ACCENT}"),
                    ("/", Styles.MUTED),
                    ("enter", f"bold {Styles.ACCENT}"),
                    (" to confirm, any other key to cancel", Styles.MUTED),
                )
            )
            return

        if snapshot.status is not None:
            style = Styles.ERROR if snapshot.status.is_error else Styles.SUCCESS
            widget.update(Text(snapshot.status.text, style=style))
            return

        hints = Text()
        for key, label in KEY_HINTS:
            if hints:
                hints.append("  ")
            hints.append(key, style=f"bold {Styles.ACCENT}")
            hints.append(f" {label}", style=Styles.MUTED)
        widget.update(hints)

    def shutdown(self) -> None:
        """Stop background work and leave the app."""
        try:
            self.workers.cancel_all()
            self.session.coordinator.shutdown()
        finally:
            self.exit()
