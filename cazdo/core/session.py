"""Interactive session state: navigation, scrolling, confirmation and actions.

The session is driven from the TUI event loop. Transitions never block; work
that touches git, the network or the browser leaves the session as a command
object and its outcome comes back through ``apply_result``.
"""

import time
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from cazdo.constants import CONFIRM_KEYS, LINE_SCROLL_AMOUNT, PAGE_SCROLL_DIVISOR, STATUS_DURATION_SECS
from cazdo.exceptions import BranchProtectedError, CurrentBranchError
from cazdo.formatters.work_item import format_work_item_lines
from cazdo.models.branch import ActionKind, Branch, ConfirmableAction, DeletedBranch
from cazdo.models.commands import CheckoutCommand, Command, CommandResult, DeleteCommand, OpenUrlCommand
from cazdo.models.work_item import FetchEntry, FetchStatus
from cazdo.services.branch_validation_service import BranchValidationService
from cazdo.services.fetch_coordinator import FetchCoordinator
from cazdo.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_VIEWPORT_WIDTH = 80


@dataclass(frozen=True)
class StatusMessage:
    """Transient footer message."""
    text: str
    is_error: bool
    expires_at: float


@dataclass
class SessionState:
    """Mutable state owned by the session.

    ``selected_index`` indexes the visible branches, not ``branches``.
    """
    branches: Tuple[Branch, ...]
    selected_index: int = 0
    show_protected: bool = False
    detail_scroll_offset: int = 0
    pending_action: Optional[ConfirmableAction] = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of the session handed to the renderer."""
    branches: Tuple[Branch, ...]
    selected_index: int
    show_protected: bool
    detail_scroll_offset: int
    pending_action: Optional[ConfirmableAction]
    entries: Dict[int, FetchEntry] = field(default_factory=dict)
    status: Optional[StatusMessage] = None
    deleted_branches: Tuple[DeletedBranch, ...] = ()

    @property
    def selected_branch(self) -> Optional[Branch]:
        if not self.branches:
            return None
        return self.branches[self.selected_index]

    @property
    def selected_entry(self) -> Optional[FetchEntry]:
        branch = self.selected_branch
        if branch is None or branch.work_item_id is None:
            return None
        return self.entries.get(branch.work_item_id)


class BranchSession:
    """State machine behind the interactive branch browser."""

    def __init__(
        self,
        branches: Sequence[Branch],
        coordinator: FetchCoordinator,
        show_protected: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the session.

        Args:
            branches: Every local branch, in display order
            coordinator: Fetch coordinator for work item details
            show_protected: Whether protected branches start visible
            clock: Monotonic clock used for status message expiry
        """
        self.state = SessionState(branches=tuple(branches), show_protected=show_protected)
        self.coordinator = coordinator
        self.clock = clock
        self.status: Optional[StatusMessage] = None
        self.deleted_branches: List[DeletedBranch] = []
        self.should_quit = False
        self._viewport_height = 0
        self._viewport_width = DEFAULT_VIEWPORT_WIDTH

    # Queries

    @property
    def visible_branches(self) -> Tuple[Branch, ...]:
        if self.state.show_protected:
            return self.state.branches
        return tuple(b for b in self.state.branches if not b.is_protected)

    @property
    def selected_branch(self) -> Optional[Branch]:
        visible = self.visible_branches
        if not visible:
            return None
        return visible[self.state.selected_index]

    def selected_entry(self) -> Optional[FetchEntry]:
        branch = self.selected_branch
        if branch is None or branch.work_item_id is None:
            return None
        return self.coordinator.cache.get(branch.work_item_id)

    def active_status(self) -> Optional[StatusMessage]:
        if self.status is not None and self.clock() >= self.status.expires_at:
            self.status = None
        return self.status

    def content_height(self) -> int:
        """Rendered line count of the selected work item, 0 unless it is ready."""
        entry = self.selected_entry()
        if entry is None or entry.status is not FetchStatus.READY:
            return 0
        return len(format_work_item_lines(entry.details, self._viewport_width))

    def max_scroll_offset(self) -> int:
        return max(0, self.content_height() - self._viewport_height)

    def snapshot(self) -> SessionSnapshot:
        visible = self.visible_branches
        ids = [b.work_item_id for b in visible if b.work_item_id is not None]
        return SessionSnapshot(
            branches=visible,
            selected_index=self.state.selected_index,
            show_protected=self.state.show_protected,
            detail_scroll_offset=self.state.detail_scroll_offset,
            pending_action=self.state.pending_action,
            entries=self.coordinator.cache.snapshot(ids),
            status=self.active_status(),
            deleted_branches=tuple(self.deleted_branches),
        )

    # Lifecycle

    def start(self) -> None:
        """Request the work item of the initially selected branch."""
        self._request_selected()

    def quit(self) -> None:
        """End the session. Fetches still in flight are abandoned."""
        self.should_quit = True

    def set_viewport(self, height: int, width: int) -> None:
        """Record the details pane size used for scroll bounds."""
        self._viewport_height = max(0, height)
        self._viewport_width = max(1, width)
        self._clamp_scroll()

    # Navigation

    def move_down(self) -> None:
        visible = self.visible_branches
        if self.state.selected_index < len(visible) - 1:
            self._select(self.state.selected_index + 1)

    def move_up(self) -> None:
        if self.state.selected_index > 0:
            self._select(self.state.selected_index - 1)

    def toggle_protected(self) -> None:
        """Show or hide protected branches, keeping the selection where possible."""
        previous = self.selected_branch
        self.state.show_protected = not self.state.show_protected
        visible = self.visible_branches

        index = self.state.selected_index
        if previous is not None:
            for i, branch in enumerate(visible):
                if branch.name == previous.name:
                    index = i
                    break
        self.state.selected_index = min(index, max(0, len(visible) - 1))
        self._on_selection_changed(previous)

    # Detail scrolling

    def scroll_down(self, lines: int = LINE_SCROLL_AMOUNT) -> None:
        self.state.detail_scroll_offset = min(
            self.state.detail_scroll_offset + lines, self.max_scroll_offset()
        )

    def scroll_up(self, lines: int = LINE_SCROLL_AMOUNT) -> None:
        self.state.detail_scroll_offset = max(self.state.detail_scroll_offset - lines, 0)

    def scroll_half_page_down(self) -> None:
        self.scroll_down(self._half_page())

    def scroll_half_page_up(self) -> None:
        self.scroll_up(self._half_page())

    # Work items

    def refresh(self) -> None:
        branch = self.selected_branch
        if branch is None or branch.work_item_id is None:
            return
        self.coordinator.refresh(branch.work_item_id)
        self.state.detail_scroll_offset = 0

    def open_in_browser(self) -> Optional[OpenUrlCommand]:
        entry = self.selected_entry()
        if entry is None or entry.status is not FetchStatus.READY or not entry.details.url:
            return None
        return OpenUrlCommand(entry.details.url)

    # Branch actions

    def checkout(self) -> Optional[CheckoutCommand]:
        branch = self.selected_branch
        if branch is None:
            return None
        return CheckoutCommand(branch.name)

    def request_delete(self, force: bool = False) -> Optional[DeleteCommand]:
        """Start deleting the selected branch.

        Protected and current branches are rejected before any confirmation
        is asked for. A forced delete skips confirmation entirely.
        """
        branch = self.selected_branch
        if branch is None:
            return None
        try:
            BranchValidationService.check_deletable(branch)
        except (BranchProtectedError, CurrentBranchError) as e:
            logger.debug(f"Delete rejected: {e}")
            self._set_status(f"Cannot delete '{branch.name}': {e.message}", is_error=True)
            return None

        if force:
            return DeleteCommand(branch.name, force=True)
        self.state.pending_action = ConfirmableAction(ActionKind.DELETE, branch.name)
        return None

    def confirm(self) -> Optional[DeleteCommand]:
        action = self.state.pending_action
        if action is None:
            return None
        self.state.pending_action = None
        return DeleteCommand(action.target_branch, force=action.kind is ActionKind.FORCE_DELETE)

    def cancel(self) -> None:
        self.state.pending_action = None

    # Command results

    def apply_result(self, result: CommandResult) -> None:
        """Fold the outcome of a dispatched command back into the session."""
        if not result.success:
            self.apply_command_error(result.error or "Command failed")
        elif isinstance(result.command, CheckoutCommand):
            self.apply_checkout_result(result.command.branch_name)
        elif isinstance(result.command, DeleteCommand):
            self.apply_delete_result(result.command.branch_name, result.commit_sha or "")

    def apply_checkout_result(self, branch_name: str) -> None:
        """Mark ``branch_name`` as the current branch."""
        self.state.branches = tuple(
            replace(b, is_current=(b.name == branch_name)) for b in self.state.branches
        )
        self._set_status(f"Switched to branch '{branch_name}'")

    def apply_delete_result(self, branch_name: str, commit_sha: str) -> None:
        """Drop a deleted branch from the list and remember how to restore it."""
        previous = self.selected_branch
        self.state.branches = tuple(b for b in self.state.branches if b.name != branch_name)
        deleted = DeletedBranch(branch_name, commit_sha)
        self.deleted_branches.append(deleted)

        visible = self.visible_branches
        self.state.selected_index = min(self.state.selected_index, max(0, len(visible) - 1))
        self._on_selection_changed(previous)
        self._set_status(f"Deleted branch '{branch_name}' (was {deleted.short_sha})")

    def apply_command_error(self, message: str) -> None:
        self._set_status(message, is_error=True)

    def handle_mouse_scroll(self, down: bool) -> None:
        """Mouse wheel scrolls the details pane, except while a confirmation is pending."""
        if self.state.pending_action is not None:
            return
        if down:
            self.scroll_down()
        else:
            self.scroll_up()

    # Key dispatch

    def handle_key(self, key: str) -> Optional[Command]:
        """Apply one keystroke and return the command it produced, if any."""
        if self.state.pending_action is not None:
            if key in CONFIRM_KEYS:
                return self.confirm()
            self.cancel()
            return None

        if key in ("j", "down"):
            self.move_down()
        elif key in ("k", "up"):
            self.move_up()
        elif key in ("J", "shift+j", "shift+down"):
            self.scroll_down()
        elif key in ("K", "shift+k", "shift+up"):
            self.scroll_up()
        elif key in ("pagedown", "ctrl+d"):
            self.scroll_half_page_down()
        elif key in ("pageup", "ctrl+u"):
            self.scroll_half_page_up()
        elif key == "enter":
            return self.checkout()
        elif key == "d":
            return self.request_delete(force=False)
        elif key in ("D", "shift+d"):
            return self.request_delete(force=True)
        elif key == "o":
            return self.open_in_browser()
        elif key == "r":
            self.refresh()
        elif key == "p":
            self.toggle_protected()
        elif key in ("q", "escape", "ctrl+c"):
            self.quit()
        return None

    # Internals

    def _select(self, index: int) -> None:
        previous = self.selected_branch
        self.state.selected_index = index
        self._on_selection_changed(previous)

    def _on_selection_changed(self, previous: Optional[Branch]) -> None:
        current = self.selected_branch
        previous_name = previous.name if previous is not None else None
        current_name = current.name if current is not None else None
        if previous_name == current_name:
            return
        self.state.detail_scroll_offset = 0
        self._request_selected()

    def _request_selected(self) -> None:
        branch = self.selected_branch
        if branch is not None and branch.work_item_id is not None:
            self.coordinator.request(branch.work_item_id)

    def _half_page(self) -> int:
        return max(1, self._viewport_height // PAGE_SCROLL_DIVISOR)

    def _clamp_scroll(self) -> None:
        self.state.detail_scroll_offset = min(self.state.detail_scroll_offset, self.max_scroll_offset())

    def _set_status(self, text: str, is_error: bool = False) -> None:
        self.status = StatusMessage(text, is_error, self.clock() + STATUS_DURATION_SECS)
