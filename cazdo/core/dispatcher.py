"""Run session commands against git and the browser."""

from typing import Callable, Optional

import git

from cazdo.exceptions import BrowserError, CazdoError, GitOperationError
from cazdo.models.commands import CheckoutCommand, Command, CommandResult, DeleteCommand, OpenUrlCommand
from cazdo.services.git import GitOperations
from cazdo.utils.browser import open_url
from cazdo.logging_config import get_logger

logger = get_logger(__name__)


def _describe(error: Exception) -> str:
    if isinstance(error, (GitOperationError, BrowserError)) and error.message:
        return error.message
    return str(error)


class CommandDispatcher:
    """Executes commands produced by the session.

    Failures never escape ``execute``; they come back as an unsuccessful
    ``CommandResult`` carrying a short message for the status line.
    """

    def __init__(self, git_ops: GitOperations, opener: Optional[Callable[[str], None]] = None):
        self.git_ops = git_ops
        self.opener = opener or open_url

    def execute(self, command: Command) -> CommandResult:
        """
        Run a single command.

        Args:
            command: Checkout, delete or open-url command

        Returns:
            CommandResult; for deletions ``commit_sha`` holds the deleted tip
        """
        try:
            if isinstance(command, CheckoutCommand):
                self.git_ops.checkout(command.branch_name)
                logger.info(f"Checked out {command.branch_name}")
                return CommandResult(command, success=True)

            if isinstance(command, DeleteCommand):
                sha = self.git_ops.delete(command.branch_name, force=command.force)
                logger.info(f"Deleted {command.branch_name} at {sha[:7]}")
                return CommandResult(command, success=True, commit_sha=sha)

            if isinstance(command, OpenUrlCommand):
                self.opener(command.url)
                return CommandResult(command, success=True)

            raise TypeError(f"Unsupported command: {command!r}")

        except (CazdoError, git.exc.GitError) as e:
            logger.warning(f"Command {command!r} failed: {e}")
            return CommandResult(command, success=False, error=self._error_message(command, e))

    @staticmethod
    def _error_message(command: Command, error: Exception) -> str:
        if isinstance(command, CheckoutCommand):
            return f"Checkout of '{command.branch_name}' failed: {_describe(error)}"
        if isinstance(command, DeleteCommand):
            return f"Delete of '{command.branch_name}' failed: {_describe(error)}"
        return f"Could not open browser: {_describe(error)}"
