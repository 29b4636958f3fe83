"""Tests for running session commands"""
from unittest.mock import Mock

import git

from cazdo.core.dispatcher import CommandDispatcher
from cazdo.exceptions import BrowserError, GitOperationError
from cazdo.models.commands import CheckoutCommand, DeleteCommand, OpenUrlCommand
from cazdo.services.git import GitOperations


class TestDispatcherWithRepository:
    """Commands against a real repository."""

    def test_checkout(self, git_repo_with_branches):
        ops = GitOperations(git_repo_with_branches.working_dir)
        result = CommandDispatcher(ops).execute(CheckoutCommand("feature/123-login"))
        assert result.success
        assert ops.current_branch() == "feature/123-login"

    def test_delete_returns_sha(self, git_repo_with_branches):
        sha = git_repo_with_branches.heads["feature/100-merged"].commit.hexsha
        ops = GitOperations(git_repo_with_branches.working_dir)
        result = CommandDispatcher(ops).execute(DeleteCommand("feature/100-merged"))
        assert result.success
        assert result.commit_sha == sha

    def test_unmerged_delete_fails_without_raising(self, git_repo_with_branches):
        ops = GitOperations(git_repo_with_branches.working_dir)
        result = CommandDispatcher(ops).execute(DeleteCommand("feature/123-login"))
        assert not result.success
        assert result.error.startswith("Delete of 'feature/123-login' failed")
        assert "not fully merged" in result.error


class TestDispatcherErrors:
    """Every failure becomes an unsuccessful result."""

    def test_git_operation_error(self):
        ops = Mock()
        ops.checkout.side_effect = GitOperationError("checkout", "x", "local changes would be overwritten")
        result = CommandDispatcher(ops).execute(CheckoutCommand("x"))
        assert not result.success
        assert result.error == "Checkout of 'x' failed: local changes would be overwritten"

    def test_raw_gitpython_error(self):
        ops = Mock()
        ops.delete.side_effect = git.exc.GitCommandError("branch", 128)
        result = CommandDispatcher(ops).execute(DeleteCommand("x", force=True))
        assert not result.success
        assert result.commit_sha is None

    def test_open_url(self):
        opener = Mock()
        result = CommandDispatcher(Mock(), opener=opener).execute(OpenUrlCommand("https://example.com"))
        assert result.success
        opener.assert_called_once_with("https://example.com")

    def test_browser_error(self):
        opener = Mock(side_effect=BrowserError("https://example.com", "no browser available"))
        result = CommandDispatcher(Mock(), opener=opener).execute(OpenUrlCommand("https://example.com"))
        assert not result.success
        assert result.error == "Could not open browser: no browser available"
