"""Git operations service"""

from typing import List, Optional

import git

from cazdo.exceptions import BranchNotFoundError, GitOperationError
from cazdo.models.branch import BranchRef, BranchSummary, RemoteStatus
from cazdo.logging_config import get_logger

logger = get_logger(__name__)


def _stderr(error: git.exc.GitCommandError) -> str:
    """Extract git's own message from a command error."""
    message = (error.stderr or "").strip()
    if message.startswith("stderr:"):
        message = message[len("stderr:"):].strip()
    return message.strip("'").strip() or str(error)


class GitOperations:
    """Service for Git operations on local branches."""

    def __init__(self, repo_path: str):
        """Initialize the service.

        Args:
            repo_path: Path inside the git repository (parent directories are searched)

        Raises:
            GitOperationError: if the path is not inside a git repository
        """
        try:
            repo = git.Repo(repo_path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise GitOperationError(
                "open_repository",
                message="Not a git repository (or any of the parent directories)",
            ) from e
        self.repo_path = repo.working_tree_dir or repo.git_dir
        repo.close()
        logger.info(f"Git operations initialized for {self.repo_path}")

    def _get_repo(self) -> git.Repo:
        """Get a fresh git.Repo instance.

        A new instance per call keeps GitPython objects off shared threads.
        """
        return git.Repo(self.repo_path)

    def current_branch(self) -> Optional[str]:
        """Name of the checked-out branch, or None on a detached HEAD."""
        repo = self._get_repo()
        if repo.head.is_detached:
            return None
        try:
            return repo.active_branch.name
        except TypeError:
            return None

    def list_branches(self) -> List[BranchRef]:
        """List local branches sorted by name."""
        try:
            repo = self._get_repo()
            current = self.current_branch()
            names = sorted(head.name for head in repo.heads)
        except git.exc.GitError as e:
            raise GitOperationError("list_branches", message=str(e)) from e

        logger.debug(f"Found {len(names)} local branches (current: {current})")
        return [BranchRef(name=name, is_current=(name == current)) for name in names]

    def _get_head(self, repo: git.Repo, branch_name: str) -> git.Head:
        try:
            return repo.heads[branch_name]
        except (IndexError, AttributeError) as e:
            raise BranchNotFoundError(branch_name) from e

    def checkout(self, branch_name: str) -> None:
        """Switch the working tree to a local branch.

        Raises:
            GitOperationError: if git refuses (e.g. local changes would be overwritten)
        """
        repo = self._get_repo()
        self._get_head(repo, branch_name)
        try:
            logger.debug(f"Checking out {branch_name}")
            repo.git.checkout(branch_name)
        except git.exc.GitCommandError as e:
            raise GitOperationError("checkout", branch_name, _stderr(e)) from e

    def delete(self, branch_name: str, force: bool = False) -> str:
        """Delete a local branch.

        Args:
            branch_name: Branch to delete
            force: Delete even if the branch is not fully merged (``git branch -D``)

        Returns:
            SHA of the commit the branch pointed to, for restoring it later

        Raises:
            GitOperationError: if git refuses to delete the branch
        """
        repo = self._get_repo()
        sha = self._get_head(repo, branch_name).commit.hexsha
        try:
            logger.debug(f"Deleting {branch_name} at {sha[:7]} (force={force})")
            repo.git.branch("-D" if force else "-d", branch_name)
        except git.exc.GitCommandError as e:
            raise GitOperationError("delete_branch", branch_name, _stderr(e)) from e
        return sha

    def get_branch_summary(self, branch_name: str) -> Optional[BranchSummary]:
        """Remote tracking status and last commit of a branch.

        Returns:
            Summary, or None if the branch cannot be read
        """
        try:
            repo = self._get_repo()
            head = repo.heads[branch_name]
            commit = head.commit
            author = commit.author.name
            committed = commit.committed_datetime

            tracking = head.tracking_branch()
            if tracking is None or not tracking.is_valid():
                return BranchSummary(RemoteStatus.LOCAL_ONLY, 0, 0, author, committed)

            ahead = sum(1 for _ in repo.iter_commits(f"{tracking.path}..{head.path}"))
            behind = sum(1 for _ in repo.iter_commits(f"{head.path}..{tracking.path}"))
        except (IndexError, ValueError, git.exc.GitError) as e:
            logger.debug(f"Error reading status for {branch_name}: {e}")
            return None

        if ahead and behind:
            status = RemoteStatus.DIVERGED
        elif ahead:
            status = RemoteStatus.AHEAD
        elif behind:
            status = RemoteStatus.BEHIND
        else:
            status = RemoteStatus.UP_TO_DATE
        return BranchSummary(status, ahead, behind, author, committed)
