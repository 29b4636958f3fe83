"""Pytest fixtures for cazdo tests"""
import tempfile
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Dict, List, Union

import pytest
import git

from cazdo.exceptions import ProviderError, ProviderErrorKind
from cazdo.models.branch import BranchRef
from cazdo.models.work_item import WorkItemDetails, WorkItemState, WorkItemType
from cazdo.services.branch_validation_service import BranchValidationService
from cazdo.services.cache_service import WorkItemCache
from cazdo.services.fetch_coordinator import FetchCoordinator


class ManualExecutor(Executor):
    """Executor that holds submitted work until the test runs it."""

    def __init__(self):
        self.queue = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.queue.append((future, fn, args, kwargs))
        return future

    def run(self, index: int = 0) -> None:
        """Run one queued job (the oldest by default)."""
        future, fn, args, kwargs = self.queue.pop(index)
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)

    def run_all(self) -> None:
        while self.queue:
            self.run()

    def shutdown(self, wait=True, *, cancel_futures=False):
        if cancel_futures:
            self.queue.clear()


class FakeProvider:
    """Work item provider returning canned details or errors."""

    def __init__(self, responses: Dict[int, Union[WorkItemDetails, Exception]] = None):
        self.responses = dict(responses or {})
        self.calls: List[int] = []

    def fetch(self, work_item_id: int) -> WorkItemDetails:
        self.calls.append(work_item_id)
        response = self.responses.get(work_item_id)
        if response is None:
            raise ProviderError(ProviderErrorKind.NOT_FOUND, "Work item does not exist", work_item_id)
        if isinstance(response, Exception):
            raise response
        return response


def make_details(work_item_id: int, title: str = "Fix login", **kwargs) -> WorkItemDetails:
    """Build work item details with sensible defaults."""
    values = {
        "id": work_item_id,
        "type": WorkItemType.BUG,
        "title": title,
        "state": WorkItemState.ACTIVE,
        "type_name": "Bug",
        "state_name": "Active",
        "url": f"https://dev.azure.com/org/project/_workitems/edit/{work_item_id}",
    }
    values.update(kwargs)
    return WorkItemDetails(**values)


def make_branches(names, current=None, protected=("main",)):
    """Build Branch objects the way the CLI does."""
    refs = [BranchRef(name, is_current=(name == current)) for name in names]
    return BranchValidationService.build_branches(refs, list(protected))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def coordinator(fake_provider, manual_executor):
    """Fetch coordinator whose fetches run only when the test says so."""
    return FetchCoordinator(fake_provider, cache=WorkItemCache(), executor=manual_executor)


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    repo.git.branch("-M", "main")

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_branches(git_repo):
    """Repository with a merged branch, an unmerged branch and a work item branch."""
    repo = git_repo
    repo_path = Path(repo.working_dir)

    # Merged: points at main's tip
    repo.git.branch("feature/100-merged")

    # Unmerged: one extra commit
    repo.git.checkout("-b", "feature/123-login")
    (repo_path / "login.txt").write_text("login\n")
    repo.index.add(["login.txt"])
    repo.index.commit("Add login")

    repo.git.checkout("main")
    repo.git.branch("chore/cleanup")

    yield repo
