"""Background fetching of work items into the cache."""
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional, Protocol

from cazdo.exceptions import ProviderError, ProviderErrorKind
from cazdo.models.work_item import FetchStatus, WorkItemDetails
from cazdo.services.cache_service import WorkItemCache
from cazdo.utils.threading import get_optimal_worker_count
from cazdo.logging_config import get_logger

logger = get_logger(__name__)


class WorkItemProvider(Protocol):
    """Anything that can fetch a work item by id."""

    def fetch(self, work_item_id: int) -> WorkItemDetails:
        ...


class FetchCoordinator:
    """Issues at most one fetch per work item and records results in the cache.

    Provider failures of any kind end up as FAILED cache entries; nothing is
    raised to callers. A fetch superseded by a refresh still runs to
    completion, but the cache discards its result.
    """

    def __init__(
        self,
        provider: WorkItemProvider,
        cache: Optional[WorkItemCache] = None,
        executor: Optional[Executor] = None,
        on_update: Optional[Callable[[int], None]] = None,
        max_workers: Optional[int] = None,
    ):
        """Initialize the coordinator.

        Args:
            provider: Work item provider doing the network call
            cache: Cache to populate (a new one by default)
            executor: Executor running the fetches (a thread pool by default)
            on_update: Called with the work item id after a result lands
            max_workers: Pool size when the default executor is used
        """
        self.provider = provider
        self.cache = cache if cache is not None else WorkItemCache()
        self.on_update = on_update
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=get_optimal_worker_count(max_workers),
            thread_name_prefix="cazdo-fetch",
        )

    def request(self, work_item_id: int) -> bool:
        """Fetch a work item unless it is already pending or fetched.

        Returns:
            True if a new fetch was started
        """
        if self.cache.get(work_item_id).status is not FetchStatus.NOT_REQUESTED:
            return False
        generation = self.cache.begin(work_item_id)
        self._submit(work_item_id, generation)
        return True

    def refresh(self, work_item_id: int) -> None:
        """Fetch a work item again, superseding any fetch in flight."""
        generation = self.cache.begin(work_item_id, force=True)
        logger.debug(f"[Fetch] Refreshing #{work_item_id} (generation {generation})")
        self._submit(work_item_id, generation)

    def _submit(self, work_item_id: int, generation: int) -> None:
        logger.debug(f"[Fetch] Queueing #{work_item_id} (generation {generation})")
        self._executor.submit(self._run_fetch, work_item_id, generation)

    def _run_fetch(self, work_item_id: int, generation: int) -> None:
        """Worker body: fetch, then record the outcome for this generation."""
        try:
            details = self.provider.fetch(work_item_id)
        except ProviderError as e:
            logger.debug(f"[Fetch] #{work_item_id} failed: {e}")
            applied = self.cache.complete(work_item_id, generation, error=e)
        except Exception as e:
            logger.error(f"[Fetch] Unexpected error fetching #{work_item_id}: {e}", exc_info=True)
            error = ProviderError(ProviderErrorKind.UNKNOWN, str(e), work_item_id)
            applied = self.cache.complete(work_item_id, generation, error=error)
        else:
            applied = self.cache.complete(work_item_id, generation, details=details)

        if applied and self.on_update is not None:
            try:
                self.on_update(work_item_id)
            except Exception as e:
                logger.warning(f"[Fetch] Update listener failed for #{work_item_id}: {e}")

    def shutdown(self) -> None:
        """Stop accepting fetches; in-flight requests are abandoned."""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
