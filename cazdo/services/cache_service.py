"""Cache service for work item fetch results."""
import itertools
from datetime import datetime
from threading import Lock
from typing import Dict, Iterable, Optional

from cazdo.exceptions import ProviderError
from cazdo.models.work_item import NOT_REQUESTED, FetchEntry, FetchStatus, WorkItemDetails
from cazdo.logging_config import get_logger

logger = get_logger(__name__)


class WorkItemCache:
    """Keeps the latest fetch state for each work item id.

    Only the fetch coordinator calls ``begin`` and ``complete``; everything
    else reads through ``get`` and ``snapshot``. Every operation runs under a
    single lock so a completion lands entirely before or after any read.
    """

    def __init__(self):
        self._entries: Dict[int, FetchEntry] = {}
        self._lock = Lock()
        self._generations = itertools.count(1)

    def begin(self, work_item_id: int, force: bool = False) -> int:
        """Mark a work item as pending and return its generation token.

        Args:
            work_item_id: Work item to fetch
            force: Supersede a fetch that is already pending

        Returns:
            The generation token the eventual completion must present
        """
        with self._lock:
            entry = self._entries.get(work_item_id, NOT_REQUESTED)
            if entry.status is FetchStatus.PENDING and not force:
                logger.debug(f"[Cache] #{work_item_id} already pending (generation {entry.generation})")
                return entry.generation

            generation = next(self._generations)
            if entry.status is FetchStatus.PENDING:
                logger.debug(
                    f"[Cache] #{work_item_id} generation {entry.generation} superseded by {generation}"
                )
            self._entries[work_item_id] = FetchEntry(status=FetchStatus.PENDING, generation=generation)
            return generation

    def complete(
        self,
        work_item_id: int,
        generation: int,
        details: Optional[WorkItemDetails] = None,
        error: Optional[ProviderError] = None,
    ) -> bool:
        """Record the outcome of a fetch.

        The result is dropped when ``generation`` is not the pending one,
        which happens when a refresh superseded the fetch.

        Returns:
            True if the entry was updated
        """
        with self._lock:
            entry = self._entries.get(work_item_id, NOT_REQUESTED)
            if entry.status is not FetchStatus.PENDING or entry.generation != generation:
                logger.debug(
                    f"[Cache] Discarding stale result for #{work_item_id} "
                    f"(generation {generation}, current {entry.generation})"
                )
                return False

            if error is None and details is not None:
                self._entries[work_item_id] = FetchEntry(
                    status=FetchStatus.READY,
                    generation=generation,
                    details=details,
                    timestamp=datetime.now(),
                )
            else:
                self._entries[work_item_id] = FetchEntry(
                    status=FetchStatus.FAILED,
                    generation=generation,
                    error=error,
                    timestamp=datetime.now(),
                )
            return True

    def get(self, work_item_id: int) -> FetchEntry:
        with self._lock:
            return self._entries.get(work_item_id, NOT_REQUESTED)

    def snapshot(self, work_item_ids: Iterable[int]) -> Dict[int, FetchEntry]:
        """Return the entries for several ids read under one lock."""
        with self._lock:
            return {
                work_item_id: self._entries.get(work_item_id, NOT_REQUESTED)
                for work_item_id in work_item_ids
            }
