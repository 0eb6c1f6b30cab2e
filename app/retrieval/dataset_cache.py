"""Time-boxed, per-source snapshots of the remote reference datasets."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, List, Mapping, Optional

from app.retrieval.models import DatasetSnapshot, Row

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 10 * 60
DEFAULT_RETRY_SECONDS = 30

FetchRows = Callable[[str], Awaitable[List[Row]]]


class DatasetUnavailableError(RuntimeError):
    """Raised when a dataset could not be loaded and no earlier copy exists."""

    def __init__(self, source: str) -> None:
        super().__init__(f"dataset '{source}' is unavailable")
        self.source = source


class DatasetCache:
    """Holds the latest snapshot per named source and refreshes it after the TTL.

    Snapshots are immutable and replaced by a single assignment, so readers
    never see a half-updated dataset. A failed refresh keeps serving the
    previous rows flagged as ``stale``. After a failure the source is not
    fetched again for ``retry_seconds``; requests queued behind the failed
    attempt get the same stale snapshot or ``DatasetUnavailableError``.
    """

    def __init__(
        self,
        fetch: FetchRows,
        sources: Mapping[str, str],
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        retry_seconds: float = DEFAULT_RETRY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.fetch = fetch
        self.sources = dict(sources)
        self.ttl_seconds = ttl_seconds
        self.retry_seconds = retry_seconds
        self.clock = clock
        self._snapshots: Dict[str, DatasetSnapshot] = {}
        self._failed_at: Dict[str, float] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _fresh(self, source: str) -> Optional[DatasetSnapshot]:
        snapshot = self._snapshots.get(source)
        if snapshot is None or snapshot.stale:
            return None
        if self.clock() - snapshot.loaded_at >= self.ttl_seconds:
            return None
        return snapshot

    def _recently_failed(self, source: str) -> bool:
        failed_at = self._failed_at.get(source)
        return failed_at is not None and self.clock() - failed_at < self.retry_seconds

    def _degraded(self, source: str, cause: Optional[BaseException] = None) -> DatasetSnapshot:
        """Stale copy of the last good snapshot, or unavailable when there is none."""

        previous = self._snapshots.get(source)
        if previous is None:
            raise DatasetUnavailableError(source) from cause
        if previous.stale:
            return previous
        stale = DatasetSnapshot(
            source=source,
            rows=previous.rows,
            loaded_at=previous.loaded_at,
            stale=True,
        )
        self._snapshots[source] = stale
        return stale

    def peek(self, source: str) -> Optional[DatasetSnapshot]:
        """Return the current snapshot without refreshing it."""

        return self._snapshots.get(source)

    async def get_rows(self, source: str) -> DatasetSnapshot:
        url = self.sources[source]

        snapshot = self._fresh(source)
        if snapshot is not None:
            return snapshot

        lock = self._locks.setdefault(source, asyncio.Lock())
        async with lock:
            # Another request may have refreshed (or failed) while we waited.
            snapshot = self._fresh(source)
            if snapshot is not None:
                return snapshot
            if self._recently_failed(source):
                return self._degraded(source)

            try:
                rows = await self.fetch(url)
            except Exception as exc:
                self._failed_at[source] = self.clock()
                previous = self._snapshots.get(source)
                if previous is None:
                    logger.error("Dataset %s unavailable (%s): %s", source, url, exc)
                else:
                    logger.warning(
                        "Refreshing dataset %s failed, serving %s stale rows: %s",
                        source,
                        len(previous.rows),
                        exc,
                    )
                return self._degraded(source, exc)

            self._failed_at.pop(source, None)
            snapshot = DatasetSnapshot(
                source=source,
                rows=tuple(rows),
                loaded_at=self.clock(),
            )
            self._snapshots[source] = snapshot
            logger.info("Reloaded dataset %s: %s rows", source, len(snapshot.rows))
            return snapshot
