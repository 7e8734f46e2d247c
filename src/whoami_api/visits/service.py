"""Visit accounting orchestration."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from whoami_api.metrics import VISIT_FALLBACKS
from whoami_api.visits.constants import NOT_PERSISTED_MESSAGE, UPDATE_FAILED_MESSAGE
from whoami_api.visits.exceptions import StoreError
from whoami_api.visits.ledger import VisitCounts, VisitSnapshot
from whoami_api.visits.redis_store import RedisVisitStore
from whoami_api.visits.store import StoreKind, VisitStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VisitOutcome:
    counts: Optional[VisitCounts]
    store: StoreKind
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.counts is not None


def choose_store(preferred_ready: bool) -> StoreKind:
    return StoreKind.REDIS if preferred_ready else StoreKind.FILE


class VisitAccounting:
    """Counts visits on Redis when it is ready, on the local file otherwise.

    A Redis failure during a call is retried on the file store within the same
    call, so the visit is recorded rather than dropped.
    """

    def __init__(self, file_store: VisitStore, redis_store: RedisVisitStore | None = None) -> None:
        self.file_store = file_store
        self.redis_store = redis_store

    @property
    def redis_ready(self) -> bool:
        return self.redis_store is not None and self.redis_store.health.ready

    async def record(self, client_id: str) -> VisitOutcome:
        # Shielded so an aborted request still finishes a started increment.
        return await asyncio.shield(self._record(client_id))

    async def _record(self, client_id: str) -> VisitOutcome:
        if choose_store(self.redis_ready) is StoreKind.REDIS:
            try:
                counts = await self.redis_store.increment(client_id)
                return VisitOutcome(counts=counts, store=StoreKind.REDIS)
            except StoreError as exc:
                logger.warning(f"Redis increment failed, falling back to file: {exc}")
                VISIT_FALLBACKS.labels(operation="increment").inc()

        try:
            counts = await self.file_store.increment(client_id)
        except StoreError as exc:
            logger.error(f"Failed to update visits: {exc}")
            return VisitOutcome(counts=None, store=StoreKind.FILE, error=UPDATE_FAILED_MESSAGE)
        if not counts.persisted:
            return VisitOutcome(counts=counts, store=StoreKind.FILE, error=NOT_PERSISTED_MESSAGE)
        return VisitOutcome(counts=counts, store=StoreKind.FILE)

    async def snapshot(self) -> VisitSnapshot:
        """Current totals; raises :class:`StoreError` when no store can answer."""
        if choose_store(self.redis_ready) is StoreKind.REDIS:
            try:
                return await self.redis_store.snapshot()
            except StoreError as exc:
                logger.warning(f"Redis read failed, falling back to file: {exc}")
                VISIT_FALLBACKS.labels(operation="snapshot").inc()
        return await self.file_store.snapshot()
