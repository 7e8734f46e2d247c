"""Counter store interface shared by the Redis and file adapters."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from whoami_api.visits.ledger import VisitCounts, VisitSnapshot


class StoreKind(str, Enum):
    REDIS = "redis"
    FILE = "file"


class VisitStore(Protocol):
    kind: StoreKind

    async def increment(self, client_id: str) -> VisitCounts:
        """Count one visit for ``client_id`` and return the resulting counts."""
        ...

    async def snapshot(self) -> VisitSnapshot:
        """Return the current totals without counting a visit."""
        ...
