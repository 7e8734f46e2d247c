"""Visit ledger data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from whoami_api.visits.constants import (
    LEDGER_CLIENTS_FIELD,
    LEDGER_TOTAL_FIELD,
    LEGACY_CLIENTS_FIELD,
)


@dataclass(frozen=True)
class VisitCounts:
    total: int
    unique: int
    your_visits: int
    persisted: bool = True


@dataclass(frozen=True)
class VisitSnapshot:
    total: int
    unique: int


def _as_count(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


@dataclass
class VisitLedger:
    """Global and per-client visit counts.

    ``total`` always equals the sum of ``by_client`` after :meth:`record`.
    """

    total: int = 0
    by_client: Dict[str, int] = field(default_factory=dict)

    @property
    def unique(self) -> int:
        return len(self.by_client)

    def record(self, client_id: str) -> int:
        self.total += 1
        visits = self.by_client.get(client_id, 0) + 1
        self.by_client[client_id] = visits
        return visits

    def counts_for(self, client_id: str, *, persisted: bool = True) -> VisitCounts:
        return VisitCounts(
            total=self.total,
            unique=self.unique,
            your_visits=self.by_client.get(client_id, 0),
            persisted=persisted,
        )

    def snapshot(self) -> VisitSnapshot:
        return VisitSnapshot(total=self.total, unique=self.unique)

    def to_document(self) -> Dict[str, Any]:
        return {LEDGER_TOTAL_FIELD: self.total, LEDGER_CLIENTS_FIELD: dict(self.by_client)}

    @classmethod
    def from_document(cls, data: Any) -> "VisitLedger":
        """Build a ledger from a parsed JSON document, tolerating bad shapes."""
        if not isinstance(data, dict):
            return cls()
        clients = data.get(LEDGER_CLIENTS_FIELD)
        if clients is None:
            clients = data.get(LEGACY_CLIENTS_FIELD)
        by_client: Dict[str, int] = {}
        if isinstance(clients, dict):
            by_client = {str(key): _as_count(value) for key, value in clients.items()}
        return cls(total=_as_count(data.get(LEDGER_TOTAL_FIELD, 0)), by_client=by_client)
