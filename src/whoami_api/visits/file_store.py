"""JSON file backed visit store.

The whole ledger lives in one document that is rewritten on every visit.
Safe for a single process only: increments are serialized by a lock owned by
the store, nothing guards against a second process writing the same file.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from whoami_api.visits.exceptions import StoreUnavailable
from whoami_api.visits.ledger import VisitCounts, VisitLedger, VisitSnapshot
from whoami_api.visits.store import StoreKind

logger = logging.getLogger(__name__)


class FileVisitStore:
    kind = StoreKind.FILE

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def ensure_exists(self) -> None:
        """Create an empty ledger document if none exists yet."""
        with self._lock:
            if not self.path.exists():
                self._write(VisitLedger())

    def _read(self) -> VisitLedger:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return VisitLedger()
        except OSError as exc:
            raise StoreUnavailable(f"Cannot read visits file {self.path}: {exc}") from exc
        try:
            data = json.loads(raw.decode("utf-8") or "{}")
        except ValueError:
            # Also covers UnicodeDecodeError.
            logger.warning(f"Visits file {self.path} is not valid JSON, starting from an empty ledger")
            return VisitLedger()
        return VisitLedger.from_document(data)

    def _write(self, ledger: VisitLedger) -> bool:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(ledger.to_document(), indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.error(f"Failed to write visits file {self.path}: {exc}")
            return False
        return True

    def increment_sync(self, client_id: str) -> VisitCounts:
        with self._lock:
            ledger = self._read()
            ledger.record(client_id)
            persisted = self._write(ledger)
            return ledger.counts_for(client_id, persisted=persisted)

    def snapshot_sync(self) -> VisitSnapshot:
        with self._lock:
            return self._read().snapshot()

    async def increment(self, client_id: str) -> VisitCounts:
        return await run_in_threadpool(self.increment_sync, client_id)

    async def snapshot(self) -> VisitSnapshot:
        return await run_in_threadpool(self.snapshot_sync)
