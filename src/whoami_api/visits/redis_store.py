"""Redis backed visit store.

A visit is one MULTI/EXEC transaction: INCR of the global counter, HINCRBY of
the client field and HLEN of the hash. Either all of it is applied or none of
it, and the replies are the counts right after this visit.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from redis.asyncio import Redis
from redis.backoff import AbstractBackoff
from redis.exceptions import RedisError

from whoami_api.visits.exceptions import StoreUnavailable
from whoami_api.visits.health import StoreHealth
from whoami_api.visits.ledger import VisitCounts, VisitSnapshot
from whoami_api.visits.store import StoreKind

logger = logging.getLogger(__name__)


class LinearBackoff(AbstractBackoff):
    """Reconnect delay growing by ``step`` per failed attempt, capped at ``cap``."""

    def __init__(self, step: float = 0.05, cap: float = 2.0) -> None:
        self._step = step
        self._cap = cap

    def reset(self) -> None:
        pass

    def compute(self, failures: int) -> float:
        return min(self._step * max(1, failures), self._cap)


class RedisVisitStore:
    kind = StoreKind.REDIS

    def __init__(
        self,
        client: Redis,
        health: StoreHealth,
        *,
        total_key: str = "visits:total",
        clients_key: str = "visits:byIp",
        backoff: Optional[AbstractBackoff] = None,
        heartbeat_seconds: float = 5.0,
    ) -> None:
        self._client = client
        self.health = health
        self.total_key = total_key
        self.clients_key = clients_key
        self._backoff = backoff or LinearBackoff()
        self._heartbeat_seconds = heartbeat_seconds
        self._monitor_task: Optional[asyncio.Task] = None

    @classmethod
    def from_url(
        cls,
        url: str,
        health: StoreHealth,
        *,
        socket_timeout: float = 2.0,
        **kwargs,
    ) -> "RedisVisitStore":
        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        return cls(client, health, **kwargs)

    async def increment(self, client_id: str) -> VisitCounts:
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(self.total_key)
                pipe.hincrby(self.clients_key, client_id, 1)
                pipe.hlen(self.clients_key)
                total, your_visits, unique = await pipe.execute()
        except (RedisError, OSError) as exc:
            self.health.mark_unavailable(str(exc))
            raise StoreUnavailable(f"Redis increment failed: {exc}") from exc
        return VisitCounts(
            total=int(total or 0),
            unique=int(unique or 0),
            your_visits=int(your_visits or 0),
        )

    async def snapshot(self) -> VisitSnapshot:
        try:
            total, unique = await asyncio.gather(
                self._client.get(self.total_key),
                self._client.hlen(self.clients_key),
            )
        except (RedisError, OSError) as exc:
            self.health.mark_unavailable(str(exc))
            raise StoreUnavailable(f"Redis read failed: {exc}") from exc
        return VisitSnapshot(total=int(total or 0), unique=int(unique or 0))

    async def check(self) -> bool:
        """PING the server once and update health accordingly."""
        try:
            await self._client.ping()
        except (RedisError, OSError) as exc:
            self.health.mark_unavailable(str(exc))
            return False
        self.health.mark_ready()
        return True

    async def _monitor(self) -> None:
        failures = 0
        while True:
            if await self.check():
                failures = 0
                self._backoff.reset()
                delay = self._heartbeat_seconds
            else:
                failures += 1
                delay = self._backoff.compute(failures)
                logger.debug(f"Redis reconnect attempt {failures} in {delay:.2f}s")
            await asyncio.sleep(delay)

    def start(self) -> None:
        if self._monitor_task is None:
            self._monitor_task = asyncio.create_task(self._monitor())

    async def close(self) -> None:
        if self._monitor_task is not None:
            self._monitor_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._monitor_task
            self._monitor_task = None
        self.health.mark_unavailable("connection closed")
        await self._client.aclose()
