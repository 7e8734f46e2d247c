"""Tests for store selection and failover in the accounting service."""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, patch

from fakes import FakeRedis
from whoami_api.visits.constants import NOT_PERSISTED_MESSAGE, UPDATE_FAILED_MESSAGE
from whoami_api.visits.exceptions import StoreUnavailable
from whoami_api.visits.file_store import FileVisitStore
from whoami_api.visits.health import StoreHealth
from whoami_api.visits.ledger import VisitSnapshot
from whoami_api.visits.redis_store import RedisVisitStore
from whoami_api.visits.service import VisitAccounting, choose_store
from whoami_api.visits.store import StoreKind


@pytest.fixture
def file_store(tmp_path):
    return FileVisitStore(tmp_path / "visits.json")


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_store(fake_redis):
    health = StoreHealth()
    health.mark_ready()
    return RedisVisitStore(fake_redis, health)


def _record_all(accounting, clients):
    async def run():
        return [await accounting.record(client) for client in clients]

    return asyncio.run(run())


class TestChooseStore:
    def test_prefers_redis_when_ready(self):
        assert choose_store(True) is StoreKind.REDIS

    def test_file_when_not_ready(self):
        assert choose_store(False) is StoreKind.FILE


class TestFileOnlyAccounting:
    def test_monotonic_total_and_per_client_counts(self, file_store):
        clients = ["a", "b", "a", "c", "a", "b"]
        outcomes = _record_all(VisitAccounting(file_store), clients)

        totals = [o.counts.total for o in outcomes]
        assert totals == sorted(totals)
        assert totals[-1] == len(clients)
        assert [o.counts.your_visits for o in outcomes] == [1, 1, 2, 1, 3, 2]
        assert [o.counts.unique for o in outcomes] == [1, 2, 2, 3, 3, 3]
        assert all(o.store is StoreKind.FILE and o.ok for o in outcomes)

    def test_unknown_client_accumulates_under_empty_key(self, file_store):
        outcomes = _record_all(VisitAccounting(file_store), ["", "", ""])
        assert outcomes[-1].counts.your_visits == 3
        assert outcomes[-1].counts.unique == 1

    def test_concurrent_records_lose_nothing(self, file_store):
        accounting = VisitAccounting(file_store)
        clients = [f"c{i % 7}" for i in range(70)]

        async def run():
            return await asyncio.gather(*(accounting.record(c) for c in clients))

        outcomes = asyncio.run(run())
        assert sorted(o.counts.total for o in outcomes) == list(range(1, 71))
        assert asyncio.run(accounting.snapshot()) == VisitSnapshot(total=70, unique=7)

    def test_unpersisted_write_reported_as_error(self, file_store):
        accounting = VisitAccounting(file_store)
        with patch("whoami_api.visits.file_store.os.replace", side_effect=OSError("read-only")):
            outcome = _record_all(accounting, ["a"])[0]
        assert not outcome.ok
        assert outcome.error == NOT_PERSISTED_MESSAGE
        assert outcome.counts.total == 1

    def test_file_failure_reported_not_raised(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        accounting = VisitAccounting(FileVisitStore(blocker / "visits.json"))
        outcome = _record_all(accounting, ["a"])[0]
        assert outcome.counts is None
        assert outcome.error == UPDATE_FAILED_MESSAGE


class TestRedisAccounting:
    def test_uses_redis_when_ready(self, file_store, redis_store, fake_redis):
        outcomes = _record_all(VisitAccounting(file_store, redis_store), ["a", "a"])
        assert [o.store for o in outcomes] == [StoreKind.REDIS, StoreKind.REDIS]
        assert outcomes[-1].counts.your_visits == 2
        assert not file_store.path.exists()

    def test_unready_redis_skipped_without_calls(self, file_store, fake_redis):
        redis_store = RedisVisitStore(fake_redis, StoreHealth())
        outcome = _record_all(VisitAccounting(file_store, redis_store), ["a"])[0]
        assert outcome.store is StoreKind.FILE
        assert fake_redis.values == {}

    def test_failover_mid_sequence_loses_no_visit(self, file_store, redis_store, fake_redis):
        accounting = VisitAccounting(file_store, redis_store)
        first = _record_all(accounting, ["a", "b", "a"])
        fake_redis.fail = True
        second = _record_all(accounting, ["a", "c"])

        assert [o.store for o in first] == [StoreKind.REDIS] * 3
        assert [o.store for o in second] == [StoreKind.FILE] * 2
        assert all(o.ok for o in first + second)
        redis_total = fake_redis.values["visits:total"]
        file_total = json.loads(file_store.path.read_text())["total"]
        assert redis_total + file_total == 5
        assert redis_store.health.ready is False

    def test_failing_call_itself_is_recorded_in_file(self, file_store, redis_store):
        redis_store.increment = AsyncMock(side_effect=StoreUnavailable("timeout"))
        outcome = _record_all(VisitAccounting(file_store, redis_store), ["a"])[0]
        assert outcome.ok
        assert outcome.store is StoreKind.FILE
        assert file_store.snapshot_sync() == VisitSnapshot(total=1, unique=1)

    def test_snapshot_falls_back_to_file(self, file_store, redis_store, fake_redis):
        file_store.increment_sync("x")
        accounting = VisitAccounting(file_store, redis_store)
        _record_all(accounting, ["a", "b"])
        assert asyncio.run(accounting.snapshot()) == VisitSnapshot(total=2, unique=2)
        fake_redis.fail = True
        assert asyncio.run(accounting.snapshot()) == VisitSnapshot(total=1, unique=1)

    def test_record_survives_caller_cancellation(self, file_store, redis_store, fake_redis):
        accounting = VisitAccounting(file_store, redis_store)
        fake_redis.exec_delay = 0.01

        async def run():
            task = asyncio.create_task(accounting.record("a"))
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            await asyncio.sleep(0.05)

        asyncio.run(run())
        assert fake_redis.values["visits:total"] == 1
        assert fake_redis.hashes["visits:byIp"] == {"a": 1}

    def test_broken_transaction_counts_visit_once(self, file_store, redis_store, fake_redis):
        accounting = VisitAccounting(file_store, redis_store)
        fake_redis.fail_on = "hincrby"
        outcome = _record_all(accounting, ["a"])[0]

        assert outcome.ok
        assert outcome.store is StoreKind.FILE
        assert fake_redis.values.get("visits:total", 0) == 0
        assert sum(fake_redis.hashes.get("visits:byIp", {}).values()) == 0
        assert file_store.snapshot_sync() == VisitSnapshot(total=1, unique=1)
