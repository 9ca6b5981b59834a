"""Unit tests for blob stores and typed repositories."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from talentwatch.config.settings import Settings, StorageBackend
from talentwatch.core.exceptions import StorageCorruptionError
from talentwatch.storage import create_blob_store
from talentwatch.storage.memory import InMemoryBlobStore
from talentwatch.storage.redis import RedisBlobStore
from talentwatch.storage.repository import CappedLog, KeyedRepository, SingletonDocument, decode_model


class Counter(BaseModel):
    id: str
    value: int = 0


class Preferences(BaseModel):
    theme: str = "light"


class SlowBlobStore(InMemoryBlobStore):
    """Yields inside every write and records the most writes seen on one key at once."""

    def __init__(self) -> None:
        super().__init__()
        self._active: dict[str, int] = {}
        self.max_overlap = 0

    async def _hold(self, key: str) -> None:
        self._active[key] = self._active.get(key, 0) + 1
        self.max_overlap = max(self.max_overlap, self._active[key])
        for _ in range(3):
            await asyncio.sleep(0)
        self._active[key] -= 1

    async def set(self, key: str, value: str) -> None:
        await self._hold(key)
        await super().set(key, value)

    async def delete(self, key: str) -> bool:
        await self._hold(key)
        return await super().delete(key)


class TestInMemoryBlobStore:
    """Tests for InMemoryBlobStore."""

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        store = InMemoryBlobStore()
        await store.set("a", "1")

        assert await store.get("a") == "1"
        assert await store.delete("a") is True
        assert await store.get("a") is None
        assert await store.delete("a") is False

    @pytest.mark.asyncio
    async def test_scan_by_prefix(self):
        store = InMemoryBlobStore()
        await store.set("alerts:item:1", "x")
        await store.set("alerts:item:2", "y")
        await store.set("reports:item:1", "z")

        assert await store.scan("alerts:") == ["alerts:item:1", "alerts:item:2"]

    @pytest.mark.asyncio
    async def test_list_append_caps_and_returns_evicted(self):
        store = InMemoryBlobStore()
        for value in ["a", "b", "c"]:
            assert await store.list_append("log", value, max_length=3) == []

        evicted = await store.list_append("log", "d", max_length=3)

        assert evicted == ["a"]
        assert await store.list_range("log") == ["b", "c", "d"]

    @pytest.mark.asyncio
    async def test_list_remove(self):
        store = InMemoryBlobStore()
        await store.list_append("ids", "1")
        await store.list_append("ids", "2")

        await store.list_remove("ids", "1")

        assert await store.list_range("ids") == ["2"]


class TestRedisBlobStore:
    """Tests for RedisBlobStore against a mocked client."""

    @pytest.fixture
    def mock_client(self):
        """Create mock Redis client.

        pipeline() is synchronous and returns an object with async execute().
        """
        client = MagicMock()
        client.get = AsyncMock()
        client.set = AsyncMock()
        client.delete = AsyncMock()
        client.rpush = AsyncMock()
        client.lrange = AsyncMock()
        client.lrem = AsyncMock()
        client.aclose = AsyncMock()
        return client

    @pytest.fixture
    def redis_store(self, mock_client):
        return RedisBlobStore(client=mock_client, prefix="test")

    @pytest.mark.asyncio
    async def test_get_uses_prefixed_key(self, redis_store, mock_client):
        mock_client.get.return_value = '{"id": "1"}'

        assert await redis_store.get("alerts:item:1") == '{"id": "1"}'
        mock_client.get.assert_awaited_once_with("test:alerts:item:1")

    @pytest.mark.asyncio
    async def test_delete_reports_existence(self, redis_store, mock_client):
        mock_client.delete.return_value = 0

        assert await redis_store.delete("missing") is False

    @pytest.mark.asyncio
    async def test_capped_append_uses_transaction(self, redis_store, mock_client):
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[4, ["oldest"], True])
        mock_client.pipeline.return_value = pipe

        evicted = await redis_store.list_append("audit:entries", "entry", max_length=3)

        assert evicted == ["oldest"]
        mock_client.pipeline.assert_called_once_with(transaction=True)
        pipe.rpush.assert_called_once_with("test:audit:entries", "entry")
        pipe.lrange.assert_called_once_with("test:audit:entries", 0, -4)
        pipe.ltrim.assert_called_once_with("test:audit:entries", -3, -1)

    @pytest.mark.asyncio
    async def test_uncapped_append_pushes_directly(self, redis_store, mock_client):
        assert await redis_store.list_append("ids", "1") == []
        mock_client.rpush.assert_awaited_once_with("test:ids", "1")
        mock_client.pipeline.assert_not_called()

    @pytest.mark.asyncio
    async def test_scan_strips_prefix(self, redis_store, mock_client):
        async def keys():
            for key in ["test:rules:item:b", "test:rules:item:a"]:
                yield key

        mock_client.scan_iter = MagicMock(return_value=keys())

        assert await redis_store.scan("rules:") == ["rules:item:a", "rules:item:b"]
        mock_client.scan_iter.assert_called_once_with(match="test:rules:*")

    @pytest.mark.asyncio
    async def test_close(self, redis_store, mock_client):
        await redis_store.close()
        mock_client.aclose.assert_awaited_once()


class TestCreateBlobStore:
    """Tests for backend selection."""

    def test_memory_backend(self):
        assert isinstance(create_blob_store(Settings(storage_backend=StorageBackend.MEMORY)), InMemoryBlobStore)

    def test_redis_backend(self):
        store = create_blob_store(Settings(storage_backend=StorageBackend.REDIS, storage_prefix="tw"))
        assert isinstance(store, RedisBlobStore)
        assert store.prefix == "tw"


class TestDecodeModel:
    """Tests for decode_model."""

    def test_invalid_blob_raises_corruption_error(self):
        with pytest.raises(StorageCorruptionError) as exc_info:
            decode_model(Counter, "counters:item:1", "not json")
        assert exc_info.value.key == "counters:item:1"


class TestKeyedRepository:
    """Tests for KeyedRepository."""

    @pytest.fixture
    def repo(self, store):
        return KeyedRepository(store, "counters", Counter)

    @pytest.mark.asyncio
    async def test_upsert_and_get(self, repo):
        await repo.upsert(Counter(id="c1", value=3))

        assert await repo.get("c1") == Counter(id="c1", value=3)
        assert await repo.get("missing") is None

    @pytest.mark.asyncio
    async def test_upsert_overwrite_keeps_single_index_entry(self, repo):
        await repo.upsert(Counter(id="c1", value=1))
        await repo.upsert(Counter(id="c1", value=2))

        assert await repo.list_ids() == ["c1"]
        assert (await repo.get("c1")).value == 2

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, repo):
        assert await repo.update("missing", lambda c: c) is None

    @pytest.mark.asyncio
    async def test_concurrent_updates_are_not_lost(self, repo):
        await repo.upsert(Counter(id="c1"))

        async def increment():
            await repo.update("c1", lambda c: c.model_copy(update={"value": c.value + 1}))

        await asyncio.gather(*(increment() for _ in range(50)))

        assert (await repo.get("c1")).value == 50

    @pytest.mark.asyncio
    async def test_delete(self, repo):
        await repo.upsert(Counter(id="c1"))

        assert await repo.delete("c1") is True
        assert await repo.get("c1") is None
        assert await repo.list_ids() == []

    @pytest.mark.asyncio
    async def test_delete_keeps_lock_for_waiting_writers(self):
        store = SlowBlobStore()
        repo = KeyedRepository(store, "counters", Counter)
        await repo.upsert(Counter(id="c1", value=1))
        deleted = asyncio.Event()

        async def delete():
            await repo.delete("c1")
            deleted.set()

        async def recreate_after_delete():
            await deleted.wait()
            await repo.upsert(Counter(id="c1", value=7))

        await asyncio.gather(
            delete(),
            repo.upsert(Counter(id="c1", value=5)),
            recreate_after_delete(),
        )

        assert store.max_overlap == 1
        assert (await repo.get("c1")).value == 7
        assert await repo.list_ids() == ["c1"]
        assert not repo._locks

    @pytest.mark.asyncio
    async def test_cap_evicts_oldest_records(self, store):
        repo = KeyedRepository(store, "counters", Counter, max_entries=2)
        for i in range(3):
            await repo.upsert(Counter(id=f"c{i}"))

        assert await repo.list_ids() == ["c1", "c2"]
        assert await repo.get("c0") is None
        assert await store.get("counters:item:c0") is None

    @pytest.mark.asyncio
    async def test_corrupt_record_is_skipped(self, repo, store):
        await repo.upsert(Counter(id="good"))
        await repo.upsert(Counter(id="bad"))
        await store.set("counters:item:bad", "{broken")

        assert await repo.get("bad") is None
        assert [c.id for c in await repo.list_all()] == ["good"]


class TestCappedLog:
    """Tests for CappedLog."""

    @pytest.mark.asyncio
    async def test_keeps_most_recent_entries(self, store):
        log = CappedLog(store, "log", Counter, max_entries=3)
        for i in range(5):
            await log.append(Counter(id=str(i)))

        assert [c.id for c in await log.list_all()] == ["2", "3", "4"]

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_skipped(self, store):
        log = CappedLog(store, "log", Counter, max_entries=3)
        await log.append(Counter(id="1"))
        await store.list_append("log", "garbage")

        assert [c.id for c in await log.list_all()] == ["1"]


class TestSingletonDocument:
    """Tests for SingletonDocument."""

    @pytest.mark.asyncio
    async def test_load_default_then_saved(self, store):
        doc = SingletonDocument(store, "prefs", Preferences, Preferences)

        assert (await doc.load()).theme == "light"
        await doc.save(Preferences(theme="dark"))
        assert (await doc.load()).theme == "dark"

    @pytest.mark.asyncio
    async def test_corrupt_document_resets_to_default(self, store):
        doc = SingletonDocument(store, "prefs", Preferences, Preferences)
        await store.set("prefs", "[]")

        assert await doc.load() == Preferences()
