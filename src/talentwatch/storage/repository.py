"""Typed repositories over a BlobStore.

Classes:
    KeyedRepository: Records addressed by id, with optional retention cap
    CappedLog: Append-only log keeping the most recent N entries
    SingletonDocument: A single settings-style document with a default
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from talentwatch.core.exceptions import StorageCorruptionError
from talentwatch.core.logging import get_logger
from talentwatch.storage.base import BlobStore

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_model(model: type[ModelT], key: str, raw: str) -> ModelT:
    """Decode a JSON blob into ``model``.

    Raises:
        StorageCorruptionError: If the blob is not valid for the model
    """
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        raise StorageCorruptionError(f"Cannot decode {model.__name__}: {e.error_count()} errors", key) from e


class KeyedRepository(Generic[ModelT]):
    """Records of one model type addressed by a string id.

    Writes to the same id are serialised with a per-key lock, so
    ``update`` is an atomic read-modify-write within the process. When
    ``max_entries`` is set, inserting a new id beyond the cap evicts the
    oldest records.
    """

    def __init__(
        self,
        store: BlobStore,
        namespace: str,
        model: type[ModelT],
        id_field: str = "id",
        max_entries: int | None = None,
    ):
        self._store = store
        self.namespace = namespace
        self.model = model
        self.id_field = id_field
        self.max_entries = max_entries
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def _key(self, record_id: str) -> str:
        return f"{self.namespace}:item:{record_id}"

    @property
    def _index_key(self) -> str:
        return f"{self.namespace}:index"

    @asynccontextmanager
    async def _locked(self, record_id: str) -> AsyncIterator[None]:
        """Hold the per-id lock. The entry is dropped once no caller holds or awaits it."""
        lock = self._locks.get(record_id)
        if lock is None:
            lock = self._locks[record_id] = asyncio.Lock()
        self._lock_users[record_id] = self._lock_users.get(record_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[record_id] -= 1
            if not self._lock_users[record_id]:
                del self._lock_users[record_id]
                del self._locks[record_id]

    async def _read(self, record_id: str) -> ModelT | None:
        key = self._key(record_id)
        raw = await self._store.get(key)
        if raw is None:
            return None
        try:
            return decode_model(self.model, key, raw)
        except StorageCorruptionError as e:
            logger.warning("corrupt_record_skipped", namespace=self.namespace, key=e.key, error=str(e))
            return None

    async def get(self, record_id: str) -> ModelT | None:
        """Get a record by id, or None if absent or undecodable."""
        return await self._read(record_id)

    async def upsert(self, item: ModelT) -> ModelT:
        """Insert or overwrite a record."""
        record_id = str(getattr(item, self.id_field))
        async with self._locked(record_id):
            existed = await self._store.get(self._key(record_id)) is not None
            await self._store.set(self._key(record_id), item.model_dump_json())
            if not existed:
                await self._track(record_id)
        return item

    async def update(self, record_id: str, mutate: Callable[[ModelT], ModelT]) -> ModelT | None:
        """Atomically apply ``mutate`` to a stored record.

        Returns:
            The updated record, or None if the record does not exist
        """
        async with self._locked(record_id):
            current = await self._read(record_id)
            if current is None:
                return None
            updated = mutate(current)
            await self._store.set(self._key(record_id), updated.model_dump_json())
            return updated

    async def delete(self, record_id: str) -> bool:
        """Delete a record. Returns True if it existed."""
        async with self._locked(record_id):
            removed = await self._store.delete(self._key(record_id))
            await self._store.list_remove(self._index_key, record_id)
        return removed

    async def list_ids(self) -> list[str]:
        """Ids in insertion order, oldest first."""
        return await self._store.list_range(self._index_key)

    async def list_all(self) -> list[ModelT]:
        """All decodable records in insertion order, oldest first."""
        records: list[ModelT] = []
        for record_id in await self.list_ids():
            record = await self._read(record_id)
            if record is not None:
                records.append(record)
        return records

    async def _track(self, record_id: str) -> None:
        evicted = await self._store.list_append(self._index_key, record_id, self.max_entries)
        for old_id in evicted:
            await self._store.delete(self._key(old_id))
        if evicted:
            logger.debug("records_evicted", namespace=self.namespace, count=len(evicted))


class CappedLog(Generic[ModelT]):
    """Append-only log retaining the most recent ``max_entries`` entries."""

    def __init__(self, store: BlobStore, key: str, model: type[ModelT], max_entries: int):
        self._store = store
        self.key = key
        self.model = model
        self.max_entries = max_entries

    async def append(self, entry: ModelT) -> None:
        await self._store.list_append(self.key, entry.model_dump_json(), self.max_entries)

    async def list_all(self) -> list[ModelT]:
        """All decodable entries, oldest first."""
        entries: list[ModelT] = []
        for raw in await self._store.list_range(self.key):
            try:
                entries.append(decode_model(self.model, self.key, raw))
            except StorageCorruptionError as e:
                logger.warning("corrupt_log_entry_skipped", key=self.key, error=str(e))
        return entries


class SingletonDocument(Generic[ModelT]):
    """A single JSON document that falls back to a default."""

    def __init__(self, store: BlobStore, key: str, model: type[ModelT], default: Callable[[], ModelT]):
        self._store = store
        self.key = key
        self.model = model
        self._default = default

    async def load(self) -> ModelT:
        raw = await self._store.get(self.key)
        if raw is None:
            return self._default()
        try:
            return decode_model(self.model, self.key, raw)
        except StorageCorruptionError as e:
            logger.warning("corrupt_document_reset", key=self.key, error=str(e))
            return self._default()

    async def save(self, document: ModelT) -> None:
        await self._store.set(self.key, document.model_dump_json())
