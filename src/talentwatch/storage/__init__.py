"""Persistence layer: blob stores and typed repositories."""

from talentwatch.config.settings import Settings, StorageBackend, get_settings
from talentwatch.storage.base import BlobStore
from talentwatch.storage.memory import InMemoryBlobStore
from talentwatch.storage.redis import RedisBlobStore
from talentwatch.storage.repository import (
    CappedLog,
    KeyedRepository,
    SingletonDocument,
    decode_model,
)


def create_blob_store(settings: Settings | None = None) -> BlobStore:
    """Create the blob store selected by settings."""
    settings = settings or get_settings()
    if settings.storage_backend == StorageBackend.REDIS:
        return RedisBlobStore.from_settings(settings)
    return InMemoryBlobStore()


__all__ = [
    "BlobStore",
    "CappedLog",
    "InMemoryBlobStore",
    "KeyedRepository",
    "RedisBlobStore",
    "SingletonDocument",
    "create_blob_store",
    "decode_model",
]
