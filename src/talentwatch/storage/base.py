"""Blob store protocol shared by the storage backends."""

from typing import Protocol


class BlobStore(Protocol):
    """Keyed string storage with capped list support.

    Values are opaque strings (JSON documents in practice). Lists are
    append-ordered, oldest first.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> bool: ...

    async def scan(self, prefix: str) -> list[str]:
        """Return all keys starting with ``prefix``."""
        ...

    async def list_append(self, key: str, value: str, max_length: int | None = None) -> list[str]:
        """Append to a list, trimming the oldest values beyond ``max_length``.

        Returns:
            Values evicted by the trim, oldest first
        """
        ...

    async def list_range(self, key: str) -> list[str]: ...

    async def list_remove(self, key: str, value: str) -> None: ...
