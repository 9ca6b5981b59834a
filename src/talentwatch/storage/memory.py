"""In-process blob store used for tests and single-node deployments."""


class InMemoryBlobStore:
    """Dictionary-backed BlobStore."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lists: dict[str, list[str]] = {}

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> bool:
        removed = self._values.pop(key, None) is not None
        return (self._lists.pop(key, None) is not None) or removed

    async def scan(self, prefix: str) -> list[str]:
        keys = set(self._values) | set(self._lists)
        return sorted(k for k in keys if k.startswith(prefix))

    async def list_append(self, key: str, value: str, max_length: int | None = None) -> list[str]:
        values = self._lists.setdefault(key, [])
        values.append(value)
        if max_length is None or len(values) <= max_length:
            return []
        overflow = len(values) - max_length
        evicted = values[:overflow]
        del values[:overflow]
        return evicted

    async def list_range(self, key: str) -> list[str]:
        return list(self._lists.get(key, []))

    async def list_remove(self, key: str, value: str) -> None:
        values = self._lists.get(key)
        if values is not None:
            self._lists[key] = [v for v in values if v != value]

    def clear(self) -> None:
        """Drop every stored value."""
        self._values.clear()
        self._lists.clear()
