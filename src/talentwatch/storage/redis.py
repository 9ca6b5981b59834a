"""Redis-backed BlobStore.

Keys are namespaced with a prefix. Capped lists use RPUSH + LTRIM inside
a MULTI/EXEC pipeline so concurrent appenders never exceed the cap.
"""

from redis.asyncio import ConnectionPool, Redis

from talentwatch.config.settings import Settings, get_settings


class RedisBlobStore:
    """BlobStore implementation on top of ``redis.asyncio``."""

    def __init__(self, client: Redis, prefix: str = "talentwatch"):
        """Initialize the store.

        Args:
            client: Redis client created with ``decode_responses=True``
            prefix: Key prefix for namespacing
        """
        self._client = client
        self.prefix = prefix

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RedisBlobStore":
        """Create a store with its own connection pool."""
        settings = settings or get_settings()
        pool = ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            decode_responses=True,
        )
        return cls(Redis(connection_pool=pool), prefix=settings.storage_prefix)

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def _strip_key(self, key: str) -> str:
        return key.removeprefix(f"{self.prefix}:")

    async def get(self, key: str) -> str | None:
        return await self._client.get(self._make_key(key))

    async def set(self, key: str, value: str) -> None:
        await self._client.set(self._make_key(key), value)

    async def delete(self, key: str) -> bool:
        return bool(await self._client.delete(self._make_key(key)))

    async def scan(self, prefix: str) -> list[str]:
        keys = [key async for key in self._client.scan_iter(match=f"{self._make_key(prefix)}*")]
        return sorted(self._strip_key(k) for k in keys)

    async def list_append(self, key: str, value: str, max_length: int | None = None) -> list[str]:
        full_key = self._make_key(key)
        if max_length is None:
            await self._client.rpush(full_key, value)
            return []

        pipe = self._client.pipeline(transaction=True)
        pipe.rpush(full_key, value)
        pipe.lrange(full_key, 0, -(max_length + 1))
        pipe.ltrim(full_key, -max_length, -1)
        _, evicted, _ = await pipe.execute()
        return list(evicted)

    async def list_range(self, key: str) -> list[str]:
        return list(await self._client.lrange(self._make_key(key), 0, -1))

    async def list_remove(self, key: str, value: str) -> None:
        await self._client.lrem(self._make_key(key), 0, value)

    async def close(self) -> None:
        """Close the underlying client."""
        await self._client.aclose()
