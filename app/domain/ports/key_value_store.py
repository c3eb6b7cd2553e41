from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


class KeyValueStorePort(Protocol):
    """
    The narrow slice of a shared TTL-capable key-value store we rely on.

    Every call is atomic on its own; sequences of calls are not.
    """

    async def get(self, key: str) -> Any | None:
        """Value at key, or None when absent/expired."""

    async def hgetall(self, key: str) -> dict[str, Any] | None:
        """All fields of the hash at key, or None when absent."""

    async def hmset(self, key: str, mapping: Mapping[str, Any]) -> bool:
        """Merge fields into the hash (creating it); True when acknowledged."""

    async def set(self, key: str, value: Any, *, ex: int | None = None) -> bool:
        """Overwrite key, optionally with a TTL in seconds; True when acknowledged."""

    async def delete(self, key: str) -> int:
        """Remove key; number of keys actually removed."""

    async def expire(self, key: str, seconds: int) -> bool:
        """Set a TTL; False when the key does not exist."""

    async def ttl(self, key: str) -> int:
        """Seconds remaining; -1 without expiry, -2 when absent."""


@runtime_checkable
class ConditionalCreateStorePort(KeyValueStorePort, Protocol):
    """
    Stores that can run small multi-step operations server-side, atomically.
    """

    async def hmset_if_absent(self, key: str, mapping: Mapping[str, Any]) -> bool:
        """Create the hash only if key does not exist; True if it was created."""

    async def consume(
        self,
        key: str,
        expected: Any,
        *,
        hash_key: str | None = None,
        mapping: Mapping[str, Any] | None = None,
    ) -> bool:
        """
        If key still holds expected (and hash_key, when given, exists): delete
        it and merge mapping into hash_key. True if consumed.
        """
