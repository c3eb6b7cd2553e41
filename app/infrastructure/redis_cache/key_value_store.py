from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.domain.errors import StoreUnavailable
from app.domain.ports.key_value_store import ConditionalCreateStorePort
from app.infrastructure.redis_cache.codec import encode_field, encode_mapping


_LUA_HMSET_IF_ABSENT = """
-- KEYS[1]: hash key
-- ARGV: field1, value1, field2, value2, ...
if redis.call('EXISTS', KEYS[1]) == 1 then
  return 0
end
redis.call('HSET', KEYS[1], unpack(ARGV))
return 1
"""

_LUA_CONSUME = """
-- KEYS[1]: code key
-- KEYS[2]: existing hash key to update (optional; nothing happens if missing)
-- ARGV[1]: expected value
-- ARGV[2..]: field/value pairs merged into KEYS[2]
local cur = redis.call('GET', KEYS[1])
if not cur then
  return 0
end
if cur ~= ARGV[1] then
  return 0
end
if #KEYS > 1 and redis.call('EXISTS', KEYS[2]) == 0 then
  return 0
end
if #KEYS > 1 and #ARGV > 1 then
  redis.call('HSET', KEYS[2], unpack(ARGV, 2))
end
redis.call('DEL', KEYS[1])
return 1
"""


def _flatten(mapping: Mapping[str, Any]) -> list[str]:
    args: list[str] = []
    for field, value in encode_mapping(mapping).items():
        args.extend((field, value))
    return args


@contextmanager
def _store_errors(op: str, key: str) -> Iterator[None]:
    try:
        yield
    except RedisError as exc:
        raise StoreUnavailable(f"redis {op} failed for {key!r}: {exc}") from exc


class RedisKeyValueStore(ConditionalCreateStorePort):
    """
    KeyValueStorePort over redis.asyncio.

    Expects a client built with decode_responses=True. Non-string values are
    JSON-encoded on the way in so records stay readable by other clients
    sharing the same keys.
    """

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    async def get(self, key: str) -> str | None:
        with _store_errors("GET", key):
            return await self._redis.get(key)

    async def hgetall(self, key: str) -> dict[str, str] | None:
        with _store_errors("HGETALL", key):
            raw = await self._redis.hgetall(key)
        return raw or None

    async def hmset(self, key: str, mapping: Mapping[str, Any]) -> bool:
        if not mapping:
            return True
        with _store_errors("HSET", key):
            await self._redis.hset(key, mapping=encode_mapping(mapping))
        return True

    async def set(self, key: str, value: Any, *, ex: int | None = None) -> bool:
        with _store_errors("SET", key):
            return bool(await self._redis.set(key, encode_field(value), ex=ex))

    async def delete(self, key: str) -> int:
        with _store_errors("DEL", key):
            return int(await self._redis.delete(key))

    async def expire(self, key: str, seconds: int) -> bool:
        with _store_errors("EXPIRE", key):
            return bool(await self._redis.expire(key, seconds))

    async def ttl(self, key: str) -> int:
        with _store_errors("TTL", key):
            return int(await self._redis.ttl(key))

    async def hmset_if_absent(self, key: str, mapping: Mapping[str, Any]) -> bool:
        if not mapping:
            raise ValueError("mapping cannot be empty")
        with _store_errors("EVAL", key):
            res = await self._redis.eval(
                _LUA_HMSET_IF_ABSENT, 1, key, *_flatten(mapping)
            )
        return int(res) == 1

    async def consume(
        self,
        key: str,
        expected: Any,
        *,
        hash_key: str | None = None,
        mapping: Mapping[str, Any] | None = None,
    ) -> bool:
        keys = [key]
        args = [encode_field(expected)]
        if hash_key and mapping:
            keys.append(hash_key)
            args.extend(_flatten(mapping))
        # atomic compare-and-delete (+ optional hash update)
        with _store_errors("EVAL", key):
            res = await self._redis.eval(_LUA_CONSUME, len(keys), *keys, *args)
        return int(res) == 1
