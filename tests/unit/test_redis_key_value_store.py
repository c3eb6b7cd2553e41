import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.domain.errors import StoreUnavailable
from app.domain.ports.key_value_store import ConditionalCreateStorePort
from app.infrastructure.redis_cache.key_value_store import RedisKeyValueStore
from tests.fakes import FakeRedis


def test_adapter_supports_conditional_operations():
    assert isinstance(RedisKeyValueStore(FakeRedis()), ConditionalCreateStorePort)


@pytest.mark.asyncio
async def test_hmset_encodes_non_string_values():
    redis = FakeRedis()
    store = RedisKeyValueStore(redis)

    ok = await store.hmset(
        "user:a@test.com", {"name": "Alice", "phone": None, "isBlocked": False}
    )

    assert ok is True
    assert redis.calls == [
        (
            "hset",
            ("user:a@test.com",),
            {"mapping": {"name": "Alice", "phone": "null", "isBlocked": "false"}},
        )
    ]


@pytest.mark.asyncio
async def test_hmset_with_nothing_to_write_is_a_noop():
    redis = FakeRedis()
    assert await RedisKeyValueStore(redis).hmset("user:a@test.com", {}) is True
    assert redis.calls == []


@pytest.mark.asyncio
async def test_set_passes_ttl_and_reports_ack():
    redis = FakeRedis()
    redis.returns["set"] = True
    store = RedisKeyValueStore(redis)

    assert await store.set("register:code:email:a@test.com", 123456, ex=300) is True
    assert redis.calls[-1] == (
        "set",
        ("register:code:email:a@test.com", "123456"),
        {"ex": 300},
    )

    redis.returns["set"] = None
    assert await store.set("k", "v") is False


@pytest.mark.asyncio
async def test_empty_hash_reads_as_absent():
    redis = FakeRedis()
    redis.returns["hgetall"] = {}
    assert await RedisKeyValueStore(redis).hgetall("user:ghost") is None


@pytest.mark.asyncio
async def test_delete_ttl_expire_are_normalized():
    redis = FakeRedis()
    redis.returns.update({"delete": 1, "ttl": 297, "expire": 1})
    store = RedisKeyValueStore(redis)

    assert await store.delete("k") == 1
    assert await store.ttl("k") == 297
    assert await store.expire("k", 300) is True


@pytest.mark.asyncio
async def test_hmset_if_absent_runs_script_with_flat_args():
    redis = FakeRedis()
    redis.returns["eval"] = 1
    store = RedisKeyValueStore(redis)

    created = await store.hmset_if_absent("user:a@test.com", {"name": "A", "createdAt": 5})

    assert created is True
    name, args, _ = redis.calls[0]
    assert name == "eval"
    assert args[1:] == (1, "user:a@test.com", "name", "A", "createdAt", "5")

    redis.returns["eval"] = 0
    assert await store.hmset_if_absent("user:a@test.com", {"name": "A"}) is False


@pytest.mark.asyncio
async def test_consume_passes_optional_hash_update():
    redis = FakeRedis()
    redis.returns["eval"] = 1
    store = RedisKeyValueStore(redis)

    assert await store.consume("code", "123456") is True
    assert redis.calls[-1][1][1:] == (1, "code", "123456")

    await store.consume("code", "123456", hash_key="user:a", mapping={"phone": "+1"})
    assert redis.calls[-1][1][1:] == (2, "code", "user:a", "123456", "phone", "+1")


@pytest.mark.asyncio
async def test_redis_errors_become_store_unavailable():
    store = RedisKeyValueStore(FakeRedis(error=RedisConnectionError("refused")))

    with pytest.raises(StoreUnavailable) as ei:
        await store.get("user:a@test.com")
    assert "GET" in str(ei.value)
    assert isinstance(ei.value.__cause__, RedisConnectionError)

    with pytest.raises(StoreUnavailable):
        await store.consume("code", "1")
