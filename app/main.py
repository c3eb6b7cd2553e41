from contextlib import asynccontextmanager
from typing import AsyncIterator

from app.domain.ports.key_value_store import KeyValueStorePort
from app.infrastructure.redis_cache.key_value_store import RedisKeyValueStore
from app.infrastructure.redis_cache.pool import close_redis, get_redis
from app.logging import setup_logging
from app.settings import get_settings


@asynccontextmanager
async def lifespan() -> AsyncIterator[KeyValueStorePort]:
    """
    Process-level setup for a host application: logging plus ONE shared
    redis client, closed on exit. Yields the store to inject into
    UserStore / RegistrationCodeIssuer.
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    store = RedisKeyValueStore(get_redis())
    try:
        yield store
    finally:
        await close_redis()
