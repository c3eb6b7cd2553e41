from app.application.registration_codes import RegistrationCodeIssuer
from app.application.user_store import UserStore
from app.domain.entities import CodePolicy
from app.domain.ports.key_value_store import KeyValueStorePort
from app.infrastructure.redis_cache.key_value_store import RedisKeyValueStore
from app.infrastructure.redis_cache.pool import get_redis
from app.settings import get_settings


def get_store() -> KeyValueStorePort:
    return RedisKeyValueStore(get_redis())


def get_code_policy() -> CodePolicy:
    settings = get_settings()
    return CodePolicy(
        ttl_seconds=settings.code_ttl_seconds,
        min_interval_seconds=settings.code_min_interval_seconds,
    )


def get_user_store(email: str, store: KeyValueStorePort | None = None) -> UserStore:
    return UserStore(store or get_store(), email, code_policy=get_code_policy())


def get_code_issuer(
    email: str, store: KeyValueStorePort | None = None
) -> RegistrationCodeIssuer:
    return RegistrationCodeIssuer(
        store or get_store(), email, policy=get_code_policy()
    )
