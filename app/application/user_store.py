from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping

from app.application.registration_codes import RegistrationCodeIssuer
from app.domain.entities import CodePolicy, normalize_email
from app.domain.keys import user_key
from app.domain.ports.key_value_store import (
    ConditionalCreateStorePort,
    KeyValueStorePort,
)
from app.infrastructure.security import password as passwords
from app.schemas.records import DEFAULT_USER_NAME, UserRecord

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class UserStore:
    """
    The user record stored under ``user:{normalized email}``.

    The record's presence is the only existence flag: it exists iff
    registration completed.
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        email: str,
        *,
        code_policy: CodePolicy = CodePolicy(),
        now_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self.email = normalize_email(email)
        self._code_policy = code_policy
        self._now_ms = now_ms

    @property
    def user_key(self) -> str:
        return user_key(self.email)

    @property
    def register_codes(self) -> RegistrationCodeIssuer:
        return RegistrationCodeIssuer(
            self._store, self.email, policy=self._code_policy
        )

    async def get(self) -> UserRecord | None:
        raw = await self._store.hgetall(self.user_key)
        if not raw:
            return None
        return UserRecord.model_validate({**raw, "email": self.email})

    async def update(self, fields: Mapping[str, Any]) -> bool:
        """
        Merge stored (camelCase) fields into the record. Creates the hash if
        it does not exist, so check exists() first when that matters.
        """
        return await self._store.hmset(self.user_key, dict(fields))

    async def exists(self) -> bool:
        return await self.get() is not None

    async def delete(self) -> bool:
        return await self._store.delete(self.user_key) == 1

    @classmethod
    async def register(
        cls,
        store: KeyValueStorePort,
        email: str,
        password: str,
        name: str | None = None,
        *,
        code_policy: CodePolicy = CodePolicy(),
        now_ms: Callable[[], int] = _now_ms,
        hash_password: Callable[[str], str] = passwords.hash_password,
    ) -> UserStore | None:
        """
        Create the record for a new email. Returns None if one already exists.
        """
        user = cls(store, email, code_policy=code_policy, now_ms=now_ms)
        now = user._now_ms()
        record = UserRecord(
            email=user.email,
            name=name if name is not None else DEFAULT_USER_NAME,
            password_hash=hash_password(password.strip()),
            phone=None,
            created_at=now,
            last_login_at=now,
            is_blocked=False,
        )

        if isinstance(store, ConditionalCreateStorePort):
            created = await store.hmset_if_absent(user.user_key, record.to_store())
        elif await user.exists():
            created = False
        else:
            # Not atomic with the exists() above: two concurrent registrations
            # for the same email can both get here, and the last write wins.
            created = await user.update(record.to_store())

        if not created:
            logger.info("registration rejected", extra={"reason": "user exists"})
            return None

        logger.info("user registered")
        return user

    async def login(self, password: str) -> bool:
        """
        Check the password; on success stamp lastLoginAt (and upgrade the
        stored hash when its scheme is deprecated).
        """
        record = await self.get()
        if record is None:
            return False

        ok, new_hash = passwords.verify_and_update(
            password.strip(), record.password_hash
        )
        if not ok:
            return False

        fields: dict[str, Any] = {"lastLoginAt": self._now_ms()}
        if new_hash:
            fields["passwordHash"] = new_hash
        await self.update(fields)
        return True

    async def block(self) -> bool:
        if not await self.exists():
            return False
        return await self.update({"isBlocked": True})

    async def unblock(self) -> bool:
        if not await self.exists():
            return False
        return await self.update({"isBlocked": False})
