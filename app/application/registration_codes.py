from __future__ import annotations

import logging

import app.domain.services as domain_services
from app.domain.entities import (
    CodePolicy,
    CodeType,
    IssueResult,
    IssueStatus,
    normalize_email,
)
from app.domain.errors import PhoneNumberRequired, StoreUnavailable
from app.domain.keys import code_key, user_key
from app.domain.ports.key_value_store import (
    ConditionalCreateStorePort,
    KeyValueStorePort,
)

logger = logging.getLogger(__name__)


class RegistrationCodeIssuer:
    """
    One-time registration codes for a user, over email or phone.

    Each (code type, identifier) key moves Absent -> Active -> Consumed or
    Expired, and back to Absent once the store drops the key. The issuer
    holds no state of its own.
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        email: str,
        *,
        policy: CodePolicy = CodePolicy(),
    ) -> None:
        self._store = store
        self.email = normalize_email(email)
        self.policy = policy

    def code_key(self, code_type: CodeType | str, phone: str | None = None) -> str:
        code_type = CodeType(code_type)
        if code_type is CodeType.PHONE and not phone:
            raise PhoneNumberRequired()
        return code_key(code_type, phone if phone is not None else self.email)

    async def issue(
        self, code_type: CodeType | str, phone: str | None = None
    ) -> IssueResult:
        """
        Issue a fresh code unless the current one is younger than the
        minimum re-issuance interval, in which case report its remaining TTL.
        """
        code_type = CodeType(code_type)
        key = self.code_key(code_type, phone)

        if await self._store.get(key) is not None:
            ttl = await self._store.ttl(key)
            if ttl >= self.policy.reissue_threshold:
                logger.info(
                    "registration code requested too fast",
                    extra={"code_type": code_type.value, "ttl": ttl},
                )
                return IssueResult(IssueStatus.TOO_FAST, ttl=ttl)

        code = domain_services.generate_6digit_code()
        try:
            acknowledged = await self._store.set(
                key, code, ex=self.policy.ttl_seconds
            )
        except StoreUnavailable:
            logger.warning(
                "registration code write failed",
                extra={"code_type": code_type.value},
                exc_info=True,
            )
            acknowledged = False

        if not acknowledged:
            return IssueResult(IssueStatus.UNKNOWN_ERROR)

        logger.info(
            "registration code issued",
            extra={"code_type": code_type.value, "ttl": self.policy.ttl_seconds},
        )
        return IssueResult(
            IssueStatus.SUCCESS, code=code, ttl=self.policy.ttl_seconds
        )

    async def activate(
        self,
        code: str | int,
        code_type: CodeType | str,
        phone: str | None = None,
    ) -> bool:
        """
        Consume a matching code. A phone code also links the phone number to
        the user record.
        """
        code_type = CodeType(code_type)
        key = self.code_key(code_type, phone)

        stored = await self._store.get(key)
        if stored is None or not domain_services.codes_match(stored, code):
            logger.info(
                "registration code rejected", extra={"code_type": code_type.value}
            )
            return False

        profile = {"phone": phone} if code_type is CodeType.PHONE else None

        if isinstance(self._store, ConditionalCreateStorePort):
            consumed = await self._store.consume(
                key,
                stored,
                hash_key=user_key(self.email) if profile else None,
                mapping=profile,
            )
        else:
            # No multi-key atomicity here. The phone goes first so a failure
            # in between leaves the code usable rather than the phone unlinked.
            if profile:
                if await self._store.hgetall(user_key(self.email)) is None:
                    consumed = False
                else:
                    await self._store.hmset(user_key(self.email), profile)
                    consumed = await self._store.delete(key) == 1
            else:
                consumed = await self._store.delete(key) == 1

        if not consumed:
            # phone codes only bind to a registered user
            logger.info(
                "registration code not consumed",
                extra={"code_type": code_type.value},
            )
            return False

        logger.info(
            "registration code activated", extra={"code_type": code_type.value}
        )
        return True
