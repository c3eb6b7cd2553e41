from __future__ import annotations

from functools import lru_cache

from passlib.context import CryptContext

from app.settings import get_settings

# hex_md5 is the unsalted digest already stored by the existing deployment.
# It is weak; set PASSWORD_SCHEME=bcrypt to hash new passwords with bcrypt and
# upgrade md5 hashes on the next successful login.
SUPPORTED_SCHEMES = ("bcrypt", "hex_md5")


@lru_cache(maxsize=None)
def _context(scheme: str, rounds: int) -> CryptContext:
    if scheme not in SUPPORTED_SCHEMES:
        raise ValueError(f"unsupported password scheme: {scheme}")
    return CryptContext(
        schemes=list(SUPPORTED_SCHEMES),
        default=scheme,
        deprecated=["hex_md5"] if scheme == "bcrypt" else [],
        bcrypt__rounds=rounds,
    )


def get_context(scheme: str | None = None, rounds: int | None = None) -> CryptContext:
    settings = get_settings()
    return _context(
        scheme or settings.password_scheme,
        int(rounds if rounds is not None else settings.bcrypt_rounds),
    )


def hash_password(
    plain: str, *, scheme: str | None = None, rounds: int | None = None
) -> str:
    """
    Hash a password with the configured default scheme.
    """
    return get_context(scheme, rounds).hash(plain)


def verify_and_update(
    plain: str, password_hash: str, *, scheme: str | None = None
) -> tuple[bool, str | None]:
    """
    Verify a password against a stored hash of any supported scheme, plus a
    replacement hash when the stored one uses a deprecated scheme. Unknown
    or empty hashes never verify.
    """
    try:
        return get_context(scheme).verify_and_update(plain, password_hash)
    except ValueError:
        return False, None
