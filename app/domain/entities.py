from dataclasses import dataclass
from enum import Enum


def normalize_email(email: str) -> str:
    """Canonical identity key: trimmed and lowercased."""
    normalized = email.strip().lower()
    if not normalized:
        raise ValueError("email cannot be empty")
    return normalized


class CodeType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"


class IssueStatus(str, Enum):
    SUCCESS = "Success"
    TOO_FAST = "TooFast"
    UNKNOWN_ERROR = "UnknownError"


@dataclass(frozen=True)
class IssueResult:
    status: IssueStatus
    code: int | None = None
    ttl: int | None = None


CODE_TTL_SECONDS = 300
CODE_MIN_INTERVAL_SECONDS = 60


@dataclass(frozen=True)
class CodePolicy:
    ttl_seconds: int = CODE_TTL_SECONDS
    min_interval_seconds: int = CODE_MIN_INTERVAL_SECONDS

    def __post_init__(self):
        if self.ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if not 0 <= self.min_interval_seconds < self.ttl_seconds:
            raise ValueError("min_interval_seconds must be within [0, ttl_seconds)")

    @property
    def reissue_threshold(self) -> int:
        """A live code with at least this much TTL left is too young to replace."""
        return self.ttl_seconds - self.min_interval_seconds
