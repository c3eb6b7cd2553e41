from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_NAME = "Anonymous"


class UserRecord(BaseModel):
    """
    A user hash as stored under ``user:{email}``.

    Field names on the wire are camelCase to stay compatible with records
    written by the existing deployment. Hash fields come back from the store
    as strings; lax validation turns "1700000000000" and "false" back into
    numbers and booleans.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    email: str = Field(..., description="Normalized email (taken from the key)")
    name: str = DEFAULT_USER_NAME
    password_hash: str = Field("", alias="passwordHash")
    phone: str | None = None
    created_at: int = Field(0, alias="createdAt")
    last_login_at: int = Field(0, alias="lastLoginAt")
    is_blocked: bool = Field(False, alias="isBlocked")

    @field_validator("phone", mode="before")
    @classmethod
    def _null_phone(cls, value: Any) -> Any:
        # JSON-encoded null written at registration
        if value in ("null", ""):
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("created_at", "last_login_at", mode="before")
    @classmethod
    def _int_timestamp(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip() in ("", "null"):
            return 0
        return value

    def to_store(self) -> dict[str, Any]:
        """Hash fields to write; the email lives in the key, not the hash."""
        return self.model_dump(by_alias=True, exclude={"email"})
