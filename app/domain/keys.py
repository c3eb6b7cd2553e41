# Key layout shared with every other client of the store; do not change.
from app.domain.entities import CodeType


def user_key(normalized_email: str) -> str:
    return f"user:{normalized_email}"


def code_key(code_type: CodeType, identifier: str) -> str:
    return f"register:code:{CodeType(code_type).value}:{identifier}"
