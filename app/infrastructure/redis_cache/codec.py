from __future__ import annotations

import json
from typing import Any, Mapping


def encode_field(value: Any) -> str:
    """Strings verbatim, everything else as JSON (None -> "null", False -> "false")."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def encode_mapping(mapping: Mapping[str, Any]) -> dict[str, str]:
    return {field: encode_field(value) for field, value in mapping.items()}
