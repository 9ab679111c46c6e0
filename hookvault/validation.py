"""Flat-payload validation for inbound webhooks."""
from typing import Any

import orjson

from .errors import InvalidJson, NestedValue, NotObject

SCALAR_TYPES = (str, int, float, bool, type(None))


def parse_payload(raw: bytes) -> Any:
    """
    Decode a request body with orjson.

    Integers wider than 64 bits come back as floats and numbers that
    overflow a double are rejected as InvalidJson.
    """
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise InvalidJson(f"Request body is not valid JSON: {e}") from e


def validate_payload(value: Any) -> dict[str, Any]:
    """
    Accept a JSON object whose values are all scalars.

    Raises:
        NotObject: top-level value is an array, null or a scalar
        NestedValue: some property holds an object or array
    """
    if not isinstance(value, dict):
        raise NotObject("Body must be a flat JSON object of key-value pairs")
    for field, item in value.items():
        if not isinstance(item, SCALAR_TYPES):
            raise NestedValue(
                "Body must be flat (no nested objects/arrays); only key-value pairs",
                field=field,
            )
    return value
