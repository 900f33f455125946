"""
Common helpers for JSON columns
"""
from typing import Any
import json


def decode_json_column(value: Any) -> Any:
    """
    Decode a JSON value read from the database.

    Drivers disagree on what a JSON/TEXT column comes back as:
    - asyncpg returns JSONB columns as Python dicts/lists -> returned as-is
    - TEXT/LONGTEXT columns come back as str (or bytes) -> parsed

    Raises ValueError when a string value is not valid JSON.
    """
    if value is None:
        return None

    if isinstance(value, (dict, list)):
        return value

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")

    return json.loads(value)


def encode_json_column(value: Any) -> str:
    """Serialize a value for a TEXT JSON column, keeping non-ASCII text readable"""
    return json.dumps(value, ensure_ascii=False)
