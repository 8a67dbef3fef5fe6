"""
Value codec between document data and the JSON column.

JSON has no timestamp type, so datetimes are written as ``{"$date": iso}``
and turned back into aware datetimes on read.
"""
from datetime import datetime, timezone
from typing import Any

DATE_TAG = "$date"


def encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return {DATE_TAG: value.isoformat()}
    if isinstance(value, dict):
        return {key: encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value


def decode_value(value: Any) -> Any:
    if isinstance(value, dict):
        if len(value) == 1 and DATE_TAG in value:
            return datetime.fromisoformat(value[DATE_TAG])
        return {key: decode_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_value(item) for item in value]
    return value
