"""Row value normalization and the tagged value model.

Drivers hand back whatever Python types they like: ``datetime`` objects,
``Decimal``, ``bytes``/``memoryview`` for blobs and, for some MySQL drivers,
``bytes`` for plain text columns. ``normalize()`` folds all of that into the
small set of JSON-friendly scalars listed rows are made of. ``tag()`` gives
the same value as an explicit ``TypedValue``.

Byte decoding is a policy, not a contract. ``BinaryDecoding.HEURISTIC``
keeps the legacy behaviour: a non-empty value ending in ``=`` or ``/`` is
treated as base64 and decoded to text when that succeeds. Trailing bytes are
not a reliable base64 signal, so ``TEXT`` and ``RAW`` exist for callers who
know what their blobs hold.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any


class BinaryDecoding(str, Enum):
    """How byte values in listed rows are turned into output values."""

    HEURISTIC = "heuristic"
    TEXT = "text"
    RAW = "raw"


class ValueKind(str, Enum):
    """Kinds a generic record value can take."""

    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    BINARY = "binary"
    NULL = "null"


@dataclass(frozen=True)
class TypedValue:
    """A normalized value together with its kind."""

    kind: ValueKind
    value: Any

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL


def looks_like_base64(data: bytes) -> bool:
    return len(data) > 0 and data[-1:] in (b"=", b"/")


def decode_binary(data: bytes, policy: BinaryDecoding = BinaryDecoding.HEURISTIC) -> str | bytes:
    """Turn a byte value into text (or keep it) according to ``policy``."""
    if policy is BinaryDecoding.RAW:
        return data
    if policy is BinaryDecoding.HEURISTIC and looks_like_base64(data):
        try:
            return base64.b64decode(data, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            pass
    return data.decode("utf-8", errors="replace")


def format_timestamp(value: datetime) -> str:
    """RFC 3339 text; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def normalize(value: Any, policy: BinaryDecoding = BinaryDecoding.HEURISTIC) -> Any:
    """Normalize one driver value for a generic record."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return decode_binary(bytes(value), policy)
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def tag(value: Any, policy: BinaryDecoding = BinaryDecoding.HEURISTIC) -> TypedValue:
    """Normalize ``value`` and attach its ``ValueKind``."""
    if value is None:
        return TypedValue(ValueKind.NULL, None)
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return TypedValue(ValueKind.BOOLEAN, value)
    if isinstance(value, int):
        return TypedValue(ValueKind.INTEGER, value)
    if isinstance(value, float):
        return TypedValue(ValueKind.FLOAT, value)
    if isinstance(value, (datetime, date, time)):
        return TypedValue(ValueKind.TIMESTAMP, normalize(value))

    normalized = normalize(value, policy)
    if isinstance(normalized, bytes):
        return TypedValue(ValueKind.BINARY, normalized)
    if isinstance(normalized, str):
        return TypedValue(ValueKind.TEXT, normalized)
    return TypedValue(ValueKind.TEXT, str(normalized))


__all__ = [
    "BinaryDecoding",
    "TypedValue",
    "ValueKind",
    "decode_binary",
    "format_timestamp",
    "looks_like_base64",
    "normalize",
    "tag",
]
