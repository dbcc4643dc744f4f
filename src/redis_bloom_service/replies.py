"""Helpers turning raw Redis replies into typed values.

Depending on ``decode_responses`` and the protocol version, the same reply can
arrive as ``int``, ``str``, ``bytes`` or ``bool``. Everything is coerced to
text before it is compared with a literal.
"""

from __future__ import annotations

from typing import Any

from .exceptions import classify_error
from .types import INFO_LABELS


def as_text(reply: Any) -> str:
    if isinstance(reply, (bytes, bytearray, memoryview)):
        return bytes(reply).decode("utf-8", errors="replace")
    if isinstance(reply, bool):
        return "1" if reply else "0"
    return str(reply)


def as_flag(reply: Any) -> bool:
    """True exactly when the reply is the literal ``1``."""
    return as_text(reply) == "1"


def as_ok(reply: Any) -> bool:
    """True exactly when the reply is the simple string ``OK``."""
    return reply is True or as_text(reply) == "OK"


def as_int(reply: Any) -> int:
    if reply is None:
        return 0
    if isinstance(reply, (list, tuple)):
        # Single-attribute BF.INFO answers with a one-element array
        return as_int(reply[0]) if reply else 0
    return int(as_text(reply))


def as_int_list(reply: Any, key: str | None = None) -> list[int]:
    """Convert a per-item array reply, raising on embedded error entries."""
    results: list[int] = []
    for entry in reply or []:
        if isinstance(entry, BaseException):
            raise classify_error(entry, key) from entry
        results.append(as_int(entry))
    return results


def _normalize_value(value: Any) -> Any:
    if value is None:
        return 0
    try:
        return as_int(value)
    except ValueError:
        return as_text(value)


def parse_info(reply: Any) -> dict[str, Any]:
    """Read a ``BF.INFO`` reply into a mapping keyed by normalized field names.

    Flat ``[label, value, label, value, ...]`` lists and RESP3 maps are both
    accepted. Unknown labels are kept as-is; missing values become 0.
    """
    if isinstance(reply, dict):
        pairs = list(reply.items())
    else:
        flat = list(reply or [])
        pairs = [
            (flat[i], flat[i + 1] if i + 1 < len(flat) else None) for i in range(0, len(flat), 2)
        ]

    info: dict[str, Any] = {}
    for raw_label, value in pairs:
        label = as_text(raw_label)
        field = INFO_LABELS.get(label.strip().lower())
        info[field.value if field is not None else label] = _normalize_value(value)
    return info
