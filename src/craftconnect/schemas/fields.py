"""Total field coercers shared by every result schema.

Each helper takes an arbitrary value and returns something of the expected
type: the value itself when valid, a narrowly coerced or clamped value when
allowed, otherwise the supplied default. None of them raise.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

_LEADING_INT_RE = re.compile(r"^\s*([-+]?\d+)")
# Value used for digit strings longer than int() accepts.
OVERSIZED_INT = 10**18


def pick(payload: Any, *keys: str) -> Any:
    """Return the first present key (camelCase first, then aliases)."""
    if not isinstance(payload, Mapping):
        return None
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def section(payload: Any, *keys: str) -> Mapping[str, Any]:
    """Nested object lookup that always yields a mapping."""
    value = pick(payload, *keys)
    return value if isinstance(value, Mapping) else {}


def clamp(value: int, minimum: int | None = None, maximum: int | None = None) -> int:
    if minimum is not None:
        value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value


def parse_leading_int(value: str) -> int | None:
    """Integer prefix of a string, e.g. ``"87%"`` -> 87; None when absent."""
    match = _LEADING_INT_RE.match(value)
    if not match:
        return None
    digits = match.group(1)
    try:
        return int(digits)
    except ValueError:
        return -OVERSIZED_INT if digits.startswith("-") else OVERSIZED_INT


def as_int(
    value: Any,
    default: int,
    *,
    minimum: int | None = None,
    maximum: int | None = None,
    allow_strings: bool = True,
) -> int:
    """Bounded integer field.

    Numbers are clamped rather than replaced. Floats round to the nearest
    integer. Numeric strings are accepted when ``allow_strings`` is set.
    Booleans are never numbers.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return clamp(value, minimum, maximum)
    if isinstance(value, float):
        if math.isnan(value):
            return default
        if math.isinf(value):
            bound = maximum if value > 0 else minimum
            return default if bound is None else bound
        return clamp(round(value), minimum, maximum)
    if allow_strings and isinstance(value, str):
        parsed = parse_leading_int(value)
        if parsed is not None:
            return clamp(parsed, minimum, maximum)
    return default


def as_text(value: Any, default: str) -> str:
    """Non-empty string field; whitespace-only counts as empty."""
    if isinstance(value, str) and value.strip():
        return value
    return default


def as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes"):
            return True
        if lowered in ("false", "no"):
            return False
    return default


def as_choice(value: Any, allowed: Iterable[str], default: str) -> str:
    """Enumerated string field, matched case-insensitively after trimming."""
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in allowed:
            return candidate
    return default


def as_text_list(
    value: Any, default: list[str], empty_default: list[str] | None = None
) -> list[str]:
    """List of non-empty strings.

    ``default`` replaces a missing or non-list value; ``empty_default``
    (falling back to ``default``) replaces a list with no usable entries.
    """
    if not isinstance(value, (list, tuple)):
        return list(default)
    kept = [item for item in value if isinstance(item, str) and item.strip()]
    if not kept:
        return list(empty_default if empty_default is not None else default)
    return kept
