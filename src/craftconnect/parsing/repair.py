"""One-shot heuristic repair for malformed model JSON.

Strategy:
  1. Strict parse; return on success.
  2. Quote bare object keys.
  3. Turn single-quoted values after a colon into JSON strings.
  4. Drop trailing commas before ``}`` or ``]``.
  5. Append missing closing braces.
  6. Strict parse again, exactly once.

Every transform only touches text outside string literals, so a colon,
comma or brace inside a quoted value is never rewritten or counted.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable

from ..exceptions import RepairFailed

logger = logging.getLogger("craftconnect")

# Double- or single-quoted literal, honoring backslash escapes.
_STRING_RE = re.compile(r"(\"(?:\\.|[^\"\\])*\"|'(?:\\.|[^'\\])*')")
_BARE_KEY_RE = re.compile(r"([A-Za-z_$][\w$]*)(\s*):")
_VALUE_COLON_RE = re.compile(r":\s*$")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


def _tokens(text: str) -> list[str]:
    """Split text into alternating [code, literal, code, literal, ..., code]."""
    return _STRING_RE.split(text)


def _map_code(text: str, transform: Callable[[str], str]) -> str:
    """Apply ``transform`` to the code segments only."""
    parts = _tokens(text)
    for i in range(0, len(parts), 2):
        parts[i] = transform(parts[i])
    return "".join(parts)


def quote_bare_keys(text: str) -> str:
    return _map_code(text, lambda code: _BARE_KEY_RE.sub(r'"\1"\2:', code))


def _single_to_double(literal: str) -> str:
    body = literal[1:-1].replace("\\'", "'")
    return json.dumps(body, ensure_ascii=False)


def convert_single_quoted_values(text: str) -> str:
    parts = _tokens(text)
    for i in range(1, len(parts), 2):
        literal = parts[i]
        if literal.startswith("'") and _VALUE_COLON_RE.search(parts[i - 1]):
            parts[i] = _single_to_double(literal)
    return "".join(parts)


def remove_trailing_commas(text: str) -> str:
    return _map_code(text, lambda code: _TRAILING_COMMA_RE.sub(r"\1", code))


def balance_braces(text: str) -> str:
    parts = _tokens(text)
    code = "".join(parts[0::2])
    missing = code.count("{") - code.count("}")
    if missing > 0:
        return text + "}" * missing
    return text


# Order matters: later steps assume keys are quoted and values normalized.
REPAIR_STEPS: tuple[Callable[[str], str], ...] = (
    quote_bare_keys,
    convert_single_quoted_values,
    remove_trailing_commas,
    balance_braces,
)


def apply_repairs(span: str) -> str:
    """Run every repair step once, in order."""
    for step in REPAIR_STEPS:
        span = step(span)
    return span


def parse_object(text: str) -> dict[str, Any]:
    """Strict parse that only accepts a JSON object.

    Oversized number literals and excessive nesting are reported as
    ``JSONDecodeError`` like any other malformed input.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        raise
    except (ValueError, RecursionError) as e:
        message = f"Unparseable JSON: {type(e).__name__}"
        raise json.JSONDecodeError(message, text, 0) from e
    if not isinstance(parsed, dict):
        raise json.JSONDecodeError("Top-level JSON value is not an object", text, 0)
    return parsed


def repair_json(span: str) -> dict[str, Any]:
    """Parse a candidate span, repairing it once if strict parsing fails.

    Raises RepairFailed (with the decode error as ``cause``) when the
    repaired text still does not parse.
    """
    try:
        return parse_object(span)
    except json.JSONDecodeError:
        logger.debug("Strict JSON parse failed, attempting repair")

    repaired = apply_repairs(span)
    try:
        return parse_object(repaired)
    except json.JSONDecodeError as e:
        logger.warning("JSON repair failed: %s", e)
        raise RepairFailed(f"JSON repair failed: {e}", cause=e) from e
