"""Candidate JSON extraction from generative-model text.

Models wrap their JSON in markdown fences and chatty prose. The extractor
only finds the span; parsing and repair live in ``repair.py``.
"""

from __future__ import annotations

import re

from ..exceptions import NoJsonFound

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def strip_code_fence(text: str) -> str:
    """Return the body of the first ```json fence, or the text unchanged."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1)
    return text


def extract_json_span(raw: str) -> str:
    """Extract the first-``{``-to-last-``}`` span from model text.

    Raises NoJsonFound when either brace is missing or they are out of order.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise NoJsonFound("Empty or non-string model response")

    text = strip_code_fence(raw)
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or start >= end:
        raise NoJsonFound("No JSON object found in model response")
    return text[start : end + 1]
