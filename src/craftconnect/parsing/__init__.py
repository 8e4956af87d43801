"""Model-output parsing: span extraction and one-shot JSON repair."""

from .extract import extract_json_span, strip_code_fence
from .repair import apply_repairs, parse_object, repair_json

__all__ = [
    "apply_repairs",
    "extract_json_span",
    "parse_object",
    "repair_json",
    "strip_code_fence",
]
