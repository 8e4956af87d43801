"""Business and product context for outgoing WhatsApp messages."""

from __future__ import annotations

from typing import Any

from .base import Record
from .fields import pick, section


class MessageContext(Record):
    business_type: str | None = None
    detected_focus: str | None = None
    transcript: str | None = None
    product_name: str | None = None
    price: str | None = None
    description: str | None = None


def _optional_text(value: Any) -> str | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value
    return None


def message_context(body: Any) -> MessageContext:
    """Read context from flat keys or nested businessData/productData."""
    business = section(body, "businessData", "business_data")
    product = section(body, "productData", "product_data")

    def field(flat: tuple[str, ...], nested: Any, keys: tuple[str, ...]) -> Any:
        value = pick(body, *flat)
        return value if value is not None else pick(nested, *keys)

    return MessageContext(
        business_type=_optional_text(
            field(("businessType", "business_type"), business, ("businessType",))
        ),
        detected_focus=_optional_text(
            field(("detectedFocus", "detected_focus"), business, ("detectedFocus",))
        ),
        transcript=_optional_text(field(("transcript",), business, ("transcript",))),
        product_name=_optional_text(
            field(("productName", "product_name"), product, ("name",))
        ),
        price=_optional_text(field(("price",), product, ("price",))),
        description=_optional_text(field(("description",), product, ("description",))),
    )
