"""WhatsApp Business messaging: compose, preview and deliver.

Delivery modes:
    demo        no Cloud API credentials; returns a wa.me link to send manually
    production  sent through the Cloud API
    fallback    every Cloud API attempt failed; returns a wa.me link instead
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from ..exceptions import InvalidRequest, MessageDeliveryFailed
from ..friendly_errors import friendly_delivery_error
from ..pipeline import describe_error
from ..prompts import whatsapp_message_prompt
from ..providers.factory import Services
from ..providers.whatsapp import mask_phone
from ..schemas.messaging import MessageContext

logger = logging.getLogger("craftconnect")

MAX_BULK_RECIPIENTS = 50
MIN_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 15
MESSAGE_TEMPERATURE = 0.7
MESSAGE_MAX_TOKENS = 512


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def template_message(ctx: MessageContext) -> str:
    """Contextual message used when the language model is unavailable."""
    product = ""
    if ctx.product_name and ctx.price:
        product = f"\n\n🎯 Featured Product: {ctx.product_name}\n💰 Price: ₹{ctx.price}"
        if ctx.description:
            product += f"\n✨ {ctx.description[:80]}..."

    return f"""🙏 Namaste! Welcome to our {ctx.business_type or "craft business"}!

🎨 We specialize in {ctx.detected_focus or "authentic handmade products"} created with traditional techniques and modern quality.

✨ Why choose us:
• Genuine handmade quality
• Traditional craftsmanship
• Custom orders available
• Fast & reliable delivery{product}

📞 Reply to this message with your requirements and we'll send you:
• Product photos & details
• Pricing information
• Delivery timeline
• Custom options available

🛒 Ready to order or have questions? Just reply - we're here to help!

🙏 Thank you for supporting local artisans!"""


async def compose_message(services: Services, ctx: MessageContext) -> tuple[str, bool]:
    """Return (message, generated_by_ai). Never raises."""
    if services.generator.configured:
        try:
            text = await services.generator.generate(
                whatsapp_message_prompt(ctx),
                temperature=MESSAGE_TEMPERATURE,
                max_output_tokens=MESSAGE_MAX_TOKENS,
            )
        except Exception as e:
            logger.warning("AI message generation failed, using template: %s", e)
        else:
            if text.strip():
                return text.strip(), True
    return template_message(ctx), False


async def generate_message(services: Services, ctx: MessageContext) -> dict[str, Any]:
    """Message text for the analysis screen; needs the business transcript."""
    if not ctx.transcript:
        raise InvalidRequest(
            "Business transcript is required to generate WhatsApp message"
        )
    message, ai = await compose_message(services, ctx)
    return {
        "success": True,
        "partial": not ai,
        "message": message,
        "businessType": ctx.business_type or "Craft Business",
        "generatedAt": _now(),
    }


def clean_phone(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


def validate_phone(phone: Any) -> str:
    """Digits-only phone number.

    Raises:
        InvalidRequest: Missing, or not 10-15 digits after cleaning.
    """
    if not isinstance(phone, (str, int)) or isinstance(phone, bool):
        raise InvalidRequest("Phone number required")
    cleaned = clean_phone(str(phone))
    if not MIN_PHONE_DIGITS <= len(cleaned) <= MAX_PHONE_DIGITS:
        raise InvalidRequest(
            f"Phone number must be {MIN_PHONE_DIGITS}-{MAX_PHONE_DIGITS} digits"
        )
    return cleaned


def wa_link(message: str, phone: str = "") -> str:
    """Click-to-chat link that pre-fills ``message``."""
    return f"https://wa.me/{phone}?text={quote(message, safe='')}"


async def preview(services: Services, ctx: MessageContext) -> dict[str, Any]:
    message, ai = await compose_message(services, ctx)
    return {
        "success": True,
        "mode": "preview",
        "message": message,
        "aiGenerated": ai,
        "waLink": wa_link(message),
        "actions": {
            "copy": True,
            "openWhatsApp": True,
            "businessSend": services.messenger.configured,
        },
        "timestamp": _now(),
    }


async def _deliver(services: Services, phone: str, message: str) -> dict[str, Any]:
    if not services.messenger.configured:
        return {
            "success": True,
            "mode": "demo",
            "message": message,
            "waLink": wa_link(message, phone),
            "phoneNumber": phone,
            "instructions": "Click the WhatsApp link to send this message manually",
        }
    try:
        message_id = await services.messenger.send_text(phone, message)
    except MessageDeliveryFailed as e:
        return {
            "success": False,
            "mode": "fallback",
            "error": "WhatsApp Business API failed",
            "apiError": describe_error(e),
            "help": friendly_delivery_error(e).to_dict(),
            "message": message,
            "waLink": wa_link(message, phone),
            "phoneNumber": phone,
            "fallbackInstructions": "Please use the WhatsApp link to send manually",
        }
    return {
        "success": True,
        "mode": "production",
        "messageId": message_id,
        "message": message,
        "phoneNumber": phone,
        "status": "sent",
        "sentAt": _now(),
    }


async def send(services: Services, phone: Any, ctx: MessageContext) -> dict[str, Any]:
    """Compose and deliver one message, degrading to a manual wa.me link."""
    cleaned = validate_phone(phone)
    message, _ = await compose_message(services, ctx)
    logger.info("Sending WhatsApp message to %s", mask_phone(cleaned))
    result = await _deliver(services, cleaned, message)
    if not services.messenger.configured:
        result["note"] = (
            "To enable automatic sending, configure "
            "FACEBOOK_ACCESS_TOKEN and WHATSAPP_PHONE_ID"
        )
    return result


async def bulk_send(
    services: Services, recipients: Any, ctx: MessageContext
) -> dict[str, Any]:
    """Send one composed message to up to 50 recipients, one at a time."""
    if not isinstance(recipients, list) or not recipients:
        raise InvalidRequest("Recipients array required")
    if len(recipients) > MAX_BULK_RECIPIENTS:
        raise InvalidRequest(f"Maximum {MAX_BULK_RECIPIENTS} recipients per batch")

    message, _ = await compose_message(services, ctx)
    results = []
    for recipient in recipients:
        phone = recipient.get("phone") if isinstance(recipient, dict) else recipient
        try:
            cleaned = validate_phone(phone)
        except InvalidRequest as e:
            results.append({"phone": phone, "success": False, "error": str(e)})
            continue
        outcome = await _deliver(services, cleaned, message)
        outcome["phone"] = f"+{cleaned}"
        results.append(outcome)

    successful = sum(1 for r in results if r["success"])
    return {
        "success": True,
        "mode": "production" if services.messenger.configured else "demo",
        "totalRecipients": len(recipients),
        "results": results,
        "summary": {"successful": successful, "failed": len(results) - successful},
    }


def status(services: Services, api_url: str = "") -> dict[str, Any]:
    configured = services.messenger.configured
    return {
        "available": True,
        "mode": "production" if configured else "demo",
        "features": {
            "preview": True,
            "copyMessage": True,
            "waLink": True,
            "businessApiSend": configured,
            "aiMessages": services.generator.configured,
        },
        "apiUrl": api_url,
        "timestamp": _now(),
    }
