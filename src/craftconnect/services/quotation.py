"""AI price quotations for handmade products, with template pricing fallback."""

from __future__ import annotations

import dataclasses
import functools
import logging
from datetime import datetime, timezone
from typing import Any

from ..exceptions import InvalidRequest
from ..pipeline import PipelineResult, ResponsePipeline
from ..prompts import pricing_prompt
from ..providers.factory import Services
from ..schemas.fields import as_int, pick, section
from ..schemas.quotation import (
    MAX_PRICE,
    MIN_PRICE,
    QUOTATION,
    Quotation,
    QuotationRequest,
    fallback_quotation,
)

logger = logging.getLogger("craftconnect")

MAX_BULK_PRODUCTS = 20
PRICING_TEMPERATURE = 0.2
BULK_REASON = "Bulk estimate"

# (average, low, high) multipliers of the artisan's base price.
MARKETS = {
    "amazonHandmade": ((1.3, 0.9, 2.1), "moderate"),
    "etsy": ((1.5, 1.1, 2.8), "high"),
    "localMarket": ((0.85, 0.6, 1.4), "low"),
}
SUGGESTED_MARKUP = 1.1
COMPETITIVE_ADVANTAGES = [
    "Authentic traditional techniques",
    "Direct from artisan - no middlemen",
    "Customization available",
    "Supporting local crafts community",
]

_REQUEST_KEYS = {
    "product_name": ("productName", "product_name"),
    "product_type": ("productType", "product_type"),
    "business_type": ("businessType", "business_type"),
    "detected_focus": ("detectedFocus", "detected_focus"),
    "materials": ("materials",),
    "time_to_make": ("timeToMake", "time_to_make"),
    "complexity": ("complexity",),
    "region": ("region",),
    "customization": ("customization",),
    "description": ("description",),
}


def _text(value: Any) -> str | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def quotation_request(body: Any) -> QuotationRequest:
    """Build a QuotationRequest from a camelCase or snake_case body.

    Raises:
        InvalidRequest: The product name is missing.
    """
    values = {field: _text(pick(body, *keys)) for field, keys in _REQUEST_KEYS.items()}
    if not values["product_name"]:
        raise InvalidRequest("Product name required")
    return QuotationRequest(**values)


def quotation_pipeline(request: QuotationRequest) -> ResponsePipeline[Quotation]:
    """Quotation pipeline whose template fallback is priced for ``request``."""
    schema = dataclasses.replace(
        QUOTATION, fallback=functools.partial(fallback_quotation, request=request)
    )
    return ResponsePipeline(schema)


async def quote(
    services: Services, request: QuotationRequest
) -> PipelineResult[Quotation]:
    prompt = pricing_prompt(request)
    logger.info("Generating quotation for %s", request.product_name)
    return await quotation_pipeline(request).run(
        lambda: services.generator.generate(prompt, temperature=PRICING_TEMPERATURE)
    )


async def generate(services: Services, body: Any) -> dict[str, Any]:
    request = quotation_request(body)
    result = await quote(services, request)
    logger.info("Quotation base price: Rs.%d", result.data.base_price)
    out = result.to_dict()
    out.update(
        productName=request.product_name,
        generatedBy="template" if result.fallback else "vertex-ai",
        generatedAt=datetime.now(timezone.utc).isoformat(),
    )
    return out


def compare_market_prices(body: Any) -> dict[str, Any]:
    """Position a base price against typical handmade marketplaces."""
    name = _text(pick(body, "productName", "product_name"))
    price = as_int(pick(body, "basePrice", "base_price"), 0, minimum=0)
    if not name or price <= 0:
        raise InvalidRequest("Product name and base price required")

    analysis = {
        market: {
            "averagePrice": round(price * avg),
            "priceRange": [round(price * low), round(price * high)],
            "competition": competition,
        }
        for market, ((avg, low, high), competition) in MARKETS.items()
    }
    if price > 1000:
        positioning = "premium"
    elif price > 500:
        positioning = "mid-range"
    else:
        positioning = "affordable"

    return {
        "success": True,
        "comparison": {
            "productName": name,
            "basePrice": price,
            "marketAnalysis": analysis,
            "recommendations": {
                "suggestedPrice": round(price * SUGGESTED_MARKUP),
                "positioning": positioning,
                "competitiveAdvantage": list(COMPETITIVE_ADVANTAGES),
            },
            "generated": datetime.now(timezone.utc).isoformat(),
        },
    }


def bulk_quotations(body: Any) -> dict[str, Any]:
    """Template quotations for up to 20 products sharing one business context."""
    products = pick(body, "products")
    if not isinstance(products, list) or not products:
        raise InvalidRequest("Products array required")
    if len(products) > MAX_BULK_PRODUCTS:
        raise InvalidRequest(f"Maximum {MAX_BULK_PRODUCTS} products per batch")
    business = dict(section(body, "businessData", "business_data"))

    quotations = []
    for index, product in enumerate(products):
        product = product if isinstance(product, dict) else {}
        merged = {
            **business,
            "productName": pick(product, "name", "productName"),
            "productType": pick(product, "type", "productType"),
            "materials": pick(product, "materials"),
            "timeToMake": pick(product, "timeToMake"),
            "complexity": pick(product, "complexity"),
            "description": pick(product, "description"),
        }
        product_id = pick(product, "id")
        product_id = index if product_id is None else product_id
        try:
            request = quotation_request(merged)
        except InvalidRequest as e:
            quotations.append(
                {"productId": product_id, "success": False, "error": str(e)}
            )
            continue
        quotations.append(
            {
                "productId": product_id,
                "productName": request.product_name,
                "success": True,
                "quotation": fallback_quotation(BULK_REASON, request).to_wire(),
            }
        )

    priced = [q["quotation"]["basePrice"] for q in quotations if q["success"]]
    total = sum(priced)
    logger.info("Bulk quotations: %d/%d priced", len(priced), len(products))
    return {
        "success": True,
        "batchSize": len(products),
        "quotations": quotations,
        "summary": {
            "successful": len(priced),
            "failed": len(products) - len(priced),
            "totalPortfolioValue": total,
            "averagePrice": round(total / len(priced)) if priced else 0,
        },
        "businessContext": business,
    }


def status(services: Services) -> dict[str, Any]:
    ai = services.generator.configured
    return {
        "available": True,
        "aiPowered": ai,
        "services": {
            "vertexAI": {
                "available": ai,
                "model": services.generator.model_name,
                "features": ["intelligent_pricing", "market_analysis", "cost_breakdown"],
            },
            "templatePricing": {
                "available": True,
                "features": [
                    "base_calculations",
                    "regional_adjustments",
                    "bulk_discounts",
                ],
            },
        },
        "limits": {
            "maxBulkProducts": MAX_BULK_PRODUCTS,
            "priceRange": f"₹{MIN_PRICE} - ₹{MAX_PRICE:,}",
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
