"""Price quotation record and the template pricing used as its fallback."""

from __future__ import annotations

from typing import Any

from .base import Record, ResultRecord, ResultSchema
from .fields import as_int, as_text, clamp, pick, section

MIN_PRICE = 50
MAX_PRICE = 50_000
MAX_BULK_DISCOUNT = 50

# Indian handcraft market, whole rupees.
BASE_PRICES = {
    "pottery": 500,
    "textile": 800,
    "jewelry": 1200,
    "woodwork": 600,
    "metalwork": 900,
    "craft": 650,
}
COMPLEXITY_MULTIPLIERS = {
    "simple": 0.8,
    "moderate": 1.0,
    "complex": 1.4,
    "intricate": 1.8,
}
REGIONAL_MULTIPLIERS = {
    "urban": 1.2,
    "metro": 1.3,
    "rural": 0.9,
    "tier1": 1.2,
    "tier2": 1.0,
    "tier3": 0.9,
}


class QuotationRequest(Record):
    """Caller-supplied product details; only the product name is required."""

    product_name: str
    product_type: str | None = None
    business_type: str | None = None
    detected_focus: str | None = None
    materials: str | None = None
    time_to_make: str | None = None
    complexity: str | None = None
    region: str | None = None
    customization: str | None = None
    description: str | None = None


class PriceRange(Record):
    min: int
    max: int


class CostBreakdown(Record):
    materials: int = 0
    labor: int = 0
    artisan_skill: int = 0
    profit: int = 0


class CustomizationPricing(Record):
    color_variation: int = 50
    size_increase: int = 100
    personal_engraving: int = 150
    rush_delivery: int = 200


class MarketComparison(Record):
    local_market: str = "competitive pricing"
    online_market: str = "fair for handmade quality"
    premium_justification: str = "authentic craftsmanship"


class BulkDiscounts(Record):
    quantity5: int = 10
    quantity10: int = 15
    quantity25: int = 25


class Quotation(ResultRecord):
    base_price: int
    price_range: PriceRange
    breakdown: CostBreakdown
    customization_pricing: CustomizationPricing
    market_comparison: MarketComparison
    bulk_discounts: BulkDiscounts
    confidence: int
    notes: str


def _price(value: Any, default: int) -> int:
    return as_int(value, default, minimum=MIN_PRICE, maximum=MAX_PRICE)


def _non_negative(value: Any, default: int) -> int:
    return as_int(value, default, minimum=0)


def _price_range(raw: Any) -> PriceRange:
    low = _price(pick(raw, "min"), 400)
    high = _price(pick(raw, "max"), 1500)
    if low >= high:
        high = min(round(low * 1.5), MAX_PRICE)
    if low >= high:
        low = round(high / 1.5)
    return PriceRange(min=low, max=high)


def normalize_quotation(payload: Any) -> Quotation:
    """Coerce a parsed payload into a Quotation with bounded prices."""
    breakdown = section(payload, "breakdown")
    custom = section(payload, "customizationPricing", "customization_pricing")
    market = section(payload, "marketComparison", "market_comparison")
    bulk = section(payload, "bulkDiscounts", "bulk_discounts")
    c = CustomizationPricing()
    m = MarketComparison()
    b = BulkDiscounts()

    def discount(key: str, default: int) -> int:
        return as_int(pick(bulk, key), default, minimum=0, maximum=MAX_BULK_DISCOUNT)

    return Quotation(
        base_price=_price(pick(payload, "basePrice", "base_price"), 500),
        price_range=_price_range(section(payload, "priceRange", "price_range")),
        breakdown=CostBreakdown(
            materials=_non_negative(pick(breakdown, "materials"), 0),
            labor=_non_negative(pick(breakdown, "labor"), 0),
            artisan_skill=_non_negative(
                pick(breakdown, "artisanSkill", "artisan_skill"), 0
            ),
            profit=_non_negative(pick(breakdown, "profit"), 0),
        ),
        customization_pricing=CustomizationPricing(
            color_variation=_non_negative(
                pick(custom, "colorVariation", "color_variation"), c.color_variation
            ),
            size_increase=_non_negative(
                pick(custom, "sizeIncrease", "size_increase"), c.size_increase
            ),
            personal_engraving=_non_negative(
                pick(custom, "personalEngraving", "personal_engraving"),
                c.personal_engraving,
            ),
            rush_delivery=_non_negative(
                pick(custom, "rushDelivery", "rush_delivery"), c.rush_delivery
            ),
        ),
        market_comparison=MarketComparison(
            local_market=as_text(
                pick(market, "localMarket", "local_market"), m.local_market
            ),
            online_market=as_text(
                pick(market, "onlineMarket", "online_market"), m.online_market
            ),
            premium_justification=as_text(
                pick(market, "premiumJustification", "premium_justification"),
                m.premium_justification,
            ),
        ),
        bulk_discounts=BulkDiscounts(
            quantity5=discount("quantity5", b.quantity5),
            quantity10=discount("quantity10", b.quantity10),
            quantity25=discount("quantity25", b.quantity25),
        ),
        confidence=as_int(pick(payload, "confidence"), 80, minimum=50, maximum=100),
        notes=as_text(pick(payload, "notes"), "AI-generated pricing analysis"),
    )


def template_base_price(request: QuotationRequest | None) -> int:
    """Base price from the product type, complexity and region tables."""
    if request is None:
        return BASE_PRICES["craft"]
    base = BASE_PRICES.get((request.product_type or "").lower(), BASE_PRICES["craft"])
    complexity = COMPLEXITY_MULTIPLIERS.get((request.complexity or "").lower(), 1.0)
    regional = REGIONAL_MULTIPLIERS.get((request.region or "").lower(), 1.0)
    return clamp(round(base * complexity * regional), MIN_PRICE, MAX_PRICE)


def fallback_quotation(
    reason: str, request: QuotationRequest | None = None
) -> Quotation:
    """Template quotation; ``reason`` is recorded verbatim in ``notes``."""
    price = template_base_price(request)
    return Quotation(
        base_price=price,
        price_range=PriceRange(min=round(price * 0.8), max=round(price * 1.5)),
        breakdown=CostBreakdown(
            materials=round(price * 0.35),
            labor=round(price * 0.45),
            artisan_skill=round(price * 0.15),
            profit=round(price * 0.15),
        ),
        customization_pricing=CustomizationPricing(
            color_variation=round(price * 0.1),
            size_increase=round(price * 0.15),
            personal_engraving=round(price * 0.2),
            rush_delivery=round(price * 0.25),
        ),
        market_comparison=MarketComparison(
            local_market="10-15% competitive with local artisans",
            online_market="fair pricing for handmade quality",
            premium_justification="authentic craftsmanship + quality materials",
        ),
        bulk_discounts=BulkDiscounts(quantity5=8, quantity10=15, quantity25=22),
        confidence=82,
        notes=f"{reason}. Template-based pricing with Indian market considerations",
        fallback=True,
    )


QUOTATION = ResultSchema(
    name="quotation",
    normalize=normalize_quotation,
    fallback=fallback_quotation,
)
