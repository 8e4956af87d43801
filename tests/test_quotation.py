"""Tests for product quotations, market comparison and bulk pricing."""

from unittest.mock import AsyncMock

import pytest

from craftconnect.exceptions import InvalidRequest
from craftconnect.providers.factory import Services
from craftconnect.services import quotation


def _generator(text: str) -> AsyncMock:
    generator = AsyncMock()
    generator.configured = True
    generator.generate.return_value = text
    return generator


class TestQuotationRequest:
    def test_camel_and_snake_keys(self):
        request = quotation.quotation_request(
            {"productName": " Vase ", "product_type": "pottery", "region": "rural"}
        )
        assert request.product_name == "Vase"
        assert request.product_type == "pottery"
        assert request.region == "rural"

    @pytest.mark.parametrize("body", [{}, {"productName": "  "}, None, []])
    def test_name_required(self, body):
        with pytest.raises(InvalidRequest, match="Product name required"):
            quotation.quotation_request(body)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_ai_quotation(self):
        services = Services.unconfigured()
        services.generator = _generator(
            "Sure! {basePrice: 850, priceRange: {min: 700, max: 1200}, "
            "confidence: 87,}"
        )
        out = await quotation.generate(services, {"productName": "Blue vase"})
        assert out["fallback"] is False
        assert out["generatedBy"] == "vertex-ai"
        assert out["productName"] == "Blue vase"
        assert out["data"]["basePrice"] == 850
        assert out["data"]["priceRange"] == {"min": 700, "max": 1200}
        assert out["data"]["confidence"] == 87

    @pytest.mark.asyncio
    async def test_template_priced_for_request(self):
        out = await quotation.generate(
            Services.unconfigured(),
            {
                "productName": "Water pot",
                "productType": "pottery",
                "complexity": "complex",
                "region": "rural",
            },
        )
        assert out["fallback"] is True
        assert out["generatedBy"] == "template"
        assert out["data"]["basePrice"] == 630
        assert out["data"]["priceRange"] == {"min": 504, "max": 945}
        assert out["data"]["notes"].startswith("AI service unavailable")

    @pytest.mark.asyncio
    async def test_prices_are_bounded(self):
        services = Services.unconfigured()
        services.generator = _generator(
            '{"basePrice": 9999999, "priceRange": {"min": 900, "max": 100}}'
        )
        out = await quotation.generate(services, {"productName": "Gold necklace"})
        data = out["data"]
        assert data["basePrice"] == 50_000
        assert data["priceRange"]["min"] < data["priceRange"]["max"]


class TestCompareMarketPrices:
    def test_mid_range(self):
        out = quotation.compare_market_prices(
            {"productName": "Shawl", "basePrice": 1000}
        )
        comparison = out["comparison"]
        assert comparison["marketAnalysis"]["etsy"] == {
            "averagePrice": 1500,
            "priceRange": [1100, 2800],
            "competition": "high",
        }
        assert comparison["marketAnalysis"]["localMarket"]["averagePrice"] == 850
        assert comparison["recommendations"]["suggestedPrice"] == 1100
        assert comparison["recommendations"]["positioning"] == "mid-range"

    @pytest.mark.parametrize(
        "price, positioning",
        [(1500, "premium"), (501, "mid-range"), (500, "affordable")],
    )
    def test_positioning(self, price, positioning):
        out = quotation.compare_market_prices({"productName": "x", "basePrice": price})
        assert out["comparison"]["recommendations"]["positioning"] == positioning

    @pytest.mark.parametrize(
        "body",
        [{"productName": "x"}, {"basePrice": 500}, {"productName": "x", "basePrice": 0}],
    )
    def test_requires_name_and_price(self, body):
        with pytest.raises(InvalidRequest, match="base price required"):
            quotation.compare_market_prices(body)


class TestBulkQuotations:
    def test_shared_business_context(self):
        out = quotation.bulk_quotations(
            {
                "products": [
                    {"id": "p1", "name": "Vase", "type": "pottery"},
                    {"type": "textile"},
                    {"name": "Ring", "type": "jewelry"},
                ],
                "businessData": {"businessType": "Crafts", "region": "urban"},
            }
        )
        assert out["batchSize"] == 3
        first, missing, ring = out["quotations"]
        assert first["productId"] == "p1"
        assert first["quotation"]["basePrice"] == 600
        assert first["quotation"]["notes"].startswith("Bulk estimate")
        assert missing == {
            "productId": 1,
            "success": False,
            "error": "Product name required",
        }
        assert ring["quotation"]["basePrice"] == 1440
        assert out["summary"] == {
            "successful": 2,
            "failed": 1,
            "totalPortfolioValue": 2040,
            "averagePrice": 1020,
        }
        assert out["businessContext"]["businessType"] == "Crafts"

    def test_limits(self):
        with pytest.raises(InvalidRequest, match="Products array"):
            quotation.bulk_quotations({"products": []})
        with pytest.raises(InvalidRequest, match="Maximum 20"):
            quotation.bulk_quotations({"products": [{"name": "x"}] * 21})
