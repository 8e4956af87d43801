"""Result schemas: normalizers and fallback generators per use case."""

from .base import ResultRecord, ResultSchema
from .business import (
    BUSINESS_ANALYSIS,
    BusinessAnalysis,
    fallback_business_analysis,
    normalize_business_analysis,
)
from .enhancement import (
    ENHANCEMENT,
    EnhancementAnalysis,
    fallback_enhancement,
    normalize_enhancement,
)
from .quotation import (
    QUOTATION,
    Quotation,
    QuotationRequest,
    fallback_quotation,
    normalize_quotation,
)
from .vision import VisionSummary

SCHEMAS = {
    schema.name: schema for schema in (BUSINESS_ANALYSIS, ENHANCEMENT, QUOTATION)
}

__all__ = [
    "BUSINESS_ANALYSIS",
    "ENHANCEMENT",
    "QUOTATION",
    "SCHEMAS",
    "BusinessAnalysis",
    "EnhancementAnalysis",
    "Quotation",
    "QuotationRequest",
    "ResultRecord",
    "ResultSchema",
    "VisionSummary",
    "fallback_business_analysis",
    "fallback_enhancement",
    "fallback_quotation",
    "normalize_business_analysis",
    "normalize_enhancement",
    "normalize_quotation",
]
