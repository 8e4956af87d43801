"""Business analysis record: what the artisan makes and what to do first."""

from __future__ import annotations

from typing import Any

from .base import Record, ResultRecord, ResultSchema
from .fields import as_choice, as_int, as_text, as_text_list, pick, section

SOLUTION_IDS = ("website", "whatsapp", "instagram")

DEFAULT_BUSINESS_TYPE = "Craft Business"
DEFAULT_FOCUS = "Handmade Products"
DEFAULT_PROBLEMS = ["Unable to determine specific challenges"]
EMPTY_PROBLEMS = ["No specific challenges identified"]
DEFAULT_PRIMARY_ID = "website"
DEFAULT_PRIMARY_REASON = "A basic online presence is essential"
DEFAULT_SECONDARY_ID = "whatsapp"
DEFAULT_SECONDARY_REASON = "Direct customer communication"
DEFAULT_CONFIDENCE = 85
FALLBACK_CONFIDENCE = 75


class Solution(Record):
    id: str
    reason: str


class RecommendedSolutions(Record):
    primary: Solution
    secondary: Solution


class BusinessAnalysis(ResultRecord):
    business_type: str
    detected_focus: str
    top_problems: tuple[str, ...]
    recommended_solutions: RecommendedSolutions
    confidence: int


def _solution(raw: Any, default_id: str, default_reason: str) -> Solution:
    return Solution(
        id=as_choice(pick(raw, "id"), SOLUTION_IDS, default_id),
        reason=as_text(pick(raw, "reason"), default_reason),
    )


def normalize_business_analysis(payload: Any) -> BusinessAnalysis:
    """Coerce any parsed payload (or None) into a valid BusinessAnalysis."""
    solutions = section(payload, "recommendedSolutions", "recommended_solutions")
    return BusinessAnalysis(
        business_type=as_text(
            pick(payload, "businessType", "business_type"), DEFAULT_BUSINESS_TYPE
        ),
        detected_focus=as_text(
            pick(payload, "detectedFocus", "detected_focus"), DEFAULT_FOCUS
        ),
        top_problems=as_text_list(
            pick(payload, "topProblems", "top_problems"),
            DEFAULT_PROBLEMS,
            EMPTY_PROBLEMS,
        ),
        recommended_solutions=RecommendedSolutions(
            primary=_solution(
                pick(solutions, "primary"), DEFAULT_PRIMARY_ID, DEFAULT_PRIMARY_REASON
            ),
            secondary=_solution(
                pick(solutions, "secondary"),
                DEFAULT_SECONDARY_ID,
                DEFAULT_SECONDARY_REASON,
            ),
        ),
        confidence=as_int(
            pick(payload, "confidence"), DEFAULT_CONFIDENCE, minimum=0, maximum=100
        ),
    )


def fallback_business_analysis(reason: str) -> BusinessAnalysis:
    """Canned analysis with ``reason`` as the first listed problem."""
    return BusinessAnalysis(
        business_type=DEFAULT_BUSINESS_TYPE,
        detected_focus=DEFAULT_FOCUS,
        top_problems=(reason, "Limited online presence", "Need better customer reach"),
        recommended_solutions=RecommendedSolutions(
            primary=Solution(
                id="website",
                reason="A professional website builds credibility and showcases your products",
            ),
            secondary=Solution(
                id="whatsapp",
                reason="WhatsApp Business enables direct customer communication and orders",
            ),
        ),
        confidence=FALLBACK_CONFIDENCE,
        fallback=True,
    )


BUSINESS_ANALYSIS = ResultSchema(
    name="business_analysis",
    normalize=normalize_business_analysis,
    fallback=fallback_business_analysis,
)
