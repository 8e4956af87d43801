"""Product-photo enhancement record."""

from __future__ import annotations

from typing import Any

from .base import Record, ResultRecord, ResultSchema
from .fields import as_bool, as_choice, as_int, as_text, as_text_list, pick, section
from .vision import DEFAULT_QUALITY, VisionSummary, detect_product_type

GRADES = ("poor", "fair", "good", "excellent")
BACKGROUNDS = ("cluttered", "plain", "professional")
FOCUS_LEVELS = ("blurry", "soft", "sharp", "crisp")
LIGHTING_ADJUSTMENTS = ("none", "subtle", "moderate", "significant")

DEFAULT_ACTIONS = [
    "Optimize lighting for better product visibility",
    "Ensure clean, professional background",
    "Center product in frame for maximum impact",
]
DEFAULT_ANGLES = ["front view", "detail shot", "usage context"]
DEFAULT_ADDITIONAL_PHOTOS = "Recommend 3-4 photos showing different angles and details"
MARKETPLACE_READY_SCORE = 70


class CurrentQuality(Record):
    lighting: str = "fair"
    background: str = "plain"
    composition: str = "good"
    focus: str = "sharp"


class TechnicalImprovements(Record):
    background_removal: bool = True
    lighting_adjustment: str = "moderate"
    color_correction: bool = True
    sharpening: bool = False


class MarketplaceOptimization(Record):
    suggested_angles: tuple[str, ...] = tuple(DEFAULT_ANGLES)
    additional_photos: str = DEFAULT_ADDITIONAL_PHOTOS


class EnhancementAnalysis(ResultRecord):
    product_type: str
    current_quality: CurrentQuality
    enhancement_actions: tuple[str, ...]
    technical_improvements: TechnicalImprovements
    marketplace_optimization: MarketplaceOptimization
    quality_score: int
    ready_for_marketplace: bool


def _vision_defaults(vision: VisionSummary | None) -> tuple[str, int]:
    if vision is None:
        return "craft", DEFAULT_QUALITY
    return detect_product_type(vision.labels), vision.quality


def normalize_enhancement(
    payload: Any, vision: VisionSummary | None = None
) -> EnhancementAnalysis:
    """Coerce a parsed payload into an EnhancementAnalysis.

    ``vision`` only supplies the defaults for product type and quality.
    """
    default_type, default_quality = _vision_defaults(vision)
    quality = section(payload, "currentQuality", "current_quality")
    technical = section(payload, "technicalImprovements", "technical_improvements")
    marketplace = section(
        payload, "marketplaceOptimization", "marketplace_optimization"
    )
    defaults = CurrentQuality()
    tech_defaults = TechnicalImprovements()

    score = as_int(
        pick(payload, "qualityScore", "quality_score"),
        default_quality,
        minimum=0,
        maximum=100,
    )
    return EnhancementAnalysis(
        product_type=as_text(pick(payload, "productType", "product_type"), default_type),
        current_quality=CurrentQuality(
            lighting=as_choice(pick(quality, "lighting"), GRADES, defaults.lighting),
            background=as_choice(
                pick(quality, "background"), BACKGROUNDS, defaults.background
            ),
            composition=as_choice(
                pick(quality, "composition"), GRADES, defaults.composition
            ),
            focus=as_choice(pick(quality, "focus"), FOCUS_LEVELS, defaults.focus),
        ),
        enhancement_actions=as_text_list(
            pick(payload, "enhancementActions", "enhancement_actions"), DEFAULT_ACTIONS
        ),
        technical_improvements=TechnicalImprovements(
            background_removal=as_bool(
                pick(technical, "backgroundRemoval", "background_removal"),
                tech_defaults.background_removal,
            ),
            lighting_adjustment=as_choice(
                pick(technical, "lightingAdjustment", "lighting_adjustment"),
                LIGHTING_ADJUSTMENTS,
                tech_defaults.lighting_adjustment,
            ),
            color_correction=as_bool(
                pick(technical, "colorCorrection", "color_correction"),
                tech_defaults.color_correction,
            ),
            sharpening=as_bool(pick(technical, "sharpening"), tech_defaults.sharpening),
        ),
        marketplace_optimization=MarketplaceOptimization(
            suggested_angles=as_text_list(
                pick(marketplace, "suggestedAngles", "suggested_angles"), DEFAULT_ANGLES
            ),
            additional_photos=as_text(
                pick(marketplace, "additionalPhotos", "additional_photos"),
                DEFAULT_ADDITIONAL_PHOTOS,
            ),
        ),
        quality_score=score,
        ready_for_marketplace=as_bool(
            pick(payload, "readyForMarketplace", "ready_for_marketplace"),
            score >= MARKETPLACE_READY_SCORE,
        ),
    )


def fallback_enhancement(
    reason: str, vision: VisionSummary | None = None
) -> EnhancementAnalysis:
    """Canned enhancement advice with ``reason`` as the first action."""
    product_type, quality = _vision_defaults(vision)
    return EnhancementAnalysis(
        product_type=product_type,
        current_quality=CurrentQuality(),
        enhancement_actions=(reason, *DEFAULT_ACTIONS),
        technical_improvements=TechnicalImprovements(),
        marketplace_optimization=MarketplaceOptimization(),
        quality_score=quality,
        ready_for_marketplace=quality >= MARKETPLACE_READY_SCORE,
        fallback=True,
    )


ENHANCEMENT = ResultSchema(
    name="enhancement",
    normalize=normalize_enhancement,
    fallback=fallback_enhancement,
)
