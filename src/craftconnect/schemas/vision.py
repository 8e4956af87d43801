"""Vision labeling summary that feeds the enhancement prompt."""

from __future__ import annotations

from collections.abc import Sequence

from .base import Record

DEFAULT_QUALITY = 75

# First match wins; order mirrors how specific the vocabulary is.
PRODUCT_KEYWORDS: tuple[tuple[str, frozenset[str]], ...] = (
    ("pottery", frozenset({"pottery", "ceramic", "clay", "bowl", "vase", "pot"})),
    ("textile", frozenset({"textile", "fabric", "cloth", "saree", "silk", "cotton"})),
    ("jewelry", frozenset({"jewelry", "necklace", "bracelet", "earring", "ring"})),
    ("woodwork", frozenset({"wood", "wooden", "furniture", "carving"})),
    ("metalwork", frozenset({"metal", "brass", "copper", "silver", "bronze"})),
)


class Label(Record):
    description: str
    confidence: int


class DominantColor(Record):
    rgb: str
    score: int


class SafeSearch(Record):
    adult: str = "UNKNOWN"
    violence: str = "UNKNOWN"
    racy: str = "UNKNOWN"


class VisionSummary(Record):
    labels: tuple[Label, ...] = ()
    colors: tuple[DominantColor, ...] = ()
    objects: tuple[Label, ...] = ()
    safe_search: SafeSearch = SafeSearch()
    quality: int = DEFAULT_QUALITY
    fallback: bool = False


def image_quality_score(label_scores: Sequence[float], object_count: int) -> int:
    """Heuristic photo quality from annotation confidence (0-100).

    Base 70, +10 when objects were localized, +3 per label scoring above
    0.8 (capped at +15), and -20 when the mean label score is below 0.5,
    which usually means a blurry shot.
    """
    score = 70
    if object_count > 0:
        score += 10
    confident = sum(1 for s in label_scores if s > 0.8)
    score += min(confident * 3, 15)
    mean = sum(label_scores) / (len(label_scores) or 1)
    if mean < 0.5:
        score -= 20
    return max(0, min(100, score))


def detect_product_type(labels: Sequence[Label]) -> str:
    texts = {label.description.lower() for label in labels}
    for product_type, keywords in PRODUCT_KEYWORDS:
        if texts & keywords:
            return product_type
    return "craft"


def fallback_vision_summary() -> VisionSummary:
    """Neutral summary used when the vision service is unavailable."""
    return VisionSummary(
        labels=(Label(description="product", confidence=80),),
        colors=(DominantColor(rgb="rgb(139, 69, 19)", score=60),),
        quality=70,
        fallback=True,
    )
