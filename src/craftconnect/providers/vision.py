"""Google Cloud Vision image labeler."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import UpstreamUnavailable
from ..schemas.vision import (
    DominantColor,
    Label,
    SafeSearch,
    VisionSummary,
    image_quality_score,
)
from .base import ImageLabeler
from .google import load_credentials

logger = logging.getLogger("craftconnect")

MAX_LABELS = 8
MAX_COLORS = 5
MAX_OBJECTS = 5


def _likelihood(value: Any) -> str:
    return getattr(value, "name", None) or str(value or "UNKNOWN")


def summarize_annotations(response: Any) -> VisionSummary:
    """Convert an AnnotateImageResponse into a VisionSummary."""
    labels = list(response.label_annotations or [])
    objects = list(response.localized_object_annotations or [])
    properties = response.image_properties_annotation
    colors = list(properties.dominant_colors.colors) if properties else []
    safe = response.safe_search_annotation

    return VisionSummary(
        labels=tuple(
            Label(description=label.description, confidence=round(label.score * 100))
            for label in labels[:MAX_LABELS]
        ),
        colors=tuple(
            DominantColor(
                rgb="rgb({}, {}, {})".format(
                    round(c.color.red or 0),
                    round(c.color.green or 0),
                    round(c.color.blue or 0),
                ),
                score=round(c.score * 100),
            )
            for c in colors[:MAX_COLORS]
        ),
        objects=tuple(
            Label(description=obj.name, confidence=round(obj.score * 100))
            for obj in objects[:MAX_OBJECTS]
        ),
        safe_search=SafeSearch(
            adult=_likelihood(getattr(safe, "adult", None)),
            violence=_likelihood(getattr(safe, "violence", None)),
            racy=_likelihood(getattr(safe, "racy", None)),
        ),
        quality=image_quality_score([label.score for label in labels], len(objects)),
    )


class GoogleVisionLabeler(ImageLabeler):
    def __init__(self, credentials_file: str = ""):
        try:
            from google.cloud import vision  # noqa: F401
        except ImportError:
            raise ImportError(
                "Google Cloud Vision SDK not installed. "
                "Run: pip install google-cloud-vision"
            )
        self._credentials_file = credentials_file
        self._client = None

    def _get_client(self):
        if self._client is None:
            from google.cloud import vision

            self._client = vision.ImageAnnotatorAsyncClient(
                credentials=load_credentials(self._credentials_file)
            )
        return self._client

    async def analyze_image(self, image: bytes) -> VisionSummary:
        from google.cloud import vision

        feature = vision.Feature.Type
        request = vision.AnnotateImageRequest(
            image=vision.Image(content=image),
            features=[
                vision.Feature(type_=feature.LABEL_DETECTION, max_results=10),
                vision.Feature(type_=feature.IMAGE_PROPERTIES),
                vision.Feature(type_=feature.SAFE_SEARCH_DETECTION),
                vision.Feature(type_=feature.OBJECT_LOCALIZATION, max_results=10),
            ],
        )
        batch = await self._get_client().batch_annotate_images(requests=[request])
        response = batch.responses[0]
        if response.error and response.error.message:
            raise UpstreamUnavailable(f"Vision API error: {response.error.message}")
        return summarize_annotations(response)
