"""Smart product enhancer: vision labels -> enhancement advice -> hosted image.

Each stage degrades on its own. A vision failure uses a neutral summary, a
model failure the canned advice, and an upload failure an inline data URI.
"""

from __future__ import annotations

import base64
import dataclasses
import functools
import logging
from datetime import datetime, timezone
from typing import Any

from ..exceptions import InvalidRequest
from ..pipeline import PipelineResult, ResponsePipeline
from ..prompts import enhancement_prompt
from ..providers.factory import Services
from ..schemas.enhancement import (
    ENHANCEMENT,
    EnhancementAnalysis,
    TechnicalImprovements,
    fallback_enhancement,
    normalize_enhancement,
)
from ..schemas.vision import VisionSummary, fallback_vision_summary

logger = logging.getLogger("craftconnect")

MAX_BATCH_IMAGES = 10
ENHANCER_TEMPERATURE = 0.2


def build_transformations(technical: TechnicalImprovements) -> list[str]:
    """Cloudinary transformation chain for the recommended improvements."""
    chain = ["f_auto", "q_auto"]
    if technical.background_removal:
        chain.append("e_background_removal")
    if technical.lighting_adjustment == "significant":
        chain.extend(["e_auto_brightness", "e_auto_contrast"])
    elif technical.lighting_adjustment == "moderate":
        chain.append("e_auto_brightness:20")
    if technical.color_correction:
        chain.append("e_auto_color")
    if technical.sharpening:
        chain.append("e_unsharp_mask:100")
    return chain


def enhancement_pipeline(vision: VisionSummary) -> ResponsePipeline[EnhancementAnalysis]:
    """Enhancement pipeline whose defaults come from this image's labels."""
    schema = dataclasses.replace(
        ENHANCEMENT,
        normalize=functools.partial(normalize_enhancement, vision=vision),
        fallback=functools.partial(fallback_enhancement, vision=vision),
    )
    return ResponsePipeline(schema)


def data_uri(image: bytes, mime_type: str = "image/jpeg") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"


async def _label(services: Services, image: bytes) -> tuple[VisionSummary, bool]:
    try:
        return await services.labeler.analyze_image(image), True
    except Exception as e:
        logger.warning("Vision analysis failed: %s", e)
        return fallback_vision_summary(), False


async def _upload(
    services: Services, image: bytes, mime_type: str, transformations: list[str]
) -> tuple[dict[str, Any], bool]:
    try:
        uploaded = await services.uploader.upload(image, transformations)
    except Exception as e:
        logger.warning("Image upload failed: %s", e)
        original = data_uri(image, mime_type)
        return {"original": original, "enhanced": None, "publicId": None}, False
    return {
        "original": uploaded.original_url,
        "enhanced": uploaded.enhanced_url,
        "publicId": uploaded.public_id,
        "transformations": uploaded.transformations,
    }, True


async def analyze_product_image(
    services: Services, image: bytes, mime_type: str = "image/jpeg"
) -> tuple[VisionSummary, bool, PipelineResult[EnhancementAnalysis]]:
    """Vision labels plus the enhancement pipeline result for one image."""
    vision, vision_ok = await _label(services, image)
    prompt = enhancement_prompt(vision)
    result = await enhancement_pipeline(vision).run(
        lambda: services.enhancer.generate(
            prompt,
            image=image,
            mime_type=mime_type,
            temperature=ENHANCER_TEMPERATURE,
        )
    )
    return vision, vision_ok, result


async def enhance_product(
    services: Services, image: bytes, mime_type: str = "image/jpeg"
) -> dict[str, Any]:
    if not image:
        raise InvalidRequest("No image uploaded")

    vision, vision_ok, result = await analyze_product_image(services, image, mime_type)
    enhancement = result.data
    images, uploaded = await _upload(
        services,
        image,
        mime_type,
        build_transformations(enhancement.technical_improvements),
    )
    logger.info(
        "Enhanced %s image: quality %d, marketplace ready %s",
        enhancement.product_type,
        enhancement.quality_score,
        enhancement.ready_for_marketplace,
    )
    return {
        "success": True,
        "fallback": result.fallback,
        "processing": {
            "vision": vision_ok,
            "gemini": not result.fallback,
            "cloudinary": uploaded,
        },
        "analysis": {
            "vision": vision.to_wire(),
            "enhancement": enhancement.to_wire(),
        },
        "images": images,
        "recommendations": {
            "immediate": list(enhancement.enhancement_actions),
            "technical": enhancement.technical_improvements.to_wire(),
            "marketplace": enhancement.marketplace_optimization.to_wire(),
        },
        "scores": {
            "originalQuality": vision.quality,
            "enhancedQuality": enhancement.quality_score,
            "marketplaceReadiness": enhancement.ready_for_marketplace,
        },
        "processedAt": datetime.now(timezone.utc).isoformat(),
    }


async def enhance_batch(
    services: Services, images: list[tuple[str, bytes, str]]
) -> dict[str, Any]:
    """Enhance up to 10 (filename, bytes, mime type) images in order."""
    if not images:
        raise InvalidRequest("No images uploaded")
    if len(images) > MAX_BATCH_IMAGES:
        raise InvalidRequest(f"Maximum {MAX_BATCH_IMAGES} images per batch")

    results = []
    for index, (filename, image, mime_type) in enumerate(images):
        logger.info("Processing image %d/%d: %s", index + 1, len(images), filename)
        try:
            outcome = await enhance_product(services, image, mime_type)
        except InvalidRequest as e:
            results.append(
                {"index": index, "filename": filename, "success": False, "error": str(e)}
            )
            continue
        results.append(
            {
                "index": index,
                "filename": filename,
                "success": True,
                "analysis": outcome["analysis"]["enhancement"],
                "images": outcome["images"],
                "scores": outcome["scores"],
            }
        )

    ok = [r for r in results if r["success"]]
    average = (
        sum(r["scores"]["enhancedQuality"] for r in ok) / len(ok) if ok else 0
    )
    return {
        "success": True,
        "batchSize": len(images),
        "results": results,
        "summary": {
            "successful": len(ok),
            "failed": len(results) - len(ok),
            "averageQuality": round(average, 1),
        },
    }


def status(services: Services) -> dict[str, Any]:
    uploader = services.uploader.configured
    return {
        "available": True,
        "services": {
            "gemini": {
                "available": services.enhancer.configured,
                "model": services.enhancer.model_name,
                "features": [
                    "image_analysis",
                    "enhancement_recommendations",
                    "quality_scoring",
                ],
            },
            "vision": {
                "available": services.labeler.configured,
                "features": [
                    "label_detection",
                    "color_analysis",
                    "object_localization",
                    "quality_assessment",
                ],
            },
            "cloudinary": {
                "available": uploader,
                "features": [
                    "image_upload",
                    "background_removal",
                    "auto_enhancement",
                    "format_optimization",
                ],
            },
        },
        "capabilities": {
            "qualityAnalysis": True,
            "backgroundRemoval": uploader,
            "batchProcessing": True,
            "maxBatchSize": MAX_BATCH_IMAGES,
        },
    }
