"""Provider factory: builds one adapter per configured upstream service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Callable

from ..config import CraftConnectConfig
from .base import (
    Capability,
    ImageLabeler,
    ImageUploader,
    MessageSender,
    NotConfigured,
    TextGenerator,
    Transcriber,
)

logger = logging.getLogger("craftconnect")


@dataclass
class Services:
    """Every upstream collaborator, configured or stand-in."""

    generator: TextGenerator
    enhancer: TextGenerator
    transcriber: Transcriber
    labeler: ImageLabeler
    uploader: ImageUploader
    messenger: MessageSender

    @classmethod
    def unconfigured(cls) -> Services:
        return cls(
            generator=NotConfigured("Vertex AI"),
            enhancer=NotConfigured("Vertex AI"),
            transcriber=NotConfigured("Speech-to-Text"),
            labeler=NotConfigured("Vision API"),
            uploader=NotConfigured("Cloudinary"),
            messenger=NotConfigured("WhatsApp"),
        )

    def status(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name).configured for f in fields(self)}

    async def close(self) -> None:
        seen: set[int] = set()
        for f in fields(self):
            capability: Capability = getattr(self, f.name)
            if id(capability) in seen:
                continue
            seen.add(id(capability))
            await capability.close()


def _build(service: str, enabled: bool, factory: Callable[[], Any]) -> Any:
    """Run ``factory`` or fall back to a NotConfigured stand-in."""
    if not enabled:
        logger.info("%s not configured", service)
        return NotConfigured(service)
    try:
        return factory()
    except ImportError as e:
        logger.warning("%s unavailable: %s", service, e)
        return NotConfigured(service)


def create_services(config: CraftConnectConfig) -> Services:
    """Create adapters for every service that has credentials."""
    g, ai = config.google, config.ai
    has_google = bool(g.project_id)

    def gemini(model: str) -> Callable[[], TextGenerator]:
        def build() -> TextGenerator:
            from .google import GeminiGenerator

            return GeminiGenerator(
                project=g.project_id,
                location=g.location,
                model=model,
                temperature=ai.temperature,
                max_output_tokens=ai.max_output_tokens,
                timeout=ai.request_timeout_seconds,
                credentials_file=g.credentials_file,
            )

        return build

    def transcriber() -> Transcriber:
        from .speech import GoogleSpeechTranscriber

        return GoogleSpeechTranscriber(
            language_code=g.language_code,
            alternative_language_codes=g.alternative_language_codes,
            credentials_file=g.credentials_file,
        )

    def labeler() -> ImageLabeler:
        from .vision import GoogleVisionLabeler

        return GoogleVisionLabeler(credentials_file=g.credentials_file)

    c = config.cloudinary

    def uploader() -> ImageUploader:
        from .cloudinary import CloudinaryUploader

        return CloudinaryUploader(
            cloud_name=c.cloud_name,
            api_key=c.api_key,
            api_secret=c.api_secret,
            folder=c.folder,
        )

    w = config.whatsapp

    def messenger() -> MessageSender:
        from .whatsapp import WhatsAppSender

        return WhatsAppSender(
            access_token=w.access_token,
            phone_id=w.phone_id,
            api_url=w.api_url,
            max_attempts=w.max_attempts,
            timeout=w.request_timeout_seconds,
        )

    return Services(
        generator=_build("Vertex AI", has_google, gemini(ai.model)),
        enhancer=_build("Vertex AI", has_google, gemini(ai.enhancer_model)),
        transcriber=_build("Speech-to-Text", has_google, transcriber),
        labeler=_build("Vision API", has_google, labeler),
        uploader=_build(
            "Cloudinary", bool(c.cloud_name and c.api_key and c.api_secret), uploader
        ),
        messenger=_build("WhatsApp", bool(w.access_token and w.phone_id), messenger),
    )
