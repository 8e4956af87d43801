"""Upstream service adapters."""

from .base import (
    ImageLabeler,
    ImageUploader,
    MessageSender,
    NotConfigured,
    TextGenerator,
    TranscriptionResponse,
    Transcriber,
    UploadedImage,
)
from .factory import Services, create_services

__all__ = [
    "ImageLabeler",
    "ImageUploader",
    "MessageSender",
    "NotConfigured",
    "Services",
    "TextGenerator",
    "TranscriptionResponse",
    "Transcriber",
    "UploadedImage",
    "create_services",
]
