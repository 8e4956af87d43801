"""Upstream capability interfaces.

Every cloud collaborator is reached through one of these. A service that
was not configured at startup is represented by ``NotConfigured`` rather
than ``None``, so call sites never null-check a client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..exceptions import UpstreamUnavailable
from ..schemas.vision import VisionSummary


@dataclass(frozen=True)
class TranscriptionResponse:
    text: str
    segment_confidences: list[float | None] = field(default_factory=list)


@dataclass(frozen=True)
class UploadedImage:
    original_url: str
    enhanced_url: str | None
    public_id: str | None = None
    transformations: list[str] = field(default_factory=list)


class Capability(ABC):
    @property
    def configured(self) -> bool:
        return True

    async def close(self) -> None:
        """Release network resources. Override when the adapter holds any."""


class TextGenerator(Capability):
    """Generative language model, optionally with one inline image."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        image: bytes | None = None,
        mime_type: str = "image/jpeg",
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str:
        """Return the model's raw text response."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str: ...


class Transcriber(Capability):
    @abstractmethod
    async def transcribe(
        self, audio: bytes, encoding: str, sample_rate_hertz: int
    ) -> TranscriptionResponse:
        """Transcribe audio assuming the given encoding."""
        ...


class ImageLabeler(Capability):
    @abstractmethod
    async def analyze_image(self, image: bytes) -> VisionSummary:
        """Labels, colors, objects and safe-search flags for an image."""
        ...


class ImageUploader(Capability):
    @abstractmethod
    async def upload(self, image: bytes, transformations: list[str]) -> UploadedImage:
        """Store the original and return it plus a transformed delivery URL."""
        ...


class MessageSender(Capability):
    @abstractmethod
    async def send_text(self, phone: str, body: str) -> str:
        """Deliver a text message and return the provider message id."""
        ...


class NotConfigured(
    TextGenerator, Transcriber, ImageLabeler, ImageUploader, MessageSender
):
    """Stand-in for any capability whose credentials are missing."""

    def __init__(self, service: str):
        self._service = service

    @property
    def configured(self) -> bool:
        return False

    @property
    def model_name(self) -> str:
        return ""

    def _unavailable(self) -> UpstreamUnavailable:
        return UpstreamUnavailable(f"{self._service} not configured")

    async def generate(
        self,
        prompt: str,
        image: bytes | None = None,
        mime_type: str = "image/jpeg",
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str:
        raise self._unavailable()

    async def transcribe(
        self, audio: bytes, encoding: str, sample_rate_hertz: int
    ) -> TranscriptionResponse:
        raise self._unavailable()

    async def analyze_image(self, image: bytes) -> VisionSummary:
        raise self._unavailable()

    async def upload(
        self, image: bytes, transformations: list[str]
    ) -> UploadedImage:
        raise self._unavailable()

    async def send_text(self, phone: str, body: str) -> str:
        raise self._unavailable()
