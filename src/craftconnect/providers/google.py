"""Gemini on Vertex AI text generator."""

from __future__ import annotations

import asyncio
import logging

from ..exceptions import UpstreamUnavailable
from .base import TextGenerator

logger = logging.getLogger("craftconnect")

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def load_credentials(credentials_file: str):
    """Service-account credentials, or None to use application defaults."""
    if not credentials_file:
        return None
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_file(
        credentials_file, scopes=[CLOUD_PLATFORM_SCOPE]
    )


class GeminiGenerator(TextGenerator):
    def __init__(
        self,
        project: str,
        location: str = "us-central1",
        model: str = "gemini-1.5-flash",
        temperature: float = 0.1,
        max_output_tokens: int = 1024,
        timeout: float = 30.0,
        credentials_file: str = "",
    ):
        try:
            from google import genai
        except ImportError:
            raise ImportError(
                "Google GenAI SDK not installed. Run: pip install google-genai"
            )
        self._client = genai.Client(
            vertexai=True,
            project=project,
            location=location,
            credentials=load_credentials(credentials_file),
        )
        self._model = model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._timeout = timeout

    async def generate(
        self,
        prompt: str,
        image: bytes | None = None,
        mime_type: str = "image/jpeg",
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str:
        from google.genai import types

        contents = []
        if image is not None:
            contents.append(types.Part.from_bytes(data=image, mime_type=mime_type))
        contents.append(types.Part.from_text(text=prompt))

        config = types.GenerateContentConfig(
            temperature=self._temperature if temperature is None else temperature,
            top_p=0.8,
            max_output_tokens=max_output_tokens or self._max_output_tokens,
            candidate_count=1,
        )
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model, contents=contents, config=config
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailable(
                f"Gemini request timed out after {self._timeout:.0f}s"
            ) from e

        text = response.text
        if not text:
            raise UpstreamUnavailable("Gemini returned no text")
        logger.debug("Gemini response (%d chars): %.200s", len(text), text)
        return text

    @property
    def model_name(self) -> str:
        return self._model
