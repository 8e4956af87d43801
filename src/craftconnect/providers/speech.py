"""Google Cloud Speech-to-Text transcriber."""

from __future__ import annotations

import logging

from .base import TranscriptionResponse, Transcriber
from .google import load_credentials

logger = logging.getLogger("craftconnect")

# Vocabulary hints for artisans describing their business.
SPEECH_PHRASES = [
    "business", "craft", "artisan", "pottery", "textile", "jewelry",
    "marketplace", "customers", "products", "pricing", "handmade",
    "traditional", "online", "website", "social media", "WhatsApp",
]  # fmt: skip
PHRASE_BOOST = 15.0


class GoogleSpeechTranscriber(Transcriber):
    def __init__(
        self,
        language_code: str = "en-US",
        alternative_language_codes: list[str] | None = None,
        credentials_file: str = "",
    ):
        try:
            from google.cloud import speech_v1p1beta1  # noqa: F401
        except ImportError:
            raise ImportError(
                "Google Cloud Speech SDK not installed. "
                "Run: pip install google-cloud-speech"
            )
        self._language_code = language_code
        self._alternatives = list(alternative_language_codes or [])
        self._credentials_file = credentials_file
        self._client = None

    def _get_client(self):
        # The async gRPC client binds to the running loop, so build it lazily.
        if self._client is None:
            from google.cloud import speech_v1p1beta1 as speech

            self._client = speech.SpeechAsyncClient(
                credentials=load_credentials(self._credentials_file)
            )
        return self._client

    async def transcribe(
        self, audio: bytes, encoding: str, sample_rate_hertz: int
    ) -> TranscriptionResponse:
        from google.cloud import speech_v1p1beta1 as speech

        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding[encoding],
            sample_rate_hertz=sample_rate_hertz,
            language_code=self._language_code,
            alternative_language_codes=self._alternatives,
            enable_automatic_punctuation=True,
            model="latest_long",
            speech_contexts=[
                speech.SpeechContext(phrases=SPEECH_PHRASES, boost=PHRASE_BOOST)
            ],
            enable_word_confidence=True,
            enable_word_time_offsets=True,
        )
        response = await self._get_client().recognize(
            config=config, audio=speech.RecognitionAudio(content=audio)
        )

        texts: list[str] = []
        confidences: list[float | None] = []
        for result in response.results:
            if not result.alternatives:
                continue
            best = result.alternatives[0]
            texts.append(best.transcript)
            confidences.append(best.confidence or None)
        return TranscriptionResponse(
            text=" ".join(texts).strip(), segment_confidences=confidences
        )
