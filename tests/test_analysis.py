"""Tests for voice-note transcription and business analysis."""

from unittest.mock import AsyncMock

import pytest

from craftconnect.exceptions import TranscriptionFailed, UpstreamUnavailable
from craftconnect.providers.base import NotConfigured, TranscriptionResponse
from craftconnect.providers.factory import Services
from craftconnect.services.analysis import (
    REASON_TRANSCRIPTION_FAILED,
    analyze_business_audio,
    analyze_transcript,
    mean_confidence,
    transcribe_audio,
)

SPOKEN = "I make clay pots and diyas in my village near Jaipur"


def _services(**overrides) -> Services:
    services = Services.unconfigured()
    for name, value in overrides.items():
        setattr(services, name, value)
    return services


class TestMeanConfidence:
    def test_empty_defaults_to_eighty(self):
        assert mean_confidence([]) == 80

    def test_average_as_percentage(self):
        assert mean_confidence([0.9, 0.7]) == 80

    def test_missing_segment_counts_as_default(self):
        assert mean_confidence([1.0, None]) == 90


class TestTranscribeAudio:
    @pytest.mark.asyncio
    async def test_first_viable_encoding_wins(self):
        transcriber = AsyncMock()
        transcriber.transcribe.return_value = TranscriptionResponse(
            text=SPOKEN, segment_confidences=[0.92]
        )
        result = await transcribe_audio(transcriber, b"audio")
        assert result.text == SPOKEN
        assert result.encoding == "WEBM_OPUS"
        assert result.confidence == 92
        transcriber.transcribe.assert_awaited_once_with(b"audio", "WEBM_OPUS", 48000)

    @pytest.mark.asyncio
    async def test_falls_through_to_next_encoding(self):
        transcriber = AsyncMock()
        transcriber.transcribe.side_effect = [
            RuntimeError("bad encoding"),
            TranscriptionResponse(text="too short"),
            TranscriptionResponse(text=SPOKEN),
        ]
        result = await transcribe_audio(transcriber, b"audio")
        assert result.encoding == "LINEAR16"
        assert result.confidence == 80
        assert transcriber.transcribe.await_count == 3

    @pytest.mark.asyncio
    async def test_all_encodings_fail(self):
        transcriber = AsyncMock()
        transcriber.transcribe.side_effect = RuntimeError("invalid audio")
        with pytest.raises(TranscriptionFailed, match="Last error: invalid audio"):
            await transcribe_audio(transcriber, b"audio")
        assert transcriber.transcribe.await_count == 4

    @pytest.mark.asyncio
    async def test_only_short_transcripts(self):
        transcriber = AsyncMock()
        transcriber.transcribe.return_value = TranscriptionResponse(text="hello")
        with pytest.raises(TranscriptionFailed, match="Last error: Unknown"):
            await transcribe_audio(transcriber, b"audio")


class TestAnalyzeBusinessAudio:
    @pytest.mark.asyncio
    async def test_happy_path(self):
        transcriber = AsyncMock()
        transcriber.transcribe.return_value = TranscriptionResponse(
            text=SPOKEN, segment_confidences=[0.9]
        )
        generator = AsyncMock()
        generator.generate.return_value = (
            '{"businessType": "Pottery", "detectedFocus": "Clay pots", '
            '"confidence": 88}'
        )
        outcome = await analyze_business_audio(
            _services(transcriber=transcriber, generator=generator), b"audio"
        )
        out = outcome.to_dict()
        assert out["fallback"] is False
        assert out["data"]["businessType"] == "Pottery"
        assert out["transcript"] == SPOKEN
        assert out["transcriptionConfidence"] == 90
        assert out["encoding"] == "WEBM_OPUS"

        prompt = generator.generate.await_args.args[0]
        assert "clay pots" in prompt

    @pytest.mark.asyncio
    async def test_transcription_failure_falls_back(self):
        outcome = await analyze_business_audio(Services.unconfigured(), b"audio")
        out = outcome.to_dict()
        assert out["success"] is True
        assert out["fallback"] is True
        assert out["data"]["topProblems"][0] == REASON_TRANSCRIPTION_FAILED
        assert "transcript" not in out
        assert isinstance(outcome.result.cause, TranscriptionFailed)


class TestAnalyzeTranscript:
    @pytest.mark.asyncio
    async def test_unconfigured_generator_falls_back(self):
        result = await analyze_transcript(Services.unconfigured(), SPOKEN)
        assert result.fallback is True
        assert result.data.top_problems[0] == (
            "AI service unavailable: Vertex AI not configured"
        )

    @pytest.mark.asyncio
    async def test_quotes_are_neutralized_in_prompt(self):
        generator = AsyncMock()
        generator.generate.return_value = "{}"
        await analyze_transcript(
            _services(generator=generator), 'I sell "blue" pottery'
        )
        prompt = generator.generate.await_args.args[0]
        assert "I sell 'blue' pottery" in prompt


class TestNotConfigured:
    @pytest.mark.asyncio
    async def test_raises_upstream_unavailable(self):
        stub = NotConfigured("Speech-to-Text")
        assert stub.configured is False
        with pytest.raises(UpstreamUnavailable, match="not configured"):
            await stub.transcribe(b"", "MP3", 44100)
