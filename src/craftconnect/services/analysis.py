"""Business analysis: speech transcription followed by the analysis pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..exceptions import TranscriptionFailed
from ..pipeline import PipelineResult, ResponsePipeline, describe_error
from ..prompts import business_analysis_prompt
from ..providers.base import Transcriber
from ..providers.factory import Services
from ..schemas.business import BUSINESS_ANALYSIS, BusinessAnalysis

logger = logging.getLogger("craftconnect")

# Tried in order; browsers record WEBM_OPUS, uploads are usually MP3.
ENCODINGS: tuple[tuple[str, int], ...] = (
    ("WEBM_OPUS", 48000),
    ("MP3", 44100),
    ("LINEAR16", 16000),
    ("OGG_OPUS", 48000),
)
MIN_TRANSCRIPT_LENGTH = 10
DEFAULT_SEGMENT_CONFIDENCE = 0.8
REASON_TRANSCRIPTION_FAILED = "Transcription failed"


@dataclass(frozen=True)
class Transcript:
    text: str
    confidence: int
    encoding: str


@dataclass(frozen=True)
class AudioAnalysis:
    result: PipelineResult[BusinessAnalysis]
    transcript: str | None = None
    transcription_confidence: int | None = None
    encoding: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out = self.result.to_dict()
        if self.transcript is not None:
            out["transcript"] = self.transcript
            out["transcriptionConfidence"] = self.transcription_confidence
            out["encoding"] = self.encoding
        return out


def mean_confidence(segment_confidences: list[float | None]) -> int:
    """Mean segment confidence as a percentage; missing values count as 0.8."""
    if not segment_confidences:
        return round(DEFAULT_SEGMENT_CONFIDENCE * 100)
    values = [
        DEFAULT_SEGMENT_CONFIDENCE if c is None else c for c in segment_confidences
    ]
    return round(sum(values) / len(values) * 100)


async def transcribe_audio(transcriber: Transcriber, audio: bytes) -> Transcript:
    """Try each encoding in turn and return the first viable transcript.

    Raises:
        TranscriptionFailed: No encoding produced more than
            MIN_TRANSCRIPT_LENGTH characters.
    """
    last_error: Exception | None = None
    for encoding, sample_rate in ENCODINGS:
        logger.info("Attempting transcription with %s @ %dHz", encoding, sample_rate)
        try:
            response = await transcriber.transcribe(audio, encoding, sample_rate)
        except Exception as e:
            logger.warning("Transcription with %s failed: %s", encoding, e)
            last_error = e
            continue

        if len(response.text) > MIN_TRANSCRIPT_LENGTH:
            confidence = mean_confidence(response.segment_confidences)
            logger.info(
                "Transcribed %d chars with %s (confidence %d%%)",
                len(response.text),
                encoding,
                confidence,
            )
            return Transcript(
                text=response.text, confidence=confidence, encoding=encoding
            )
        logger.info("No viable transcription with %s", encoding)

    detail = describe_error(last_error) if last_error else "Unknown"
    raise TranscriptionFailed(
        f"Speech recognition failed with all formats. Last error: {detail}"
    )


async def analyze_transcript(
    services: Services, transcript: str
) -> PipelineResult[BusinessAnalysis]:
    """Run the business-analysis pipeline over a transcript."""
    prompt = business_analysis_prompt(transcript)
    pipeline = ResponsePipeline(BUSINESS_ANALYSIS)
    return await pipeline.run(lambda: services.generator.generate(prompt))


async def analyze_business_audio(services: Services, audio: bytes) -> AudioAnalysis:
    """Transcribe a voice note and analyze the business it describes."""
    try:
        transcript = await transcribe_audio(services.transcriber, audio)
    except TranscriptionFailed as e:
        logger.warning("%s", e)
        result = ResponsePipeline(BUSINESS_ANALYSIS).fallback(
            REASON_TRANSCRIPTION_FAILED, e
        )
        return AudioAnalysis(result=result)

    result = await analyze_transcript(services, transcript.text)
    return AudioAnalysis(
        result=result,
        transcript=transcript.text,
        transcription_confidence=transcript.confidence,
        encoding=transcript.encoding,
    )
