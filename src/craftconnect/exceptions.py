"""Custom exception hierarchy for craftconnect.

All craftconnect exceptions inherit from CraftConnectError, allowing callers
to catch broad or specific errors:

    try:
        payload = repair_json(extract_json_span(text))
    except NoJsonFound:
        ...
    except PipelineError as e:
        print(f"Could not read model output: {e}")
"""

from __future__ import annotations


class CraftConnectError(Exception):
    """Base exception for all craftconnect errors."""


class UpstreamUnavailable(CraftConnectError):
    """Raised when an upstream service is not configured or the call fails."""


class TranscriptionFailed(UpstreamUnavailable):
    """Raised when every audio encoding attempt failed to produce a transcript."""


class MessageDeliveryFailed(UpstreamUnavailable):
    """Raised when the WhatsApp Cloud API rejected every send attempt."""


class PipelineError(CraftConnectError):
    """Raised by the response pipeline stages that read model output."""


class NoJsonFound(PipelineError):
    """Raised when model text contains no candidate JSON object."""


class RepairFailed(PipelineError):
    """Raised when a JSON span is still invalid after one repair pass."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class SchemaViolation(PipelineError):
    """Reserved for schema mismatches; normalization always absorbs these."""


class ConfigError(CraftConnectError):
    """Raised when configuration is invalid or missing."""


class InvalidRequest(CraftConnectError):
    """Raised when a caller request lacks required fields."""
