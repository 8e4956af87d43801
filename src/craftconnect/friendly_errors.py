"""Artisan-friendly error messages for common issues.

Maps technical upstream errors to plain messages with a next step the
artisan (or whoever runs the server) can act on.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any

from .exceptions import MessageDeliveryFailed, TranscriptionFailed, UpstreamUnavailable


@dataclass
class FriendlyError:
    """A human-readable error with a fix suggestion."""

    title: str
    message: str
    fix: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def friendly_transcription_error(error: Exception) -> FriendlyError:
    """Convert a speech transcription failure to a user-facing message."""
    msg = str(error).lower()

    if "not configured" in msg:
        return FriendlyError(
            title="Voice analysis is offline",
            message="Speech recognition is not set up on this server.",
            fix=(
                "Set GOOGLE_PROJECT_ID and GOOGLE_APPLICATION_CREDENTIALS, "
                "then restart the server. You can describe your business "
                "in text in the meantime."
            ),
        )

    return FriendlyError(
        title="Could not understand the recording",
        message=(
            "Could not transcribe audio. Please speak clearly and ensure "
            "good audio quality."
        ),
        fix=(
            "Record for at least a few seconds in a quiet place, hold the "
            "phone close, and try again."
        ),
    )


def friendly_upstream_error(error: Exception) -> FriendlyError:
    """Convert a model or cloud service error to a user-facing message."""
    msg = str(error).lower()

    # Auth / credentials
    if "permission" in msg or "credential" in msg or "401" in msg or "403" in msg:
        return FriendlyError(
            title="Google Cloud credentials rejected",
            message="The AI service refused this server's credentials.",
            fix=(
                "Check GOOGLE_APPLICATION_CREDENTIALS points at a valid "
                "service-account key with the Vertex AI User role."
            ),
        )

    # Rate limit
    if "quota" in msg or "429" in msg or "resource exhausted" in msg:
        return FriendlyError(
            title="AI service is busy",
            message="Too many requests were sent to the AI service.",
            fix="Wait a minute and try again. Suggestions below are template-based.",
        )

    if re.search(r"timed?\s?out", msg):
        return FriendlyError(
            title="AI service timed out",
            message="The AI service took too long to respond.",
            fix="Try again. Suggestions below are template-based.",
        )

    if "not configured" in msg:
        return FriendlyError(
            title="AI service not set up",
            message="This server has no AI model configured.",
            fix=(
                "Set GOOGLE_PROJECT_ID (and optionally VERTEX_MODEL) or add a "
                "google section to ~/.craftconnect/config.yaml."
            ),
        )

    return FriendlyError(
        title="AI service error",
        message=f"The AI service returned an error: {error}",
        fix="This is usually temporary. Suggestions below are template-based.",
    )


def friendly_delivery_error(error: Exception) -> FriendlyError:
    """Convert a WhatsApp delivery failure to a user-facing message."""
    msg = str(error).lower()

    if "401" in msg or "190" in msg or "access token" in msg:
        return FriendlyError(
            title="WhatsApp token expired",
            message="The WhatsApp Business API rejected the access token.",
            fix=(
                "Generate a new permanent token in Meta for Developers and "
                "update FACEBOOK_ACCESS_TOKEN."
            ),
        )

    return FriendlyError(
        title="WhatsApp message not sent",
        message="The WhatsApp Business API did not accept the message.",
        fix="Use the WhatsApp link to send the message manually.",
    )


def friendly_config_error(error: Exception) -> FriendlyError:
    """Convert a configuration error to a user-facing message."""
    msg = str(error).lower()

    if "parse" in msg or "mapping" in msg:
        return FriendlyError(
            title="Configuration file error",
            message="The configuration file has a formatting issue.",
            fix=(
                "Check ~/.craftconnect/config.yaml for syntax errors. "
                "Common issues:\n"
                "- Missing spaces after colons (use 'key: value')\n"
                "- Incorrect indentation (use 2 spaces, not tabs)"
            ),
        )

    return FriendlyError(
        title="Configuration error",
        message=f"There's a problem with your setup: {error}",
        fix="Check ~/.craftconnect/config.yaml or the environment variables.",
    )


def friendly_error_for(error: Exception) -> FriendlyError | None:
    """Pick the matching message for an error that caused a fallback."""
    if isinstance(error, TranscriptionFailed):
        return friendly_transcription_error(error)
    if isinstance(error, MessageDeliveryFailed):
        return friendly_delivery_error(error)
    if isinstance(error, UpstreamUnavailable):
        return friendly_upstream_error(error)
    return None
