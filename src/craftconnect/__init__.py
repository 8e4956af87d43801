"""CraftConnect: AI business tools for artisans."""

__version__ = "0.3.0"

from .exceptions import (
    ConfigError,
    CraftConnectError,
    InvalidRequest,
    MessageDeliveryFailed,
    NoJsonFound,
    PipelineError,
    RepairFailed,
    SchemaViolation,
    TranscriptionFailed,
    UpstreamUnavailable,
)

__all__ = [
    "__version__",
    "CraftConnectError",
    "UpstreamUnavailable",
    "TranscriptionFailed",
    "MessageDeliveryFailed",
    "PipelineError",
    "NoJsonFound",
    "RepairFailed",
    "SchemaViolation",
    "ConfigError",
    "InvalidRequest",
]
