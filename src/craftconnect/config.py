"""Configuration loading and validation."""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError

DEFAULT_CONFIG_PATH = "~/.craftconnect/config.yaml"


class GoogleConfig(BaseModel):
    project_id: str = ""
    location: str = "us-central1"
    credentials_file: str = ""  # Service-account JSON; empty = ADC
    language_code: str = "en-US"
    alternative_language_codes: list[str] = Field(
        default_factory=lambda: ["hi-IN", "en-IN"]
    )


class AIConfig(BaseModel):
    model: str = "gemini-1.5-flash"
    enhancer_model: str = "gemini-2.5-flash"  # Needs inline image input
    temperature: float = 0.1
    max_output_tokens: int = 1024
    request_timeout_seconds: float = 30.0


class CloudinaryConfig(BaseModel):
    cloud_name: str = ""
    api_key: str = ""
    api_secret: str = ""
    folder: str = "craftconnect/originals"


class WhatsAppConfig(BaseModel):
    access_token: str = ""
    phone_id: str = ""
    api_url: str = "https://graph.facebook.com/v18.0"
    max_attempts: int = 3
    request_timeout_seconds: float = 10.0


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5000
    max_upload_mb: int = 10


class CraftConnectConfig(BaseModel):
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    cloudinary: CloudinaryConfig = Field(default_factory=CloudinaryConfig)
    whatsapp: WhatsAppConfig = Field(default_factory=WhatsAppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


def _interpolate_env_vars(text: str) -> str:
    """Replace ${VAR_NAME} with environment variable values."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(r"\$\{(\w+)\}", replacer, text)


def _config_from_env() -> CraftConnectConfig:
    """Build config from environment variables (container deployment).

    Unset variables keep their defaults.
    """
    env = os.environ
    return CraftConnectConfig(
        google=GoogleConfig(
            project_id=env.get("GOOGLE_PROJECT_ID", ""),
            location=env.get("GOOGLE_LOCATION", "us-central1"),
            credentials_file=env.get("GOOGLE_APPLICATION_CREDENTIALS", ""),
        ),
        ai=AIConfig(
            model=env.get("VERTEX_MODEL", "gemini-1.5-flash"),
            enhancer_model=env.get("ENHANCER_MODEL", "gemini-2.5-flash"),
        ),
        cloudinary=CloudinaryConfig(
            cloud_name=env.get("CLOUDINARY_CLOUD_NAME", ""),
            api_key=env.get("CLOUDINARY_API_KEY", ""),
            api_secret=env.get("CLOUDINARY_API_SECRET", ""),
        ),
        whatsapp=WhatsAppConfig(
            access_token=env.get("FACEBOOK_ACCESS_TOKEN", ""),
            phone_id=env.get("WHATSAPP_PHONE_ID", ""),
        ),
        server=ServerConfig(
            host=env.get("CRAFTCONNECT_HOST", "0.0.0.0"),
            port=int(env.get("PORT", "5000")),
        ),
    )


def load_config(path: str | Path | None = None) -> CraftConnectConfig:
    """Load config from a YAML file, env vars, or defaults.

    Priority: config.yaml (with ${ENV} interpolation) > env vars > defaults.
    """
    path = Path(path or DEFAULT_CONFIG_PATH).expanduser()
    if not path.exists():
        try:
            return _config_from_env()
        except ValueError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

    try:
        data = yaml.safe_load(_interpolate_env_vars(path.read_text()))
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    if data is None:
        return CraftConnectConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    try:
        return CraftConnectConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
