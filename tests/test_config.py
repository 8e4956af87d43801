"""Tests for configuration loading."""

import pytest

from craftconnect.config import CraftConnectConfig, load_config
from craftconnect.exceptions import ConfigError

ENV_VARS = (
    "GOOGLE_PROJECT_ID",
    "GOOGLE_LOCATION",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "VERTEX_MODEL",
    "ENHANCER_MODEL",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
    "FACEBOOK_ACCESS_TOKEN",
    "WHATSAPP_PHONE_ID",
    "CRAFTCONNECT_HOST",
    "PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        config = CraftConnectConfig()
        assert config.server.port == 5000
        assert config.server.max_upload_mb == 10
        assert config.whatsapp.max_attempts == 3
        assert config.google.project_id == ""


class TestLoadFromEnv:
    def test_missing_file_uses_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GOOGLE_PROJECT_ID", "craft-prod")
        monkeypatch.setenv("WHATSAPP_PHONE_ID", "555000")
        monkeypatch.setenv("PORT", "8080")
        config = load_config(tmp_path / "missing.yaml")
        assert config.google.project_id == "craft-prod"
        assert config.whatsapp.phone_id == "555000"
        assert config.server.port == 8080
        assert config.ai.model == "gemini-1.5-flash"

    def test_bad_port(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PORT", "eighty")
        with pytest.raises(ConfigError, match="environment"):
            load_config(tmp_path / "missing.yaml")


class TestLoadFromYaml:
    def test_yaml_with_interpolation(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CLOUD_SECRET", "s3cret")
        path = tmp_path / "config.yaml"
        path.write_text(
            "google:\n"
            "  project_id: craft-dev\n"
            "cloudinary:\n"
            "  cloud_name: demo\n"
            "  api_secret: ${CLOUD_SECRET}\n"
            "  api_key: ${UNSET_VAR}\n"
            "server:\n"
            "  port: 9000\n"
        )
        config = load_config(path)
        assert config.google.project_id == "craft-dev"
        assert config.cloudinary.api_secret == "s3cret"
        assert config.cloudinary.api_key == ""
        assert config.server.port == 9000
        assert config.ai.temperature == 0.1

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == CraftConnectConfig()

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server: [unclosed\n")
        with pytest.raises(ConfigError, match="Could not parse"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: not-a-port\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)
