"""Tests for custom exception hierarchy."""

import pytest

from craftconnect.exceptions import (
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


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            UpstreamUnavailable,
            TranscriptionFailed,
            MessageDeliveryFailed,
            PipelineError,
            NoJsonFound,
            SchemaViolation,
            ConfigError,
            InvalidRequest,
        ],
    )
    def test_all_inherit_from_base(self, exc):
        with pytest.raises(CraftConnectError):
            raise exc("boom")

    def test_upstream_subclasses(self):
        with pytest.raises(UpstreamUnavailable):
            raise TranscriptionFailed("no transcript")
        with pytest.raises(UpstreamUnavailable):
            raise MessageDeliveryFailed("not sent")

    def test_pipeline_subclasses(self):
        with pytest.raises(PipelineError):
            raise NoJsonFound("none")
        with pytest.raises(PipelineError):
            raise RepairFailed("broken")

    def test_repair_failed_carries_cause(self):
        cause = ValueError("bad json")
        err = RepairFailed("broken", cause=cause)
        assert err.cause is cause
        assert str(err) == "broken"

    def test_exported_from_package_root(self):
        import craftconnect

        assert craftconnect.CraftConnectError is CraftConnectError
        assert "RepairFailed" in craftconnect.__all__
