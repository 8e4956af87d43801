"""Tests for Cloudinary signed uploads and delivery URLs."""

import hashlib
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from craftconnect.exceptions import UpstreamUnavailable
from craftconnect.providers.cloudinary import (
    CloudinaryUploader,
    delivery_url,
    sign_params,
)


class TestSignParams:
    def test_sorted_pairs_plus_secret(self):
        params = {"timestamp": "1700000000", "folder": "crafts"}
        expected = hashlib.sha1(
            b"folder=crafts&timestamp=1700000000shh"
        ).hexdigest()
        assert sign_params(params, "shh") == expected


class TestDeliveryUrl:
    def test_with_transformations(self):
        url = delivery_url("demo", "crafts/vase", ["f_auto", "q_auto"])
        assert url == (
            "https://res.cloudinary.com/demo/image/upload/f_auto/q_auto/crafts/vase"
        )

    def test_without_transformations(self):
        url = delivery_url("demo", "crafts/vase", [])
        assert url == "https://res.cloudinary.com/demo/image/upload/crafts/vase"


def _uploader(status, body, captured):
    uploader = CloudinaryUploader("demo", "key", "secret", folder="crafts")

    @asynccontextmanager
    async def mock_post(url, data=None):
        captured["url"] = url
        captured["data"] = data
        resp = AsyncMock()
        resp.status = status
        resp.json.return_value = body
        yield resp

    mock_session = AsyncMock()
    mock_session.post = mock_post
    uploader._session = mock_session
    return uploader


class TestCloudinaryUploader:
    @pytest.mark.asyncio
    async def test_upload_returns_both_urls(self):
        captured = {}
        uploader = _uploader(
            200,
            {
                "public_id": "crafts/abc",
                "secure_url": "https://res.cloudinary.com/demo/image/upload/crafts/abc",
            },
            captured,
        )

        result = await uploader.upload(b"jpeg", ["f_auto", "e_auto_color"])

        assert captured["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
        assert captured["data"] is not None
        assert result.public_id == "crafts/abc"
        assert result.original_url.endswith("/crafts/abc")
        assert result.enhanced_url == (
            "https://res.cloudinary.com/demo/image/upload/f_auto/e_auto_color/crafts/abc"
        )
        assert result.transformations == ["f_auto", "e_auto_color"]
        await uploader.close()

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        uploader = _uploader(401, {"error": {"message": "Invalid Signature"}}, {})
        with pytest.raises(UpstreamUnavailable, match="Invalid Signature"):
            await uploader.upload(b"jpeg", [])
