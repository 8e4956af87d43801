"""Cloudinary image storage via the signed REST upload API.

Uploads the original photo once; enhanced versions are delivery URLs with
a transformation chain, so no second upload is needed.
"""

from __future__ import annotations

import hashlib
import logging
import time

import aiohttp

from ..exceptions import UpstreamUnavailable
from .base import ImageUploader, UploadedImage

logger = logging.getLogger("craftconnect")

API_BASE = "https://api.cloudinary.com/v1_1"
DELIVERY_BASE = "https://res.cloudinary.com"


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary request signature: sha1 of sorted k=v pairs + secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


def delivery_url(cloud_name: str, public_id: str, transformations: list[str]) -> str:
    chain = "/".join(transformations)
    prefix = f"{DELIVERY_BASE}/{cloud_name}/image/upload"
    return f"{prefix}/{chain}/{public_id}" if chain else f"{prefix}/{public_id}"


class CloudinaryUploader(ImageUploader):
    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "craftconnect/originals",
    ):
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._folder = folder
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=60)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def upload(
        self, image: bytes, transformations: list[str]
    ) -> UploadedImage:
        params = {"folder": self._folder, "timestamp": str(int(time.time()))}
        form = aiohttp.FormData()
        for key, value in params.items():
            form.add_field(key, value)
        form.add_field("api_key", self._api_key)
        form.add_field("signature", sign_params(params, self._api_secret))
        form.add_field(
            "file", image, filename="product.jpg", content_type="image/jpeg"
        )

        url = f"{API_BASE}/{self._cloud_name}/image/upload"
        session = self._get_session()
        async with session.post(url, data=form) as resp:
            body = await resp.json(content_type=None)
            if resp.status >= 400:
                message = (body or {}).get("error", {}).get("message", "")
                raise UpstreamUnavailable(
                    f"Cloudinary upload failed: HTTP {resp.status} {message}".strip()
                )

        public_id = body["public_id"]
        logger.info("Image uploaded to Cloudinary: %s", public_id)
        return UploadedImage(
            original_url=body["secure_url"],
            enhanced_url=delivery_url(self._cloud_name, public_id, transformations),
            public_id=public_id,
            transformations=list(transformations),
        )

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session:
            await self._session.close()
            self._session = None
