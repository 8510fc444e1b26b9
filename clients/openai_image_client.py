"""
OpenAI image edit API client.
Uses POST /v1/images/edits with the letterboxed photo and the style prompt.
"""
import logging
import threading
import time
from typing import Optional

import httpx

from models.generation import Dimensions, ProviderImage

from .base import (
    ImageProvider,
    check_response,
    decode_b64_image,
    fetch_image,
    read_json,
    translate_transport_errors,
)
from .errors import ProviderInvalidResponse, ProviderNotConfigured

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com"


class OpenAIImageClient(ImageProvider):
    """Client for OpenAI POST /v1/images/edits (image edit with style prompt)."""

    provider_id = "openai"
    default_priority = 10

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout_seconds: int = 120,
        model: str = "gpt-image-1",
        quality: str = "high",
        output_format: str = "png",
    ):
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.model = model
        self.quality = quality
        self.output_format = output_format

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def timeout_budget(self) -> float:
        return float(self.timeout_seconds)

    def generate_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        dimensions: Dimensions,
        cancel_event: Optional[threading.Event] = None,
    ) -> ProviderImage:
        """
        Apply the style via the image edit API. GPT image models answer with
        b64_json; older models may answer with a URL, which is downloaded.
        """
        if not self.is_configured():
            raise ProviderNotConfigured("OPENAI_API_KEY is not set", self.provider_id)

        url = f"{self.base_url}/v1/images/edits"
        width, height = dimensions
        files = {"image": ("avatar.png", image, mime_type)}
        data = {
            "model": self.model,
            "prompt": prompt,
            "n": "1",
            "size": f"{width}x{height}",
            "quality": self.quality,
            "output_format": self.output_format,
        }

        start = time.time()
        with translate_transport_errors(self.provider_id):
            with httpx.Client(timeout=self.timeout_seconds) as client:
                r = client.post(url, headers=self._headers(), files=files, data=data)
                check_response(self.provider_id, r)
                resp = read_json(self.provider_id, r)

                items = resp.get("data") or []
                if not items:
                    raise ProviderInvalidResponse("response contained no images", self.provider_id)
                first = items[0]
                if first.get("b64_json"):
                    result = decode_b64_image(
                        self.provider_id, first["b64_json"], f"image/{self.output_format}"
                    )
                elif first.get("url"):
                    result = fetch_image(client, self.provider_id, first["url"])
                else:
                    raise ProviderInvalidResponse(
                        f"unexpected response format: {sorted(first)}", self.provider_id
                    )

        logger.info("OpenAI image edit completed in %.1fs", time.time() - start)
        return result

    def probe(self) -> bool:
        if not self.is_configured():
            return False
        try:
            with httpx.Client(timeout=10) as client:
                r = client.get(f"{self.base_url}/v1/models", headers=self._headers())
            return r.status_code == 200
        except httpx.HTTPError as e:
            logger.debug("OpenAI probe failed: %s", e)
            return False
