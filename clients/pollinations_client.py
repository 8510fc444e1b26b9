"""
Pollinations.ai client. Free, keyless: the prompt is part of the URL and the
response body is the image itself.
"""
import logging
import threading
from typing import Optional
from urllib.parse import quote

import httpx

from models.generation import Dimensions, ProviderImage

from .base import ImageProvider, check_response, image_from_response, translate_transport_errors
from .errors import ProviderNotConfigured

logger = logging.getLogger(__name__)


class PollinationsClient(ImageProvider):
    provider_id = "pollinations"
    default_priority = 40

    BASE_URL = "https://image.pollinations.ai/prompt"

    def __init__(self, enabled: bool = True, seed: int = 42, timeout_seconds: int = 60):
        self.enabled = enabled
        self.seed = seed
        self.timeout_seconds = timeout_seconds

    def is_configured(self) -> bool:
        return self.enabled

    def timeout_budget(self) -> float:
        return float(self.timeout_seconds)

    def build_url(self, prompt: str) -> str:
        return f"{self.BASE_URL}/{quote(prompt, safe='')}"

    def generate_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        dimensions: Dimensions,
        cancel_event: Optional[threading.Event] = None,
    ) -> ProviderImage:
        # Text-to-image only; the photo is not uploaded.
        if not self.is_configured():
            raise ProviderNotConfigured("Pollinations is disabled", self.provider_id)
        width, height = dimensions
        params = {"width": width, "height": height, "seed": self.seed, "nologo": "true"}
        with translate_transport_errors(self.provider_id):
            with httpx.Client(timeout=self.timeout_seconds, follow_redirects=True) as client:
                r = client.get(self.build_url(prompt), params=params)
        check_response(self.provider_id, r)
        return image_from_response(self.provider_id, r)

    def probe(self) -> bool:
        if not self.is_configured():
            return False
        try:
            with httpx.Client(timeout=10, follow_redirects=True) as client:
                r = client.head(f"{self.BASE_URL}/test", params={"width": 64, "height": 64})
            return r.status_code < 400
        except httpx.HTTPError as e:
            logger.debug("Pollinations probe failed: %s", e)
            return False
