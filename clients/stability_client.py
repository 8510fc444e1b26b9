"""
Stability AI client: SDXL image-to-image with the photo as init image.
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
    read_json,
    translate_transport_errors,
)
from .errors import ProviderInvalidResponse, ProviderNotConfigured, ProviderUnavailable

logger = logging.getLogger(__name__)


class StabilityClient(ImageProvider):
    """Stability AI image generator using Stable Diffusion XL."""

    provider_id = "stability"
    default_priority = 20

    API_URL = "https://api.stability.ai/v1/generation/stable-diffusion-xl-1024-v1-0/image-to-image"
    ACCOUNT_URL = "https://api.stability.ai/v1/user/account"

    # How much of the init image survives (0 = ignore it, 1 = return it unchanged)
    IMAGE_STRENGTH = 0.35

    def __init__(self, api_key: str, timeout_seconds: int = 120):
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

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
        if not self.is_configured():
            raise ProviderNotConfigured("STABILITY_API_KEY is not set", self.provider_id)

        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        files = {"init_image": ("avatar.png", image, mime_type)}
        data = {
            "init_image_mode": "IMAGE_STRENGTH",
            "image_strength": str(self.IMAGE_STRENGTH),
            "text_prompts[0][text]": prompt,
            "text_prompts[0][weight]": "1",
            "cfg_scale": "7",
            "samples": "1",
            "steps": "30",
        }

        start = time.time()
        logger.info("Submitting Stability AI request (%dx%d)", *dimensions)
        with translate_transport_errors(self.provider_id):
            with httpx.Client(timeout=self.timeout_seconds) as client:
                r = client.post(self.API_URL, headers=headers, files=files, data=data)
        check_response(self.provider_id, r)
        result = read_json(self.provider_id, r)

        for artifact in result.get("artifacts", []):
            if artifact.get("finishReason") == "CONTENT_FILTERED":
                raise ProviderUnavailable("blocked by content filter", self.provider_id)
            if artifact.get("base64"):
                logger.info("Stability AI completed in %.1fs", time.time() - start)
                return decode_b64_image(self.provider_id, artifact["base64"], "image/png")

        raise ProviderInvalidResponse("no artifacts returned", self.provider_id)

    def probe(self) -> bool:
        if not self.is_configured():
            return False
        try:
            with httpx.Client(timeout=10) as client:
                r = client.get(self.ACCOUNT_URL, headers={"Authorization": f"Bearer {self.api_key}"})
            return r.status_code == 200
        except httpx.HTTPError as e:
            logger.debug("Stability probe failed: %s", e)
            return False
