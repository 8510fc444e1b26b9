"""
Hugging Face Inference API client.

Works without a token on the free tier. Several text-to-image models are tried
in order because any of them may be cold ("model is loading", HTTP 503).
"""
import logging
import threading
from typing import List, Optional

import httpx

from models.generation import Dimensions, ProviderImage

from .base import (
    ImageProvider,
    check_response,
    image_from_response,
    raise_if_cancelled,
    translate_transport_errors,
)
from .errors import (
    ProviderError,
    ProviderNotConfigured,
    ProviderRateLimit,
    ProviderUnavailable,
)

logger = logging.getLogger(__name__)

DEFAULT_MODELS = [
    "stabilityai/stable-diffusion-xl-base-1.0",
    "runwayml/stable-diffusion-v1-5",
    "CompVis/stable-diffusion-v1-4",
]


class HuggingFaceClient(ImageProvider):
    provider_id = "huggingface"
    default_priority = 50

    BASE_URL = "https://api-inference.huggingface.co/models"

    def __init__(
        self,
        enabled: bool = True,
        api_token: str = "",
        models: Optional[List[str]] = None,
        timeout_seconds: int = 60,
    ):
        self.enabled = enabled
        self.api_token = api_token
        self.models = list(models or DEFAULT_MODELS)
        self.timeout_seconds = timeout_seconds

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json", "Accept": "image/png"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def is_configured(self) -> bool:
        return self.enabled and bool(self.models)

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
            raise ProviderNotConfigured("Hugging Face is disabled", self.provider_id)

        # SD 1.x models are trained at 512px; the result is returned at that size.
        width, height = (min(d, 512) for d in dimensions)
        payload = {
            "inputs": prompt,
            "parameters": {
                "guidance_scale": 7.5,
                "num_inference_steps": 20,
                "width": width,
                "height": height,
            },
        }

        failures = []
        with translate_transport_errors(self.provider_id):
            with httpx.Client(timeout=self.timeout_seconds) as client:
                for model in self.models:
                    raise_if_cancelled(self.provider_id, cancel_event)
                    r = client.post(f"{self.BASE_URL}/{model}", json=payload, headers=self._headers())
                    if r.status_code == 503:
                        logger.info("Hugging Face model %s is loading, trying next", model)
                        failures.append(f"{model}: loading")
                        continue
                    try:
                        check_response(self.provider_id, r)
                        return image_from_response(self.provider_id, r)
                    except ProviderRateLimit:
                        raise
                    except ProviderError as e:
                        logger.info("Hugging Face model %s failed: %s", model, e.reason)
                        failures.append(f"{model}: {e.reason}")

        raise ProviderUnavailable("all models failed or are loading (" + "; ".join(failures) + ")", self.provider_id)
