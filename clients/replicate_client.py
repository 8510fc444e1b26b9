"""
Replicate API client: submits an SDXL prediction and polls the job until it finishes.
"""
import logging
import threading
import time
from typing import Any, Optional

import httpx

from models.generation import Dimensions, ProviderImage

from .base import (
    ImageProvider,
    check_response,
    fetch_image,
    raise_if_cancelled,
    read_json,
    to_data_uri,
    translate_transport_errors,
)
from .errors import (
    ProviderInvalidResponse,
    ProviderNotConfigured,
    ProviderTimeout,
    ProviderUnavailable,
)

logger = logging.getLogger(__name__)


class ReplicateClient(ImageProvider):
    provider_id = "replicate"
    default_priority = 30

    SDXL_VERSION = "39ed52f2a78e934b3ba6e2a89f5b1c712de7dfea535525255b1aa35c5565e08b"

    def __init__(
        self,
        api_token: str,
        timeout_seconds: int = 180,
        polling_interval_seconds: float = 1.0,
        max_polling_attempts: int = 120,
        request_timeout_seconds: int = 30,
    ):
        self.api_token = api_token
        self.base_url = "https://api.replicate.com/v1"
        self.timeout_seconds = timeout_seconds
        self.polling_interval = polling_interval_seconds
        self.max_polling_attempts = max_polling_attempts
        self.request_timeout = request_timeout_seconds

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

    def is_configured(self) -> bool:
        return bool(self.api_token)

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
            raise ProviderNotConfigured("REPLICATE_API_TOKEN is not set", self.provider_id)

        with translate_transport_errors(self.provider_id):
            with httpx.Client(timeout=self.request_timeout) as client:
                prediction_id = self.submit_prediction(client, image, mime_type, prompt, dimensions)
                output_url = self.poll_result(client, prediction_id, cancel_event)
                return fetch_image(client, self.provider_id, output_url)

    def submit_prediction(
        self,
        client: httpx.Client,
        image: bytes,
        mime_type: str,
        prompt: str,
        dimensions: Dimensions,
    ) -> str:
        """Submit an image-to-image job. Returns prediction ID."""
        width, height = dimensions
        payload = {
            "version": self.SDXL_VERSION,
            "input": {
                "prompt": prompt,
                "image": to_data_uri(image, mime_type),
                "prompt_strength": 0.8,
                "width": width,
                "height": height,
                "num_inference_steps": 30,
                "guidance_scale": 7.5,
            },
        }
        r = client.post(f"{self.base_url}/predictions", json=payload, headers=self._headers())
        check_response(self.provider_id, r)
        prediction_id = read_json(self.provider_id, r).get("id")
        if not prediction_id:
            raise ProviderInvalidResponse("no prediction ID returned", self.provider_id)
        logger.info("Replicate job submitted: %s", prediction_id)
        return prediction_id

    def poll_result(
        self,
        client: httpx.Client,
        prediction_id: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """Poll until the prediction reaches a terminal status. Returns output URL."""
        url = f"{self.base_url}/predictions/{prediction_id}"
        # Polling never outlives the attempt budget, even if nobody cancels it.
        deadline = time.monotonic() + self.timeout_seconds
        for _ in range(self.max_polling_attempts):
            raise_if_cancelled(self.provider_id, cancel_event)
            if time.monotonic() >= deadline:
                raise ProviderTimeout(
                    f"prediction {prediction_id} not finished within {self.timeout_seconds}s", self.provider_id
                )
            r = client.get(url, headers=self._headers())
            check_response(self.provider_id, r)
            data = read_json(self.provider_id, r)
            status = data.get("status", "")
            if status == "succeeded":
                return self._output_url(data.get("output"))
            if status == "failed":
                raise ProviderUnavailable(
                    f"generation failed: {data.get('error') or 'unknown error'}", self.provider_id
                )
            if status == "canceled":
                raise ProviderUnavailable("generation was canceled", self.provider_id)
            if cancel_event is not None:
                cancel_event.wait(self.polling_interval)
            else:
                time.sleep(self.polling_interval)
        raise ProviderTimeout(
            f"prediction {prediction_id} not finished after {self.max_polling_attempts} polls",
            self.provider_id,
        )

    def _output_url(self, output: Any) -> str:
        if isinstance(output, list) and output:
            first = output[0]
            if isinstance(first, str):
                return first
            if isinstance(first, dict) and first.get("url"):
                return first["url"]
        if isinstance(output, str) and output:
            return output
        raise ProviderInvalidResponse(f"unexpected output format: {output!r}"[:200], self.provider_id)

    def probe(self) -> bool:
        if not self.is_configured():
            return False
        try:
            with httpx.Client(timeout=10) as client:
                r = client.get(f"{self.base_url}/account", headers=self._headers())
            return r.status_code == 200
        except httpx.HTTPError as e:
            logger.debug("Replicate probe failed: %s", e)
            return False
