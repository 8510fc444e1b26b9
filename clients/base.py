"""
Provider adapter contract and the response helpers the adapters share.

Every adapter turns the common (image, prompt, dimensions) tuple into its own
payload and reports failure only through the ProviderError family, so transport
exceptions never leave the adapter.
"""
import base64
import binascii
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import httpx

from models.generation import Dimensions, ProviderImage

from .errors import (
    ProviderError,
    ProviderInvalidResponse,
    ProviderRateLimit,
    ProviderTimeout,
    ProviderUnavailable,
)


class ImageProvider(ABC):
    """A remote image-generation backend."""

    provider_id: str = ""
    default_priority: int = 100

    @abstractmethod
    def is_configured(self) -> bool:
        """True when the credentials/switches this provider needs are present."""

    @abstractmethod
    def timeout_budget(self) -> float:
        """Seconds the orchestrator allows one generate_image call to take."""

    @abstractmethod
    def generate_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        dimensions: Dimensions,
        cancel_event: Optional[threading.Event] = None,
    ) -> ProviderImage:
        """
        Generate a styled image. Raises ProviderError on any failure.

        cancel_event is set once the caller has given up on this attempt;
        adapters that loop (polling, model fallthrough) stop at the next check.
        """

    def probe(self) -> bool:
        """Best-effort liveness check. Must not raise."""
        return self.is_configured()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.provider_id!r}>"


@contextmanager
def translate_transport_errors(provider_id: str) -> Iterator[None]:
    try:
        yield
    except ProviderError:
        raise
    except httpx.TimeoutException as e:
        raise ProviderTimeout(f"request timed out: {e}", provider_id) from e
    except httpx.HTTPError as e:
        raise ProviderUnavailable(f"transport error: {e}", provider_id) from e


def raise_if_cancelled(provider_id: str, cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ProviderTimeout("attempt abandoned by caller", provider_id)


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text[:500]
    if isinstance(body, dict):
        err = body.get("error") or body.get("message") or body.get("detail")
        if isinstance(err, dict):
            return str(err.get("message", err))
        if err:
            return str(err)
    return str(body)[:500]


def check_response(provider_id: str, r: httpx.Response) -> None:
    if r.status_code == 429:
        raise ProviderRateLimit(f"HTTP 429: {_error_message(r)}", provider_id)
    if r.status_code >= 400:
        raise ProviderUnavailable(f"HTTP {r.status_code}: {_error_message(r)}", provider_id)


def read_json(provider_id: str, r: httpx.Response) -> Dict[str, Any]:
    try:
        data = r.json()
    except ValueError as e:
        raise ProviderInvalidResponse("response is not JSON", provider_id) from e
    if not isinstance(data, dict):
        raise ProviderInvalidResponse(f"unexpected response shape: {type(data).__name__}", provider_id)
    return data


def image_from_response(provider_id: str, r: httpx.Response) -> ProviderImage:
    content_type = r.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type and not content_type.startswith("image/"):
        raise ProviderInvalidResponse(f"expected an image, got {content_type}", provider_id)
    if not r.content:
        raise ProviderInvalidResponse("empty image body", provider_id)
    return ProviderImage(content=r.content, content_type=content_type or "image/png")


def fetch_image(client: httpx.Client, provider_id: str, url: str) -> ProviderImage:
    """Download a result the provider only returned by URL."""
    r = client.get(url)
    check_response(provider_id, r)
    return image_from_response(provider_id, r)


def decode_b64_image(provider_id: str, value: str, content_type: str = "image/png") -> ProviderImage:
    try:
        content = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ProviderInvalidResponse("image payload is not valid base64", provider_id) from e
    if not content:
        raise ProviderInvalidResponse("empty image payload", provider_id)
    return ProviderImage(content=content, content_type=content_type)


def to_data_uri(image: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"
