"""
Fallback orchestration: try remote providers one at a time in priority order,
then fall back to the local pixel pipeline, which always produces an image.

    Idle -> TryingProvider(i) -> {Success | NextProvider} -> ...
         -> AllProvidersExhausted -> LocalFallback -> Done

Providers are blocking adapters; each attempt runs in a worker thread under
asyncio.wait_for with the provider's timeout budget. An attempt that times out
is abandoned: its cancel event is set so looping adapters stop, and its
eventual result is discarded. Decoding, encoding and the local pipeline also
run in worker threads so the event loop keeps serving other requests.
"""
import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from clients import ProviderError, ProviderInvalidResponse, ProviderTimeout, ProviderUnavailable
from models.generation import (
    LOCAL_FALLBACK,
    Dimensions,
    GenerationRequest,
    GenerationResult,
    provider_label,
)

from .imaging import InvalidInputError, decode_image, encode_png, to_png
from .pixel_transform import PixelTransformEngine, letterbox
from .provider_registry import ProviderDescriptor, ProviderRegistry
from .style_catalog import StyleCatalog, StyleProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderAttempt:
    provider_id: str
    outcome: str  # "skipped", "success" or a ProviderErrorKind value
    reason: str = ""
    elapsed_seconds: float = 0.0


class FallbackOrchestrator:
    """
    Stateless between requests: everything a run needs lives in generate()'s locals,
    so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        catalog: StyleCatalog,
        engine: PixelTransformEngine,
    ):
        self.registry = registry
        self.catalog = catalog
        self.engine = engine

    @property
    def dimensions(self) -> Dimensions:
        return (self.engine.canvas_size, self.engine.canvas_size)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """
        Produce a styled avatar for the request. Raises InvalidInputError only,
        and only when the source image cannot be decoded.
        """
        attempts: List[ProviderAttempt] = []

        # Decode first: a bad image is fatal and must fail before any provider is called.
        raster = await asyncio.to_thread(decode_image, request.source_image.data)

        profile = self.catalog.resolve(request.style)
        if request.style and not self.catalog.is_known(request.style):
            logger.info("Unknown style %r, using %s", request.style, profile.label)
        prompt = self.catalog.prompt_for(
            request.style, self.catalog.base_prompt(request.style, request.prompt)
        )
        init_image = await asyncio.to_thread(self._init_image, raster)

        for descriptor in self.registry.candidates():
            if not descriptor.is_configured:
                logger.debug("Skipping %s: not configured", descriptor.provider_id)
                attempts.append(ProviderAttempt(descriptor.provider_id, "skipped", "not configured"))
                continue

            image = await self._attempt(descriptor, init_image, prompt, attempts)
            if image is not None:
                return GenerationResult(
                    image=image,
                    produced_by=provider_label(descriptor.provider_id),
                    prompt_used=prompt,
                )

        tried = [a.provider_id for a in attempts if a.outcome != "skipped"]
        logger.warning(
            "No provider succeeded (tried: %s); using local %s effect",
            ", ".join(tried) or "none",
            profile.label,
        )
        image = await asyncio.to_thread(self._render_local, raster, profile)
        return GenerationResult(image=image, produced_by=LOCAL_FALLBACK, prompt_used=prompt)

    async def _attempt(
        self,
        descriptor: ProviderDescriptor,
        init_image: bytes,
        prompt: str,
        attempts: List[ProviderAttempt],
    ) -> Optional[bytes]:
        provider = descriptor.provider
        budget = provider.timeout_budget()
        logger.info("Trying provider %s (budget %gs)", descriptor.provider_id, budget)
        cancel_event = threading.Event()
        start = time.monotonic()
        try:
            try:
                result = await asyncio.wait_for(
                    asyncio.to_thread(
                        provider.generate_image,
                        init_image,
                        "image/png",
                        prompt,
                        self.dimensions,
                        cancel_event=cancel_event,
                    ),
                    timeout=budget,
                )
            except asyncio.TimeoutError as e:
                raise ProviderTimeout(f"no result within {budget:g}s", descriptor.provider_id) from e
            except ProviderError:
                raise
            except Exception as e:
                logger.exception("Provider %s raised unexpectedly", descriptor.provider_id)
                raise ProviderUnavailable(f"unexpected error: {e}", descriptor.provider_id) from e

            try:
                image = await asyncio.to_thread(to_png, result.content)
            except InvalidInputError as e:
                raise ProviderInvalidResponse(f"returned undecodable image: {e}", descriptor.provider_id) from e
        except ProviderError as e:
            elapsed = time.monotonic() - start
            logger.warning(
                "Provider %s failed after %.1fs [%s]: %s",
                descriptor.provider_id,
                elapsed,
                e.kind.value,
                e.reason,
            )
            attempts.append(ProviderAttempt(descriptor.provider_id, e.kind.value, e.reason, elapsed))
            return None
        finally:
            cancel_event.set()

        elapsed = time.monotonic() - start
        attempts.append(ProviderAttempt(descriptor.provider_id, "success", elapsed_seconds=elapsed))
        logger.info("Provider %s succeeded in %.1fs", descriptor.provider_id, elapsed)
        return image

    def _init_image(self, raster: np.ndarray) -> bytes:
        return encode_png(letterbox(raster, self.engine.canvas_size))

    def _render_local(self, raster: np.ndarray, profile: StyleProfile) -> bytes:
        return encode_png(self.engine.apply(raster, profile))

    def generate_sync(self, request: GenerationRequest) -> GenerationResult:
        """Blocking wrapper for scripts and worker threads."""
        return asyncio.run(self.generate(request))
