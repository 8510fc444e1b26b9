"""Shared pytest fixtures: fake providers and in-memory test images."""

import io
import threading
import time
from typing import List, Optional, Tuple

import pytest
from PIL import Image

from clients import ImageProvider, ProviderTimeout
from models.generation import Dimensions, ProviderImage
from services import FallbackOrchestrator, PixelTransformEngine, ProviderRegistry, StyleCatalog

SOLID_RGB = (100, 150, 200)


def make_image_bytes(
    size: Tuple[int, int] = (256, 256),
    color: Tuple[int, ...] = SOLID_RGB,
    fmt: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


class FakeProvider(ImageProvider):
    """
    In-process provider. Either returns `image`, raises `error`, or sleeps past its budget.
    A sleep is cut short when the orchestrator sets the attempt's cancel event.
    """

    def __init__(
        self,
        provider_id: str,
        priority: int = 100,
        configured: bool = True,
        image: Optional[bytes] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        budget: float = 5.0,
        probe_ok: bool = True,
        call_log: Optional[List[str]] = None,
    ):
        self.provider_id = provider_id
        self.default_priority = priority
        self.configured = configured
        self.image = image if image is not None else make_image_bytes((32, 32), (10, 20, 30))
        self.error = error
        self.delay = delay
        self.budget = budget
        self.probe_ok = probe_ok
        self.calls: List[Tuple[bytes, str, str, Dimensions]] = []
        self.call_log = call_log
        self.cancelled = False
        self.finished = threading.Event()

    def is_configured(self) -> bool:
        return self.configured

    def timeout_budget(self) -> float:
        return self.budget

    def generate_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        dimensions: Dimensions,
        cancel_event: Optional[threading.Event] = None,
    ) -> ProviderImage:
        self.calls.append((image, mime_type, prompt, dimensions))
        if self.call_log is not None:
            self.call_log.append(self.provider_id)
        try:
            if self.delay:
                if cancel_event is None:
                    time.sleep(self.delay)
                elif cancel_event.wait(self.delay):
                    self.cancelled = True
                    raise ProviderTimeout("cancelled", self.provider_id)
            if self.error is not None:
                raise self.error
            return ProviderImage(content=self.image)
        finally:
            self.finished.set()

    def probe(self) -> bool:
        return self.configured and self.probe_ok


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes((256, 256), (180, 90, 40), fmt="JPEG")


@pytest.fixture
def gray_jpeg() -> bytes:
    # Mid-grey survives JPEG exactly: zero chroma and a flat luma block.
    return make_image_bytes((256, 256), (128, 128, 128), fmt="JPEG")


@pytest.fixture
def solid_png() -> bytes:
    return make_image_bytes((256, 256), SOLID_RGB)


@pytest.fixture
def wide_png() -> bytes:
    return make_image_bytes((400, 200), (255, 255, 255))


@pytest.fixture
def catalog() -> StyleCatalog:
    return StyleCatalog()


@pytest.fixture
def make_orchestrator(catalog):
    """Build an orchestrator over the given fake providers with a small canvas."""

    def _make(*providers: ImageProvider, canvas_size: int = 64) -> FallbackOrchestrator:
        return FallbackOrchestrator(
            registry=ProviderRegistry(providers),
            catalog=catalog,
            engine=PixelTransformEngine(canvas_size=canvas_size),
        )

    return _make
