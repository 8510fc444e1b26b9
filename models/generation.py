"""
Internal request/result types passed between the facade, the orchestrator and providers.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

LOCAL_FALLBACK = "local-fallback"

# (width, height) in pixels
Dimensions = Tuple[int, int]


@dataclass(frozen=True)
class SourceImage:
    """Raw uploaded bytes plus the MIME type the caller declared."""
    data: bytes
    mime_type: str = "image/png"


@dataclass(frozen=True)
class GenerationRequest:
    source_image: SourceImage
    style: Optional[str] = None
    prompt: Optional[str] = None


@dataclass(frozen=True)
class ProviderImage:
    """What a provider adapter hands back on success."""
    content: bytes
    content_type: str = "image/png"


@dataclass(frozen=True)
class GenerationResult:
    image: bytes
    produced_by: str
    prompt_used: str
    content_type: str = "image/png"

    @property
    def is_local_fallback(self) -> bool:
        return self.produced_by == LOCAL_FALLBACK


def provider_label(provider_id: str) -> str:
    return f"provider:{provider_id}"
