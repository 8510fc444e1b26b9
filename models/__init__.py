from .generation import (
    LOCAL_FALLBACK,
    GenerationRequest,
    GenerationResult,
    ProviderImage,
    SourceImage,
    provider_label,
)
from .schemas import (
    GenerateAvatarErrorResponse,
    GenerateAvatarRequest,
    GenerateAvatarResponse,
    ProviderInfo,
    ProvidersResponse,
    StyleInfo,
)

__all__ = [
    "LOCAL_FALLBACK",
    "GenerationRequest",
    "GenerationResult",
    "ProviderImage",
    "SourceImage",
    "provider_label",
    "GenerateAvatarErrorResponse",
    "GenerateAvatarRequest",
    "GenerateAvatarResponse",
    "ProviderInfo",
    "ProvidersResponse",
    "StyleInfo",
]
