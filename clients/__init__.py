from .base import ImageProvider
from .errors import (
    ProviderError,
    ProviderErrorKind,
    ProviderInvalidResponse,
    ProviderNotConfigured,
    ProviderRateLimit,
    ProviderTimeout,
    ProviderUnavailable,
)
from .huggingface_client import HuggingFaceClient
from .openai_image_client import OpenAIImageClient
from .pollinations_client import PollinationsClient
from .replicate_client import ReplicateClient
from .stability_client import StabilityClient

__all__ = [
    "ImageProvider",
    "ProviderError",
    "ProviderErrorKind",
    "ProviderInvalidResponse",
    "ProviderNotConfigured",
    "ProviderRateLimit",
    "ProviderTimeout",
    "ProviderUnavailable",
    "HuggingFaceClient",
    "OpenAIImageClient",
    "PollinationsClient",
    "ReplicateClient",
    "StabilityClient",
]
