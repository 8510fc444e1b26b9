from .imaging import InvalidInputError
from .orchestrator import FallbackOrchestrator
from .pixel_transform import PixelTransformEngine
from .provider_registry import ProviderDescriptor, ProviderRegistry
from .request_facade import RequestFacade
from .style_catalog import StyleCatalog, StyleId, StyleProfile

__all__ = [
    "InvalidInputError",
    "FallbackOrchestrator",
    "PixelTransformEngine",
    "ProviderDescriptor",
    "ProviderRegistry",
    "RequestFacade",
    "StyleCatalog",
    "StyleId",
    "StyleProfile",
]
