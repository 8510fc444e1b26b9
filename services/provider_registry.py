"""
Fixed-priority set of image providers. Built once at startup and read-only afterwards.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from clients import (
    HuggingFaceClient,
    ImageProvider,
    OpenAIImageClient,
    PollinationsClient,
    ReplicateClient,
    StabilityClient,
)
from config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderDescriptor:
    provider_id: str
    priority: int
    provider: ImageProvider

    @property
    def is_configured(self) -> bool:
        return self.provider.is_configured()

    def probe(self) -> bool:
        try:
            return bool(self.provider.probe())
        except Exception as e:
            logger.warning("Probe for %s raised: %s", self.provider_id, e)
            return False


class ProviderRegistry:
    def __init__(self, providers: Iterable[ImageProvider] = ()):
        descriptors = []
        seen = set()
        for provider in providers:
            if not provider.provider_id:
                raise ValueError(f"{provider!r} has no provider_id")
            if provider.provider_id in seen:
                raise ValueError(f"Duplicate provider id: {provider.provider_id}")
            seen.add(provider.provider_id)
            descriptors.append(
                ProviderDescriptor(
                    provider_id=provider.provider_id,
                    priority=provider.default_priority,
                    provider=provider,
                )
            )
        # sorted() is stable: equal priorities keep registration order.
        self._descriptors: Tuple[ProviderDescriptor, ...] = tuple(
            sorted(descriptors, key=lambda d: d.priority)
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        return cls([
            OpenAIImageClient(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                timeout_seconds=settings.openai_timeout_seconds,
                model=settings.openai_image_model,
            ),
            StabilityClient(
                api_key=settings.stability_api_key,
                timeout_seconds=settings.stability_timeout_seconds,
            ),
            ReplicateClient(
                api_token=settings.replicate_api_token,
                timeout_seconds=settings.replicate_timeout_seconds,
                polling_interval_seconds=settings.polling_interval_seconds,
                max_polling_attempts=settings.max_polling_attempts,
            ),
            PollinationsClient(
                enabled=settings.pollinations_enabled,
                seed=settings.pollinations_seed,
                timeout_seconds=settings.pollinations_timeout_seconds,
            ),
            HuggingFaceClient(
                enabled=settings.huggingface_enabled,
                api_token=settings.huggingface_api_token,
                models=settings.huggingface_models,
                timeout_seconds=settings.huggingface_timeout_seconds,
            ),
        ])

    def __len__(self) -> int:
        return len(self._descriptors)

    def candidates(self) -> Tuple[ProviderDescriptor, ...]:
        """All providers, lowest priority number first."""
        return self._descriptors

    def configured(self) -> Tuple[ProviderDescriptor, ...]:
        return tuple(d for d in self._descriptors if d.is_configured)

    def first_available(self) -> Optional[ProviderDescriptor]:
        """First configured provider whose probe succeeds. For diagnostics only; may do network I/O."""
        for descriptor in self._descriptors:
            if descriptor.is_configured and descriptor.probe():
                return descriptor
        return None
