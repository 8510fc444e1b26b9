"""
Failure taxonomy shared by every image provider adapter.
"""
from enum import Enum
from typing import Optional


class ProviderErrorKind(str, Enum):
    UNCONFIGURED = "unconfigured"
    UNAVAILABLE = "unavailable"
    RATE_LIMITED = "rate_limited"
    INVALID_RESPONSE = "invalid_response"
    TIMEOUT = "timeout"


class ProviderError(Exception):
    kind = ProviderErrorKind.UNAVAILABLE

    def __init__(self, reason: str = "", provider_id: Optional[str] = None):
        super().__init__(reason or self.kind.value)
        self.reason = reason or self.kind.value
        self.provider_id = provider_id

    def __str__(self) -> str:
        if self.provider_id:
            return f"{self.provider_id}: {self.reason}"
        return self.reason


class ProviderNotConfigured(ProviderError):
    kind = ProviderErrorKind.UNCONFIGURED


class ProviderUnavailable(ProviderError):
    kind = ProviderErrorKind.UNAVAILABLE


class ProviderRateLimit(ProviderError):
    kind = ProviderErrorKind.RATE_LIMITED


class ProviderInvalidResponse(ProviderError):
    kind = ProviderErrorKind.INVALID_RESPONSE


class ProviderTimeout(ProviderError):
    kind = ProviderErrorKind.TIMEOUT
