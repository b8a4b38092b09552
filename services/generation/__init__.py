"""Image and video generation jobs against external providers."""

from .client import GenerationJobClient
from .config import JobClientConfig
from .errors import (
    GenerationError,
    GenerationFailed,
    GenerationTimedOut,
    ProviderProtocolError,
    ProviderUnavailable,
)

__all__ = [
    "GenerationJobClient",
    "JobClientConfig",
    "GenerationError",
    "GenerationFailed",
    "GenerationTimedOut",
    "ProviderProtocolError",
    "ProviderUnavailable",
]
