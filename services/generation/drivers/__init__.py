"""Generation provider driver registry."""

from .base import GenerationProvider
from .geminigen import GeminiGenImageProvider, GeminiGenProvider
from .sora import SoraVideoProvider
from .stub import StubGenerationProvider
from .veo import VeoVideoProvider

# Capability name -> GeminiGen driver class
PROVIDERS: dict[str, type[GeminiGenProvider]] = {
    "image": GeminiGenImageProvider,
    "sora": SoraVideoProvider,
    "veo": VeoVideoProvider,
}

__all__ = [
    "PROVIDERS",
    "GenerationProvider",
    "GeminiGenProvider",
    "GeminiGenImageProvider",
    "SoraVideoProvider",
    "VeoVideoProvider",
    "StubGenerationProvider",
]
