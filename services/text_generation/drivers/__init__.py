"""Text generation driver implementations."""

from .base import CompletionDriver
from .openai_driver import OpenAICompletionDriver
from .stub import StubCompletionDriver

__all__ = [
    "CompletionDriver",
    "OpenAICompletionDriver",
    "StubCompletionDriver",
]
