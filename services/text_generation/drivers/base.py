from abc import ABC, abstractmethod
from typing import Any


class CompletionDriver(ABC):
    """Abstract base class for chat completion drivers."""

    name: str = "base"

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        json_output: bool = False,
        **kwargs: Any,
    ) -> str:
        """Return the model's reply for a system/user prompt pair."""
        pass
