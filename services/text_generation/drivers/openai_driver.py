"""OpenAI-compatible chat completion driver using AsyncOpenAI."""

from __future__ import annotations

from typing import Any

import openai

from services.text_generation.errors import InvalidAPIKeyError, RateLimitError, TextGenerationError
from shared.openai_client import create_openai_client

from .base import CompletionDriver


class OpenAICompletionDriver(CompletionDriver):
    """Chat completions against api.openai.com or any compatible base URL."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        if client is not None:
            self.client = client
            return
        try:
            self.client = create_openai_client(api_key=api_key, base_url=base_url, async_client=True)
        except ValueError as exc:
            raise InvalidAPIKeyError(self.name) from exc

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        json_output: bool = False,
        **kwargs: Any,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        request: dict[str, Any] = {"model": model, "messages": messages}
        if json_output:
            request["response_format"] = {"type": "json_object"}
        if kwargs.get("max_tokens"):
            request["max_completion_tokens"] = kwargs["max_tokens"]
        if kwargs.get("temperature") is not None:
            request["temperature"] = kwargs["temperature"]

        try:
            response = await self.client.chat.completions.create(**request)
        except openai.AuthenticationError as exc:
            raise InvalidAPIKeyError(self.name) from exc
        except openai.RateLimitError as exc:
            retry_after = exc.response.headers.get("retry-after") if exc.response is not None else None
            raise RateLimitError(self.name, float(retry_after) if retry_after else None) from exc
        except openai.APIError as exc:
            raise TextGenerationError(f"OpenAI request failed: {exc}") from exc

        content = response.choices[0].message.content
        if content is not None:
            return content.strip()
        return ""
