"""Text generation service."""

from __future__ import annotations

import json
import re
import time
from typing import Any

from shared.config import ServiceConfig, config as service_config
from shared.models import CompletionRequest, CompletionResponse
from shared.utils import setup_logging

from .drivers import CompletionDriver, OpenAICompletionDriver, StubCompletionDriver
from .errors import InvalidAPIKeyError, InvalidResponseError

FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL)


def parse_json_content(content: str) -> dict[str, Any] | list[Any]:
    """Parse a model reply as JSON, tolerating a markdown code fence around it."""
    text = content.strip()
    match = FENCE_PATTERN.match(text)
    if match:
        text = match.group("body")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidResponseError(f"Model response was not valid JSON: {exc.msg}") from exc
    if not isinstance(data, (dict, list)):
        raise InvalidResponseError("Model response JSON must be an object or array")
    return data


class TextGenerationService:
    """Forward system/user prompt pairs to the configured chat model."""

    def __init__(
        self,
        settings: ServiceConfig | None = None,
        driver: CompletionDriver | None = None,
    ) -> None:
        self.logger = setup_logging("text-generation-service")
        self.settings = settings or service_config
        self.default_model = self.settings.get("text_generation_model", "gpt-5-mini")
        self.driver = driver or self._load_driver()

    def _load_driver(self) -> CompletionDriver:
        provider = str(self.settings.get("text_generation_provider", "openai")).lower()
        if provider == "stub":
            return StubCompletionDriver()
        if provider not in {"openai", "zhipuai"}:
            self.logger.warning("Unknown text provider '%s', falling back to stub", provider)
            return StubCompletionDriver()
        try:
            # ZhipuAI is reached through its OpenAI-compatible endpoint (OPENAI_BASE_URL)
            return OpenAICompletionDriver(
                api_key=self.settings.get("openai_api_key"),
                base_url=self.settings.get("openai_base_url"),
            )
        except InvalidAPIKeyError:
            self.logger.warning("No OpenAI API key configured, using placeholder completions")
            return StubCompletionDriver()

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        start_time = time.time()
        model = request.model or self.default_model
        self.logger.info(
            "Completion via %s/%s (prompt length %d chars)", self.driver.name, model, len(request.user_prompt)
        )

        content = await self.driver.complete(
            request.system_prompt,
            request.user_prompt,
            model=model,
            json_output=request.json_output,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )
        if not content:
            raise InvalidResponseError("Model returned an empty response")

        data = parse_json_content(content) if request.json_output else None
        return CompletionResponse(
            content=content,
            data=data,
            model=model,
            provider=self.driver.name,
            processing_time=time.time() - start_time,
        )
