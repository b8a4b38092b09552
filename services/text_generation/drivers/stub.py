"""Offline completion driver used when no API key is configured."""

from __future__ import annotations

import json
from typing import Any

from .base import CompletionDriver


class StubCompletionDriver(CompletionDriver):
    """Echo driver so the wizard keeps working without a model."""

    name = "stub"

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        json_output: bool = False,
        **kwargs: Any,
    ) -> str:
        if json_output:
            return json.dumps({"placeholder": True, "prompt": user_prompt[:200]}, ensure_ascii=False)
        return f"[placeholder] {user_prompt[:200]}"
