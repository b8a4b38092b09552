"""Builder for OpenAI-compatible chat completion clients.

The same factory serves api.openai.com and any OpenAI-compatible endpoint
(for example a ZhipuAI gateway) selected through ``OPENAI_BASE_URL``.
"""

from __future__ import annotations

from openai import AsyncOpenAI, OpenAI

from shared.config import config


def create_openai_client(
    api_key: str | None = None,
    base_url: str | None = None,
    async_client: bool = True,
) -> AsyncOpenAI | OpenAI:
    """
    Create an OpenAI client.

    Args:
        api_key: API key (read from configuration if None)
        base_url: Alternative OpenAI-compatible endpoint (read from configuration if None)
        async_client: Whether to return AsyncOpenAI (True) or sync OpenAI (False)

    Returns:
        Configured AsyncOpenAI or OpenAI client

    Raises:
        ValueError: If API key is not configured
    """
    api_key = api_key or config.get("openai_api_key")
    base_url = base_url or config.get("openai_base_url")

    if not api_key:
        raise ValueError("OpenAI API key not configured. Set OPENAI_API_KEY environment variable.")

    if async_client:
        return AsyncOpenAI(api_key=api_key, base_url=base_url)
    return OpenAI(api_key=api_key, base_url=base_url)
