"""Errors raised by text generation drivers."""


class TextGenerationError(Exception):
    """Chat completion request failed."""

    status_code = 502


class InvalidAPIKeyError(TextGenerationError):
    """The provider rejected the configured API key."""

    status_code = 401

    def __init__(self, provider: str) -> None:
        super().__init__(f"Invalid or missing API key for {provider}")
        self.provider = provider


class RateLimitError(TextGenerationError):
    """The provider is throttling requests."""

    status_code = 429

    def __init__(self, provider: str, retry_after: float | None = None) -> None:
        message = f"Rate limit exceeded for {provider}"
        if retry_after is not None:
            message = f"{message}; retry after {retry_after:g}s"
        super().__init__(message)
        self.provider = provider
        self.retry_after = retry_after


class InvalidResponseError(TextGenerationError):
    """The model answered with content that could not be used."""

    status_code = 502
