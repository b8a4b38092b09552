"""Errors raised by the generation job client and its providers."""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for every generation failure surfaced to callers."""

    error_code = "generation_error"


class ProviderUnavailable(GenerationError):
    """The provider could not be reached or rejected the submission."""

    error_code = "provider_unavailable"

    def __init__(self, message: str, status: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class GenerationFailed(GenerationError):
    """The provider reported the job as failed."""

    error_code = "generation_failed"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class GenerationTimedOut(GenerationError):
    """The job was still processing when the poll budget ran out."""

    error_code = "generation_timed_out"

    def __init__(self, uuid: str, attempts: int) -> None:
        super().__init__(f"Generation {uuid} timed out after {attempts} status checks")
        self.uuid = uuid
        self.attempts = attempts


class ProviderProtocolError(GenerationError):
    """The provider answered with a payload that breaks its own contract."""

    error_code = "provider_protocol_error"


class AllGenerationsFailed(GenerationError):
    """Every job in a batch failed."""

    error_code = "all_generations_failed"

    def __init__(self, errors: list[str]) -> None:
        super().__init__("All image generations failed")
        self.errors = errors
