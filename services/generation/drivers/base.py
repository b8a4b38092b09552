"""Base classes for generation providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from shared.enums import MediaKind
from shared.models import GenerationJob, GenerationRequest


class GenerationProvider(ABC):
    """Abstract provider that accepts generation jobs and reports their status."""

    name: ClassVar[str]
    kind: ClassVar[MediaKind]

    @abstractmethod
    async def submit(self, request: GenerationRequest) -> dict[str, Any]:
        """Send the request to the provider's creation endpoint and return the raw payload."""

    @abstractmethod
    async def check_status(self, uuid: str) -> dict[str, Any]:
        """Fetch the raw status payload for a job."""

    @abstractmethod
    def normalize_response(
        self,
        payload: dict[str, Any],
        previous: GenerationJob | None = None,
    ) -> GenerationJob:
        """Convert a provider payload into a GenerationJob.

        ``previous`` is the last known view of the job; fields a status payload
        omits are carried over from it.
        """
