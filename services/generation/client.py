"""Submit-then-poll client shared by every image and video generation call."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from shared.enums import JobStatus
from shared.models import Artifact, BatchResult, GenerationJob, GenerationRequest, JobHandle
from shared.utils import setup_logging

from .config import JobClientConfig
from .drivers.base import GenerationProvider
from .errors import (
    GenerationError,
    GenerationFailed,
    GenerationTimedOut,
    ProviderProtocolError,
    ProviderUnavailable,
)

SleepFunc = Callable[[float], Awaitable[None]]


class GenerationJobClient:
    """Drive one provider's jobs from submission to a terminal outcome.

    Each ``resolve`` call owns its polling loop and counter, so several jobs
    can be resolved concurrently on the same client without locking. The
    client keeps no record of jobs once they are resolved.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        config: JobClientConfig | None = None,
        sleep: SleepFunc = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self.provider = provider
        self.config = config or JobClientConfig()
        self._sleep = sleep
        self.logger = logger or setup_logging("generation-client")

    async def submit(self, request: GenerationRequest) -> JobHandle:
        """Send a generation request and return a handle for the accepted job.

        Raises:
            ValueError: If the prompt is empty
            ProviderUnavailable: If the provider cannot be reached or rejects the call
            ProviderProtocolError: If the provider's answer cannot be interpreted
        """
        if not request.prompt or not request.prompt.strip():
            raise ValueError("Prompt is required")

        payload = await self.provider.submit(request)
        job = self.provider.normalize_response(payload)
        self.logger.info(
            "%s accepted job %s (status=%s)", self.provider.name, job.uuid, job.status.value
        )
        return JobHandle(provider=self.provider.name, job=job)

    async def poll(self, uuid: str) -> GenerationJob:
        """Check a job's status once."""
        payload = await self.provider.check_status(uuid)
        # Status payloads may omit the uuid the caller already knows
        known = GenerationJob(uuid=uuid, status=JobStatus.PROCESSING)
        return self.provider.normalize_response(payload, previous=known)

    async def resolve(self, handle: JobHandle) -> Artifact:
        """Wait for a job to reach a terminal state and return its artifact.

        Raises:
            GenerationFailed: The provider reported the job as failed
            GenerationTimedOut: The job was still processing after ``max_attempts`` polls
            ProviderProtocolError: The job completed without a usable result URL
        """
        job = handle.job
        attempts = 0

        while job.status is JobStatus.PROCESSING and attempts < self.config.max_attempts:
            await self._sleep(self.config.poll_interval)
            attempts += 1
            try:
                payload = await self.provider.check_status(job.uuid)
            except ProviderUnavailable as exc:
                # A failed status read leaves the job as last seen; it still counts as an attempt
                self.logger.warning(
                    "Status check %d/%d for %s failed: %s",
                    attempts,
                    self.config.max_attempts,
                    job.uuid,
                    exc,
                )
                continue
            job = self.provider.normalize_response(payload, previous=job)
            self.logger.debug(
                "Poll %d/%d for %s: %s (%s%%)",
                attempts,
                self.config.max_attempts,
                job.uuid,
                job.status.value,
                job.status_percentage if job.status_percentage is not None else "?",
            )

        return self._finish(job, attempts)

    def _finish(self, job: GenerationJob, attempts: int) -> Artifact:
        if job.status is JobStatus.PROCESSING:
            self.logger.error("Job %s timed out after %d polls", job.uuid, attempts)
            raise GenerationTimedOut(job.uuid, attempts)

        if job.status is JobStatus.FAILED:
            message = job.error_message or "Unknown error"
            self.logger.error("Job %s failed: %s", job.uuid, message)
            raise GenerationFailed(message)

        if job.result is None or not job.result.url.strip():
            raise ProviderProtocolError(
                f"{self.provider.name} reported job {job.uuid} completed without a result URL"
            )

        self.logger.info("Job %s completed after %d polls", job.uuid, attempts)
        return job.result

    async def generate(self, request: GenerationRequest) -> Artifact:
        """Submit a request and wait for its artifact."""
        handle = await self.submit(request)
        return await self.resolve(handle)

    async def generate_many(
        self,
        requests: Sequence[GenerationRequest],
        label: str = "Image",
        stagger: float = 0.0,
    ) -> BatchResult:
        """Generate several artifacts concurrently, collecting failures per item.

        ``stagger`` delays the start of the n-th request by ``n * stagger``
        seconds to stay under provider rate limits.
        """

        async def run(index: int, request: GenerationRequest) -> Artifact:
            if index and stagger:
                await self._sleep(index * stagger)
            return await self.generate(request)

        outcomes = await asyncio.gather(
            *(run(index, request) for index, request in enumerate(requests)),
            return_exceptions=True,
        )

        result = BatchResult()
        for index, outcome in enumerate(outcomes, start=1):
            if isinstance(outcome, Artifact):
                result.artifacts.append(outcome)
            elif isinstance(outcome, (GenerationError, ValueError)):
                self.logger.warning("%s %d failed: %s", label, index, outcome)
                result.errors.append(f"{label} {index}: {outcome}")
            else:
                raise outcome
        return result
