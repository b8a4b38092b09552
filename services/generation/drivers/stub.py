"""Placeholder provider used when no GeminiGen key is configured."""

from __future__ import annotations

import uuid as uuid_lib
from typing import Any
from urllib.parse import quote

from shared.enums import JobStatus, MediaKind
from shared.models import Artifact, GenerationJob, GenerationRequest

from .base import GenerationProvider

PLACEHOLDER_VIDEO_URL = "https://sample-videos.com/video321/mp4/720/big_buck_bunny_720p_1mb.mp4"
STUB_PREFIX = "stub-"

ASPECT_DIMENSIONS = {
    "16:9": (1200, 675),
    "landscape": (1200, 675),
    "9:16": (675, 1200),
    "portrait": (675, 1200),
    "1:1": (1080, 1080),
    "4:3": (1200, 900),
    "3:4": (900, 1200),
}


class StubGenerationProvider(GenerationProvider):
    """Completes every job immediately with a placeholder artifact.

    Nothing is stored between calls: a status check for a stub uuid rebuilds
    the completed payload.
    """

    name = "stub"

    def __init__(self, kind: MediaKind = MediaKind.IMAGE) -> None:
        self.kind = kind  # type: ignore[misc]

    def _placeholder(self, aspect_ratio: str | None, prompt: str) -> dict[str, Any]:
        if self.kind is MediaKind.VIDEO:
            return {"result": {"url": PLACEHOLDER_VIDEO_URL}}
        width, height = ASPECT_DIMENSIONS.get(aspect_ratio or "16:9", (1200, 675))
        text = quote(prompt.strip()[:40] or "Nejiba Studio")
        return {
            "generate_result": f"https://placehold.co/{width}x{height}/1a1a24/6366f1?text={text}",
            "thumbnail_small": f"https://placehold.co/{width // 4}x{height // 4}/1a1a24/6366f1",
        }

    def _completed(self, job_uuid: str, aspect_ratio: str | None, prompt: str) -> dict[str, Any]:
        return {
            "uuid": job_uuid,
            "status": 2,
            "status_desc": "completed",
            "status_percentage": 100,
            "estimated_credit": 0,
            **self._placeholder(aspect_ratio, prompt),
        }

    async def submit(self, request: GenerationRequest) -> dict[str, Any]:
        return self._completed(f"{STUB_PREFIX}{uuid_lib.uuid4().hex[:12]}", request.aspect_ratio, request.prompt)

    async def check_status(self, uuid: str) -> dict[str, Any]:
        if not uuid.startswith(STUB_PREFIX):
            return {"uuid": uuid, "status": 3, "error_message": "Unknown placeholder job"}
        return self._completed(uuid, None, "")

    def normalize_response(
        self,
        payload: dict[str, Any],
        previous: GenerationJob | None = None,
    ) -> GenerationJob:
        status = JobStatus.from_code(payload.get("status"))
        result = None
        if status is JobStatus.COMPLETED:
            url = payload.get("generate_result") or (payload.get("result") or {}).get("url")
            result = Artifact(url=url, thumbnail_url=payload.get("thumbnail_small"))
        return GenerationJob(
            uuid=payload.get("uuid") or (previous.uuid if previous else "stub"),
            status=status,
            status_desc=payload.get("status_desc"),
            status_percentage=payload.get("status_percentage"),
            result=result,
            error_message=payload.get("error_message") if status is JobStatus.FAILED else None,
            estimated_credit=payload.get("estimated_credit"),
            model=self.name,
        )
