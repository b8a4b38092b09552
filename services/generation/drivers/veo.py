"""Veo 3.1 Fast video generation through GeminiGen."""

from __future__ import annotations

from typing import Any, ClassVar

from shared.enums import MediaKind
from shared.models import Artifact, GenerationRequest

from .geminigen import GeminiGenProvider, _usable_url


class VeoVideoProvider(GeminiGenProvider):
    """Veo 3.1 Fast jobs: 1080p, fixed 8 second clips."""

    name = "veo"
    kind = MediaKind.VIDEO
    display_name = "Veo 3.1 Fast"
    endpoint = "/video-gen/veo"
    reference_url_field = "ref_images"
    reference_file_field = "files"
    DEFAULTS: ClassVar[dict[str, Any]] = {
        "model": "veo-3.1-fast",
        "resolution": "1080p",
        "default_aspect_ratio": "16:9",
    }

    def form_fields(self, request: GenerationRequest) -> list[tuple[str, Any]]:
        # Veo clips have a fixed length, so duration is never sent
        return [
            ("prompt", request.prompt),
            ("model", request.model or self.defaults["model"]),
            ("resolution", request.resolution or self.defaults["resolution"]),
            ("aspect_ratio", request.aspect_ratio or self.defaults["default_aspect_ratio"]),
        ]

    def extract_artifact(self, payload: dict[str, Any]) -> Artifact | None:
        url = (
            _usable_url(payload.get("output_url"))
            or _usable_url(payload.get("video_url"))
            or _usable_url(payload.get("generate_result"))
        )
        if url is None:
            return None
        return Artifact(url=url, thumbnail_url=_usable_url(payload.get("thumbnail_small")))
