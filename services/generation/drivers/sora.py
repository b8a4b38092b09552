"""Sora 2 video generation through GeminiGen."""

from __future__ import annotations

from typing import Any, ClassVar

from shared.enums import MediaKind
from shared.models import Artifact, GenerationRequest

from .geminigen import GeminiGenProvider, _result_url, _usable_url


class SoraVideoProvider(GeminiGenProvider):
    """Sora 2 jobs: 720p, 10 or 15 seconds, landscape or portrait."""

    name = "sora"
    kind = MediaKind.VIDEO
    display_name = "Sora 2"
    endpoint = "/video-gen/sora"
    reference_url_field = "file_urls"
    reference_file_field = "files"
    DEFAULTS: ClassVar[dict[str, Any]] = {
        "model": "sora-2",
        "resolution": "small",
        "default_duration": 15,
        "default_aspect_ratio": "landscape",
    }

    def form_fields(self, request: GenerationRequest) -> list[tuple[str, Any]]:
        return [
            ("prompt", request.prompt),
            ("model", request.model or self.defaults["model"]),
            ("resolution", request.resolution or self.defaults["resolution"]),
            ("duration", request.duration or self.defaults["default_duration"]),
            ("aspect_ratio", request.aspect_ratio or self.defaults["default_aspect_ratio"]),
        ]

    def extract_artifact(self, payload: dict[str, Any]) -> Artifact | None:
        url = _result_url(payload) or _usable_url(payload.get("generate_result"))
        if url is None:
            return None
        return Artifact(url=url, thumbnail_url=_usable_url(payload.get("thumbnail_small")))
