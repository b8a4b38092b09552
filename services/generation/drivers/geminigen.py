"""GeminiGen image generation provider and the HTTP plumbing shared by its video siblings."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, ClassVar

import aiohttp

from services.generation.config import JobClientConfig
from services.generation.errors import ProviderProtocolError, ProviderUnavailable
from services.generation.reference import ReferenceAttachment, resolve_reference
from shared.enums import JobStatus, MediaKind
from shared.http_client import AsyncHTTPClient, HTTPStatusError
from shared.models import Artifact, GenerationJob, GenerationRequest
from shared.utils import setup_logging

from .base import GenerationProvider

logger = setup_logging("geminigen-provider")

# (field name, value, options) where options may carry filename/content_type
FormPart = tuple[str, Any, dict[str, str]]


def _error_detail(body: str) -> str:
    """Pull the provider's error message out of an error body when it is JSON."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return body
    if isinstance(data, dict):
        detail = data.get("detail")
        if isinstance(detail, dict) and detail.get("error_message"):
            return str(detail["error_message"])
        if data.get("error_message"):
            return str(data["error_message"])
    return body


def _clamp_percentage(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return max(0, min(100, int(value)))
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _usable_url(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _result_url(payload: dict[str, Any]) -> str | None:
    """Read a `result` field that is either a URL or an object with a `url`."""
    result = payload.get("result")
    if isinstance(result, dict):
        return _usable_url(result.get("url"))
    return _usable_url(result)


class GeminiGenProvider(GenerationProvider):
    """Common submit/status/normalize logic for GeminiGen endpoints."""

    display_name: ClassVar[str] = "GeminiGen"
    endpoint: ClassVar[str]
    history_endpoint: ClassVar[str] = "/history"
    reference_url_field: ClassVar[str] = "file_urls"
    reference_file_field: ClassVar[str] = "files"
    DEFAULTS: ClassVar[dict[str, Any]] = {}

    def __init__(
        self,
        config: JobClientConfig,
        http_client_factory: Callable[[], AsyncHTTPClient] | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        self.config = config
        self.http_client_factory = http_client_factory or (
            lambda: AsyncHTTPClient(timeout=config.request_timeout)
        )
        merged = dict(self.DEFAULTS)
        merged.update({key: value for key, value in (defaults or {}).items() if value is not None})
        self.defaults = merged
        self.endpoint_path: str = merged.get("endpoint", self.endpoint)
        self.history_path: str = merged.get("history_endpoint", self.history_endpoint)

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        if not self.config.api_key:
            raise ProviderUnavailable("GEMINIGEN_API_KEY not configured")
        return {"x-api-key": self.config.api_key}

    def form_fields(self, request: GenerationRequest) -> list[tuple[str, Any]]:
        """Plain (name, value) fields for the creation endpoint."""
        raise NotImplementedError

    def extract_artifact(self, payload: dict[str, Any]) -> Artifact | None:
        """Read the produced artifact out of a completed payload."""
        raise NotImplementedError

    def build_parts(
        self,
        request: GenerationRequest,
        reference: ReferenceAttachment | None,
    ) -> list[FormPart]:
        parts: list[FormPart] = [
            (name, str(value), {}) for name, value in self.form_fields(request) if value is not None
        ]
        if reference is None:
            return parts
        if reference.is_file:
            parts.append(
                (
                    self.reference_file_field,
                    reference.content,
                    {
                        "filename": reference.filename or "reference.jpeg",
                        "content_type": reference.content_type or "image/jpeg",
                    },
                )
            )
        elif reference.url:
            parts.append((self.reference_url_field, reference.url, {}))
        return parts

    @staticmethod
    def build_form(parts: list[FormPart]) -> aiohttp.FormData:
        form = aiohttp.FormData()
        for name, value, options in parts:
            form.add_field(name, value, **options)
        return form

    async def submit(self, request: GenerationRequest) -> dict[str, Any]:
        headers = self._headers()
        reference = resolve_reference(request.reference_image, self.config.media_root)
        parts = self.build_parts(request, reference)
        logger.info(
            "Submitting %s job (prompt length %d chars, reference: %s)",
            self.name,
            len(request.prompt),
            "file" if reference and reference.is_file else "url" if reference else "none",
        )
        return await self._send(self._url(self.endpoint_path), headers, form=self.build_form(parts))

    async def check_status(self, uuid: str) -> dict[str, Any]:
        headers = self._headers()
        return await self._send(self._url(f"{self.history_path}/{uuid}"), headers)

    async def _send(
        self,
        url: str,
        headers: dict[str, str],
        form: aiohttp.FormData | None = None,
    ) -> dict[str, Any]:
        try:
            async with self.http_client_factory() as client:
                if form is None:
                    payload = await client.get(url, headers=headers)
                else:
                    payload = await client.post_form(url, form, headers=headers)
        except HTTPStatusError as exc:
            logger.error("%s API error %s: %s", self.display_name, exc.status, exc.body[:500])
            raise ProviderUnavailable(
                f"{self.display_name} API error: {exc.status} - {_error_detail(exc.body)}",
                status=exc.status,
                body=exc.body,
            ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ProviderUnavailable(f"{self.display_name} request failed: {exc!s}") from exc
        except json.JSONDecodeError as exc:
            raise ProviderProtocolError(f"{self.display_name} returned invalid JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise ProviderProtocolError(f"{self.display_name} returned a non-object payload")
        return payload

    def normalize_response(
        self,
        payload: dict[str, Any],
        previous: GenerationJob | None = None,
    ) -> GenerationJob:
        try:
            status = JobStatus.from_code(payload.get("status"))
        except ValueError as exc:
            raise ProviderProtocolError(str(exc)) from exc

        uuid = payload.get("uuid") or (previous.uuid if previous else None)
        if not uuid and status is JobStatus.PROCESSING:
            # A uuid is only needed to poll
            raise ProviderProtocolError(f"{self.display_name} response carries no job uuid")

        known = previous.model_dump(exclude={"result", "error_message", "status"}) if previous else {}

        def pick(key: str, *aliases: str) -> Any:
            for candidate in (key, *aliases):
                if payload.get(candidate) is not None:
                    return payload[candidate]
            return known.get(key)

        error_message = None
        if status is JobStatus.FAILED:
            detail = payload.get("detail")
            error_message = (
                payload.get("error_message")
                or (detail.get("error_message") if isinstance(detail, dict) else None)
                or "Unknown error"
            )

        job_id = pick("id")
        created_at = pick("created_at")

        return GenerationJob(
            id=int(job_id) if isinstance(job_id, int) or str(job_id).isdigit() else None,
            uuid=str(uuid or ""),
            status=status,
            status_desc=pick("status_desc"),
            status_percentage=_clamp_percentage(pick("status_percentage")),
            result=self.extract_artifact(payload) if status is JobStatus.COMPLETED else None,
            error_message=error_message,
            estimated_credit=_as_float(pick("estimated_credit")),
            created_at=str(created_at) if created_at is not None else None,
            model=pick("model", "model_name"),
        )


class GeminiGenImageProvider(GeminiGenProvider):
    """Imagen models behind GeminiGen's generate_image endpoint."""

    name = "geminigen-image"
    kind = MediaKind.IMAGE
    display_name = "GeminiGen"
    endpoint = "/generate_image"
    DEFAULTS: ClassVar[dict[str, Any]] = {
        "default_model": "imagen-pro",
        "default_aspect_ratio": "16:9",
    }

    def form_fields(self, request: GenerationRequest) -> list[tuple[str, Any]]:
        return [
            ("prompt", request.prompt),
            ("model", request.model or self.defaults["default_model"]),
            ("aspect_ratio", request.aspect_ratio or self.defaults["default_aspect_ratio"]),
            ("style", request.style),
        ]

    def extract_artifact(self, payload: dict[str, Any]) -> Artifact | None:
        url = _usable_url(payload.get("generate_result")) or _result_url(payload)
        if url is None:
            images = payload.get("generated_image") or []
            if isinstance(images, list) and images and isinstance(images[0], dict):
                url = _usable_url(images[0].get("image_url"))
        if url is None:
            return None
        return Artifact(url=url, thumbnail_url=_usable_url(payload.get("thumbnail_small")))
