"""Generation service: poster images, scene reference images and video jobs."""

from __future__ import annotations

import asyncio
import time
import uuid as uuid_lib
from pathlib import Path
from typing import Any, Callable
from urllib.parse import urlparse

from shared.config import ServiceConfig, config as service_config
from shared.enums import MediaKind, VideoModel
from shared.http_client import AsyncHTTPClient
from shared.models import (
    Artifact,
    GenerationJob,
    GenerationRequest,
    ImageGenerationResponse,
    PosterImageRequest,
    ReferenceImage,
    SceneImage,
    SceneImagesRequest,
    SceneImagesResponse,
    SceneUploadResponse,
    VideoGenerationRequest,
)
from shared.utils import ensure_directory, extension_for_mime, sanitize_filename, setup_logging

from .client import GenerationJobClient, SleepFunc
from .config import JobClientConfig
from .drivers import PROVIDERS, GenerationProvider, StubGenerationProvider
from .errors import AllGenerationsFailed

DEFAULT_SCENE_VARIATIONS = [
    "",
    " -- vibrant colors, dynamic composition",
    " -- soft lighting, warm atmosphere",
]
DEFAULT_UPLOAD_TYPES = ["image/jpeg", "image/png", "image/webp"]
DEFAULT_UPLOAD_MAX_BYTES = 10 * 1024 * 1024


class GenerationService:
    """Route-level orchestration on top of one job client per capability."""

    def __init__(
        self,
        settings: ServiceConfig | None = None,
        client_config: JobClientConfig | None = None,
        http_client_factory: Callable[[], AsyncHTTPClient] | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.logger = setup_logging("generation-service")
        self.settings = settings or service_config
        self.client_config = client_config or JobClientConfig.from_service_config(self.settings)
        self.http_client_factory = http_client_factory
        self.clients: dict[str, GenerationJobClient] = {
            capability: GenerationJobClient(
                self._load_provider(capability),
                config=self.client_config,
                sleep=sleep,
                logger=self.logger,
            )
            for capability in PROVIDERS
        }

    def _load_provider(self, capability: str) -> GenerationProvider:
        provider_name = str(self.settings.get("generation_provider", "geminigen")).lower()
        kind = MediaKind.IMAGE if capability == "image" else MediaKind.VIDEO

        if provider_name == "stub":
            return StubGenerationProvider(kind)
        if provider_name != "geminigen":
            self.logger.warning("Unknown generation provider '%s', falling back to stub", provider_name)
            return StubGenerationProvider(kind)
        if not self.client_config.api_key:
            self.logger.warning("No GeminiGen API key, %s jobs will return placeholders", capability)
            return StubGenerationProvider(kind)

        defaults = {
            **self.settings.get_catalog_value(f"providers.{capability}", {}),
            "history_endpoint": self.settings.get_catalog_value("history.endpoint"),
        }
        return PROVIDERS[capability](
            self.client_config,
            http_client_factory=self.http_client_factory,
            defaults=defaults,
        )

    def get_client(self, capability: str) -> GenerationJobClient:
        try:
            return self.clients[capability]
        except KeyError as exc:
            raise ValueError(f"Unknown generation capability: {capability}") from exc

    def is_placeholder(self, capability: str) -> bool:
        return isinstance(self.get_client(capability).provider, StubGenerationProvider)

    def describe_providers(self) -> dict[str, str]:
        return {capability: client.provider.name for capability, client in self.clients.items()}

    def _validate_choice(self, capability: str, field: str, value: Any) -> None:
        if value is None:
            return
        allowed = self.settings.get_catalog_value(f"providers.{capability}.{field}")
        if allowed and value not in allowed:
            raise ValueError(f"Invalid {field[:-1]} '{value}' for {capability}; expected one of {allowed}")

    def _default_reference(self) -> ReferenceImage | None:
        reference_url = self.settings.get("reference_image_url")
        return ReferenceImage.from_value(reference_url) if reference_url else None

    async def generate_poster_image(self, request: PosterImageRequest) -> ImageGenerationResponse:
        """Generate a poster in the layout of the chosen social network."""
        self._validate_choice("image", "models", request.model)
        generation_request = GenerationRequest(
            prompt=request.prompt,
            model=request.model or self.settings.get_catalog_value("providers.image.poster_model"),
            aspect_ratio=request.format.aspect_ratio,
            style=request.style or self.settings.get_catalog_value("providers.image.default_style"),
        )
        client = self.get_client("image")
        handle = await client.submit(generation_request)
        artifact = await client.resolve(handle)
        return ImageGenerationResponse(
            image_url=artifact.url,
            thumbnail_url=artifact.thumbnail_url,
            uuid=handle.uuid,
            is_placeholder=self.is_placeholder("image"),
        )

    async def generate_scene_images(self, request: SceneImagesRequest) -> SceneImagesResponse:
        """Generate up to three candidate reference images for one video scene."""
        self._validate_choice("image", "aspect_ratios", request.aspect_ratio)
        variations = self.settings.get_catalog_value("scenes.variations", DEFAULT_SCENE_VARIATIONS)
        max_count = int(self.settings.get_catalog_value("scenes.max_count", len(variations)))
        count = min(request.count, max_count)
        reference = self._default_reference()
        if reference is None:
            self.logger.info("No reference image configured, generating scene images without one")

        style = request.style or self.settings.get_catalog_value("providers.image.scene_style")
        requests = [
            GenerationRequest(
                prompt=f"{request.image_prompt}{suffix}",
                aspect_ratio=request.aspect_ratio,
                style=style,
                reference_image=reference,
            )
            for suffix in variations[:count]
        ]
        self.logger.info("Generating %d images for scene %d", len(requests), request.scene_number)

        stagger = float(self.settings.get_catalog_value("scenes.stagger_seconds", 0))
        batch = await self.get_client("image").generate_many(requests, label="Image", stagger=stagger)
        if not batch.artifacts:
            raise AllGenerationsFailed(batch.errors)

        images = [SceneImage(url=item.url, thumbnail_url=item.thumbnail_url) for item in batch.artifacts]
        if len(images) < len(requests):
            message = f"Generated {len(images)}/{len(requests)} images (some failed)"
        else:
            message = f"Generated {len(images)} images successfully"
        return SceneImagesResponse(
            scene_number=request.scene_number,
            images=images,
            errors=batch.errors or None,
            message=message,
        )

    def _video_request(self, model: VideoModel, request: VideoGenerationRequest) -> GenerationRequest:
        capability = model.value
        self._validate_choice(capability, "aspect_ratios", request.aspect_ratio)
        if model is VideoModel.SORA:
            self._validate_choice(capability, "durations", request.duration)
            reference_value = (
                request.reference_image
                or self.settings.get("reference_image_url")
                or self.settings.get_catalog_value("providers.sora.default_reference")
            )
        else:
            reference_value = request.reference_image
        return GenerationRequest(
            prompt=request.prompt,
            aspect_ratio=request.aspect_ratio,
            duration=request.duration if model is VideoModel.SORA else None,
            reference_image=ReferenceImage.from_value(reference_value) if reference_value else None,
        )

    async def start_video(self, model: VideoModel, request: VideoGenerationRequest) -> GenerationJob:
        """Submit a video job and return its descriptor without waiting."""
        handle = await self.get_client(model.value).submit(self._video_request(model, request))
        return handle.job

    async def get_video_status(self, model: VideoModel, uuid: str) -> GenerationJob:
        """Check a video job once."""
        if not uuid.strip():
            raise ValueError("UUID is required")
        return await self.get_client(model.value).poll(uuid)

    async def generate_video(self, model: VideoModel, request: VideoGenerationRequest) -> Artifact:
        """Submit a video job and wait until it completes."""
        return await self.get_client(model.value).generate(self._video_request(model, request))

    def store_scene_image(
        self,
        content: bytes,
        content_type: str | None,
        scene_number: int = 0,
    ) -> SceneUploadResponse:
        """Store an uploaded reference image under the media root.

        The returned URL is a web-style path that resolves back to the stored
        file when used as a local reference image.
        """
        allowed = self.settings.get_catalog_value("uploads.allowed_types", DEFAULT_UPLOAD_TYPES)
        max_bytes = int(self.settings.get_catalog_value("uploads.max_bytes", DEFAULT_UPLOAD_MAX_BYTES))
        if content_type not in allowed:
            raise ValueError("Invalid file type. Use JPEG, PNG, or WebP.")
        if not content:
            raise ValueError("No file provided")
        if len(content) > max_bytes:
            raise ValueError(f"File too large. Maximum {max_bytes // (1024 * 1024)}MB.")

        directory = self.settings.get_catalog_value("uploads.directory", "uploads/scenes").strip("/")
        target_dir = Path(self.client_config.media_root) / directory
        ensure_directory(str(target_dir))

        filename = sanitize_filename(
            f"scene_{scene_number}_{int(time.time() * 1000)}_{uuid_lib.uuid4().hex[:8]}"
            f".{extension_for_mime(content_type)}"
        )
        (target_dir / filename).write_bytes(content)
        self.logger.info("Uploaded scene image: %s", filename)

        return SceneUploadResponse(filename=filename, url=f"/{directory}/{filename}", size=len(content))

    async def fetch_remote_image(self, url: str) -> tuple[bytes, str]:
        """Download a remote image so browsers can draw it on a canvas."""
        if urlparse(url).scheme not in ("http", "https"):
            raise ValueError("Only http and https URLs can be proxied")
        factory = self.http_client_factory or (
            lambda: AsyncHTTPClient(timeout=self.client_config.request_timeout)
        )
        async with factory() as http:
            content, content_type = await http.get_bytes(url)
        return content, content_type or "image/png"
