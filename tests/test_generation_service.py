"""Tests for the generation service orchestration layer."""

from typing import Any

import pytest

import services.generation.service as generation_service
from conftest import ScriptedProvider, completed, failed, processing
from services.generation.drivers import GeminiGenImageProvider, SoraVideoProvider, StubGenerationProvider
from services.generation.errors import AllGenerationsFailed, GenerationFailed
from services.generation.service import GenerationService
from shared.enums import PosterFormat, ReferenceSource, VideoModel
from shared.models import (
    GenerationRequest,
    PosterImageRequest,
    SceneImagesRequest,
    VideoGenerationRequest,
)


class SecondImageFails(ScriptedProvider):
    """Fails any prompt carrying the second scene variation."""

    def __init__(self) -> None:
        super().__init__(submit_payload={})

    async def submit(self, request: GenerationRequest) -> dict[str, Any]:
        self.submitted.append(request)
        if "vibrant" in request.prompt:
            return failed(uuid="second", message="provider overloaded")
        return completed(uuid=f"ok-{len(self.submitted)}", url=f"https://cdn.example.com/{len(self.submitted)}.png")


@pytest.fixture
def service(settings, recording_sleep) -> GenerationService:
    return GenerationService(settings=settings, sleep=recording_sleep)


class TestProviderSelection:
    """Choosing real or placeholder providers."""

    def test_stub_without_api_key(self, service) -> None:
        assert service.describe_providers() == {"image": "stub", "sora": "stub", "veo": "stub"}
        assert service.is_placeholder("image")

    def test_geminigen_with_api_key(self, settings, recording_sleep) -> None:
        settings.set("generation_provider", "geminigen")
        settings.set("geminigen_api_key", "secret")
        service = GenerationService(settings=settings, sleep=recording_sleep)

        assert isinstance(service.get_client("image").provider, GeminiGenImageProvider)
        assert isinstance(service.get_client("sora").provider, SoraVideoProvider)
        assert service.get_client("sora").provider.defaults["durations"] == [10, 15]
        assert not service.is_placeholder("veo")

    def test_geminigen_without_key_falls_back(self, settings, recording_sleep) -> None:
        settings.set("generation_provider", "geminigen")
        service = GenerationService(settings=settings, sleep=recording_sleep)

        assert isinstance(service.get_client("veo").provider, StubGenerationProvider)

    def test_unknown_provider_falls_back(self, settings, recording_sleep) -> None:
        settings.set("generation_provider", "midjourney")
        settings.set("geminigen_api_key", "secret")
        service = GenerationService(settings=settings, sleep=recording_sleep)

        assert service.is_placeholder("image")

    def test_unknown_capability(self, service) -> None:
        with pytest.raises(ValueError, match="Unknown generation capability"):
            service.get_client("music")

    def test_history_endpoint_from_catalog(self, settings, recording_sleep, monkeypatch) -> None:
        monkeypatch.setenv("GENERATION_FLAG_HISTORY_ENDPOINT", "/history-v2")
        settings.set("generation_provider", "geminigen")
        settings.set("geminigen_api_key", "secret")
        service = GenerationService(settings=settings, sleep=recording_sleep)

        assert service.get_client("image").provider.history_path == "/history-v2"
        assert service.get_client("veo").provider.history_path == "/history-v2"

    def test_polling_budget_from_catalog(self, service) -> None:
        assert service.client_config.poll_interval == 2.0
        assert service.client_config.max_attempts == 30


class TestPosterImages:
    """Poster generation."""

    @pytest.mark.asyncio
    async def test_instagram_placeholder(self, service) -> None:
        response = await service.generate_poster_image(
            PosterImageRequest(prompt="Workshop poster", format=PosterFormat.INSTAGRAM)
        )

        assert response.is_placeholder
        assert response.image_url.startswith("https://placehold.co/675x1200/")
        assert response.uuid.startswith("stub-")

    @pytest.mark.asyncio
    async def test_poster_defaults(self, service) -> None:
        provider = ScriptedProvider(processing(uuid="p-1"), [completed(uuid="p-1")])
        service.get_client("image").provider = provider

        response = await service.generate_poster_image(PosterImageRequest(prompt="Workshop poster"))

        request = provider.submitted[0]
        assert request.model == "imagen-4-fast"
        assert request.style == "Illustration"
        assert request.aspect_ratio == "16:9"
        assert response.image_url == "https://cdn.example.com/out.png"
        assert response.uuid == "p-1"
        assert not response.is_placeholder

    @pytest.mark.asyncio
    async def test_poster_failure_propagates(self, service) -> None:
        service.get_client("image").provider = ScriptedProvider(failed(message="quota exceeded"))

        with pytest.raises(GenerationFailed, match="quota exceeded"):
            await service.generate_poster_image(PosterImageRequest(prompt="Workshop poster"))

    @pytest.mark.asyncio
    async def test_invalid_model(self, service) -> None:
        with pytest.raises(ValueError, match="Invalid model"):
            await service.generate_poster_image(PosterImageRequest(prompt="x", model="dall-e-3"))


class TestSceneImages:
    """Scene reference image batches."""

    @pytest.mark.asyncio
    async def test_variations_share_reference_and_style(self, settings, recording_sleep) -> None:
        settings.set("reference_image_url", "https://cdn.example.com/amal.png")
        service = GenerationService(settings=settings, sleep=recording_sleep)
        provider = ScriptedProvider(completed())
        service.get_client("image").provider = provider

        response = await service.generate_scene_images(
            SceneImagesRequest(image_prompt="Amal in a garden", scene_number=2)
        )

        assert response.scene_number == 2
        assert len(response.images) == 3
        assert response.message == "Generated 3 images successfully"
        assert response.errors is None
        prompts = sorted(request.prompt for request in provider.submitted)
        assert prompts[0] == "Amal in a garden"
        assert all(request.style == "3D Render" for request in provider.submitted)
        assert all(
            request.reference_image.source is ReferenceSource.REMOTE_URL for request in provider.submitted
        )
        assert sorted(recording_sleep.calls) == [1.5, 3.0]

    @pytest.mark.asyncio
    async def test_partial_failure(self, service) -> None:
        service.get_client("image").provider = SecondImageFails()

        response = await service.generate_scene_images(SceneImagesRequest(image_prompt="Amal"))

        assert len(response.images) == 2
        assert response.errors == ["Image 2: provider overloaded"]
        assert response.message == "Generated 2/3 images (some failed)"

    @pytest.mark.asyncio
    async def test_all_failed(self, service) -> None:
        service.get_client("image").provider = ScriptedProvider(failed(message="down"))

        with pytest.raises(AllGenerationsFailed) as exc_info:
            await service.generate_scene_images(SceneImagesRequest(image_prompt="Amal", count=2))

        assert exc_info.value.errors == ["Image 1: down", "Image 2: down"]

    @pytest.mark.asyncio
    async def test_count_limits_batch(self, service) -> None:
        response = await service.generate_scene_images(SceneImagesRequest(image_prompt="Amal", count=1))

        assert len(response.images) == 1

    @pytest.mark.asyncio
    async def test_catalog_max_count_caps_batch(self, service, monkeypatch) -> None:
        monkeypatch.setenv("GENERATION_FLAG_SCENES_MAX_COUNT", "2")
        provider = ScriptedProvider(completed())
        service.get_client("image").provider = provider

        response = await service.generate_scene_images(SceneImagesRequest(image_prompt="Amal", count=3))

        assert len(provider.submitted) == 2
        assert response.message == "Generated 2 images successfully"

    @pytest.mark.asyncio
    async def test_invalid_aspect_ratio(self, service) -> None:
        with pytest.raises(ValueError, match="Invalid aspect_ratio"):
            await service.generate_scene_images(SceneImagesRequest(image_prompt="Amal", aspect_ratio="21:9"))


class TestVideos:
    """Sora and Veo job handling."""

    @pytest.mark.asyncio
    async def test_start_returns_processing_job(self, service) -> None:
        provider = ScriptedProvider(processing(uuid="v-1", estimated_credit=30))
        service.get_client("sora").provider = provider

        job = await service.start_video(VideoModel.SORA, VideoGenerationRequest(prompt="ad", duration=10))

        assert job.uuid == "v-1"
        assert job.estimated_credit == 30.0
        assert provider.submitted[0].duration == 10
        assert provider.polled == []

    @pytest.mark.asyncio
    async def test_sora_uses_default_reference(self, settings, recording_sleep) -> None:
        settings.set("reference_image_url", "/uploads/scenes/amal.png")
        service = GenerationService(settings=settings, sleep=recording_sleep)
        provider = ScriptedProvider(completed())
        service.get_client("sora").provider = provider

        await service.generate_video(VideoModel.SORA, VideoGenerationRequest(prompt="ad"))

        reference = provider.submitted[0].reference_image
        assert reference.source is ReferenceSource.LOCAL_PATH
        assert reference.value == "/uploads/scenes/amal.png"

    @pytest.mark.asyncio
    async def test_sora_falls_back_to_local_default_reference(self, service) -> None:
        provider = ScriptedProvider(completed())
        service.get_client("sora").provider = provider

        await service.generate_video(VideoModel.SORA, VideoGenerationRequest(prompt="ad"))

        reference = provider.submitted[0].reference_image
        assert reference.source is ReferenceSource.LOCAL_PATH
        assert reference.value == "/amal.jpeg"

    @pytest.mark.asyncio
    async def test_veo_has_no_default_reference(self, service) -> None:
        provider = ScriptedProvider(completed())
        service.get_client("veo").provider = provider

        await service.generate_video(VideoModel.VEO, VideoGenerationRequest(prompt="ad"))

        assert provider.submitted[0].reference_image is None

    @pytest.mark.asyncio
    async def test_veo_drops_duration(self, service) -> None:
        provider = ScriptedProvider(completed())
        service.get_client("veo").provider = provider

        await service.generate_video(
            VideoModel.VEO,
            VideoGenerationRequest(prompt="ad", duration=15, reference_image="https://cdn.example.com/s.png"),
        )

        request = provider.submitted[0]
        assert request.duration is None
        assert request.reference_image.source is ReferenceSource.REMOTE_URL

    @pytest.mark.asyncio
    async def test_invalid_sora_duration(self, service) -> None:
        with pytest.raises(ValueError, match="Invalid duration"):
            await service.start_video(VideoModel.SORA, VideoGenerationRequest(prompt="ad", duration=12))

    @pytest.mark.asyncio
    async def test_invalid_veo_aspect_ratio(self, service) -> None:
        with pytest.raises(ValueError, match="Invalid aspect_ratio"):
            await service.start_video(VideoModel.VEO, VideoGenerationRequest(prompt="ad", aspect_ratio="landscape"))

    @pytest.mark.asyncio
    async def test_status_requires_uuid(self, service) -> None:
        with pytest.raises(ValueError, match="UUID is required"):
            await service.get_video_status(VideoModel.VEO, "  ")

    @pytest.mark.asyncio
    async def test_placeholder_video(self, service) -> None:
        artifact = await service.generate_video(VideoModel.VEO, VideoGenerationRequest(prompt="ad"))

        assert artifact.url.endswith(".mp4")


class TestSceneUploads:
    """Storing uploaded reference images."""

    def test_store_png(self, service, media_root) -> None:
        response = service.store_scene_image(b"png-bytes", "image/png", scene_number=3)

        assert response.success
        assert response.size == 9
        assert response.filename.startswith("scene_3_")
        assert response.filename.endswith(".png")
        assert response.url == f"/uploads/scenes/{response.filename}"
        assert (media_root / "uploads" / "scenes" / response.filename).read_bytes() == b"png-bytes"

    def test_uploads_in_same_millisecond_get_distinct_names(self, service, media_root, monkeypatch) -> None:
        monkeypatch.setattr(generation_service.time, "time", lambda: 1700000000.0)

        first = service.store_scene_image(b"first", "image/jpeg", scene_number=1)
        second = service.store_scene_image(b"second", "image/jpeg", scene_number=1)

        assert first.filename != second.filename
        assert first.filename.startswith("scene_1_1700000000000_")
        directory = media_root / "uploads" / "scenes"
        assert (directory / first.filename).read_bytes() == b"first"
        assert (directory / second.filename).read_bytes() == b"second"

    def test_rejects_other_types(self, service) -> None:
        with pytest.raises(ValueError, match="Invalid file type"):
            service.store_scene_image(b"gif", "image/gif")

    def test_rejects_empty(self, service) -> None:
        with pytest.raises(ValueError, match="No file provided"):
            service.store_scene_image(b"", "image/jpeg")

    def test_rejects_large_files(self, service, monkeypatch) -> None:
        monkeypatch.setenv("GENERATION_FLAG_UPLOADS_MAX_BYTES", "4")

        with pytest.raises(ValueError, match="File too large"):
            service.store_scene_image(b"12345", "image/webp")
