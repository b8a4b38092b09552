"""FastAPI app for the generation service."""

import asyncio

import aiohttp
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from services.generation.errors import (
    AllGenerationsFailed,
    GenerationError,
    GenerationFailed,
    GenerationTimedOut,
    ProviderProtocolError,
    ProviderUnavailable,
)
from services.generation.service import GenerationService
from shared.enums import VideoModel
from shared.http_client import HTTPStatusError
from shared.models import (
    ImageGenerationResponse,
    JobStatusResponse,
    PosterImageRequest,
    SceneImagesRequest,
    SceneImagesResponse,
    SceneUploadResponse,
    VideoGenerationRequest,
    VideoResultResponse,
)
from shared.response_models import HealthResponse
from shared.utils import config, setup_logging

logger = setup_logging("generation-api")

app = FastAPI(
    title="Generation Service",
    description="Poster images, scene reference images and video generation jobs",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

service = GenerationService()

ERROR_STATUS_CODES: dict[type[GenerationError], int] = {
    ProviderUnavailable: 502,
    GenerationFailed: 422,
    GenerationTimedOut: 504,
    ProviderProtocolError: 502,
    AllGenerationsFailed: 500,
}

PROXY_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Cache-Control": "public, max-age=31536000, immutable",
}


def _http_error(exc: GenerationError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    detail: dict = {"message": str(exc), "error_code": exc.error_code}
    if isinstance(exc, ProviderUnavailable) and exc.body:
        detail["provider_response"] = exc.body
    if isinstance(exc, AllGenerationsFailed):
        detail["details"] = exc.errors
    return HTTPException(status_code=status_code, detail=detail)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        message="Generation service is healthy",
        version="1.0.0",
        dependencies=service.describe_providers(),
    )


@app.post("/images", response_model=ImageGenerationResponse)
async def generate_poster_image(request: PosterImageRequest) -> ImageGenerationResponse:
    """Generate a poster image and wait for the result."""
    logger.info("Generating poster image (%s)", request.format.value)
    try:
        return await service.generate_poster_image(request)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except GenerationError as exc:
        logger.error("Poster generation failed: %s", exc)
        raise _http_error(exc) from exc


@app.post("/images/scenes", response_model=SceneImagesResponse)
async def generate_scene_images(request: SceneImagesRequest) -> SceneImagesResponse:
    """Generate candidate reference images for a video scene."""
    try:
        return await service.generate_scene_images(request)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except GenerationError as exc:
        logger.error("Scene image generation failed: %s", exc)
        raise _http_error(exc) from exc


@app.post("/videos/{model}", response_model=JobStatusResponse)
async def start_video(model: VideoModel, request: VideoGenerationRequest) -> JobStatusResponse:
    """Submit a video job; poll /videos/{model}/status for progress."""
    try:
        job = await service.start_video(model, request)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except GenerationError as exc:
        logger.error("%s submission failed: %s", model.value, exc)
        raise _http_error(exc) from exc
    return JobStatusResponse.from_job(job)


@app.get("/videos/{model}/status", response_model=JobStatusResponse)
async def get_video_status(model: VideoModel, uuid: str = "") -> JobStatusResponse:
    """Check a video job once."""
    if not uuid:
        raise HTTPException(status_code=400, detail="UUID is required")
    try:
        job = await service.get_video_status(model, uuid)
    except GenerationError as exc:
        logger.error("%s status check failed: %s", model.value, exc)
        raise _http_error(exc) from exc
    return JobStatusResponse.from_job(job)


@app.post("/videos/{model}/wait", response_model=VideoResultResponse)
async def generate_video(model: VideoModel, request: VideoGenerationRequest) -> VideoResultResponse:
    """Submit a video job and block until it completes, fails or times out."""
    try:
        artifact = await service.generate_video(model, request)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except GenerationError as exc:
        logger.error("%s generation failed: %s", model.value, exc)
        raise _http_error(exc) from exc
    return VideoResultResponse(video_url=artifact.url, thumbnail_url=artifact.thumbnail_url)


@app.post("/uploads/scene-image", response_model=SceneUploadResponse)
async def upload_scene_image(
    file: UploadFile = File(...),
    scene_number: int = Form(0),
) -> SceneUploadResponse:
    """Store a reference image for later video generation."""
    content = await file.read()
    try:
        return service.store_scene_image(content, file.content_type, scene_number)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OSError as exc:
        logger.error("Failed to store scene image: %s", exc)
        raise HTTPException(status_code=500, detail=f"Failed to upload file: {exc!s}") from exc


@app.get("/proxy-image")
async def proxy_image(url: str = "") -> Response:
    """Serve a remote image with open CORS so the editor canvas can export it."""
    if not url:
        return PlainTextResponse("Missing URL", status_code=400)
    try:
        content, content_type = await service.fetch_remote_image(url)
    except ValueError as exc:
        return PlainTextResponse(str(exc), status_code=400)
    except HTTPStatusError as exc:
        return PlainTextResponse(f"Failed to fetch image: {exc.status}", status_code=exc.status)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.error("Proxy error: %s", exc)
        return PlainTextResponse("Internal Server Error", status_code=500)
    return Response(content=content, media_type=content_type, headers=PROXY_HEADERS)


if __name__ == "__main__":
    try:
        import uvicorn
    except ImportError as e:
        raise RuntimeError("uvicorn must be installed to run this service.") from e
    uvicorn.run(app, host="0.0.0.0", port=8010)
