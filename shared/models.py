from typing import Any

from pydantic import BaseModel, Field

from shared.enums import JobStatus, PosterFormat, ReferenceSource


# Domain models
class ReferenceImage(BaseModel):
    source: ReferenceSource
    value: str = Field(..., min_length=1, description="Local path, remote URL or base64 data URL")

    @classmethod
    def from_value(cls, value: str) -> "ReferenceImage":
        """Classify a raw reference string into one of the supported sources."""
        stripped = value.strip()
        if stripped.startswith("data:"):
            return cls(source=ReferenceSource.DATA_URL, value=stripped)
        if stripped.startswith(("http://", "https://")):
            return cls(source=ReferenceSource.REMOTE_URL, value=stripped)
        if stripped.startswith("//"):
            return cls(source=ReferenceSource.REMOTE_URL, value=f"https:{stripped}")
        return cls(source=ReferenceSource.LOCAL_PATH, value=stripped)


class GenerationRequest(BaseModel):
    prompt: str = Field(..., description="Prompt text sent to the provider")
    model: str | None = Field(None, description="Provider model identifier")
    aspect_ratio: str | None = None
    style: str | None = None
    resolution: str | None = None
    duration: int | None = Field(None, gt=0, description="Video duration in seconds")
    reference_image: ReferenceImage | None = None


class Artifact(BaseModel):
    url: str
    thumbnail_url: str | None = None


class GenerationJob(BaseModel):
    id: int | None = None
    uuid: str
    status: JobStatus
    status_desc: str | None = None
    status_percentage: int | None = Field(None, ge=0, le=100)
    result: Artifact | None = None
    error_message: str | None = None
    estimated_credit: float | None = None
    created_at: str | None = None
    model: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class JobHandle(BaseModel):
    provider: str = Field(..., description="Name of the provider that accepted the job")
    job: GenerationJob

    @property
    def uuid(self) -> str:
        return self.job.uuid

    @property
    def status(self) -> JobStatus:
        return self.job.status


class BatchResult(BaseModel):
    artifacts: list[Artifact] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


# Request/Response Models
class PosterImageRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="Poster description built by the caller")
    format: PosterFormat = Field(default=PosterFormat.FACEBOOK)
    model: str | None = None
    style: str | None = None


class ImageGenerationResponse(BaseModel):
    image_url: str
    thumbnail_url: str | None = None
    uuid: str | None = None
    is_placeholder: bool = False


class SceneImagesRequest(BaseModel):
    image_prompt: str = Field(..., min_length=1)
    scene_number: int = Field(default=0, ge=0)
    count: int = Field(default=3, ge=1, le=3)
    aspect_ratio: str = Field(default="16:9")
    style: str | None = None


class SceneImage(BaseModel):
    url: str
    thumbnail_url: str | None = None


class SceneImagesResponse(BaseModel):
    success: bool = True
    scene_number: int
    images: list[SceneImage]
    errors: list[str] | None = None
    message: str


class VideoGenerationRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    duration: int | None = Field(None, description="Sora only: 10 or 15 seconds")
    aspect_ratio: str | None = None
    reference_image: str | None = Field(
        None, description="Local upload path, remote URL or base64 data URL"
    )


class JobStatusResponse(BaseModel):
    uuid: str
    id: int | None = None
    status: JobStatus
    status_percentage: int | None = None
    result_url: str | None = None
    thumbnail_url: str | None = None
    error_message: str | None = None
    estimated_credit: float | None = None
    created_at: str | None = None
    model: str | None = None

    @classmethod
    def from_job(cls, job: GenerationJob) -> "JobStatusResponse":
        return cls(
            uuid=job.uuid,
            id=job.id,
            status=job.status,
            status_percentage=job.status_percentage,
            result_url=job.result.url if job.result else None,
            thumbnail_url=job.result.thumbnail_url if job.result else None,
            error_message=job.error_message,
            estimated_credit=job.estimated_credit,
            created_at=job.created_at,
            model=job.model,
        )


class VideoResultResponse(BaseModel):
    video_url: str
    thumbnail_url: str | None = None


class SceneUploadResponse(BaseModel):
    success: bool = True
    filename: str
    url: str
    size: int


class CompletionRequest(BaseModel):
    system_prompt: str = Field(default="", description="System message for the chat model")
    user_prompt: str = Field(..., min_length=1)
    model: str | None = None
    json_output: bool = Field(default=False, description="Ask for a JSON object and parse it")
    max_tokens: int | None = Field(None, gt=0)
    temperature: float | None = Field(None, ge=0.0, le=2.0)


class CompletionResponse(BaseModel):
    content: str
    data: dict[str, Any] | list[Any] | None = None
    model: str
    provider: str
    processing_time: float
