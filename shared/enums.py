"""
Enums and constants used across the application.
"""

from enum import Enum


class JobStatus(str, Enum):
    """Lifecycle state of a generation job as reported by the provider."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def from_code(cls, code: int | str | None) -> "JobStatus":
        """Map a provider status code (1/2/3) to a job status."""
        try:
            return PROVIDER_STATUS_CODES[int(code)]  # type: ignore[arg-type]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Unknown provider status code: {code!r}") from exc

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PROCESSING


PROVIDER_STATUS_CODES = {
    1: JobStatus.PROCESSING,
    2: JobStatus.COMPLETED,
    3: JobStatus.FAILED,
}


class MediaKind(str, Enum):
    """Kind of artifact a provider produces."""

    IMAGE = "image"
    VIDEO = "video"


class ReferenceSource(str, Enum):
    """Where a reference image comes from."""

    LOCAL_PATH = "local_path"
    REMOTE_URL = "remote_url"
    DATA_URL = "data_url"


class PosterFormat(str, Enum):
    """Social network layout for a poster."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"

    @property
    def aspect_ratio(self) -> str:
        return "16:9" if self is PosterFormat.FACEBOOK else "9:16"


class VideoModel(str, Enum):
    """Video model families offered by the generation service."""

    SORA = "sora"
    VEO = "veo"
