"""Turn a reference image (local path, remote URL or data URL) into a request attachment."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from shared.enums import ReferenceSource
from shared.file_utils import decode_data_url, extension_for_mime, guess_image_mime
from shared.models import ReferenceImage

logger = logging.getLogger("generation-reference")


class ReferenceAttachment(BaseModel):
    """A reference image ready to be placed in a multipart payload."""

    url: str | None = None
    content: bytes | None = None
    filename: str | None = None
    content_type: str | None = None

    @property
    def is_file(self) -> bool:
        return self.content is not None


def _local_candidates(value: str, media_root: Path) -> list[Path]:
    """Candidate files for a local reference, confined to the media root."""
    root = media_root.resolve()
    # Web-style paths such as /uploads/scenes/x.png live under the media root
    paths = [media_root / value.lstrip("/")]
    if Path(value).is_absolute():
        paths.append(Path(value))
    return [path for path in (p.resolve() for p in paths) if path.is_relative_to(root)]


def resolve_reference(
    reference: ReferenceImage | None,
    media_root: str | Path,
) -> ReferenceAttachment | None:
    """
    Resolve a reference image into an attachment.

    A local file that cannot be found is not an error: the submission goes
    ahead without a reference image.

    Raises:
        ValueError: If a data URL cannot be decoded
    """
    if reference is None:
        return None

    if reference.source is ReferenceSource.REMOTE_URL:
        return ReferenceAttachment(url=reference.value)

    if reference.source is ReferenceSource.DATA_URL:
        mime_type, content = decode_data_url(reference.value)
        return ReferenceAttachment(
            content=content,
            filename=f"reference.{extension_for_mime(mime_type)}",
            content_type=mime_type,
        )

    for candidate in _local_candidates(reference.value, Path(media_root)):
        if candidate.is_file():
            logger.info("Reading local reference image: %s", candidate)
            extension = candidate.suffix.lstrip(".").lower() or "jpeg"
            return ReferenceAttachment(
                content=candidate.read_bytes(),
                filename=f"reference.{extension}",
                content_type=guess_image_mime(candidate.name),
            )

    logger.warning("Local reference file not found: %s; generating without reference", reference.value)
    return None
