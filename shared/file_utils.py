"""
File utilities.
"""

import base64
import binascii
import re
from pathlib import Path

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.+-]+)*;base64,(?P<payload>.*)$", re.DOTALL)

MIME_EXTENSIONS = {
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/png": "png",
    "image/webp": "webp",
}


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage."""
    invalid_chars = '<>:"/\\|?*'
    for char in invalid_chars:
        filename = filename.replace(char, "_")
    return filename


def ensure_directory(path: str) -> None:
    """Ensure directory exists, create if not."""
    Path(path).mkdir(parents=True, exist_ok=True)


def guess_image_mime(filename: str) -> str:
    """Map an image filename to its MIME type, defaulting to JPEG."""
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension == "png":
        return "image/png"
    if extension == "webp":
        return "image/webp"
    return "image/jpeg"


def extension_for_mime(mime_type: str) -> str:
    """Return the file extension used for an image MIME type."""
    return MIME_EXTENSIONS.get(mime_type.lower(), "jpeg")


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """
    Decode a ``data:<mime>;base64,<payload>`` URL.

    Returns:
        Tuple of (mime type, decoded bytes)

    Raises:
        ValueError: If the URL is not a base64 data URL or the payload is corrupt
    """
    match = DATA_URL_PATTERN.match(data_url.strip())
    if not match:
        raise ValueError("Reference image is not a base64 data URL")

    mime_type = match.group("mime") or "image/jpeg"
    try:
        content = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Reference image data URL has an invalid base64 payload: {exc}") from exc

    if not content:
        raise ValueError("Reference image data URL is empty")
    return mime_type, content
