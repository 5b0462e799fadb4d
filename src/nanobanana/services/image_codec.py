"""Image file I/O: mime detection, passthrough writes and transcoding."""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from nanobanana.models.responses import ImagePayload, extension_for_mime

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_MIME_TYPE = "image/png"
LOSSY_QUALITY = 95

EXTENSION_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

# Destination extension -> Pillow format name
EXTENSION_FORMATS = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".gif": "GIF",
    ".webp": "WEBP",
}


def _sniff_mime(content: bytes) -> Optional[str]:
    try:
        with Image.open(io.BytesIO(content)) as img:
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None


def detect_mime(path: PathLike, content: Optional[bytes] = None) -> str:
    """
    Detect an image's mime type.

    Known extensions decide first; otherwise the content is sniffed (read from
    the file when not given). Anything unrecognised is reported as PNG.
    """
    path = Path(path)
    mime_type = EXTENSION_MIME_TYPES.get(path.suffix.lower())
    if mime_type:
        return mime_type

    if content is None:
        try:
            content = path.read_bytes()
        except OSError:
            return DEFAULT_MIME_TYPE

    sniffed = _sniff_mime(content)
    if sniffed and sniffed.startswith("image/"):
        return sniffed
    return DEFAULT_MIME_TYPE


def read_image(path: PathLike) -> ImagePayload:
    """Read a source image for an edit request."""
    data = Path(path).read_bytes()
    return ImagePayload(data=data, mime_type=detect_mime(path, data))


def write_image(path: PathLike, data: bytes, source_mime: str) -> None:
    """
    Write image bytes to path, transcoding when the extension asks for another format.

    Matching encodings are written verbatim. Otherwise the bytes are decoded
    and re-encoded for the destination extension (PNG for unknown
    extensions). Bytes Pillow cannot decode or re-encode are written
    verbatim, and nothing is written to path until encoding succeeds.

    Raises:
        OSError: If the file cannot be written
    """
    path = Path(path)
    ext = path.suffix.lower()

    if EXTENSION_MIME_TYPES.get(ext) == source_mime:
        path.write_bytes(data)
        return

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError):
        logger.debug(f"💾 [ImageCodec] Cannot decode {source_mime} payload, writing raw bytes to {path}")
        path.write_bytes(data)
        return

    image_format = EXTENSION_FORMATS.get(ext, "PNG")
    save_kwargs = {}
    if image_format in ("JPEG", "WEBP"):
        save_kwargs["quality"] = LOSSY_QUALITY

    logger.debug(f"💾 [ImageCodec] Transcoding {source_mime} -> {image_format} for {path}")
    buffer = io.BytesIO()
    try:
        _normalize_mode(img, image_format).save(buffer, format=image_format, **save_kwargs)
    except (OSError, ValueError) as e:
        logger.debug(f"💾 [ImageCodec] Cannot encode {image_format} ({e}), writing raw bytes to {path}")
        path.write_bytes(data)
        return
    path.write_bytes(buffer.getvalue())


def _normalize_mode(img: Image.Image, image_format: str) -> Image.Image:
    """Convert to a mode the destination format can store."""
    if image_format == "JPEG":
        # JPEG has no alpha channel or palette
        return img if img.mode in ("RGB", "L") else img.convert("RGB")
    if image_format == "GIF":
        return img
    if img.mode in ("RGB", "RGBA", "L", "LA", "P"):
        return img
    has_alpha = "A" in img.getbands() or "transparency" in img.info
    return img.convert("RGBA" if has_alpha else "RGB")


def auto_name(prefix: str, mime_type: str, index: Optional[int] = None) -> str:
    """Timestamped output filename, e.g. nanobanana_20250101_120000_2.png."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = f"_{index + 1}" if index is not None else ""
    return f"{prefix}_{timestamp}{suffix}{extension_for_mime(mime_type)}"


def edited_name(source_path: PathLike) -> str:
    """Default output name for an edit: <stem>_edited<ext>."""
    source_path = Path(source_path)
    return f"{source_path.stem}_edited{source_path.suffix}"


def batch_paths(base: PathLike, count: int) -> list[Path]:
    """Numbered output paths for a user-supplied path; unchanged when count is 1."""
    base = Path(base)
    if count == 1:
        return [base]
    return [base.with_name(f"{base.stem}_{n}{base.suffix}") for n in range(1, count + 1)]
