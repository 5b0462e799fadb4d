"""Locates image data in generateContent responses."""

import base64
import binascii
import logging
import re
from typing import Iterator

from pydantic import ValidationError

from nanobanana.models.errors import ApiError, ErrorCode
from nanobanana.models.responses import ImagePayload
from nanobanana.models.wire import ErrorBody, Part, WireResponse

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"

# Text parts shorter than this are treated as prose, whatever their alphabet
MIN_BASE64_TEXT_LENGTH = 1000

# Best-effort check only: long prose in the base64 alphabet also matches
BASE64_TEXT_RE = re.compile(r"[A-Za-z0-9+/]*={0,2}")


def looks_like_base64_image(text: str) -> bool:
    """Check whether a text part plausibly carries an undeclared base64 image."""
    return len(text) >= MIN_BASE64_TEXT_LENGTH and BASE64_TEXT_RE.fullmatch(text) is not None


def error_from_body(error: ErrorBody, status: int | None = None) -> ApiError:
    """Classify an explicit error object from a response envelope."""
    status = status if status is not None else error.code
    if status == 400:
        return ApiError(ErrorCode.BAD_REQUEST, error.message, status=status)
    return ApiError(ErrorCode.SERVER_ERROR, error.message, status=status)


def parse_envelope(raw: bytes) -> WireResponse:
    """Parse raw response bytes, raising a DECODE ApiError if they are not a valid envelope."""
    try:
        return WireResponse.model_validate_json(raw)
    except ValidationError as e:
        raise ApiError(
            ErrorCode.DECODE,
            f"could not parse API response: {e.errors()[0]['msg'] if e.errors() else e}",
            original_exception=e,
        )


def _iter_parts(response: WireResponse) -> Iterator[Part]:
    for candidate in response.candidates or []:
        if candidate.content is None:
            continue
        yield from candidate.content.parts or []


def extract(raw: bytes) -> ImagePayload:
    """
    Extract the first image from a raw response body.

    Inline data parts win over everything else, across all candidates. Only
    when none exists are long base64-looking text parts tried, as PNG.

    Args:
        raw: Response body bytes from a 200 response

    Returns:
        ImagePayload with decoded bytes and mime type

    Raises:
        ApiError: DECODE for an unparseable envelope or corrupt inline data,
            BAD_REQUEST/SERVER_ERROR for an explicit error object,
            NO_IMAGE_FOUND when no part carries an image
    """
    response = parse_envelope(raw)

    if response.error is not None:
        raise error_from_body(response.error)

    parts = list(_iter_parts(response))

    for part in parts:
        inline = part.inline_data
        if inline is None or not inline.data:
            continue
        try:
            # Line-wrapped base64 is accepted
            data = base64.b64decode(inline.data.replace("\r", "").replace("\n", ""), validate=True)
        except (binascii.Error, ValueError) as e:
            raise ApiError(ErrorCode.DECODE, f"decoding image: {e}", original_exception=e)
        mime_type = inline.mime_type or DEFAULT_MIME_TYPE
        logger.debug(f"🖼️ [ResponseExtractor] Found inline image ({mime_type}, {len(data)} bytes)")
        return ImagePayload(data=data, mime_type=mime_type)

    for part in parts:
        if not part.text or not looks_like_base64_image(part.text):
            continue
        try:
            data = base64.b64decode(part.text, validate=True)
        except (binascii.Error, ValueError):
            logger.debug("🖼️ [ResponseExtractor] Skipping base64-looking text part that failed to decode")
            continue
        logger.debug(f"🖼️ [ResponseExtractor] Found base64 image in text part ({len(data)} bytes)")
        return ImagePayload(data=data, mime_type=DEFAULT_MIME_TYPE)

    raise ApiError(ErrorCode.NO_IMAGE_FOUND, "no image in API response")
