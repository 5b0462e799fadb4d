"""HTTP transport for the generateContent endpoint."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from nanobanana.models.errors import ApiError, ErrorCode
from nanobanana.models.wire import WireResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_TIMEOUT_SECONDS = 120.0
API_KEY_HEADER = "x-goog-api-key"


def _error_message(body: bytes) -> str | None:
    """Return the envelope's error message, if the body carries one."""
    try:
        response = WireResponse.model_validate_json(body)
    except ValidationError:
        return None
    if response.error is None or not response.error.message:
        return None
    return response.error.message


class Transport:
    """Issues single generateContent calls and classifies HTTP outcomes."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize transport.

        Args:
            base_url: Models base URL; the endpoint is <base_url>/<model>:generateContent
            timeout_seconds: Upper bound for one call, after which it counts as a network failure
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def endpoint(self, model_identifier: str) -> str:
        return f"{self.base_url}/{model_identifier}:generateContent"

    async def send(self, body: dict[str, Any], credential: str, model_identifier: str) -> bytes:
        """
        POST one request body and return the raw response bytes.

        Args:
            body: JSON request body
            credential: API key, sent as a header and never in the URL
            model_identifier: Canonical model identifier

        Returns:
            Raw body of a 200 response

        Raises:
            ApiError: NETWORK, AUTH, RATE_LIMITED, BAD_REQUEST or SERVER_ERROR
        """
        url = self.endpoint(model_identifier)
        headers = {
            "Content-Type": "application/json",
            API_KEY_HEADER: credential,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            raise ApiError(
                ErrorCode.NETWORK,
                f"request timed out after {self.timeout_seconds:g}s",
                original_exception=e,
            )
        except httpx.RequestError as e:
            raise ApiError(
                ErrorCode.NETWORK,
                "could not reach API. Check your internet connection",
                original_exception=e,
            )

        status = response.status_code
        logger.debug(f"🌐 [Transport] POST {url} -> {status} ({len(response.content)} bytes)")

        if status == 200:
            return response.content

        if status in (401, 403):
            raise ApiError(ErrorCode.AUTH, "authentication failed. Check your API key: nanobanana setup", status=status)

        if status == 429:
            raise ApiError(ErrorCode.RATE_LIMITED, "rate limit exceeded. Wait and try again", status=status)

        message = _error_message(response.content)
        if status == 400 and message is not None:
            raise ApiError(ErrorCode.BAD_REQUEST, message, status=status)

        logger.warning(f"⚠️ [Transport] API error {status} for {model_identifier}")
        raise ApiError(ErrorCode.SERVER_ERROR, message or "", status=status)
