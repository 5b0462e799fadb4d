"""Protocol interfaces for nanobanana."""

from typing import Any, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class ImageTransport(Protocol):
    """Protocol for anything that can carry one generateContent call."""

    async def send(self, body: dict[str, Any], credential: str, model_identifier: str) -> bytes:
        """
        Send one request body.

        Args:
            body: JSON request body
            credential: API key
            model_identifier: Canonical model identifier

        Returns:
            Raw body of a successful response

        Raises:
            ApiError: Classified transport or HTTP failure
        """
        ...
