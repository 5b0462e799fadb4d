"""Shared pytest fixtures for nanobanana tests."""

import base64
import io
import json

import pytest
from PIL import Image

from nanobanana.models.requests import ModelVariant, ResolvedModel
from nanobanana.validation import resolve_model


class FakeTransport:
    """Transport double returning scripted raw bodies or raising scripted errors."""

    def __init__(self, responses=None, default=None):
        """
        Initialize fake transport.

        Args:
            responses: Items consumed in call order (bytes or an exception to raise)
            default: Item used once responses are exhausted
        """
        self.responses = list(responses or [])
        self.default = default
        self.calls = []

    async def send(self, body, credential, model_identifier):
        """Mock send method."""
        self.calls.append({"body": body, "credential": credential, "model": model_identifier})
        item = self.responses.pop(0) if self.responses else self.default
        if isinstance(item, Exception):
            raise item
        return item


def make_response(parts=None, error=None, candidates=None) -> bytes:
    """Build a raw generateContent response body."""
    body = {}
    if candidates is not None:
        body["candidates"] = candidates
    elif parts is not None:
        body["candidates"] = [{"content": {"parts": parts}}]
    if error is not None:
        body["error"] = error
    return json.dumps(body).encode()


def inline_part(data: bytes, mime_type: str | None = "image/png") -> dict:
    inline = {"data": base64.b64encode(data).decode()}
    if mime_type is not None:
        inline["mimeType"] = mime_type
    return {"inlineData": inline}


def encode_image(size=(8, 6), image_format="PNG", color=(200, 30, 30), mode="RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """Small PNG image."""
    return encode_image()


@pytest.fixture
def jpeg_bytes():
    """Small JPEG image."""
    return encode_image(image_format="JPEG")


@pytest.fixture
def image_response(png_bytes):
    """Response body carrying png_bytes as inline data."""
    return make_response(parts=[{"text": "Here you go"}, inline_part(png_bytes)])


@pytest.fixture
def flash_model() -> ResolvedModel:
    return resolve_model("flash")


@pytest.fixture
def pro_model() -> ResolvedModel:
    return resolve_model("pro")


@pytest.fixture
def custom_model() -> ResolvedModel:
    return ResolvedModel(variant=ModelVariant.CUSTOM, identifier="some-future-model-v2")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate credentials, model overrides and the config directory."""
    for name in (
        "NANOBANANA_GEMINI_API_KEY",
        "GEMINI_API_KEY",
        "NANOBANANA_MODEL",
        "NANOBANANA_BASE_URL",
        "NANOBANANA_TIMEOUT_SECONDS",
        "NANOBANANA_MAX_CONCURRENCY",
        "NANOBANANA_HINT_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    return tmp_path
