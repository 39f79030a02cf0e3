"""Pytest configuration and fixtures for visionforge tests."""

from __future__ import annotations

import base64
import os
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock, patch

import pytest

from visionforge import generator
from visionforge.settings import reset_settings

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

TEST_API_KEY = "test-key-123"


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test without a real key, .env file or home storage."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.setenv("VISIONFORGE_STORAGE_DIR", str(tmp_path / "storage"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def api_key_env() -> Iterator[None]:
    """Configure a test API key."""
    with patch.dict(os.environ, {"GEMINI_API_KEY": TEST_API_KEY}):
        yield


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Return sample PNG image bytes (1x1 red pixel)."""
    # Minimal valid PNG: 1x1 red pixel
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIA"
        "X8jx0gAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def sample_image_path(tmp_path: Path, sample_image_bytes: bytes) -> Path:
    """Create a temporary sample image file."""
    image_path = tmp_path / "sample.png"
    image_path.write_bytes(sample_image_bytes)
    return image_path


def make_image_part(data: bytes, mime_type: str = "image/png") -> MagicMock:
    """Create a mock SDK part carrying inline image data."""
    part = MagicMock()
    part.thought = False
    part.text = None
    part.inline_data = MagicMock()
    part.inline_data.data = data
    part.inline_data.mime_type = mime_type
    return part


def make_text_part(text: str) -> MagicMock:
    """Create a mock SDK part carrying text."""
    part = MagicMock()
    part.thought = False
    part.text = text
    part.inline_data = None
    return part


def make_web_chunk(title: str | None, uri: str | None) -> MagicMock:
    """Create a mock grounding chunk with a web citation."""
    chunk = MagicMock()
    chunk.web.title = title
    chunk.web.uri = uri
    return chunk


def make_response(
    parts: list[Any],
    finish_reason: Any = "STOP",
    grounding_chunks: list[Any] | None = None,
) -> MagicMock:
    """Create a mock generate_content response with one candidate."""
    candidate = MagicMock()
    candidate.finish_reason = finish_reason
    candidate.content.parts = parts
    if grounding_chunks is None:
        candidate.grounding_metadata = None
    else:
        candidate.grounding_metadata.grounding_chunks = grounding_chunks

    response = MagicMock()
    response.candidates = [candidate]
    return response


@pytest.fixture
def sdk() -> SimpleNamespace:
    """Factories for mock SDK parts, grounding chunks and responses."""
    return SimpleNamespace(
        image_part=make_image_part,
        text_part=make_text_part,
        web_chunk=make_web_chunk,
        response=make_response,
    )


@pytest.fixture
def mock_genai_response(sample_image_bytes: bytes) -> MagicMock:
    """Create a mock Gemini API response with image data."""
    return make_response([make_image_part(sample_image_bytes)])


@pytest.fixture
def mock_genai_client(mock_genai_response: MagicMock) -> Iterator[MagicMock]:
    """Patch the lazily loaded google.genai modules with mocks.

    Yields the mock client returned by ``genai.Client(...)``.
    """
    mock_genai = MagicMock()
    mock_types = MagicMock()

    mock_client = MagicMock()
    mock_client.models.generate_content.return_value = mock_genai_response
    mock_genai.Client.return_value = mock_client

    with (
        patch.object(generator, "_genai", mock_genai),
        patch.object(generator, "_types", mock_types),
    ):
        yield mock_client
