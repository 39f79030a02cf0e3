"""Tests for utility functions."""

# Bandit B101 (assert_used) is expected in test files - pytest uses assert statements

from __future__ import annotations

import base64
from typing import TYPE_CHECKING

import pytest

from visionforge.utils import (
    decode_base64_image,
    get_file_extension,
    load_image_as_base64,
    parse_data_uri,
    to_data_uri,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestDataUri:
    """Tests for data URI helpers."""

    @pytest.mark.unit
    def test_to_data_uri_from_bytes(self) -> None:
        """Test that bytes are base64-encoded."""
        assert to_data_uri("image/png", b"abc") == "data:image/png;base64,YWJj"

    @pytest.mark.unit
    def test_to_data_uri_from_base64_text(self) -> None:
        """Test that text payloads are used as-is."""
        assert to_data_uri("image/jpeg", "YWJj") == "data:image/jpeg;base64,YWJj"

    @pytest.mark.unit
    def test_parse_data_uri(self) -> None:
        """Test splitting a data URI."""
        assert parse_data_uri("data:image/webp;base64,YWJj") == ("image/webp", "YWJj")

    @pytest.mark.unit
    def test_parse_rejects_plain_url(self) -> None:
        """Test that non data URIs are rejected."""
        with pytest.raises(ValueError, match="data URI"):
            parse_data_uri("https://example.com/cat.png")


class TestLoadImageAsBase64:
    """Tests for load_image_as_base64 function."""

    @pytest.mark.unit
    def test_load_png_image(self, sample_image_path: Path) -> None:
        """Test loading a PNG image."""
        data, mime_type = load_image_as_base64(sample_image_path)

        assert isinstance(data, str)
        assert mime_type == "image/png"
        assert len(base64.standard_b64decode(data)) > 0

    @pytest.mark.unit
    def test_load_jpeg_image(self, tmp_path: Path, sample_image_bytes: bytes) -> None:
        """Test loading a JPEG image (using PNG bytes, just testing extension)."""
        image_path = tmp_path / "image.jpg"
        image_path.write_bytes(sample_image_bytes)

        _, mime_type = load_image_as_base64(image_path)
        assert mime_type == "image/jpeg"

    @pytest.mark.unit
    def test_load_missing_image_raises(self, tmp_path: Path) -> None:
        """Test that loading missing image raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_image_as_base64(tmp_path / "nonexistent.png")


class TestDecodeBase64Image:
    """Tests for decode_base64_image function."""

    @pytest.mark.unit
    def test_decode_valid_base64(self) -> None:
        """Test decoding valid base64 data."""
        original = b"test image data"
        encoded = base64.standard_b64encode(original).decode()

        assert decode_base64_image(encoded) == original

    @pytest.mark.unit
    def test_decode_invalid_base64_raises(self) -> None:
        """Test that bad padding raises ValueError."""
        with pytest.raises(ValueError, match="Invalid base64"):
            decode_base64_image("abc")


class TestGetFileExtension:
    """Tests for get_file_extension function."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("mime_type", "extension"),
        [
            ("image/png", ".png"),
            ("image/jpeg", ".jpg"),
            ("image/gif", ".gif"),
            ("image/webp", ".webp"),
            ("image/unknown", ".png"),
        ],
    )
    def test_extension(self, mime_type: str, extension: str) -> None:
        """Test MIME type to extension mapping."""
        assert get_file_extension(mime_type) == extension
