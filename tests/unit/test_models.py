"""Tests for model configurations and data types."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from visionforge.models import (
    ASPECT_RATIOS,
    DEFAULT_MODEL,
    IMAGE_SIZES,
    MODELS,
    EntryConfig,
    GenerationRequest,
    GenerationResult,
    GenerationSettings,
    GroundingSource,
    HistoryEntry,
    ImagePart,
    TextPart,
)


class TestModelConfigurations:
    """Tests for model configuration constants."""

    @pytest.mark.unit
    def test_models_has_flash(self) -> None:
        """Test that the fast model is defined without image config."""
        assert MODELS["flash"]["id"] == "gemini-2.5-flash-image"
        assert MODELS["flash"]["supports_image_config"] is False
        assert MODELS["flash"]["supports_search"] is False

    @pytest.mark.unit
    def test_models_has_pro(self) -> None:
        """Test that the high-quality model supports size and search."""
        assert MODELS["pro"]["id"] == "gemini-3-pro-image-preview"
        assert MODELS["pro"]["supports_image_config"] is True
        assert MODELS["pro"]["supports_search"] is True

    @pytest.mark.unit
    def test_default_model_is_flash(self) -> None:
        """Test that the default model is the fast one."""
        assert DEFAULT_MODEL == "flash"

    @pytest.mark.unit
    def test_aspect_ratios(self) -> None:
        """Test that all expected aspect ratios are defined."""
        assert ASPECT_RATIOS == ["1:1", "3:4", "4:3", "9:16", "16:9"]

    @pytest.mark.unit
    def test_image_sizes(self) -> None:
        """Test that all expected image sizes are defined."""
        assert IMAGE_SIZES == ["1K", "2K", "4K"]


class TestGenerationSettings:
    """Tests for GenerationSettings."""

    @pytest.mark.unit
    def test_defaults(self) -> None:
        """Test default settings."""
        settings = GenerationSettings(prompt="a cat")

        assert settings.aspect_ratio == "1:1"
        assert settings.model == "flash"
        assert settings.image_size == "1K"
        assert settings.has_reference is False
        assert settings.is_high_quality is False

    @pytest.mark.unit
    def test_reference_without_mime_type_rejected(self) -> None:
        """Test that a reference image needs its media type."""
        with pytest.raises(ValidationError, match="set together"):
            GenerationSettings(prompt="a cat", reference_image="aGVsbG8=")

    @pytest.mark.unit
    def test_mime_type_without_reference_rejected(self) -> None:
        """Test that a media type alone is rejected."""
        with pytest.raises(ValidationError, match="set together"):
            GenerationSettings(prompt="a cat", mime_type="image/png")

    @pytest.mark.unit
    def test_empty_reference_with_mime_type_rejected(self) -> None:
        """Test that an empty payload does not count as a reference image."""
        with pytest.raises(ValidationError, match="set together"):
            GenerationSettings(prompt="a cat", reference_image="", mime_type="image/png")

    @pytest.mark.unit
    def test_empty_reference_pair_means_no_reference(self) -> None:
        """Test that empty values on both sides leave no reference attached."""
        settings = GenerationSettings(prompt="a cat", reference_image="", mime_type="")

        assert settings.has_reference is False
        assert EntryConfig.from_settings(settings).has_reference_image is False

    @pytest.mark.unit
    def test_invalid_aspect_ratio_rejected(self) -> None:
        """Test that unknown aspect ratios are rejected."""
        with pytest.raises(ValidationError):
            GenerationSettings(prompt="a cat", aspect_ratio="2:1")  # type: ignore[arg-type]

    @pytest.mark.unit
    def test_settings_are_frozen(self) -> None:
        """Test that settings cannot be mutated."""
        settings = GenerationSettings(prompt="a cat")

        with pytest.raises(ValidationError):
            settings.prompt = "a dog"  # type: ignore[misc]

    @pytest.mark.unit
    def test_with_prompt_returns_copy(self) -> None:
        """Test that with_prompt leaves the original untouched."""
        settings = GenerationSettings(prompt="a cat", model="pro")
        updated = settings.with_prompt("a dog")

        assert updated.prompt == "a dog"
        assert updated.model == "pro"
        assert settings.prompt == "a cat"

    @pytest.mark.unit
    def test_with_reference_sets_and_clears(self) -> None:
        """Test attaching and clearing a reference image."""
        settings = GenerationSettings(prompt="a cat")

        attached = settings.with_reference("aGVsbG8=", "image/jpeg")
        assert attached.has_reference is True
        assert attached.mime_type == "image/jpeg"

        cleared = attached.with_reference(None, None)
        assert cleared.has_reference is False


class TestContentParts:
    """Tests for the tagged content part types."""

    @pytest.mark.unit
    def test_parts_discriminated_by_kind(self) -> None:
        """Test that parts validate into the right variant from plain data."""
        request = GenerationRequest.model_validate(
            {
                "model_id": "m",
                "aspect_ratio": "1:1",
                "parts": [
                    {"kind": "image", "data": b"\x89PNG", "mime_type": "image/png"},
                    {"kind": "text", "text": "hello"},
                ],
            }
        )

        assert isinstance(request.parts[0], ImagePart)
        assert isinstance(request.parts[1], TextPart)


class TestHistoryEntry:
    """Tests for HistoryEntry and EntryConfig."""

    @pytest.mark.unit
    def test_create_from_settings_and_result(self) -> None:
        """Test that create snapshots settings and result."""
        settings = GenerationSettings(
            prompt="a cat", model="pro", image_size="4K", aspect_ratio="16:9"
        )
        result = GenerationResult(
            image_url="data:image/png;base64,AAAA",
            sources=(GroundingSource(title="Wiki", uri="https://example.com"),),
        )

        entry = HistoryEntry.create(settings, result, "a fluffy cat")

        assert entry.url == result.image_url
        assert entry.prompt == "a fluffy cat"
        assert entry.sources == result.sources
        assert entry.config == EntryConfig(
            aspect_ratio="16:9", model="pro", size="4K", has_reference_image=False
        )
        assert entry.timestamp > 0
        assert entry.id

    @pytest.mark.unit
    def test_size_omitted_for_fast_model(self) -> None:
        """Test that the snapshot drops the size for the fast model."""
        settings = GenerationSettings(prompt="a cat", model="flash", image_size="4K")

        assert EntryConfig.from_settings(settings).size is None

    @pytest.mark.unit
    def test_reference_flag_recorded(self) -> None:
        """Test that the snapshot records an attached reference image."""
        settings = GenerationSettings(
            prompt="a cat", reference_image="aGVsbG8=", mime_type="image/png"
        )

        assert EntryConfig.from_settings(settings).has_reference_image is True

    @pytest.mark.unit
    def test_ids_are_unique(self) -> None:
        """Test that each created entry gets a fresh id."""
        settings = GenerationSettings(prompt="a cat")
        result = GenerationResult(image_url="data:image/png;base64,AAAA")

        ids = {HistoryEntry.create(settings, result, "a cat").id for _ in range(50)}

        assert len(ids) == 50
