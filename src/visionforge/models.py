"""Model configurations and data types for VisionForge image generation."""

from __future__ import annotations

import secrets
import time
from typing import Annotated, Literal, TypedDict

from pydantic import BaseModel, ConfigDict, Field, model_validator

from visionforge.exceptions import ErrorKind

# Type aliases for model configuration
ModelKey = Literal["flash", "pro"]
AspectRatio = Literal["1:1", "3:4", "4:3", "9:16", "16:9"]
ImageSize = Literal["1K", "2K", "4K"]


class ModelConfig(TypedDict):
    """Configuration for a Gemini image generation model."""

    id: str
    name: str
    description: str
    supports_image_config: bool
    supports_search: bool


MODELS: dict[ModelKey, ModelConfig] = {
    "flash": {
        "id": "gemini-2.5-flash-image",
        "name": "Gemini 2.5 Flash Image",
        "description": "Fast image generation model",
        "supports_image_config": False,
        "supports_search": False,
    },
    "pro": {
        "id": "gemini-3-pro-image-preview",
        "name": "Gemini 3 Pro Image",
        "description": "Adjustable resolution up to 4K, Google Search grounding",
        "supports_image_config": True,
        "supports_search": True,
    },
}

DEFAULT_MODEL: ModelKey = "flash"
HIGH_QUALITY_MODEL: ModelKey = "pro"

# Text model used to rewrite short prompts
ENHANCER_MODEL = "gemini-3-flash-preview"

ASPECT_RATIOS: list[AspectRatio] = ["1:1", "3:4", "4:3", "9:16", "16:9"]

# Low, medium and high output resolution (high-quality model only)
IMAGE_SIZES: list[ImageSize] = ["1K", "2K", "4K"]

# Persisted history lives under this key in the storage directory
STORAGE_KEY = "visionforge_v3_history"


class GenerationSettings(BaseModel):
    """Everything needed to describe one generation request.

    Attributes:
        prompt: Text instruction for the model.
        aspect_ratio: Output aspect ratio.
        model: Model variant key.
        image_size: Output resolution, honoured by the high-quality model only.
        reference_image: Optional base64-encoded reference image.
        mime_type: Media type of ``reference_image``.
    """

    model_config = ConfigDict(frozen=True)

    prompt: str = ""
    aspect_ratio: AspectRatio = "1:1"
    model: ModelKey = DEFAULT_MODEL
    image_size: ImageSize = "1K"
    reference_image: str | None = None
    mime_type: str | None = None

    @model_validator(mode="after")
    def check_reference_pair(self) -> GenerationSettings:
        """Require a non-empty reference payload and media type together."""
        if bool(self.reference_image) != bool(self.mime_type):
            msg = "reference_image and mime_type must be set together"
            raise ValueError(msg)
        return self

    @property
    def is_high_quality(self) -> bool:
        """Whether the selected model supports resolution and search."""
        return MODELS[self.model]["supports_image_config"]

    @property
    def has_reference(self) -> bool:
        """Whether a reference image is attached."""
        return bool(self.reference_image and self.mime_type)

    def with_prompt(self, prompt: str) -> GenerationSettings:
        """Return a copy using a different prompt."""
        return self.model_copy(update={"prompt": prompt})

    def with_reference(
        self, reference_image: str | None, mime_type: str | None
    ) -> GenerationSettings:
        """Return a copy with the reference image replaced (or cleared)."""
        return GenerationSettings(
            **{
                **self.model_dump(),
                "reference_image": reference_image,
                "mime_type": mime_type,
            }
        )


class GroundingSource(BaseModel):
    """A web citation returned when search grounding was used."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    uri: str | None = None


class ImagePart(BaseModel):
    """Binary content part (an image payload and its media type)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    data: bytes
    mime_type: str


class TextPart(BaseModel):
    """Plain text content part."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


ContentPart = Annotated[ImagePart | TextPart, Field(discriminator="kind")]


class GenerationRequest(BaseModel):
    """SDK-independent description of an outgoing generation call.

    Attributes:
        model_id: Remote model identifier.
        parts: Content parts in send order (reference image first, if any).
        aspect_ratio: Requested aspect ratio.
        image_size: Requested resolution, ``None`` unless the model supports it.
        use_search: Attach Google Search grounding.
    """

    model_config = ConfigDict(frozen=True)

    model_id: str
    parts: tuple[ContentPart, ...]
    aspect_ratio: AspectRatio
    image_size: ImageSize | None = None
    use_search: bool = False


class GenerationResult(BaseModel):
    """Successful output of one generation call."""

    model_config = ConfigDict(frozen=True)

    image_url: str
    text: str = ""
    sources: tuple[GroundingSource, ...] = ()


class EntryConfig(BaseModel):
    """Snapshot of the settings that produced a history entry."""

    model_config = ConfigDict(frozen=True)

    aspect_ratio: AspectRatio
    model: ModelKey
    size: ImageSize | None = None
    has_reference_image: bool = False

    @classmethod
    def from_settings(cls, settings: GenerationSettings) -> EntryConfig:
        """Freeze the relevant fields of ``settings``."""
        return cls(
            aspect_ratio=settings.aspect_ratio,
            model=settings.model,
            size=settings.image_size if settings.is_high_quality else None,
            has_reference_image=settings.has_reference,
        )


class HistoryEntry(BaseModel):
    """One past generation kept in the history gallery.

    Attributes:
        id: Opaque unique token.
        url: Image data URI.
        prompt: Final prompt sent to the model (possibly enhanced).
        timestamp: Creation time in milliseconds since the epoch.
        sources: Grounding citations, in the order the model returned them.
        config: Snapshot of the generation settings.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    prompt: str
    timestamp: int
    sources: tuple[GroundingSource, ...] = ()
    config: EntryConfig

    @classmethod
    def create(
        cls,
        settings: GenerationSettings,
        result: GenerationResult,
        prompt: str,
    ) -> HistoryEntry:
        """Build a new entry for a successful generation."""
        return cls(
            id=secrets.token_hex(4),
            url=result.image_url,
            prompt=prompt,
            timestamp=time.time_ns() // 1_000_000,
            sources=result.sources,
            config=EntryConfig.from_settings(settings),
        )


class GenerationOutcome(BaseModel):
    """Result of a studio generation: either an entry or a classified error.

    Attributes:
        entry: The new history entry on success.
        error_kind: Failure kind name on failure.
        message: Human-readable failure message.
        prompt: Final prompt that was used (or attempted).
    """

    model_config = ConfigDict(frozen=True)

    entry: HistoryEntry | None = None
    error_kind: ErrorKind | None = None
    message: str | None = None
    prompt: str = ""

    @property
    def ok(self) -> bool:
        """Whether the generation produced an entry."""
        return self.entry is not None
