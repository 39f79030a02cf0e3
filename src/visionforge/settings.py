"""VisionForge configuration settings.

Environment-based configuration for the API key, storage location and
generation defaults.
"""

from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from visionforge.models import (
    ASPECT_RATIOS,
    DEFAULT_MODEL,
    ENHANCER_MODEL,
    IMAGE_SIZES,
    MODELS,
    STORAGE_KEY,
    AspectRatio,
    ImageSize,
    ModelKey,
)


class ApiKeySettings(BaseSettings):
    """Credential-only view of the environment.

    Reading the key through this class keeps an invalid unrelated setting
    from failing the credential lookup.

    Attributes:
        gemini_api_key: Gemini API key (``GEMINI_API_KEY`` or ``API_KEY``)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    gemini_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
        description="Gemini API key",
    )

    def get_api_key_value(self) -> str | None:
        """Get the API key as a plain string.

        Returns:
            The API key, or None when it is unset or blank.
        """
        if self.gemini_api_key is None:
            return None
        value = self.gemini_api_key.get_secret_value().strip()
        return value or None


class StudioSettings(ApiKeySettings):
    """Configuration for the VisionForge studio.

    All settings can be configured via environment variables or .env file.

    Attributes:
        gemini_api_key: Gemini API key (``GEMINI_API_KEY`` or ``API_KEY``)
        storage_dir: Directory holding the persisted history
        enhancer_model: Text model used by the prompt enhancer
        default_model: Model variant used when none is given
        default_aspect_ratio: Aspect ratio used when none is given
        default_image_size: Resolution used when none is given
        enhance_by_default: Run the prompt enhancer unless disabled
    """

    storage_dir: Path = Field(
        default=Path.home() / ".visionforge",
        alias="VISIONFORGE_STORAGE_DIR",
        description="Directory for persisted history",
    )
    enhancer_model: str = Field(
        default=ENHANCER_MODEL,
        alias="VISIONFORGE_ENHANCER_MODEL",
        description="Text model used to enhance prompts",
    )

    default_model: ModelKey = Field(
        default=DEFAULT_MODEL,
        alias="VISIONFORGE_DEFAULT_MODEL",
        description=f"Default model ({', '.join(MODELS)})",
    )
    default_aspect_ratio: AspectRatio = Field(
        default="1:1",
        alias="VISIONFORGE_DEFAULT_ASPECT",
        description=f"Default aspect ratio ({', '.join(ASPECT_RATIOS)})",
    )
    default_image_size: ImageSize = Field(
        default="1K",
        alias="VISIONFORGE_DEFAULT_SIZE",
        description=f"Default image size ({', '.join(IMAGE_SIZES)})",
    )
    enhance_by_default: bool = Field(
        default=True,
        alias="VISIONFORGE_ENHANCE",
        description="Enhance prompts before generation",
    )

    @field_validator("default_model", mode="before")
    @classmethod
    def normalize_model_key(cls, v: str) -> str:
        """Accept model keys case-insensitively."""
        return v.lower() if isinstance(v, str) else v

    @field_validator("default_image_size", mode="before")
    @classmethod
    def normalize_image_size(cls, v: str) -> str:
        """Accept ``2k`` as well as ``2K``."""
        return v.upper() if isinstance(v, str) else v

    @property
    def history_path(self) -> Path:
        """Path of the persisted history document."""
        return self.storage_dir.expanduser() / f"{STORAGE_KEY}.json"


_settings_instance: StudioSettings | None = None


def get_settings() -> StudioSettings:
    """Get default settings (singleton, reads from environment).

    Returns:
        StudioSettings instance.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = StudioSettings()
    return _settings_instance


def reset_settings() -> None:
    """Reset singleton (for testing)."""
    global _settings_instance
    _settings_instance = None
