"""VisionForge.

Image generation studio built on Google's Gemini models.

Features:
    - Text-to-image generation with configurable aspect ratio
    - Adjustable resolution and Google Search grounding (pro model)
    - Reference-based image editing
    - Optional prompt enhancement through a text model
    - Persistent local history with export

Models:
    - flash: Gemini 2.5 Flash Image (fast generation)
    - pro: Gemini 3 Pro Image (up to 4K, search grounding)

Example:
    >>> from visionforge import GenerationSettings, generate_image
    >>> result = generate_image(GenerationSettings(prompt="A futuristic city"))
    >>> result.image_url[:22]
    'data:image/png;base64,'

"""

from visionforge.enhancer import enhance_prompt
from visionforge.exceptions import (
    AbnormalStopError,
    CredentialMissingError,
    ErrorKind,
    NoCandidatesError,
    NoImageError,
    UnclassifiedError,
    VisionForgeError,
    classify_error,
)
from visionforge.generator import generate_image
from visionforge.history import HistoryStore
from visionforge.models import (
    ASPECT_RATIOS,
    DEFAULT_MODEL,
    IMAGE_SIZES,
    MODELS,
    AspectRatio,
    GenerationOutcome,
    GenerationResult,
    GenerationSettings,
    GroundingSource,
    HistoryEntry,
    ImageSize,
    ModelConfig,
    ModelKey,
)
from visionforge.studio import Studio

__all__ = [
    "ASPECT_RATIOS",
    "DEFAULT_MODEL",
    "IMAGE_SIZES",
    "MODELS",
    "AbnormalStopError",
    "AspectRatio",
    "CredentialMissingError",
    "ErrorKind",
    "GenerationOutcome",
    "GenerationResult",
    "GenerationSettings",
    "GroundingSource",
    "HistoryEntry",
    "HistoryStore",
    "ImageSize",
    "ModelConfig",
    "ModelKey",
    "NoCandidatesError",
    "NoImageError",
    "Studio",
    "UnclassifiedError",
    "VisionForgeError",
    "classify_error",
    "enhance_prompt",
    "generate_image",
]

__version__ = "0.1.0"
