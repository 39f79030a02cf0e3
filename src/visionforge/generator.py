"""Core image generation functions using Google Gemini.

A generation is one complete attempt: build the request, send it, parse the
response. Every failure leaves this module as a :class:`VisionForgeError`
whose ``kind`` tells the caller what happened.

The google-genai types are dynamically loaded, causing reportUnknown* warnings.
"""
# ruff: noqa: PLC0415

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from visionforge.credentials import resolve_api_key
from visionforge.exceptions import (
    AbnormalStopError,
    CredentialMissingError,
    NoCandidatesError,
    NoImageError,
    UnclassifiedError,
    VisionForgeError,
    error_status_code,
    is_credential_failure,
)
from visionforge.models import (
    MODELS,
    ContentPart,
    GenerationRequest,
    GenerationResult,
    GenerationSettings,
    GroundingSource,
    ImagePart,
    TextPart,
)
from visionforge.utils import decode_base64_image, to_data_uri

if TYPE_CHECKING:
    from visionforge.credentials import KeySelector

logger = logging.getLogger(__name__)

# Finish reason reported for a normal completion
NORMAL_FINISH_REASON = "STOP"

# Lazy import for google.genai
_genai = None
_types = None


def _get_genai() -> tuple[Any, Any]:
    """Lazy import google.genai to avoid import errors when not installed."""
    global _genai, _types  # noqa: PLW0603
    if _genai is None:
        try:
            from google import genai
            from google.genai import types

            _genai = genai
            _types = types
        except ImportError as e:
            msg = (
                "google-genai package not installed. "
                "Install with: pip install google-genai"
            )
            raise ImportError(msg) from e
    return _genai, _types


def build_request(settings: GenerationSettings) -> GenerationRequest:
    """Build the outgoing request for ``settings``.

    The prompt is always sent as a text part. A reference image, when both
    its payload and media type are set, goes first so the model reads it
    before the instruction. Resolution and search grounding are only
    requested from the high-quality model.

    Args:
        settings: Generation settings.

    Returns:
        The SDK-independent request description.

    Raises:
        ValueError: If the reference image is not valid base64.

    """
    model_config = MODELS[settings.model]

    parts: list[ContentPart] = [TextPart(text=settings.prompt)]
    if settings.reference_image and settings.mime_type:
        parts.insert(
            0,
            ImagePart(
                data=decode_base64_image(settings.reference_image),
                mime_type=settings.mime_type,
            ),
        )

    return GenerationRequest(
        model_id=model_config["id"],
        parts=tuple(parts),
        aspect_ratio=settings.aspect_ratio,
        image_size=(
            settings.image_size if model_config["supports_image_config"] else None
        ),
        use_search=model_config["supports_search"],
    )


def to_sdk_call(request: GenerationRequest, types: Any) -> tuple[list[Any], Any]:
    """Convert a request into google-genai contents and config.

    Args:
        request: Request built by :func:`build_request`.
        types: The ``google.genai.types`` module.

    Returns:
        Tuple of (contents, GenerateContentConfig).

    """
    contents: list[Any] = []
    for part in request.parts:
        if isinstance(part, ImagePart):
            contents.append(
                types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
            )
        else:
            contents.append(types.Part.from_text(text=part.text))

    image_config_kwargs: dict[str, Any] = {"aspect_ratio": request.aspect_ratio}
    if request.image_size:
        image_config_kwargs["image_size"] = request.image_size

    config_kwargs: dict[str, Any] = {
        "response_modalities": ["IMAGE", "TEXT"],
        "image_config": types.ImageConfig(**image_config_kwargs),
    }
    if request.use_search:
        config_kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]

    return contents, types.GenerateContentConfig(**config_kwargs)


def _finish_reason_name(value: Any) -> str | None:
    """Normalize an SDK finish reason (enum or string) to its name."""
    if value is None:
        return None
    value = getattr(value, "value", value)
    return str(value) or None


def _to_response_part(part: Any) -> ContentPart | None:
    """Convert one SDK content part, skipping thoughts and empty parts."""
    # Intermediate reasoning output, not the final answer
    if getattr(part, "thought", None) is True:
        return None

    inline_data = getattr(part, "inline_data", None)
    if inline_data is not None and inline_data.data:
        data = inline_data.data
        if isinstance(data, str):
            data = decode_base64_image(data)
        return ImagePart(data=data, mime_type=inline_data.mime_type or "image/png")

    text = getattr(part, "text", None)
    if isinstance(text, str) and text:
        return TextPart(text=text)

    return None


def _extract_sources(candidate: Any) -> tuple[GroundingSource, ...]:
    """Collect web citations from grounding metadata, in order."""
    metadata = getattr(candidate, "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) if metadata else None

    sources: list[GroundingSource] = []
    for chunk in chunks or []:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        sources.append(GroundingSource(title=web.title, uri=web.uri))
    return tuple(sources)


def parse_response(response: Any) -> GenerationResult:
    """Turn a generate_content response into a result.

    Args:
        response: google-genai ``GenerateContentResponse``.

    Returns:
        The image data URI, accompanying text and grounding sources.

    Raises:
        NoCandidatesError: If the response has no candidates.
        AbnormalStopError: If the candidate did not finish with STOP.
        NoImageError: If no image part was returned.

    """
    candidates = getattr(response, "candidates", None)
    if not candidates:
        feedback = getattr(response, "prompt_feedback", None)
        details = {"prompt_feedback": str(feedback)} if feedback else None
        raise NoCandidatesError(details=details)

    candidate = candidates[0]

    finish_reason = _finish_reason_name(getattr(candidate, "finish_reason", None))
    if finish_reason and finish_reason != NORMAL_FINISH_REASON:
        raise AbnormalStopError(finish_reason)

    content = getattr(candidate, "content", None)
    raw_parts = getattr(content, "parts", None) if content else None

    image: ImagePart | None = None
    text = ""
    for raw_part in raw_parts or []:
        part = _to_response_part(raw_part)
        if isinstance(part, ImagePart):
            # Only one image is expected; the last one wins
            image = part
        elif isinstance(part, TextPart):
            text += part.text

    sources = _extract_sources(candidate)

    if image is None:
        raise NoImageError(text or None)

    return GenerationResult(
        image_url=to_data_uri(image.mime_type, image.data),
        text=text,
        sources=sources,
    )


def _reclassify(error: Exception) -> VisionForgeError:
    """Map a failure to the error the caller should see.

    Key, permission and not-found failures all become
    :class:`CredentialMissingError`; other VisionForge errors pass through;
    anything else is wrapped with its message unchanged.
    """
    if isinstance(error, CredentialMissingError):
        return error
    if is_credential_failure(error):
        logger.error("Generation failed with a credential error: %s", error)
        return CredentialMissingError(details={"original_message": str(error)})
    if isinstance(error, VisionForgeError):
        return error
    return UnclassifiedError(str(error), status_code=error_status_code(error))


def generate_image(
    settings: GenerationSettings,
    *,
    selector: KeySelector | None = None,
) -> GenerationResult:
    """Generate an image using Gemini.

    Args:
        settings: Prompt, model variant, aspect ratio, resolution and
            optional reference image.
        selector: Optional host key-selection facility. A selected key
            takes precedence over the configured one.

    Returns:
        The generated image as a data URI, plus caption text and sources.

    Raises:
        CredentialMissingError: If no key is available (checked before any
            network call) or the API rejected it.
        NoCandidatesError: If the model returned nothing.
        AbnormalStopError: If generation stopped early.
        NoImageError: If the response had no image.
        UnclassifiedError: For any other failure.
        ImportError: If google-genai is not installed.

    """
    api_key = resolve_api_key(selector)
    genai, types = _get_genai()

    model_config = MODELS[settings.model]

    try:
        request = build_request(settings)
        contents, config = to_sdk_call(request, types)

        logger.info("Generating image with %s", model_config["name"])
        logger.debug(
            "Request: reference_image=%s image_size=%s search=%s",
            settings.has_reference,
            request.image_size,
            request.use_search,
        )

        # Fresh client per call so a rotated key takes effect immediately
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=request.model_id,
            contents=contents,
            config=config,
        )
        result = parse_response(response)
    except Exception as e:
        classified = _reclassify(e)
        logger.warning("Image generation failed (%s): %s", classified.kind.value, classified)
        if classified is e:
            raise
        raise classified from e

    logger.debug("Image generated with %d source(s)", len(result.sources))
    return result
