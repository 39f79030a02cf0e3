"""Prompt enhancement using a Gemini text model.

Enhancement is best effort: whatever goes wrong, the caller gets the
original prompt back and generation proceeds.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from visionforge import generator
from visionforge.credentials import resolve_api_key
from visionforge.settings import get_settings

if TYPE_CHECKING:
    from visionforge.credentials import KeySelector

logger = logging.getLogger(__name__)

ENHANCE_INSTRUCTION = (
    "You are an expert AI prompt engineer. Expand the following simple "
    "description into a highly detailed, artistic, and visually descriptive "
    "prompt for an image generator. Focus on lighting, texture, composition, "
    "and mood. Keep it under 75 words.\n"
    'Original: "{prompt}"'
)


def build_enhance_instruction(prompt: str) -> str:
    """Embed ``prompt`` in the enhancement instruction."""
    return ENHANCE_INSTRUCTION.format(prompt=prompt)


def enhance_prompt(
    prompt: str,
    *,
    selector: KeySelector | None = None,
    model: str | None = None,
) -> str:
    """Rewrite a short prompt into a richly descriptive one.

    Makes a single text-generation call. Never raises: on a missing key,
    an API or network error, or an empty answer, the failure is logged and
    ``prompt`` is returned unchanged.

    Args:
        prompt: The user's prompt.
        selector: Optional host key-selection facility.
        model: Text model ID. Defaults to the configured enhancer model.

    Returns:
        The enhanced prompt, or ``prompt`` itself on any failure.

    """
    try:
        api_key = resolve_api_key(selector)
        genai, _ = generator._get_genai()
        model_id = model or get_settings().enhancer_model

        logger.debug("Enhancing prompt with %s", model_id)
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=model_id,
            contents=build_enhance_instruction(prompt),
        )
        text = response.text
    except Exception as e:  # noqa: BLE001
        logger.warning("Prompt enhancement failed, using original: %s", e)
        return prompt

    if not isinstance(text, str) or not text.strip():
        logger.warning("Prompt enhancement returned no text, using original")
        return prompt

    return text.strip()
