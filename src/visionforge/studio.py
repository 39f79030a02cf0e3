"""Generation workflow tying the enhancer, generator and history together.

This is the layer a user interface calls. It is where generation failures
are turned into a :class:`GenerationOutcome` instead of propagating.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from visionforge.enhancer import enhance_prompt
from visionforge.exceptions import VisionForgeError
from visionforge.generator import generate_image
from visionforge.history import HistoryStore, export_image
from visionforge.models import GenerationOutcome, GenerationSettings, HistoryEntry
from visionforge.utils import parse_data_uri

if TYPE_CHECKING:
    from pathlib import Path

    from visionforge.credentials import KeySelector

logger = logging.getLogger(__name__)


class Studio:
    """Runs generations and records successful ones in a history store.

    Args:
        history: Store receiving new entries.
        selector: Optional host key-selection facility.
        enhance: Run the prompt enhancer before each generation.
    """

    def __init__(
        self,
        history: HistoryStore,
        *,
        selector: KeySelector | None = None,
        enhance: bool = True,
    ) -> None:
        self.history = history
        self.selector = selector
        self.enhance = enhance

    def generate(self, settings: GenerationSettings) -> GenerationOutcome:
        """Enhance (optionally), generate, and record one image.

        Args:
            settings: Generation settings from the user.

        Returns:
            Outcome holding the new entry, or the failure kind and message.

        Raises:
            ValueError: If the prompt is blank.
        """
        if not settings.prompt.strip():
            msg = "Prompt must not be empty"
            raise ValueError(msg)

        final_prompt = settings.prompt
        if self.enhance:
            final_prompt = enhance_prompt(settings.prompt, selector=self.selector)

        try:
            result = generate_image(
                settings.with_prompt(final_prompt), selector=self.selector
            )
        except VisionForgeError as e:
            return GenerationOutcome(
                error_kind=e.kind, message=e.message, prompt=final_prompt
            )

        entry = HistoryEntry.create(settings, result, final_prompt)
        self.history.add(entry)
        logger.info("Added %s to history", entry.id)
        return GenerationOutcome(entry=entry, prompt=final_prompt)

    def _require(self, entry_id: str) -> HistoryEntry:
        entry = self.history.get(entry_id)
        if entry is None:
            msg = f"No history entry with id {entry_id!r}"
            raise KeyError(msg)
        return entry

    def reuse_prompt(
        self, entry_id: str, settings: GenerationSettings
    ) -> GenerationSettings:
        """Return ``settings`` with the prompt of a past entry."""
        return settings.with_prompt(self._require(entry_id).prompt)

    def use_as_reference(
        self, entry_id: str, settings: GenerationSettings
    ) -> GenerationSettings:
        """Return ``settings`` with a past image attached as reference."""
        mime_type, data = parse_data_uri(self._require(entry_id).url)
        return settings.with_reference(data, mime_type)

    def export(self, entry_id: str, directory: Path) -> Path:
        """Write a past image to ``directory``."""
        return export_image(self._require(entry_id), directory)
