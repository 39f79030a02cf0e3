"""Persistent history of generated images.

The history is an ordered list of :class:`HistoryEntry` records, newest
first, stored as a single JSON document at
``<storage_dir>/visionforge_v3_history.json``.

Loading is forgiving:

- a missing, unreadable or non-list document yields an empty history
- entries that fail validation are dropped, the rest keep their order

Every mutation replaces the whole collection and rewrites the document.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from visionforge.models import STORAGE_KEY, HistoryEntry
from visionforge.utils import decode_base64_image, get_file_extension, parse_data_uri

if TYPE_CHECKING:
    from collections.abc import Iterator

    from visionforge.settings import StudioSettings

logger = logging.getLogger(__name__)

__all__ = ["STORAGE_KEY", "HistoryStore", "export_image", "load_entries", "save_entries"]


def load_entries(path: Path) -> list[HistoryEntry]:
    """Load history entries from ``path``.

    Args:
        path: Location of the history JSON document.

    Returns:
        Valid entries in persisted order. Empty if the document is missing
        or malformed.
    """
    if not path.exists():
        return []

    try:
        with open(path, encoding="utf-8") as handle:
            raw_entries = json.load(handle)
    except (OSError, ValueError) as e:
        logger.warning("Discarding unreadable history at %s: %s", path, e)
        return []

    if not isinstance(raw_entries, list):
        logger.warning("Discarding history at %s: not a list", path)
        return []

    entries: list[HistoryEntry] = []
    for raw in raw_entries:
        try:
            entries.append(HistoryEntry.model_validate(raw))
        except ValidationError as e:
            logger.warning("Dropping malformed history entry: %s", e.error_count())

    logger.debug("Loaded %d history entries from %s", len(entries), path)
    return entries


def save_entries(path: Path, entries: list[HistoryEntry] | tuple[HistoryEntry, ...]) -> None:
    """Persist history entries to ``path``, replacing the file atomically.

    Args:
        path: Location of the history JSON document.
        entries: Entries to persist, in display order.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [entry.model_dump(mode="json") for entry in entries]

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug("Saved %d history entries to %s", len(payload), path)


def export_image(entry: HistoryEntry, directory: Path) -> Path:
    """Write the entry's image to ``directory`` as ``visionforge-<id><ext>``.

    Args:
        entry: History entry to export.
        directory: Destination directory (created if missing).

    Returns:
        Path of the written file.

    Raises:
        ValueError: If the entry's URL is not a base64 data URI.
    """
    mime_type, data = parse_data_uri(entry.url)
    directory.mkdir(parents=True, exist_ok=True)
    output_path = directory / f"visionforge-{entry.id}{get_file_extension(mime_type)}"
    output_path.write_bytes(decode_base64_image(data))
    logger.info("Exported %s to %s", entry.id, output_path)
    return output_path


class HistoryStore:
    """Ordered, persisted collection of past generations.

    Example:
        ```python
        store = HistoryStore(Path("~/.visionforge/visionforge_v3_history.json"))
        store.load()
        store.add(entry)
        store.delete(entry.id)
        ```
    """

    def __init__(self, path: Path) -> None:
        """Initialize an empty store backed by ``path``.

        Args:
            path: Location of the history JSON document.
        """
        self.path = path
        self._entries: tuple[HistoryEntry, ...] = ()

    @classmethod
    def from_settings(cls, settings: StudioSettings) -> HistoryStore:
        """Create and load the store configured in ``settings``."""
        store = cls(settings.history_path)
        store.load()
        return store

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        """Entries, newest first."""
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def load(self) -> tuple[HistoryEntry, ...]:
        """Replace the in-memory entries with the persisted ones."""
        self._entries = tuple(load_entries(self.path))
        return self._entries

    def _replace(self, entries: tuple[HistoryEntry, ...]) -> None:
        save_entries(self.path, entries)
        self._entries = entries

    def get(self, entry_id: str) -> HistoryEntry | None:
        """Return the entry with ``entry_id``, or None."""
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def add(self, entry: HistoryEntry) -> None:
        """Insert ``entry`` at the front (newest first)."""
        self._replace((entry, *self._entries))

    def delete(self, entry_id: str) -> bool:
        """Remove the entry with ``entry_id``.

        Returns:
            True if an entry was removed.
        """
        remaining = tuple(entry for entry in self._entries if entry.id != entry_id)
        if len(remaining) == len(self._entries):
            return False
        self._replace(remaining)
        return True

    def clear(self) -> None:
        """Remove all entries."""
        self._replace(())
