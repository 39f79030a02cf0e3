"""API key resolution and key selection.

The key is looked up fresh on every call so a rotated key in the
environment or ``.env`` file is picked up without restarting.
"""

from __future__ import annotations

import getpass
import logging
from typing import Protocol, runtime_checkable

from visionforge.exceptions import CredentialMissingError
from visionforge.settings import ApiKeySettings

logger = logging.getLogger(__name__)


@runtime_checkable
class KeySelector(Protocol):
    """Host facility that lets the user pick an API key."""

    def has_selected_key(self) -> bool:
        """Return True when a key is currently selected."""
        ...

    def open_select_key(self) -> None:
        """Ask the user to select a key."""
        ...

    def selected_key(self) -> str | None:
        """Return the selected key, if any."""
        ...


class InteractiveKeySelector:
    """Terminal key selector that prompts with ``getpass``.

    The key is kept in memory only.
    """

    def __init__(self, prompt: str = "Gemini API key: ") -> None:
        self._prompt = prompt
        self._key: str | None = None

    def has_selected_key(self) -> bool:
        return bool(self._key)

    def open_select_key(self) -> None:
        try:
            entered = getpass.getpass(self._prompt)
        except (EOFError, KeyboardInterrupt):
            logger.info("Key selection cancelled")
            return
        self._key = entered.strip() or None

    def selected_key(self) -> str | None:
        return self._key


def resolve_api_key(selector: KeySelector | None = None) -> str:
    """Return the API key to use for the next call.

    A key picked through the selector wins over the configured one, so a
    key chosen after a rejection replaces a revoked environment key. Only
    the credential is read from the environment and ``.env`` file.

    Args:
        selector: Optional host key-selection facility.

    Returns:
        The API key.

    Raises:
        CredentialMissingError: If no key is selected or configured.
    """
    if selector is not None and selector.has_selected_key():
        api_key = selector.selected_key()
        if api_key:
            return api_key

    api_key = ApiKeySettings().get_api_key_value()
    if api_key:
        return api_key

    msg = (
        "GEMINI_API_KEY environment variable not set and no key selected. "
        "Set it with: export GEMINI_API_KEY='your-api-key'"
    )
    raise CredentialMissingError(msg)


def ensure_key_selected(selector: KeySelector) -> bool:
    """Open key selection if needed and report whether a key is now selected.

    The selector is queried again after the dialog closes; selection is
    not assumed to have succeeded.

    Args:
        selector: Host key-selection facility.

    Returns:
        True if a key is selected afterwards.
    """
    if selector.has_selected_key():
        return True

    selector.open_select_key()
    selected = selector.has_selected_key()
    if not selected:
        logger.warning("No API key selected")
    return selected
