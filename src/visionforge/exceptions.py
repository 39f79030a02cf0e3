"""Exception hierarchy for VisionForge image generation.

Every failure surfaced by the generation client carries exactly one
:class:`ErrorKind`. Callers branch on ``error.kind`` (or on
:func:`classify_error` for arbitrary exceptions) instead of parsing messages.

Exception Hierarchy:
    VisionForgeError (base, kind = Unclassified)
    ├── CredentialMissingError (no usable API key; re-select the key)
    ├── NoCandidatesError (empty response, usually a safety filter)
    ├── AbnormalStopError (generation halted with a non-STOP finish reason)
    ├── NoImageError (response carried no image payload)
    └── UnclassifiedError (anything else, message passed through verbatim)

Usage:
    from visionforge.exceptions import CredentialMissingError, ErrorKind

    try:
        result = generate_image(settings)
    except VisionForgeError as e:
        if e.kind is ErrorKind.CREDENTIAL_MISSING:
            prompt_for_key()
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

# Present in every CredentialMissingError message
CREDENTIAL_ERROR_MARKER = "API_KEY_ERROR"

# Message fragments that mean the key is invalid, lacks access, or the
# model is not visible to it
_CREDENTIAL_MESSAGE_MARKERS = (
    "requested entity was not found",
    "permission",
    "api_key",
    "api key",
)
_CREDENTIAL_STATUS_CODES = frozenset({403, 404})


class ErrorKind(str, Enum):
    """Classification of a failed generation."""

    CREDENTIAL_MISSING = "CredentialMissing"
    NO_CANDIDATES = "NoCandidates"
    ABNORMAL_STOP = "AbnormalStop"
    NO_IMAGE = "NoImage"
    UNCLASSIFIED = "Unclassified"


class VisionForgeError(Exception):
    """Base exception for all VisionForge errors.

    Attributes:
        message: Human-readable error message.
        details: Additional context about the error (optional).
        error_code: Machine-readable error code (optional).
        kind: Failure classification, fixed per subclass.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.UNCLASSIFIED

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Additional context as key-value pairs.
            error_code: Machine-readable error code.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a JSON-serializable dictionary.

        Returns:
            Dictionary with the error class, kind and message.
        """
        result: dict[str, Any] = {
            "error": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.error_code:
            result["code"] = self.error_code
        if self.details:
            result["details"] = self.details
        return result


class CredentialMissingError(VisionForgeError):
    """No usable API key.

    Raised when no key is configured, and when the remote API rejects the
    key (invalid, permission denied, model not visible to this key).

    Example:
        >>> raise CredentialMissingError()
    """

    kind = ErrorKind.CREDENTIAL_MISSING

    def __init__(
        self,
        message: str = f"{CREDENTIAL_ERROR_MARKER}: API key selection required",
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize credential error."""
        if CREDENTIAL_ERROR_MARKER not in message:
            message = f"{CREDENTIAL_ERROR_MARKER}: {message}"
        super().__init__(
            message, details=details, error_code=error_code or "CREDENTIAL_MISSING"
        )


class NoCandidatesError(VisionForgeError):
    """The model returned no candidates, typically a safety filter."""

    kind = ErrorKind.NO_CANDIDATES

    def __init__(
        self,
        message: str = (
            "The model did not return any results. "
            "This might be due to safety filters."
        ),
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize no-candidates error."""
        super().__init__(
            message, details=details, error_code=error_code or "NO_CANDIDATES"
        )


class AbnormalStopError(VisionForgeError):
    """Generation halted with a finish reason other than STOP.

    Example:
        >>> raise AbnormalStopError(finish_reason="SAFETY")
    """

    kind = ErrorKind.ABNORMAL_STOP

    def __init__(
        self,
        finish_reason: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize abnormal stop error.

        Args:
            finish_reason: Finish reason reported by the model.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        details["finish_reason"] = finish_reason
        self.finish_reason = finish_reason
        super().__init__(
            f"Generation stopped early: {finish_reason}. Try a different prompt.",
            details=details,
            error_code=error_code or "ABNORMAL_STOP",
        )


class NoImageError(VisionForgeError):
    """The response contained no image payload.

    When the model answered with text instead of an image, that text is
    part of the message.
    """

    kind = ErrorKind.NO_IMAGE

    def __init__(
        self,
        model_text: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize no-image error.

        Args:
            model_text: Text the model produced instead of an image.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        if model_text:
            details["model_text"] = model_text
            message = f"Model Response: {model_text}"
        else:
            message = (
                "No image data found. "
                "The prompt or reference image may have been filtered."
            )
        self.model_text = model_text
        super().__init__(message, details=details, error_code=error_code or "NO_IMAGE")


class UnclassifiedError(VisionForgeError):
    """Any other failure, with the original message preserved."""

    kind = ErrorKind.UNCLASSIFIED

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize unclassified error.

        Args:
            message: Original error message, unchanged.
            status_code: HTTP status code if the transport reported one.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details=details, error_code=error_code or "UNCLASSIFIED")


def error_status_code(error: BaseException) -> int | None:
    """Return the HTTP status code attached to an SDK or transport error."""
    for attr in ("code", "status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def is_credential_failure(error: BaseException) -> bool:
    """Whether ``error`` means the API key must be (re-)selected.

    Matches status 403/404 and messages about missing entities, permissions
    or the API key itself.
    """
    if isinstance(error, CredentialMissingError):
        return True
    if error_status_code(error) in _CREDENTIAL_STATUS_CODES:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _CREDENTIAL_MESSAGE_MARKERS)


def classify_error(error: BaseException) -> ErrorKind:
    """Map any exception to its :class:`ErrorKind`."""
    if is_credential_failure(error):
        return ErrorKind.CREDENTIAL_MISSING
    if isinstance(error, VisionForgeError):
        return error.kind
    return ErrorKind.UNCLASSIFIED


__all__ = [
    "CREDENTIAL_ERROR_MARKER",
    "AbnormalStopError",
    "CredentialMissingError",
    "ErrorKind",
    "NoCandidatesError",
    "NoImageError",
    "UnclassifiedError",
    "VisionForgeError",
    "classify_error",
    "error_status_code",
    "is_credential_failure",
]
