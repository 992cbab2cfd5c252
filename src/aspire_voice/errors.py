"""Error taxonomy shared by the speech adapters and the service relays."""

from __future__ import annotations


class AspireVoiceError(Exception):
    """Base class for every error raised by this package."""


class CapabilityUnavailable(AspireVoiceError):
    """Raised when the platform does not offer a required capability."""


class SynthesisNotSupported(CapabilityUnavailable):
    """Raised when neither remote nor local synthesis can render text."""


class RecognitionError(AspireVoiceError):
    """Speech recognition failed with an opaque platform reason."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Speech recognition error: {reason}")
        self.reason = reason


class SynthesisTransportError(AspireVoiceError):
    """The remote synthesis endpoint could not produce audio."""


class SynthesisPlaybackError(AspireVoiceError):
    """Audio was produced but could not be played to the end."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Speech synthesis error: {reason}")
        self.reason = reason


class ServiceError(AspireVoiceError):
    """Relay failure that maps onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ChatError(ServiceError):
    """The AI chat relay could not produce a reply."""


class RateLimitedError(ChatError):
    """The upstream AI gateway rejected the request for rate limiting."""

    status_code = 429


class AvatarServiceError(ServiceError):
    """The avatar hosting relay failed."""
