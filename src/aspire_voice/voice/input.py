"""Single-shot speech-to-text on top of a platform recognition engine."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from .interfaces import CapabilityProvider, RecognitionConfig

logger = logging.getLogger(__name__)


class _SessionListener:
    """Routes engine notifications for one session back to the service."""

    __slots__ = ("_service", "_session_id")

    def __init__(self, service: VoiceInputService, session_id: int) -> None:
        self._service = service
        self._session_id = session_id

    def on_result(self, results: Sequence[Sequence[str]]) -> None:
        self._service._handle_result(self._session_id, results)

    def on_error(self, reason: str) -> None:
        self._service._handle_error(self._session_id, reason)

    def on_end(self) -> None:
        self._service._handle_end(self._session_id)


class VoiceInputService:
    """Turns one recognition session into one transcript callback.

    The recognition engine is acquired from ``provider`` when the service is
    built and released by :meth:`close`. Only the service's own entry points
    and the current session's notifications change the listening flag;
    notifications from a stopped session are dropped.
    """

    def __init__(
        self,
        provider: CapabilityProvider,
        on_result: Callable[[str], None],
        on_error: Callable[[str], None] | None = None,
        config: RecognitionConfig | None = None,
    ) -> None:
        self._config = config or RecognitionConfig()
        self._on_result = on_result
        self._on_error = on_error
        self._engine = provider.recognition(self._config)
        self._listening = False
        self._session_id = 0

    @property
    def config(self) -> RecognitionConfig:
        """Session parameters handed to the engine."""
        return self._config

    @property
    def is_supported(self) -> bool:
        """Whether the platform offers speech recognition."""
        return self._engine is not None

    @property
    def is_listening(self) -> bool:
        return self._listening

    def start(self) -> None:
        """Begin listening for one utterance."""
        if self._listening or self._engine is None:
            return

        self._listening = True
        self._session_id += 1
        logger.debug("speech_recognition_started", extra={"session": self._session_id, "lang": self._config.lang})
        self._engine.start(_SessionListener(self, self._session_id))

    def stop(self) -> None:
        """Cancel the current session without waiting for the engine to end it."""
        if not self._listening or self._engine is None:
            return

        self._listening = False
        self._engine.stop()
        logger.debug("speech_recognition_stopped", extra={"session": self._session_id})

    def close(self) -> None:
        """Stop listening and release the recognition engine."""
        self.stop()
        if self._engine is not None:
            self._engine.close()
            self._engine = None

    def __enter__(self) -> VoiceInputService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _is_current(self, session_id: int) -> bool:
        return self._listening and session_id == self._session_id

    def _handle_result(self, session_id: int, results: Sequence[Sequence[str]]) -> None:
        if not self._is_current(session_id):
            return

        transcript = _best_transcript(results)
        if transcript is None:
            return

        self._listening = False
        self._on_result(transcript)

    def _handle_error(self, session_id: int, reason: str) -> None:
        if not self._is_current(session_id):
            return

        logger.error("speech_recognition_error", extra={"session": session_id, "reason": reason})
        self._listening = False
        if self._on_error is not None:
            self._on_error(reason)

    def _handle_end(self, session_id: int) -> None:
        if self._is_current(session_id):
            self._listening = False


def _best_transcript(results: Sequence[Sequence[str]]) -> str | None:
    """Top alternative of the first recognized segment."""
    if not results or not results[0]:
        return None
    return results[0][0]
