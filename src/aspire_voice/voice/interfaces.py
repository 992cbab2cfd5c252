"""Contracts for platform speech capabilities and remote synthesis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence


@dataclass(slots=True, frozen=True)
class RecognitionConfig:
    """Fixed session parameters for speech recognition."""

    continuous: bool = False
    interim_results: bool = False
    lang: str = "en-US"


@dataclass(slots=True, frozen=True)
class Voice:
    """A voice offered by the local synthesis engine."""

    name: str
    id: str = ""
    default: bool = False
    lang: str | None = None


@dataclass(slots=True)
class Utterance:
    """Text plus prosody handed to the local synthesis engine."""

    text: str
    voice: Voice | None = None
    rate: float = 1.0
    pitch: float = 1.0
    volume: float = 1.0
    on_end: Callable[[], None] | None = None
    on_error: Callable[[str], None] | None = None


class RecognitionListener(Protocol):
    """Receives notifications for one recognition session."""

    def on_result(self, results: Sequence[Sequence[str]]) -> None:
        """Segments of ranked transcript alternatives, best first."""

    def on_error(self, reason: str) -> None:
        """Opaque platform error code."""

    def on_end(self) -> None:
        """Session finished, whether or not anything else fired."""


class RecognitionEngine(Protocol):
    """Platform speech recognition bound to a fixed configuration."""

    def start(self, listener: RecognitionListener) -> None:
        """Begin a session that reports to ``listener``."""

    def stop(self) -> None:
        """Cancel the in-flight session, if any."""

    def close(self) -> None:
        """Release platform resources."""


class SynthesisEngine(Protocol):
    """Platform speech synthesis with a single utterance queue."""

    def voices(self) -> list[Voice]:
        """Voices available for utterances."""

    def speak(self, utterance: Utterance) -> None:
        """Queue an utterance; completion is reported through its callbacks."""

    def cancel(self) -> None:
        """Drop every queued or speaking utterance."""

    def close(self) -> None:
        """Release platform resources."""


class AudioClip(Protocol):
    """A transient playable resource built from fetched audio bytes."""

    def play(self, on_end: Callable[[], None], on_error: Callable[[str], None]) -> None:
        """Start playback; completion is reported through the callbacks."""

    def stop(self) -> None:
        """Halt playback early."""

    def revoke(self) -> None:
        """Release the underlying resource."""


class AudioPlayer(Protocol):
    """Builds playable clips from encoded audio."""

    def load(self, audio: bytes) -> AudioClip:
        """Create a clip for ``audio``."""

    def close(self) -> None:
        """Release platform resources."""


class CapabilityProvider(Protocol):
    """Source of platform capabilities; ``None`` means unavailable."""

    def recognition(self, config: RecognitionConfig) -> RecognitionEngine | None:
        """Create a recognition engine for ``config``."""

    def synthesis(self) -> SynthesisEngine | None:
        """Create a local synthesis engine."""

    def audio(self) -> AudioPlayer | None:
        """Create an audio clip player."""


class RemoteSynthesizer(Protocol):
    """Converts text into encoded audio using a hosted voice service."""

    async def synthesize(self, text: str) -> bytes:
        """Return playable audio bytes for the given text."""
