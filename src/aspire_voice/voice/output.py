"""Text-to-speech with a hosted voice and local synthesis fallback."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from aspire_voice.errors import CapabilityUnavailable, SynthesisNotSupported, SynthesisPlaybackError

from .interfaces import AudioClip, CapabilityProvider, RemoteSynthesizer, Utterance, Voice

logger = logging.getLogger(__name__)

LOCAL_RATE = 0.9
LOCAL_PITCH = 1.0
LOCAL_VOLUME = 0.8

_PREFERRED_VOICE_MARKERS = ("Natural", "Neural")


class SynthesisMode(str, Enum):
    """Which synthesis path a request prefers."""

    REMOTE = "remote"
    LOCAL = "local"


class OutputState(str, Enum):
    """Lifecycle of the output adapter."""

    IDLE = "idle"
    REQUESTING_REMOTE = "requesting_remote"
    REQUESTING_LOCAL = "requesting_local"
    PLAYING = "playing"


@dataclass(slots=True)
class SpeechRequest:
    """Text to render and the path it prefers."""

    text: str
    mode: SynthesisMode = SynthesisMode.LOCAL


class PlaybackHandle:
    """One in-flight rendering owned by the output adapter."""

    def __init__(self, request: SpeechRequest) -> None:
        self.request = request
        self.done: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self.fetch: asyncio.Future[bytes] | None = None
        self.clip: AudioClip | None = None
        self.stopped = False

    def finish(self) -> None:
        if not self.done.done():
            self.done.set_result(None)

    def fail(self, exc: BaseException) -> None:
        if not self.done.done():
            self.done.set_exception(exc)


def select_voice(voices: list[Voice]) -> Voice | None:
    """Prefer a natural or neural voice, then the platform default."""
    for voice in voices:
        if any(marker in voice.name for marker in _PREFERRED_VOICE_MARKERS):
            return voice
    for voice in voices:
        if voice.default:
            return voice
    return None


class VoiceOutputService:
    """Speaks assistant responses, preferring a hosted voice when asked.

    Remote failures before playback starts are logged and retried on the
    local engine with the same text. Playback failures on either path are
    raised from :meth:`speak`. A new ``speak`` interrupts the active one.
    """

    def __init__(self, provider: CapabilityProvider, remote: RemoteSynthesizer | None = None) -> None:
        self._remote = remote
        self._synthesis = provider.synthesis()
        self._audio = provider.audio()
        self._state = OutputState.IDLE
        self._active: PlaybackHandle | None = None

    @property
    def state(self) -> OutputState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state == OutputState.PLAYING

    @property
    def is_supported(self) -> bool:
        """Local synthesis availability; the remote voice is only known at call time."""
        return self._synthesis is not None

    async def speak(self, text: str, prefer_remote: bool = False) -> None:
        """Render ``text`` and return once playback has ended."""
        if self._active is not None:
            logger.info("speech_interrupted", extra={"chars": len(self._active.request.text)})
            self.stop()

        mode = SynthesisMode.REMOTE if prefer_remote else SynthesisMode.LOCAL
        handle = PlaybackHandle(SpeechRequest(text=text, mode=mode))
        self._active = handle
        try:
            if mode == SynthesisMode.REMOTE and self._remote is not None:
                if await self._speak_remote(handle, self._remote):
                    return
                if handle.stopped:
                    return
            await self._speak_local(handle)
        finally:
            if self._active is handle:
                self._active = None
                self._state = OutputState.IDLE

    def stop(self) -> None:
        """Silence everything this adapter started and return immediately."""
        handle = self._active
        if handle is not None:
            # Settle first so cancellation errors from the engine are ignored.
            handle.stopped = True
            handle.finish()
            if handle.fetch is not None and not handle.fetch.done():
                handle.fetch.cancel()
            if handle.clip is not None:
                handle.clip.stop()
        if self._synthesis is not None:
            self._synthesis.cancel()
        self._state = OutputState.IDLE

    def close(self) -> None:
        """Stop speaking and release owned engines."""
        self.stop()
        if self._synthesis is not None:
            self._synthesis.close()
            self._synthesis = None
        if self._audio is not None:
            self._audio.close()
            self._audio = None

    def __enter__(self) -> VoiceOutputService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    async def _speak_remote(self, handle: PlaybackHandle, remote: RemoteSynthesizer) -> bool:
        """Play the hosted voice; False means fall back to local synthesis."""
        self._state = OutputState.REQUESTING_REMOTE
        try:
            handle.fetch = asyncio.ensure_future(remote.synthesize(handle.request.text))
            audio = await handle.fetch
            if self._audio is None:
                raise CapabilityUnavailable("Audio playback not supported")
            clip = self._audio.load(audio)
        except asyncio.CancelledError:
            if handle.stopped:
                return False
            raise
        except Exception as exc:  # noqa: BLE001 - any remote failure falls back to local synthesis.
            logger.warning(
                "remote_synthesis_failed",
                extra={"error": f"{type(exc).__name__}: {exc}", "chars": len(handle.request.text)},
            )
            return False

        handle.clip = clip
        try:
            if handle.stopped:
                return True
            self._state = OutputState.PLAYING
            try:
                clip.play(
                    on_end=handle.finish,
                    on_error=lambda reason: handle.fail(SynthesisPlaybackError(reason or "Audio playback failed")),
                )
            except Exception as exc:  # noqa: BLE001 - surfaced as a playback failure.
                handle.fail(SynthesisPlaybackError(f"Audio playback failed: {exc}"))
            await handle.done
        finally:
            clip.revoke()
        return True

    async def _speak_local(self, handle: PlaybackHandle) -> None:
        self._state = OutputState.REQUESTING_LOCAL
        engine = self._synthesis
        if engine is None:
            raise SynthesisNotSupported("Speech synthesis not supported")

        utterance = Utterance(
            text=handle.request.text,
            voice=select_voice(engine.voices()),
            rate=LOCAL_RATE,
            pitch=LOCAL_PITCH,
            volume=LOCAL_VOLUME,
            on_end=handle.finish,
            on_error=lambda reason: handle.fail(SynthesisPlaybackError(reason)),
        )
        self._state = OutputState.PLAYING
        engine.speak(utterance)
        await handle.done
