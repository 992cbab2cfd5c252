"""Clip playback for fetched audio using ``sounddevice``."""

from __future__ import annotations

import asyncio
import logging
import tempfile
import threading
from pathlib import Path
from typing import Callable

from .interfaces import AudioClip, AudioPlayer

logger = logging.getLogger(__name__)


class SoundDeviceAudioClip(AudioClip):
    """A WAV clip backed by a temporary file until revoked."""

    def __init__(self, path: Path, sample_rate: int, data, sd) -> None:
        self.path = path
        self._sample_rate = sample_rate
        self._data = data
        self._sd = sd
        self._stopped = threading.Event()

    def play(self, on_end: Callable[[], None], on_error: Callable[[str], None]) -> None:
        loop = asyncio.get_running_loop()

        def _run() -> None:
            try:
                self._sd.play(self._data, self._sample_rate)
                self._sd.wait()
            except Exception as exc:  # noqa: BLE001 - reported through on_error.
                logger.error("audio_playback_failed", extra={"error": str(exc)})
                loop.call_soon_threadsafe(on_error, "Audio playback failed")
                return
            if not self._stopped.is_set():
                loop.call_soon_threadsafe(on_end)

        threading.Thread(target=_run, name="audio-playback", daemon=True).start()

    def stop(self) -> None:
        self._stopped.set()
        self._sd.stop()

    def revoke(self) -> None:
        self.path.unlink(missing_ok=True)


class SoundDeviceAudioPlayer(AudioPlayer):
    """Write fetched WAV audio to disk and play it on the default output device."""

    def __init__(self, device: int | None = None) -> None:
        try:
            import sounddevice as sd
            from scipy.io import wavfile
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Audio output backend unavailable. Install extras with: pip install 'aspire-voice[voice]'"
            ) from exc
        except OSError as exc:  # pragma: no cover - PortAudio missing
            raise RuntimeError("Audio output backend unavailable: PortAudio library not found.") from exc

        if device is not None:
            sd.default.device = (sd.default.device[0], device)
        self._sd = sd
        self._wavfile = wavfile

    def load(self, audio: bytes) -> SoundDeviceAudioClip:
        with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as handle:
            handle.write(audio)
        path = Path(handle.name)
        try:
            sample_rate, data = self._wavfile.read(str(path))
        except Exception:
            path.unlink(missing_ok=True)
            raise
        return SoundDeviceAudioClip(path, sample_rate, data, self._sd)

    def close(self) -> None:
        self._sd.stop()
