"""Speech recognition backend powered by ``speech_recognition``."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable

from aspire_voice.errors import RecognitionError

from .interfaces import RecognitionConfig, RecognitionEngine, RecognitionListener


class SpeechRecognitionEngine(RecognitionEngine):
    """Capture one utterance from the microphone and transcribe it with Google Web Speech.

    Capture runs on a worker thread; every notification is handed back to the
    event loop that called :meth:`start`.
    """

    def __init__(
        self,
        config: RecognitionConfig,
        *,
        phrase_time_limit: float = 10.0,
        timeout: float | None = 5.0,
        adjust_noise_seconds: float = 0.2,
    ) -> None:
        try:
            import speech_recognition as sr
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice STT backend unavailable. Install extras with: pip install 'aspire-voice[voice]'"
            ) from exc
        self._sr = sr
        self._config = config
        self._recognizer = sr.Recognizer()
        try:
            self._microphone = sr.Microphone()
        except (AttributeError, OSError) as exc:
            raise RuntimeError(
                "No microphone available. Install PyAudio and connect an input device."
            ) from exc
        self._phrase_time_limit = phrase_time_limit
        self._timeout = timeout
        self._adjust_noise_seconds = max(0.0, adjust_noise_seconds)
        self._cancelled: threading.Event | None = None
        # sr.Microphone refuses re-entry; a stopped session holds it until listen() returns.
        self._microphone_lock = threading.Lock()

    def start(self, listener: RecognitionListener) -> None:
        loop = asyncio.get_running_loop()
        cancelled = threading.Event()
        self._cancelled = cancelled
        worker = threading.Thread(
            target=self._run_session,
            args=(loop, listener, cancelled),
            name="speech-recognition",
            daemon=True,
        )
        worker.start()

    def stop(self) -> None:
        if self._cancelled is not None:
            self._cancelled.set()

    def close(self) -> None:
        self.stop()
        self._cancelled = None

    def _run_session(
        self,
        loop: asyncio.AbstractEventLoop,
        listener: RecognitionListener,
        cancelled: threading.Event,
    ) -> None:
        def dispatch(callback: Callable[..., None], *args: Any) -> None:
            if not cancelled.is_set() and not loop.is_closed():
                loop.call_soon_threadsafe(callback, *args)

        try:
            results = self._recognize_once(cancelled)
        except RecognitionError as exc:
            dispatch(listener.on_error, exc.reason)
        except Exception:  # noqa: BLE001 - reported to the listener instead of dying on the worker thread.
            dispatch(listener.on_error, "recognition-failed")
        else:
            if results:
                dispatch(listener.on_result, results)
        finally:
            dispatch(listener.on_end)

    def _recognize_once(self, cancelled: threading.Event) -> list[list[str]]:
        sr = self._sr
        try:
            with self._microphone_lock:
                if cancelled.is_set():
                    return []
                with self._microphone as source:
                    if self._adjust_noise_seconds > 0:
                        self._recognizer.adjust_for_ambient_noise(source, duration=self._adjust_noise_seconds)
                    audio = self._recognizer.listen(
                        source,
                        timeout=self._timeout,
                        phrase_time_limit=self._phrase_time_limit,
                    )
        except sr.WaitTimeoutError:
            return []
        except OSError as exc:
            raise RecognitionError("audio-capture") from exc

        if cancelled.is_set():
            return []

        try:
            response = self._recognizer.recognize_google(audio, language=self._config.lang, show_all=True)
        except sr.RequestError as exc:
            raise RecognitionError("network") from exc
        except sr.UnknownValueError:
            return []

        return _alternatives(response)


def _alternatives(response: Any) -> list[list[str]]:
    """Normalize a ``show_all`` Google response into ranked segments."""
    if not isinstance(response, dict):
        return []
    transcripts = [
        alternative["transcript"]
        for alternative in response.get("alternative", [])
        if alternative.get("transcript")
    ]
    return [transcripts] if transcripts else []
