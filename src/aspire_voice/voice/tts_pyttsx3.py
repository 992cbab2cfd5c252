"""Local speech synthesis backend powered by ``pyttsx3``."""

from __future__ import annotations

import asyncio
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

from .interfaces import SynthesisEngine, Utterance, Voice


class Pyttsx3SynthesisEngine(SynthesisEngine):
    """Speak utterances through a local pyttsx3 engine instance.

    pyttsx3 is not thread-safe, so the engine lives behind a single worker
    thread which doubles as the utterance queue. The one exception is
    :meth:`cancel`, which calls ``engine.stop()`` from the caller's thread
    because that is the only way to interrupt a running ``runAndWait()``.

    pyttsx3 exposes no pitch property, so ``Utterance.pitch`` is not applied.
    """

    def __init__(self) -> None:
        try:
            import pyttsx3
        except ImportError as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "Voice TTS backend unavailable. Install extras with: pip install 'aspire-voice[voice]'"
            ) from exc

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pyttsx3")
        try:
            self._engine = self._executor.submit(pyttsx3.init).result()
        except Exception as exc:  # noqa: BLE001 - driver failures vary by platform.
            self._executor.shutdown(wait=False)
            raise RuntimeError(f"Local speech synthesis engine failed to start: {exc}") from exc
        self._base_rate = int(self._executor.submit(self._engine.getProperty, "rate").result() or 200)
        self._default_voice_id = self._executor.submit(self._engine.getProperty, "voice").result()
        self._generation = 0

    def voices(self) -> list[Voice]:
        raw_voices = self._executor.submit(self._engine.getProperty, "voices").result() or []
        return [
            Voice(
                name=str(voice.name),
                id=str(voice.id),
                default=voice.id == self._default_voice_id,
                lang=_first_language(voice),
            )
            for voice in raw_voices
        ]

    def speak(self, utterance: Utterance) -> None:
        loop = asyncio.get_running_loop()
        generation = self._generation
        future = self._executor.submit(self._say, utterance, generation)
        future.add_done_callback(lambda done: self._report(loop, utterance, done))

    def cancel(self) -> None:
        self._generation += 1
        self._engine.stop()

    def close(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _say(self, utterance: Utterance, generation: int) -> bool:
        if generation != self._generation:
            return False

        engine = self._engine
        engine.setProperty("rate", max(1, int(self._base_rate * utterance.rate)))
        engine.setProperty("volume", max(0.0, min(1.0, utterance.volume)))
        engine.setProperty("voice", utterance.voice.id if utterance.voice else self._default_voice_id)
        engine.say(utterance.text)
        engine.runAndWait()
        return generation == self._generation

    @staticmethod
    def _report(loop: asyncio.AbstractEventLoop, utterance: Utterance, done: Future[bool]) -> None:
        callback: Callable[..., None] | None
        args: tuple[Any, ...] = ()
        if done.cancelled():
            callback, args = utterance.on_error, ("canceled",)
        elif done.exception() is not None:
            callback, args = utterance.on_error, ("synthesis-failed",)
        elif done.result():
            callback = utterance.on_end
        else:
            callback, args = utterance.on_error, ("interrupted",)

        if callback is not None and not loop.is_closed():
            loop.call_soon_threadsafe(callback, *args)


def _first_language(voice: Any) -> str | None:
    languages = getattr(voice, "languages", None) or []
    if not languages:
        return None
    language = languages[0]
    if isinstance(language, bytes):
        return language.decode("utf-8", errors="ignore").strip("\x00\x05") or None
    return str(language)
