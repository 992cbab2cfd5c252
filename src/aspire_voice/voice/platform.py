"""Desktop capability detection for the speech adapters."""

from __future__ import annotations

import logging

from .interfaces import AudioPlayer, CapabilityProvider, RecognitionConfig, RecognitionEngine, SynthesisEngine

logger = logging.getLogger(__name__)


class DesktopCapabilityProvider(CapabilityProvider):
    """Build speech backends from locally installed libraries and devices.

    A backend that cannot be constructed is reported as unavailable instead of
    raising, so callers can check support before use.
    """

    def __init__(
        self,
        *,
        phrase_time_limit: float = 10.0,
        listen_timeout: float | None = 5.0,
        output_device: int | None = None,
    ) -> None:
        self._phrase_time_limit = phrase_time_limit
        self._listen_timeout = listen_timeout
        self._output_device = output_device

    def recognition(self, config: RecognitionConfig) -> RecognitionEngine | None:
        try:
            from .stt_speechrecognition import SpeechRecognitionEngine

            return SpeechRecognitionEngine(
                config,
                phrase_time_limit=self._phrase_time_limit,
                timeout=self._listen_timeout,
            )
        except RuntimeError as exc:
            logger.warning("speech_recognition_unavailable", extra={"error": str(exc)})
            return None

    def synthesis(self) -> SynthesisEngine | None:
        try:
            from .tts_pyttsx3 import Pyttsx3SynthesisEngine

            return Pyttsx3SynthesisEngine()
        except RuntimeError as exc:
            logger.warning("speech_synthesis_unavailable", extra={"error": str(exc)})
            return None

    def audio(self) -> AudioPlayer | None:
        try:
            from .playback_sounddevice import SoundDeviceAudioPlayer

            return SoundDeviceAudioPlayer(device=self._output_device)
        except RuntimeError as exc:
            logger.warning("audio_playback_unavailable", extra={"error": str(exc)})
            return None
