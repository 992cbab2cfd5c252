"""Speech input and output adapters."""

from .input import VoiceInputService
from .interfaces import (
    AudioClip,
    AudioPlayer,
    CapabilityProvider,
    RecognitionConfig,
    RecognitionEngine,
    RecognitionListener,
    RemoteSynthesizer,
    SynthesisEngine,
    Utterance,
    Voice,
)
from .output import OutputState, PlaybackHandle, SpeechRequest, SynthesisMode, VoiceOutputService, select_voice
from .remote import HttpSpeechSynthesizer

__all__ = [
    "AudioClip",
    "AudioPlayer",
    "CapabilityProvider",
    "HttpSpeechSynthesizer",
    "OutputState",
    "PlaybackHandle",
    "RecognitionConfig",
    "RecognitionEngine",
    "RecognitionListener",
    "RemoteSynthesizer",
    "SpeechRequest",
    "SynthesisEngine",
    "SynthesisMode",
    "Utterance",
    "Voice",
    "VoiceInputService",
    "VoiceOutputService",
    "select_voice",
]
