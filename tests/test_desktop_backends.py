from __future__ import annotations

import asyncio
import sys
import threading
import types
from pathlib import Path

import pytest

from aspire_voice.voice.interfaces import RecognitionConfig, Utterance
from aspire_voice.voice.platform import DesktopCapabilityProvider


class FakeTtsEngine:
    def __init__(self) -> None:
        self.properties = {
            "rate": 200,
            "volume": 1.0,
            "voice": "basic",
            "voices": [
                types.SimpleNamespace(id="basic", name="Basic", languages=[b"\x05en-us"]),
                types.SimpleNamespace(id="neural", name="Neural-F", languages=["en_GB"]),
            ],
        }
        self.spoken: list[str] = []
        self.stop_calls = 0

    def getProperty(self, name):
        return self.properties[name]

    def setProperty(self, name, value) -> None:
        self.properties[name] = value

    def say(self, text: str) -> None:
        self.spoken.append(text)

    def runAndWait(self) -> None:
        pass

    def stop(self) -> None:
        self.stop_calls += 1


def _install_fake_pyttsx3(monkeypatch) -> FakeTtsEngine:
    engine = FakeTtsEngine()
    module = types.ModuleType("pyttsx3")
    module.init = lambda: engine
    monkeypatch.setitem(sys.modules, "pyttsx3", module)
    return engine


def _install_fake_speech_recognition(
    monkeypatch, *, response=None, listen_error=None, request_error=False, listen_gate: threading.Event | None = None
):
    module = types.ModuleType("speech_recognition")

    class WaitTimeoutError(Exception):
        pass

    class RequestError(Exception):
        pass

    class UnknownValueError(Exception):
        pass

    class Microphone:
        in_use = False

        def __enter__(self):
            assert not self.in_use, "This audio source is already inside a context manager"
            self.in_use = True
            return self

        def __exit__(self, *exc_info) -> None:
            self.in_use = False

    class Recognizer:
        def adjust_for_ambient_noise(self, source, duration) -> None:
            pass

        def listen(self, source, timeout=None, phrase_time_limit=None):
            if listen_error is not None:
                raise listen_error(module)
            if listen_gate is not None:
                listen_gate.wait(timeout=2)
            return object()

        def recognize_google(self, audio, language=None, show_all=False):
            assert language == "en-US"
            assert show_all is True
            if request_error:
                raise RequestError("offline")
            return response

    module.WaitTimeoutError = WaitTimeoutError
    module.RequestError = RequestError
    module.UnknownValueError = UnknownValueError
    module.Microphone = Microphone
    module.Recognizer = Recognizer
    monkeypatch.setitem(sys.modules, "speech_recognition", module)
    return module


class CollectingListener:
    def __init__(self) -> None:
        self.events: list[tuple] = []
        self.ended = asyncio.get_running_loop().create_future()

    def on_result(self, results) -> None:
        self.events.append(("result", results))

    def on_error(self, reason: str) -> None:
        self.events.append(("error", reason))

    def on_end(self) -> None:
        self.events.append(("end",))
        self.ended.set_result(None)


def _run_recognition(provider: DesktopCapabilityProvider) -> list[tuple]:
    async def _run() -> list[tuple]:
        engine = provider.recognition(RecognitionConfig())
        listener = CollectingListener()
        engine.start(listener)
        await asyncio.wait_for(listener.ended, timeout=2)
        engine.close()
        return listener.events

    return asyncio.run(_run())


def test_recognition_reports_ranked_alternatives(monkeypatch) -> None:
    _install_fake_speech_recognition(
        monkeypatch,
        response={"alternative": [{"transcript": "I feel hopeful"}, {"transcript": "I feel hope full"}]},
    )

    events = _run_recognition(DesktopCapabilityProvider(listen_timeout=0.1))

    assert events == [("result", [["I feel hopeful", "I feel hope full"]]), ("end",)]


def test_recognition_silence_ends_without_callbacks(monkeypatch) -> None:
    _install_fake_speech_recognition(monkeypatch, listen_error=lambda sr: sr.WaitTimeoutError())

    assert _run_recognition(DesktopCapabilityProvider()) == [("end",)]


def test_recognition_request_failure_reports_network(monkeypatch) -> None:
    _install_fake_speech_recognition(monkeypatch, request_error=True)

    assert _run_recognition(DesktopCapabilityProvider()) == [("error", "network"), ("end",)]


def test_restart_after_stop_waits_for_the_microphone(monkeypatch) -> None:
    released = threading.Event()
    _install_fake_speech_recognition(
        monkeypatch,
        response={"alternative": [{"transcript": "second try"}]},
        listen_gate=released,
    )
    engine = DesktopCapabilityProvider().recognition(RecognitionConfig())

    async def _run() -> tuple[list[tuple], list[tuple]]:
        first = CollectingListener()
        second = CollectingListener()
        engine.start(first)
        await asyncio.sleep(0.05)
        engine.stop()
        engine.start(second)
        await asyncio.sleep(0.05)
        released.set()
        await asyncio.wait_for(second.ended, timeout=2)
        engine.close()
        return first.events, second.events

    first_events, second_events = asyncio.run(_run())

    assert first_events == []
    assert second_events == [("result", [["second try"]]), ("end",)]


def test_recognition_unavailable_without_library(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "speech_recognition", None)

    assert DesktopCapabilityProvider().recognition(RecognitionConfig()) is None


def test_pyttsx3_engine_maps_voices_and_applies_prosody(monkeypatch) -> None:
    fake = _install_fake_pyttsx3(monkeypatch)
    engine = DesktopCapabilityProvider().synthesis()

    voices = engine.voices()
    assert [(voice.name, voice.default, voice.lang) for voice in voices] == [
        ("Basic", True, "en-us"),
        ("Neural-F", False, "en_GB"),
    ]

    async def _run() -> list[str]:
        done = asyncio.get_running_loop().create_future()
        engine.speak(
            Utterance(
                text="Take a breath",
                voice=voices[1],
                rate=0.9,
                volume=0.8,
                on_end=lambda: done.set_result("end"),
                on_error=lambda reason: done.set_result(reason),
            )
        )
        return [await asyncio.wait_for(done, timeout=2)]

    assert asyncio.run(_run()) == ["end"]
    assert fake.spoken == ["Take a breath"]
    assert fake.properties["rate"] == 180
    assert fake.properties["volume"] == 0.8
    assert fake.properties["voice"] == "neural"
    assert "pitch" not in fake.properties

    engine.close()
    assert fake.stop_calls == 1


def test_synthesis_unavailable_without_library(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "pyttsx3", None)

    assert DesktopCapabilityProvider().synthesis() is None


def _install_fake_audio(monkeypatch) -> types.ModuleType:
    sounddevice = types.ModuleType("sounddevice")
    sounddevice.default = types.SimpleNamespace(device=(None, None))
    sounddevice.played = []
    sounddevice.play = lambda data, rate: sounddevice.played.append((data, rate))
    sounddevice.wait = lambda: None
    sounddevice.stop = lambda: None

    wavfile = types.ModuleType("scipy.io.wavfile")

    def read(path: str):
        payload = Path(path).read_bytes()
        if not payload.startswith(b"RIFF"):
            raise ValueError("File format not understood")
        if payload == b"RIFF":
            raise EOFError("truncated header")
        return 24000, payload[4:]

    wavfile.read = read
    scipy = types.ModuleType("scipy")
    scipy_io = types.ModuleType("scipy.io")
    scipy_io.wavfile = wavfile
    scipy.io = scipy_io
    monkeypatch.setitem(sys.modules, "sounddevice", sounddevice)
    monkeypatch.setitem(sys.modules, "scipy", scipy)
    monkeypatch.setitem(sys.modules, "scipy.io", scipy_io)
    monkeypatch.setitem(sys.modules, "scipy.io.wavfile", wavfile)
    return sounddevice


def test_audio_clip_plays_and_revoke_removes_file(monkeypatch) -> None:
    sounddevice = _install_fake_audio(monkeypatch)
    player = DesktopCapabilityProvider().audio()
    clip = player.load(b"RIFFpcm")

    async def _run() -> str:
        done = asyncio.get_running_loop().create_future()
        clip.play(on_end=lambda: done.set_result("end"), on_error=lambda reason: done.set_result(reason))
        return await asyncio.wait_for(done, timeout=2)

    assert clip.path.exists()
    assert asyncio.run(_run()) == "end"
    assert sounddevice.played == [(b"pcm", 24000)]

    clip.revoke()
    assert not clip.path.exists()


def test_audio_load_rejects_non_wav_without_leaving_files(monkeypatch, tmp_path: Path) -> None:
    _install_fake_audio(monkeypatch)
    monkeypatch.setattr("tempfile.tempdir", str(tmp_path))
    player = DesktopCapabilityProvider().audio()

    with pytest.raises(ValueError):
        player.load(b"ID3mp3")

    assert list(tmp_path.iterdir()) == []


def test_audio_load_removes_file_for_truncated_clip(monkeypatch, tmp_path: Path) -> None:
    _install_fake_audio(monkeypatch)
    monkeypatch.setattr("tempfile.tempdir", str(tmp_path))
    player = DesktopCapabilityProvider().audio()

    with pytest.raises(EOFError):
        player.load(b"RIFF")

    assert list(tmp_path.iterdir()) == []
