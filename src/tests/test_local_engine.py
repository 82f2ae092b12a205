"""LocalSpeechEngine against a stand-in pyttsx3 engine."""
from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from readout.core.errors import SpeechEngineError
from readout.tts import local_engine
from readout.tts.local_engine import LocalSpeechEngine, scale_rate


class FakeEngine:
    def __init__(self, voices=None, fail: bool = False) -> None:
        self.properties = {
            "voices": voices if voices is not None else [
                SimpleNamespace(id="david", name="Microsoft David Desktop", languages=["en-US"], gender="male"),
                SimpleNamespace(id="zira", name="Microsoft Zira Desktop", languages=["en-US"], gender="female"),
            ],
            "rate": 200,
            "volume": 1.0,
        }
        self.calls = []
        self.fail = fail

    def getProperty(self, name):  # noqa: N802
        return self.properties[name]

    def setProperty(self, name, value):  # noqa: N802
        self.properties[name] = value

    def say(self, text):
        self.calls.append(("say", text))

    def save_to_file(self, text, path):
        self.calls.append(("save", text, path))

    def runAndWait(self):  # noqa: N802
        if self.fail:
            raise RuntimeError("run loop already started")
        self.calls.append(("run",))
        for call in self.calls:
            if call[0] == "save":
                Path(call[2]).write_bytes(b"RIFF")


def test_list_voices_maps_driver_voices() -> None:
    engine = LocalSpeechEngine(FakeEngine())
    voices = engine.list_voices()
    assert [v.name for v in voices] == ["Microsoft David Desktop", "Microsoft Zira Desktop"]
    assert voices[1].languages == ("en-US",)
    assert voices[1].gender == "female"


def test_espeak_byte_languages_are_decoded() -> None:
    fake = FakeEngine(voices=[SimpleNamespace(id="en", name="english", languages=[b"\x05en-gb"])])
    assert LocalSpeechEngine(fake).list_voices()[0].languages == ("en-gb",)


def test_configure_applies_voice_rate_and_volume() -> None:
    fake = FakeEngine()
    engine = LocalSpeechEngine(fake)
    selected = engine.configure(voice="zira", rate=10, volume=50)
    assert selected.id == "zira"
    assert fake.properties["voice"] == "zira"
    assert fake.properties["rate"] == 600
    assert fake.properties["volume"] == 0.5


def test_configure_rate_scales_from_engine_default() -> None:
    fake = FakeEngine()
    engine = LocalSpeechEngine(fake)
    engine.configure(rate=10)
    engine.configure(rate=0)
    assert fake.properties["rate"] == 200


def test_configure_without_voices_keeps_default() -> None:
    fake = FakeEngine(voices=[])
    assert LocalSpeechEngine(fake).configure(voice="anything") is None
    assert "voice" not in fake.properties


@pytest.mark.parametrize("rate,expected", [(0, 200), (-10, 67), (5, 346)])
def test_scale_rate(rate, expected) -> None:
    assert scale_rate(200, rate) == expected


def test_speak_runs_the_loop() -> None:
    fake = FakeEngine()
    LocalSpeechEngine(fake).speak("hello")
    assert fake.calls == [("say", "hello"), ("run",)]


def test_save_creates_parent_dirs(tmp_path: Path) -> None:
    fake = FakeEngine()
    target = tmp_path / "out" / "speech.wav"
    assert LocalSpeechEngine(fake).save("hello", target) == target
    assert target.read_bytes() == b"RIFF"


def test_driver_errors_become_engine_errors() -> None:
    with pytest.raises(SpeechEngineError):
        LocalSpeechEngine(FakeEngine(fail=True)).speak("hello")


def test_engine_created_lazily(monkeypatch) -> None:
    created = []

    def init():
        created.append(True)
        return FakeEngine()

    monkeypatch.setattr(local_engine, "_import_pyttsx3", lambda: SimpleNamespace(init=init))
    engine = LocalSpeechEngine()
    assert not created
    engine.list_voices()
    engine.list_voices()
    assert created == [True]


def test_init_failure_is_reported(monkeypatch) -> None:
    def init():
        raise RuntimeError("no driver")

    monkeypatch.setattr(local_engine, "_import_pyttsx3", lambda: SimpleNamespace(init=init))
    with pytest.raises(SpeechEngineError, match="no driver"):
        LocalSpeechEngine().list_voices()
