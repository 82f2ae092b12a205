"""Installed OS voices through pyttsx3 (SAPI5, NSSpeechSynthesizer or eSpeak)."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from readout.core.errors import SpeechEngineError
from readout.tts.voices import VoiceInfo, select_voice

logger = logging.getLogger("readout.local")

DEFAULT_WPM = 200


def _import_pyttsx3():
    try:
        import pyttsx3  # type: ignore
    except Exception as exc:  # pragma: no cover
        raise SpeechEngineError("pyttsx3 is required for local voices; install it with `pip install pyttsx3`") from exc
    return pyttsx3


def _decode_language(raw: Any) -> str:
    # eSpeak reports languages as bytes prefixed with a priority byte
    if isinstance(raw, bytes):
        return raw[1:].decode("utf-8", errors="ignore") if raw[:1] < b" " else raw.decode("utf-8", errors="ignore")
    return str(raw)


def _to_voice_info(voice: Any) -> VoiceInfo:
    languages = tuple(_decode_language(lang) for lang in (getattr(voice, "languages", None) or []))
    name = getattr(voice, "name", None) or str(voice.id)
    return VoiceInfo(id=str(voice.id), name=name, languages=languages, gender=getattr(voice, "gender", None))


def scale_rate(base_wpm: int, rate: int) -> int:
    """Map a -10..10 rate onto words per minute; 10 is three times the base."""
    return max(1, round(base_wpm * 3 ** (rate / 10)))


class LocalSpeechEngine:
    """Wraps a lazily created pyttsx3 engine."""

    def __init__(self, engine: Any = None) -> None:
        self._engine = engine
        self._voices: Optional[List[VoiceInfo]] = None
        self._base_rate: Optional[int] = None

    @property
    def engine(self) -> Any:
        if self._engine is None:
            pyttsx3 = _import_pyttsx3()
            try:
                self._engine = pyttsx3.init()
            except (RuntimeError, OSError, ImportError) as exc:
                raise SpeechEngineError(f"Could not start the local speech engine: {exc}") from exc
        return self._engine

    def list_voices(self) -> List[VoiceInfo]:
        if self._voices is None:
            raw = self.engine.getProperty("voices") or []
            self._voices = [_to_voice_info(v) for v in raw]
        return list(self._voices)

    def configure(self, voice: Optional[str] = None, rate: int = 0, volume: int = 100) -> Optional[VoiceInfo]:
        selected = select_voice(self.list_voices(), voice)
        if selected is not None:
            self.engine.setProperty("voice", selected.id)
            logger.info("Using local voice %s", selected.name)
        else:
            logger.warning("No local voices installed; using the engine default")

        if self._base_rate is None:
            self._base_rate = int(self.engine.getProperty("rate") or DEFAULT_WPM)
        self.engine.setProperty("rate", scale_rate(self._base_rate, rate))
        self.engine.setProperty("volume", volume / 100)
        return selected

    def speak(self, text: str) -> None:
        logger.info("Speaking %d chars", len(text))
        try:
            self.engine.say(text)
            self.engine.runAndWait()
        except (RuntimeError, OSError) as exc:
            raise SpeechEngineError(f"Local speech failed: {exc}") from exc

    def save(self, text: str, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Saving %d chars to %s", len(text), path)
        try:
            self.engine.save_to_file(text, str(path))
            self.engine.runAndWait()
        except (RuntimeError, OSError) as exc:
            raise SpeechEngineError(f"Could not write {path}: {exc}") from exc
        return path
