"""Azure neural voices through the Speech SDK.

Requires `azure-cognitiveservices-speech` and a Speech resource:
  - AZURE_SPEECH_KEY: subscription key
  - AZURE_SPEECH_REGION: region (e.g. westeurope)

Synthesis is a single awaited SDK call; the bytes the service returns are
written to disk unchanged, so the file container follows --audio-format.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional

from readout.core.config_loader import DEFAULT_AZURE_VOICE
from readout.core.errors import CredentialsError, SpeechEngineError
from readout.tts.voices import VoiceInfo, select_voice

logger = logging.getLogger("readout.azure")

# Friendly alias -> SpeechSynthesisOutputFormat member name
FRIENDLY_FORMAT_MAP = {
    "riff-16khz-16bit-mono-pcm": "Riff16Khz16BitMonoPcm",
    "riff-24khz-16bit-mono-pcm": "Riff24Khz16BitMonoPcm",
    "riff-48khz-16bit-mono-pcm": "Riff48Khz16BitMonoPcm",
    "raw-16khz-16bit-mono-pcm": "Raw16Khz16BitMonoPcm",
    "raw-24khz-16bit-mono-pcm": "Raw24Khz16BitMonoPcm",
    "raw-48khz-16bit-mono-pcm": "Raw48Khz16BitMonoPcm",
    "mp3-16k-32": "Audio16Khz32KBitRateMonoMp3",
    "mp3-24k-48": "Audio24Khz48KBitRateMonoMp3",
    "mp3-24k-96": "Audio24Khz96KBitRateMonoMp3",
    "mp3-48k-96": "Audio48Khz96KBitRateMonoMp3",
    "mp3-48k-192": "Audio48Khz192KBitRateMonoMp3",
    "ogg-16k": "Ogg16Khz16BitMonoOpus",
    "ogg-24k": "Ogg24Khz16BitMonoOpus",
    "ogg-48k": "Ogg48Khz16BitMonoOpus",
    "webm-24k": "Webm24Khz16BitMonoOpus",
}

# locale-prefixed short names, e.g. en-US-JennyNeural or zh-CN-henan-YundengNeural
FULL_VOICE_NAME = re.compile(r"^[a-z]{2,3}-[A-Za-z0-9]+(-[A-Za-z0-9]+)+$")


def _import_speech_sdk():
    try:
        import azure.cognitiveservices.speech as speechsdk  # type: ignore
    except Exception as exc:  # pragma: no cover
        raise SpeechEngineError(
            "azure-cognitiveservices-speech is required for --azure; "
            "install it with `pip install azure-cognitiveservices-speech`"
        ) from exc
    return speechsdk


def _normalize(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", name.lower())


def resolve_output_format(name: Optional[str], members: Iterable[str]) -> Optional[str]:
    """Resolve a user string to a SpeechSynthesisOutputFormat member name.

    Tries the friendly aliases first, then a case-insensitive member name,
    then a match ignoring punctuation. Returns None when nothing fits.
    """
    if not name or not name.strip():
        return None
    candidate = name.strip().lower()
    if candidate in FRIENDLY_FORMAT_MAP:
        return FRIENDLY_FORMAT_MAP[candidate]
    members = list(members)
    for member in members:
        if member.lower() == candidate:
            return member
    normalized = _normalize(candidate)
    for member in members:
        if _normalize(member) == normalized:
            return member
    return None


@dataclass(slots=True)
class AzureSettings:
    key: str
    region: str
    voice: str = DEFAULT_AZURE_VOICE
    audio_format: Optional[str] = None

    @classmethod
    def from_values(
        cls, key: Optional[str], region: Optional[str], voice: Optional[str] = None, audio_format: Optional[str] = None
    ) -> "AzureSettings":
        missing = [label for label, value in (("region", region), ("key", key)) if not value]
        if missing:
            raise CredentialsError(
                f"Azure Speech {' and '.join(missing)} missing: pass --azure-region/--azure-key "
                "or set AZURE_SPEECH_REGION and AZURE_SPEECH_KEY"
            )
        return cls(key=key, region=region, voice=voice or DEFAULT_AZURE_VOICE, audio_format=audio_format)


class AzureSpeechEngine:
    """Synthesizes with Azure neural voices."""

    def __init__(self, settings: AzureSettings, speechsdk: Any = None) -> None:
        self.settings = settings
        self._sdk = speechsdk
        self._voices: Optional[List[VoiceInfo]] = None

    @property
    def sdk(self) -> Any:
        if self._sdk is None:
            self._sdk = _import_speech_sdk()
        return self._sdk

    def _speech_config(self, voice: Optional[str] = None) -> Any:
        sdk = self.sdk
        speech_config = sdk.SpeechConfig(subscription=self.settings.key, region=self.settings.region)
        speech_config.speech_synthesis_voice_name = voice or self.settings.voice
        if self.settings.audio_format:
            resolved = resolve_output_format(
                self.settings.audio_format, sdk.SpeechSynthesisOutputFormat.__members__.keys()
            )
            if resolved is None:
                raise SpeechEngineError(
                    f"Unknown audio format {self.settings.audio_format!r}; try one of: "
                    + ", ".join(sorted(FRIENDLY_FORMAT_MAP))
                )
            speech_config.set_speech_synthesis_output_format(sdk.SpeechSynthesisOutputFormat[resolved])
            logger.debug("Azure output format %s", resolved)
        return speech_config

    def _synthesizer(self, *, to_speaker: bool, voice: Optional[str] = None) -> Any:
        sdk = self.sdk
        audio_config = sdk.audio.AudioOutputConfig(use_default_speaker=True) if to_speaker else None
        return sdk.SpeechSynthesizer(speech_config=self._speech_config(voice), audio_config=audio_config)

    def list_voices(self) -> List[VoiceInfo]:
        if self._voices is not None:
            return list(self._voices)
        synthesizer = self._synthesizer(to_speaker=False)
        try:
            result = synthesizer.get_voices_async("").get()
        except Exception as exc:
            raise SpeechEngineError(f"Azure voice listing failed: {exc}") from exc
        if result.reason != self.sdk.ResultReason.VoicesListRetrieved:
            raise SpeechEngineError(f"Azure voice listing failed: {getattr(result, 'error_details', 'unknown')}")
        self._voices = [
            VoiceInfo(
                id=v.name,
                name=v.short_name,
                languages=(v.locale,) if getattr(v, "locale", None) else (),
                gender=str(getattr(v, "gender", "")) or None,
            )
            for v in result.voices
        ]
        return list(self._voices)

    def resolve_voice(self, selector: Optional[str]) -> str:
        """Full voice names pass through; indexes and partial names pick from the listed voices."""
        if not selector or not selector.strip():
            return self.settings.voice
        selector = selector.strip()
        if FULL_VOICE_NAME.match(selector):
            return selector
        chosen = select_voice(self.list_voices(), selector)
        if chosen is None:
            raise SpeechEngineError("Azure returned no voices")
        return chosen.name

    def _run(self, synthesizer: Any, text: Optional[str], ssml: Optional[str]) -> Any:
        if (text is None) == (ssml is None):
            raise ValueError("exactly one of text or ssml is required")
        try:
            if ssml is not None:
                result = synthesizer.speak_ssml_async(ssml).get()
            else:
                result = synthesizer.speak_text_async(text).get()
        except Exception as exc:
            raise SpeechEngineError(f"Azure TTS exception: {exc}") from exc
        return self._check(result)

    def _check(self, result: Any) -> Any:
        sdk = self.sdk
        if result.reason == sdk.ResultReason.SynthesizingAudioCompleted:
            return result
        if result.reason == sdk.ResultReason.Canceled:
            cancellation = result.cancellation_details
            message = f"Azure TTS canceled: {cancellation.reason}"
            if cancellation.error_details:
                message += f" ({cancellation.error_details})"
            raise SpeechEngineError(message)
        raise SpeechEngineError(f"Azure TTS failed: {getattr(result, 'error_details', None) or result.reason}")

    def synthesize(self, text: Optional[str] = None, ssml: Optional[str] = None, *, voice: Optional[str] = None) -> bytes:
        result = self._run(self._synthesizer(to_speaker=False, voice=voice), text, ssml)
        return bytes(result.audio_data)

    def speak(self, text: Optional[str] = None, ssml: Optional[str] = None, *, voice: Optional[str] = None) -> None:
        logger.info("Speaking via Azure (%s)", voice or self.settings.voice)
        self._run(self._synthesizer(to_speaker=True, voice=voice), text, ssml)

    def save(
        self, path: Path, text: Optional[str] = None, ssml: Optional[str] = None, *, voice: Optional[str] = None
    ) -> Path:
        audio = self.synthesize(text, ssml, voice=voice)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio)
        logger.info("Wrote %d bytes to %s", len(audio), path)
        return path
