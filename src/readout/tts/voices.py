"""Voice records and the selection heuristic shared by both engines."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

logger = logging.getLogger("readout.voices")


@dataclass(frozen=True, slots=True)
class VoiceInfo:
    id: str
    name: str
    languages: Tuple[str, ...] = ()
    gender: Optional[str] = None


def select_voice(voices: Sequence[VoiceInfo], selector: Optional[str]) -> Optional[VoiceInfo]:
    """Pick a voice by index, exact name, or name substring.

    Matching is case-insensitive. An unmatched selector falls back to the
    first voice; an empty voice list yields None.
    """
    if not voices:
        return None
    if selector is None or not selector.strip():
        return voices[0]

    wanted = selector.strip()
    if wanted.isdigit():
        index = int(wanted)
        if index < len(voices):
            return voices[index]

    lowered = wanted.lower()
    for voice in voices:
        if voice.name.lower() == lowered or voice.id.lower() == lowered:
            return voice
    for voice in voices:
        if lowered in voice.name.lower():
            return voice

    logger.warning("No voice matches %r; using %s", selector, voices[0].name)
    return voices[0]


def format_voice_list(voices: Sequence[VoiceInfo]) -> list[str]:
    lines = []
    for index, voice in enumerate(voices):
        line = f"[{index}]:{voice.name}"
        if voice.languages:
            line += f" ({', '.join(voice.languages)})"
        lines.append(line)
    return lines
