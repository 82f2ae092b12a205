"""Speech subsystem.

Components:
- options.py: parsed CLI option snapshot
- voices.py: voice records and the selection heuristic
- local_engine.py: installed OS voices through pyttsx3
- azure_engine.py: Azure neural voices through the Speech SDK
"""
from readout.tts.options import ReadoutOptions, parse_options
from readout.tts.voices import VoiceInfo, select_voice

__all__ = ["ReadoutOptions", "VoiceInfo", "parse_options", "select_voice"]
