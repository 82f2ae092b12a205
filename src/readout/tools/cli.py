"""`readout` entrypoint: pick a voice and speak or save the text.

Usage:
  readout "Hello world"
  readout -f notes.txt -v 1 -s notes.wav
  readout --azure --list
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from readout.core.config_loader import ConfigLoader
from readout.core.errors import InputError, ReadoutError
from readout.core.logging_setup import get_logger
from readout.tts.azure_engine import AzureSettings, AzureSpeechEngine
from readout.tts.local_engine import LocalSpeechEngine
from readout.tts.options import ReadoutOptions, parse_options
from readout.tts.voices import format_voice_list

LOGGER_NAME = "readout"


def _read_file(path: Path, label: str) -> str:
    if str(path) != "-" and not path.is_file():
        raise InputError(f"{label} not found: {path}")
    try:
        if str(path) == "-":
            content = sys.stdin.read().lstrip("\ufeff")
        else:
            # utf-8-sig drops the BOM Notepad writes
            content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise InputError(f"Could not read {label.lower()} {path}: {exc}") from exc
    if not content.strip():
        raise InputError(f"{label} is empty: {path}")
    return content


def resolve_input(opts: ReadoutOptions) -> tuple[Optional[str], Optional[str]]:
    """Return (text, ssml); exactly one is set."""
    if opts.ssml is not None:
        if not opts.azure:
            raise InputError("--ssml requires --azure")
        return None, _read_file(opts.ssml, "SSML file")
    if opts.file is not None:
        return _read_file(opts.file, "Input file").strip(), None
    if opts.text:
        return opts.text, None
    raise InputError("Nothing to read: pass --file, --ssml or some text")


def make_local_engine() -> LocalSpeechEngine:
    return LocalSpeechEngine()


def make_azure_engine(settings: AzureSettings) -> AzureSpeechEngine:
    return AzureSpeechEngine(settings)


def run_local(opts: ReadoutOptions, logger: logging.Logger) -> int:
    engine = make_local_engine()
    if opts.list_only:
        for line in format_voice_list(engine.list_voices()):
            print(line)
        return 0

    text, _ = resolve_input(opts)
    selected = engine.configure(
        voice=opts.voice, rate=opts.rate or 0, volume=100 if opts.volume is None else opts.volume
    )
    logger.debug("Local voice %s, rate %s, volume %s", selected and selected.name, opts.rate, opts.volume)
    if opts.save is not None:
        engine.save(text, opts.save)
        print(opts.save)
    else:
        engine.speak(text)
    return 0


def run_azure(opts: ReadoutOptions, logger: logging.Logger) -> int:
    settings = AzureSettings.from_values(opts.azure_key, opts.azure_region, opts.voice, opts.audio_format)
    engine = make_azure_engine(settings)
    if opts.list_only:
        for line in format_voice_list(engine.list_voices()):
            print(line)
        return 0

    text, ssml = resolve_input(opts)
    if opts.rate or (opts.volume is not None and opts.volume != 100):
        logger.warning("--rate and --volume apply to local voices only; use SSML prosody with --azure")
    voice = engine.resolve_voice(settings.voice)
    logger.info("Azure voice %s in %s", voice, settings.region)
    if opts.save is not None:
        engine.save(opts.save, text, ssml, voice=voice)
        print(opts.save)
    else:
        engine.speak(text, ssml, voice=voice)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    opts = parse_options(argv)
    try:
        cfg = ConfigLoader(opts.config, required=opts.config_given).load()
    except (ReadoutError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    opts = opts.with_config(cfg)

    try:
        logger = get_logger(
            LOGGER_NAME,
            cfg.log_dir,
            level=logging.DEBUG if opts.verbose else logging.INFO,
            console_level=logging.DEBUG if opts.verbose else logging.WARNING,
        )
    except OSError as exc:
        print(f"error: cannot open log directory {cfg.log_dir}: {exc}", file=sys.stderr)
        return 1
    logger.debug("Engine: %s", "azure" if opts.azure else "local")

    try:
        if opts.azure:
            return run_azure(opts, logger)
        return run_local(opts, logger)
    except ReadoutError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
