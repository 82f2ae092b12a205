"""Command-line option parsing.

The parsed options are an immutable snapshot of one invocation. Flags win
over the AZURE_SPEECH_* environment variables, which win over the config
file (applied afterwards through `ReadoutOptions.with_config`).
"""
from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional, Sequence

from readout import __version__
from readout.core.config_loader import DEFAULT_CONFIG_PATH, RATE_RANGE, VOLUME_RANGE, ReadoutConfig

ENV_REGION = "AZURE_SPEECH_REGION"
ENV_KEY = "AZURE_SPEECH_KEY"

EPILOG = """\
examples:
  readout "Hello world"
  readout -f notes.txt -v Zira -r 2 --vol 80
  readout -f notes.txt -s notes.wav
  readout --list
  readout --azure -v en-US-GuyNeural -f notes.txt -s notes.mp3 --audio-format mp3-24k-96
  readout --azure --ssml greeting.xml
"""


@dataclass(frozen=True, slots=True)
class ReadoutOptions:
    file: Optional[Path] = None
    text: Optional[str] = None
    voice: Optional[str] = None
    rate: Optional[int] = None
    volume: Optional[int] = None
    save: Optional[Path] = None
    list_only: bool = False
    azure: bool = False
    azure_region: Optional[str] = None
    azure_key: Optional[str] = None
    audio_format: Optional[str] = None
    ssml: Optional[Path] = None
    config: Path = DEFAULT_CONFIG_PATH
    config_given: bool = False
    verbose: bool = False

    def with_config(self, cfg: ReadoutConfig) -> "ReadoutOptions":
        """Fill settings the command line left unset from the config."""
        voice = self.voice
        if voice is None:
            voice = cfg.azure.voice if self.azure else cfg.voice
        return replace(
            self,
            voice=voice,
            rate=cfg.rate if self.rate is None else self.rate,
            volume=cfg.volume if self.volume is None else self.volume,
            azure_region=self.azure_region or cfg.azure.region,
            azure_key=self.azure_key or cfg.azure.key,
            audio_format=self.audio_format or cfg.azure.audio_format,
        )


def _bounded_int(name: str, low: int, high: int):
    def convert(raw: str) -> int:
        try:
            value = int(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{name} must be an integer, got {raw!r}") from None
        if not low <= value <= high:
            raise argparse.ArgumentTypeError(f"{name} must be between {low} and {high}, got {value}")
        return value

    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="readout",
        description="Read text aloud with an installed OS voice or an Azure neural voice.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("text", nargs="*", help="Text to speak when --file is not given")
    parser.add_argument("-f", "--file", type=Path, help="Read text from this file ('-' for stdin)")
    parser.add_argument("-v", "--voice", help="Voice index, exact name, or part of a name")
    parser.add_argument(
        "-r", "--rate", type=_bounded_int("rate", *RATE_RANGE), help="Speaking rate from -10 (slow) to 10 (fast)"
    )
    parser.add_argument(
        "--volume", "--vol", dest="volume", type=_bounded_int("volume", *VOLUME_RANGE), help="Volume from 0 to 100"
    )
    parser.add_argument("-s", "--save", type=Path, help="Write audio to this file instead of playing it")
    parser.add_argument("-l", "--list", dest="list_only", action="store_true", help="List available voices and exit")
    parser.add_argument("--azure", action="store_true", help="Use Azure neural voices instead of local voices")
    parser.add_argument("--azure-region", help=f"Azure Speech region (default: ${ENV_REGION})")
    parser.add_argument("--azure-key", help=f"Azure Speech key (default: ${ENV_KEY})")
    parser.add_argument("--audio-format", help="Azure output format, e.g. riff-24khz-16bit-mono-pcm or mp3-24k-96")
    parser.add_argument("--ssml", type=Path, help="Speak this SSML document (Azure only)")
    parser.add_argument("--config", type=Path, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--verbose", action="store_true", help="Log debug details to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_options(
    argv: Optional[Sequence[str]] = None, env: Optional[Mapping[str, str]] = None
) -> ReadoutOptions:
    env = os.environ if env is None else env
    args = build_parser().parse_args(argv)
    text = " ".join(args.text).strip() or None
    return ReadoutOptions(
        file=args.file,
        text=text,
        voice=args.voice,
        rate=args.rate,
        volume=args.volume,
        save=args.save,
        list_only=args.list_only,
        azure=args.azure,
        azure_region=args.azure_region or env.get(ENV_REGION) or None,
        azure_key=args.azure_key or env.get(ENV_KEY) or None,
        audio_format=args.audio_format,
        ssml=args.ssml,
        config=args.config or DEFAULT_CONFIG_PATH,
        config_given=args.config is not None,
        verbose=args.verbose,
    )
