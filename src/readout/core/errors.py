"""Exception types reported by the CLI."""
from __future__ import annotations


class ReadoutError(Exception):
    """Base class for errors that end a run with a message on stderr."""


class ConfigError(ReadoutError):
    pass


class InputError(ReadoutError):
    """Text or SSML input is missing, empty or unusable."""


class CredentialsError(ReadoutError):
    pass


class SpeechEngineError(ReadoutError):
    """The speech engine or its SDK failed."""
