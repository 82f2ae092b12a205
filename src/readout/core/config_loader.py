"""Utility helpers to load YAML config with environment expansion.

`load_config` returns the plain dict; `ConfigLoader` produces the typed
`ReadoutConfig` the CLI works from. A missing default config file is not an
error: every setting has a built-in default.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from readout.core.errors import ConfigError

ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")
DEFAULT_CONFIG_PATH = Path("config/readout.yaml")
DEFAULT_AZURE_VOICE = "en-US-JennyNeural"
RATE_RANGE = (-10, 10)
VOLUME_RANGE = (0, 100)


def load_config(path: Path) -> Dict[str, Any]:
    """Load YAML config expanding ${PROJECT_ROOT}, ${ENV:VAR} and ${VAR:-default}."""

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    project_root = path.resolve().parent.parent
    _load_dotenv(project_root / ".env")

    if path.suffix not in {".yaml", ".yml"}:
        raise ConfigError(f"Unsupported config format for {path}; only YAML supported")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return _expand(data, project_root)


def _load_dotenv(env_path: Path) -> None:
    if not env_path.exists():
        return
    for line in env_path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"')
        os.environ.setdefault(key, value)


def _expand(value: Any, project_root: Path) -> Any:
    if isinstance(value, dict):
        return {k: _expand(v, project_root) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand(v, project_root) for v in value]
    if isinstance(value, str):
        return _expand_string(value, project_root)
    return value


def _expand_string(value: str, project_root: Path) -> str:
    def replacer(match: re.Match[str]) -> str:
        token = match.group(1)
        if ":-" in token and not token.startswith("ENV:"):
            name, default = token.split(":-", 1)
            return os.environ.get(name, default)
        if token == "PROJECT_ROOT":
            return str(project_root)
        if token.startswith("ENV:"):
            env_key = token.split(":", 1)[1]
            return os.environ.get(env_key, "")
        return os.environ.get(token, match.group(0))

    value = value.replace("${PROJECT_ROOT}", str(project_root))
    value = ENV_PATTERN.sub(replacer, value)
    value = os.path.expandvars(value)
    value = os.path.expanduser(value)
    return value


# ---------------------------------------------------------------------------
# Typed configuration layer used by the CLI.
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class AzureConfig:
    region: Optional[str] = None
    key: Optional[str] = None
    voice: str = DEFAULT_AZURE_VOICE
    audio_format: Optional[str] = None


@dataclass(slots=True)
class ReadoutConfig:
    voice: Optional[str] = None
    rate: int = 0
    volume: int = 100
    log_dir: Path = Path("logs")
    azure: AzureConfig = field(default_factory=AzureConfig)


class ConfigLoader:
    """Produces a `ReadoutConfig` from a YAML file.

    With `required=False` a missing file yields the defaults, which is how the
    CLI treats its default config location.
    """

    def __init__(self, path: Path, *, required: bool = True) -> None:
        self.path = path
        self.required = required

    def load(self) -> ReadoutConfig:
        if not self.path.exists() and not self.required:
            return ReadoutConfig()
        raw = load_config(self.path)
        return config_from_dict(raw)


def config_from_dict(raw: Mapping[str, Any]) -> ReadoutConfig:
    azure_raw = raw.get("azure", {}) or {}
    logs_raw = raw.get("logs", {}) or {}
    try:
        azure_cfg = AzureConfig(
            region=azure_raw.get("region") or None,
            key=azure_raw.get("key") or None,
            voice=azure_raw.get("voice") or DEFAULT_AZURE_VOICE,
            audio_format=azure_raw.get("audio_format") or None,
        )
        rate = int(raw.get("rate", 0))
        volume = int(raw.get("volume", 100))
        log_dir = Path(logs_raw.get("directory", "logs"))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc
    _check_range("rate", rate, RATE_RANGE)
    _check_range("volume", volume, VOLUME_RANGE)
    return ReadoutConfig(
        voice=raw.get("voice") or None,
        rate=rate,
        volume=volume,
        log_dir=log_dir,
        azure=azure_cfg,
    )


def _check_range(name: str, value: int, bounds: tuple[int, int]) -> None:
    low, high = bounds
    if not low <= value <= high:
        raise ConfigError(f"Config {name} must be between {low} and {high}, got {value}")
