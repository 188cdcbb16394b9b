from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

MODULE_DIR = Path(__file__).resolve().parent
ENV_PATH = MODULE_DIR.parent / ".env"
DEFAULT_CONFIG_PATH = MODULE_DIR.parent / "config.toml"
CONFIG_PATH_ENV = "ATTACHKIT_CONFIG_PATH"

ENV_PATTERN = re.compile(r"\$\{env:([A-Z0-9_]+)(?:\|([^}]*))?}")


class ConfigError(ValueError):
    """Raised when a configuration value is missing or malformed."""


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        def repl(match: re.Match[str]) -> str:
            var, default = match.group(1), match.group(2) or ""
            return os.getenv(var, default)

        return ENV_PATTERN.sub(repl, value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _require(value: Optional[str], name: str) -> str:
    if value is None or value == "":
        raise ConfigError(f"Missing required config value for '{name}'")
    return value


def parse_mode(value: Any, name: str) -> Optional[int]:
    """Parse a file mode given as an int or an octal string ("0644", "0o644")."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ConfigError(f"Invalid file mode for '{name}': {value!r}")
    if isinstance(value, int):
        mode = value
    elif isinstance(value, str):
        try:
            mode = int(value.strip(), 8)
        except ValueError as exc:
            raise ConfigError(f"Invalid octal file mode for '{name}': {value!r}") from exc
    else:
        raise ConfigError(f"Invalid file mode for '{name}': {value!r}")
    if not 0 <= mode <= 0o7777:
        raise ConfigError(f"File mode out of range for '{name}': {oct(mode)}")
    return mode


@dataclass
class FilesSettings:
    permissions: Optional[int]
    directory_permissions: Optional[int]


@dataclass
class Settings:
    files: FilesSettings
    logging_directory: Path


def resolve_config_path() -> Path:
    override = os.getenv(CONFIG_PATH_ENV)
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH


def load_settings(config_path: Optional[Path] = None) -> Settings:
    load_dotenv(ENV_PATH)

    path = config_path or resolve_config_path()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found at {path}")

    with path.open("rb") as f:
        raw = tomllib.load(f)
    data = _expand_env(raw)

    files_cfg = data.get("files", {})
    files_settings = FilesSettings(
        permissions=parse_mode(files_cfg.get("permissions"), "files.permissions"),
        directory_permissions=parse_mode(files_cfg.get("directory_permissions"), "files.directory_permissions"),
    )

    logging_dir_raw = data.get("logging", {}).get("logging_directory")

    return Settings(
        files=files_settings,
        logging_directory=Path(_require(logging_dir_raw, "logging.logging_directory")).expanduser(),
    )


settings = load_settings()
