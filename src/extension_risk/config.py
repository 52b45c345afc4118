"""
Configuration loading

Settings come from built-in defaults, then an optional config.json, then
EXTENSION_RISK_* environment variables (a .env file is honoured).
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "EXTENSION_RISK_"

DEFAULT_RETIRE_COMMAND = ["retire", "--path", "{path}", "--outputformat", "json"]
# {config} is the bundled eslint.config.mjs. In flat config mode an explicit
# --config replaces config file lookup; --no-config-lookup would discard it.
# eslint runs with the extraction dir as cwd.
DEFAULT_ESLINT_COMMAND = [
    "eslint", "--config", "{config}",
    "--format", "json", "--no-error-on-unmatched-pattern", "**/*.js",
]

# config.json section -> settings fields it may set
CONFIG_SECTIONS = {
    "download": ("max_download_bytes", "download_timeout", "prodversion"),
    "scanners": ("retire_command", "eslint_command", "tool_timeout", "external_scanners_enabled"),
    "server": ("host", "port"),
    "logging": ("log_level",),
}


@dataclass
class Settings:
    """Runtime settings for the analyzer, the CLI and the web app"""

    max_download_bytes: int = 50 * 1024 * 1024
    download_timeout: float = 30.0
    prodversion: str = "120.0"
    retire_command: List[str] = field(default_factory=lambda: list(DEFAULT_RETIRE_COMMAND))
    eslint_command: List[str] = field(default_factory=lambda: list(DEFAULT_ESLINT_COMMAND))
    tool_timeout: float = 120.0
    external_scanners_enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"


def _coerce(name, value, default):
    """Convert a raw config/env value to the type of the field default"""
    try:
        if isinstance(default, bool):
            if isinstance(value, bool):
                return value
            lowered = str(value).strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ValueError(f"not a boolean: {value!r}")
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
        if isinstance(default, list):
            if isinstance(value, str):
                value = json.loads(value)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError("expected a list of strings")
            return value
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {e}") from e


def load_settings(config_path: Optional[Path] = None, environ=None) -> Settings:
    """
    Build Settings from defaults, config.json and the environment

    Args:
        config_path: Path to a JSON config file. Defaults to ./config.json,
            which is optional; an explicitly given path must exist.
        environ: Mapping used instead of os.environ (tests)

    Returns:
        Settings
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    settings = Settings()
    defaults = {f.name: getattr(settings, f.name) for f in fields(Settings)}

    explicit = config_path is not None
    config_path = Path(config_path or environ.get(f"{ENV_PREFIX}CONFIG", "config.json"))

    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to read {config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"{config_path} must contain a JSON object")

        for section, names in CONFIG_SECTIONS.items():
            values = config.get(section, {})
            if not isinstance(values, dict):
                raise ConfigError(f"Section '{section}' in {config_path} must be an object")
            for name in names:
                if name in values:
                    setattr(settings, name, _coerce(name, values[name], defaults[name]))
        logger.debug("Loaded configuration from %s", config_path)
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")

    for name, default in defaults.items():
        env_name = ENV_PREFIX + name.upper()
        if env_name in environ:
            setattr(settings, name, _coerce(name, environ[env_name], default))

    return settings


def configure_logging(level="INFO"):
    """Install a single stream handler on the root logger"""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
