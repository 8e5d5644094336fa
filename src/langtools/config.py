"""User configuration: active profiles and user-defined profiles.

The config file is looked up in this order:

1. ``$LANG_TOOLS_CONFIG``
2. ``$XDG_CONFIG_HOME/lang-tools/config.json``
3. ``~/.config/lang-tools/config.json``

JSON and YAML (``.yml`` / ``.yaml``) files are accepted. A missing file is
an empty config; an unreadable or malformed one raises :class:`ConfigError`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import yaml

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LANG_TOOLS_CONFIG"
CONFIG_DIR_NAME = "lang-tools"
CONFIG_FILE_NAME = "config.json"


class ConfigError(ValueError):
    """The configuration file exists but cannot be used."""


def resolve_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_config(path: str | os.PathLike | None = None) -> dict:
    """Load the config at *path* (default: :func:`resolve_config_path`)."""
    config_path = Path(path) if path is not None else resolve_config_path()
    if not config_path.exists():
        log.debug("No config at %s", config_path)
        return {}

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f'Failed to read lang-tools config at "{config_path}": {exc}') from exc

    if config_path.suffix.lower() in (".yml", ".yaml"):
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigError(
                f'Failed to parse lang-tools config at "{config_path}": malformed YAML: {exc}'
            ) from exc
    else:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError(
                f'Failed to parse lang-tools config at "{config_path}": malformed JSON: {exc}'
            ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f'lang-tools config at "{config_path}" must be a mapping at the top level')
    log.debug("Loaded config from %s", config_path)
    return data


def merge_active_profiles(config: dict, requested=None) -> list[str]:
    """Active profile names for a run.

    An explicit *requested* list, even an empty one, replaces the config's
    ``activeProfiles``.
    """
    if requested is not None:
        return list(requested)
    return list(config.get("activeProfiles") or [])
