"""Persistent JSON config helpers.

Stores the default revset, log level and initial ``--ignore-immutable`` state.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "jjdag"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON, ignoring write failures."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _load_string(key: str) -> str | None:
    value = load_config().get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_default_revset() -> str:
    """Return the configured default revset, or ``""`` for jj's own default."""
    return _load_string("revset") or ""


def save_default_revset(revset: str) -> None:
    config = load_config()
    config["revset"] = revset.strip()
    save_config(config)


def load_log_level() -> str | None:
    return _load_string("log_level")


def load_ignore_immutable() -> bool:
    """Only explicit booleans are accepted; anything else means ``False``."""
    value = load_config().get("ignore_immutable")
    return value if isinstance(value, bool) else False


def save_ignore_immutable(ignore_immutable: bool) -> None:
    config = load_config()
    config["ignore_immutable"] = bool(ignore_immutable)
    save_config(config)
