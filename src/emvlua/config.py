"""config.py - layered settings for the encoder, logger and parse cache.

four layers, later wins: built-in defaults, ~/.emvlua/config.json,
.emvlua.json in the project root, then EMVLUA_* environment variables.
values from every layer go through the same coercion, so "0" in the env
and false in a JSON file mean the same thing.

in the world: the settings panel. each project can override the
global defaults, and the shell can override both for one run.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from emvlua.log import LEVELS
from emvlua.paths import GLOBAL_CONFIG, PROJECT_CONFIG_NAME, ensure_dir


_GLOBAL_CONFIG = GLOBAL_CONFIG
_PROJECT_CONFIG_NAME = PROJECT_CONFIG_NAME

DEFAULTS = {
    "usage_comments": True,   # annotate EMV.Auto items with who references them
    "log_level": "info",
    "trace": False,           # export spans to stderr
    "cache_size": 32,         # ParseCache entries; 0 disables
}

ENV_KEYS = {
    "EMVLUA_USAGE_COMMENTS": "usage_comments",
    "EMVLUA_LOG_LEVEL": "log_level",
    "EMVLUA_TRACE": "trace",
    "EMVLUA_CACHE_SIZE": "cache_size",
}


# ============================================================
# COERCION
# ============================================================

def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _as_level(value) -> str:
    level = str(value).strip().lower()
    if level not in LEVELS:
        raise ValueError(f"unknown log level '{value}'")
    return level


def _as_size(value) -> int:
    size = int(value)
    if size < 0:
        raise ValueError(f"cache_size must be >= 0, got {size}")
    return size


_COERCE = {
    "usage_comments": _as_bool,
    "trace": _as_bool,
    "log_level": _as_level,
    "cache_size": _as_size,
}


def _coerce(layer: dict) -> dict:
    """known keys converted to their types; bad values dropped, unknown keys kept."""
    out = {}
    for key, value in layer.items():
        convert = _COERCE.get(key)
        if convert is None:
            out[key] = value
            continue
        try:
            out[key] = convert(value)
        except (TypeError, ValueError):
            continue
    return out


@dataclass
class Config:
    """merged settings plus the highest layer that contributed anything."""
    values: dict = field(default_factory=dict)
    source: str = ""

    def get(self, key: str, default=None):
        if key in self.values:
            return self.values[key]
        return DEFAULTS.get(key, default)

    def set(self, key: str, value):
        self.values[key] = value

    def __getitem__(self, key: str):
        return self.get(key)

    def __contains__(self, key: str):
        return key in self.values or key in DEFAULTS

    def to_dict(self) -> dict:
        return {**DEFAULTS, **self.values}


# ============================================================
# FILES
# ============================================================

def _read(path: Path) -> dict:
    """a JSON object from path. missing, unreadable or non-object files are {}."""
    try:
        data = json.loads(path.read_text())
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _write(path: Path, config: dict):
    ensure_dir(path.parent)
    path.write_text(json.dumps(config, indent=2) + "\n")


def load_global() -> dict:
    return _read(_GLOBAL_CONFIG)


def save_global(config: dict):
    _write(_GLOBAL_CONFIG, config)


def load_project(root: str = ".") -> dict:
    return _read(Path(root) / _PROJECT_CONFIG_NAME)


def save_project(config: dict, root: str = "."):
    _write(Path(root) / _PROJECT_CONFIG_NAME, config)


def _env_overrides() -> dict:
    """EMVLUA_* variables that are set, coerced like any other layer."""
    raw = {key: os.environ[env] for env, key in ENV_KEYS.items() if env in os.environ}
    return _coerce(raw)


def _layers(root: str) -> list[tuple[str, dict]]:
    """(name, values) from lowest to highest precedence."""
    return [
        ("global", _coerce(load_global())),
        ("project", _coerce(load_project(root))),
        ("env", _env_overrides()),
    ]


# ============================================================
# MERGED VIEW
# ============================================================

def load_config(root: str = ".") -> Config:
    merged = dict(DEFAULTS)
    source = "defaults"
    for name, values in _layers(root):
        if values:
            merged.update(values)
            source = name
    return Config(values=merged, source=source)


def get_value(key: str, root: str = "."):
    return load_config(root).get(key)


def list_config(root: str = ".") -> dict:
    """key -> {"value", "source"} for every known setting."""
    result = {key: {"value": value, "source": "default"} for key, value in DEFAULTS.items()}
    for name, values in _layers(root):
        for key, value in values.items():
            if key in result:
                result[key] = {"value": value, "source": name}
    return result


def init_project_config(root: str = ".") -> str:
    """write a starter .emvlua.json unless one exists. returns its path."""
    path = Path(root) / _PROJECT_CONFIG_NAME
    if not path.exists():
        save_project({"usage_comments": True}, root)
    return str(path)


def set_value(key: str, value, root: str = ".", project: bool = False):
    """store one setting in the global or project file, coerced first.

    unknown keys raise KeyError, values that do not convert raise ValueError.
    returns the stored value.
    """
    if key not in DEFAULTS:
        raise KeyError(f"unknown config key '{key}' (known: {', '.join(DEFAULTS)})")
    try:
        stored = _COERCE[key](value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"bad value for {key}: {e}") from e
    if project:
        config = load_project(root)
        config[key] = stored
        save_project(config, root)
    else:
        config = load_global()
        config[key] = stored
        save_global(config)
    return stored
