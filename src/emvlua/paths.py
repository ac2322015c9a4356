"""paths.py - where emvlua keeps its own files.

the global config lives under ~/.emvlua/ unless EMVLUA_HOME points
somewhere else. projects carry their own .emvlua.json at the root.
"""

import os
from pathlib import Path


def emvlua_home() -> Path:
    override = os.environ.get("EMVLUA_HOME")
    return Path(override).expanduser() if override else Path.home() / ".emvlua"


def ensure_dir(path: Path) -> Path:
    """mkdir -p, then hand the path back."""
    path.mkdir(parents=True, exist_ok=True)
    return path


GLOBAL_CONFIG = emvlua_home() / "config.json"
PROJECT_CONFIG_NAME = ".emvlua.json"
