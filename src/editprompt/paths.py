from __future__ import annotations

import os
from pathlib import Path


def editprompt_home() -> Path:
    env = os.environ.get("EDITPROMPT_HOME", "").strip()
    if env:
        return Path(env).expanduser().resolve()
    return (Path.home() / ".editprompt").resolve()


def ensure_home() -> Path:
    home = editprompt_home()
    home.mkdir(parents=True, exist_ok=True)
    return home


def state_path() -> Path:
    return ensure_home() / "state.json"


def settings_path() -> Path:
    return editprompt_home() / "settings.yaml"
