"""Editor collaborator: compose text in the user's editor."""
from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from ..errors import ExternalCommandError
from ..util.time import local_stamp
from .content import process_content

logger = logging.getLogger(__name__)

TEMP_DIR_NAME = "editprompt-prompts"
TEMP_FILE_PREFIX = ".editprompt-"
TEMP_FILE_EXTENSION = ".md"


def create_temp_file(base_dir: Optional[Path] = None) -> Path:
    """Create an empty scratch file. It is left on disk so a draft is never lost."""
    d = (base_dir or Path(tempfile.gettempdir())) / TEMP_DIR_NAME
    d.mkdir(parents=True, exist_ok=True)
    p = d / f"{TEMP_FILE_PREFIX}{local_stamp()}{TEMP_FILE_EXTENSION}"
    p.write_text("", encoding="utf-8")
    return p


def launch_editor(editor: str, file_path: Path, env: Optional[Mapping[str, str]] = None) -> None:
    """Run the editor on the controlling terminal and wait for it to exit.

    `editor` is a shell command line (e.g. "nvim -u NONE"), as $EDITOR usually is.
    """
    full_env = dict(os.environ)
    full_env.update(env or {})
    cmd = f"{editor} {shlex.quote(str(file_path))}"
    logger.debug("launching editor: %s", cmd)
    try:
        p = subprocess.run(cmd, shell=True, env=full_env, check=False)
    except OSError as e:
        raise ExternalCommandError(f"Failed to launch editor: {e}", argv=[cmd]) from e
    if p.returncode != 0:
        raise ExternalCommandError(f"Editor exited with code: {p.returncode}", argv=[cmd], returncode=p.returncode)


def read_file_content(file_path: Path) -> str:
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ExternalCommandError(f"Failed to read file: {e}") from e
    return process_content(raw)


def open_editor_and_get_content(
    editor: str,
    env: Optional[Mapping[str, str]] = None,
    *,
    base_dir: Optional[Path] = None,
) -> str:
    """Return the composed text, or "" when the user saved nothing."""
    path = create_temp_file(base_dir)
    launch_editor(editor, path, env)
    content = read_file_content(path)
    return content if content.strip() else ""
