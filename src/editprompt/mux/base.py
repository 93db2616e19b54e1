"""Multiplexer Adapter capability.

Each backend implements the same small surface: who am I, is that pane alive,
focus it, type into it, and keep a few string attributes scoped to a pane.
Commands pick one implementation per invocation and never branch on the
backend name afterwards.
"""
from __future__ import annotations

import logging
import subprocess
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence, Tuple

from ..errors import ExternalCommandError

logger = logging.getLogger(__name__)

ATTR_IS_EDITOR = "is_editor"
ATTR_TARGET_PANES = "target_panes"
ATTR_EDITOR_PANE = "editor_pane"
ATTR_QUOTE = "quote"


def run_command(
    argv: Sequence[str],
    *,
    timeout_s: Optional[float] = None,
) -> Tuple[int, str, str]:
    """Run a CLI, return (returncode, stdout, stderr). Never raises for exit status."""
    logger.debug("exec %s", " ".join(argv[:3]))
    try:
        p = subprocess.run(
            list(argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=timeout_s,
            check=False,
        )
        return int(p.returncode), (p.stdout or ""), (p.stderr or "")
    except subprocess.TimeoutExpired:
        return 124, "", f"{argv[0]} timeout"
    except OSError as e:
        return 127, "", str(e)


def check_command(argv: Sequence[str], *, timeout_s: Optional[float] = None) -> str:
    """Run a CLI and return stdout, raising ExternalCommandError on non-zero exit."""
    code, out, err = run_command(argv, timeout_s=timeout_s)
    if code != 0:
        msg = err.strip() or f"exit status {code}"
        raise ExternalCommandError(f"{' '.join(argv[:3])} failed: {msg}", argv=argv, returncode=code, stderr=err)
    return out


class Multiplexer(ABC):
    name: str = ""
    default_send_key: str = ""

    def __init__(self, *, sleep: Callable[[float], None] = time.sleep) -> None:
        self._sleep = sleep

    @abstractmethod
    def current_pane_id(self) -> str:
        """Pane the command runs in; raises ExternalCommandError when it cannot be determined."""

    @abstractmethod
    def pane_exists(self, pane_id: str) -> bool:
        ...

    @abstractmethod
    def focus(self, pane_id: str) -> None:
        ...

    @abstractmethod
    def send_text(self, pane_id: str, content: str) -> None:
        """Type `content` literally into the pane, without an implicit newline."""

    @abstractmethod
    def _send_key(self, pane_id: str, key: str) -> None:
        ...

    @abstractmethod
    def get_attr(self, pane_id: str, name: str) -> Optional[str]:
        """Attribute value, or None when it is unset or the pane is unknown."""

    @abstractmethod
    def set_attr(self, pane_id: str, name: str, value: str) -> None:
        ...

    @abstractmethod
    def unset_attr(self, pane_id: str, name: str) -> None:
        ...

    def send_key(self, pane_id: str, key: str, delay_ms: Optional[int] = None) -> None:
        if delay_ms and delay_ms > 0:
            self._sleep(delay_ms / 1000.0)
        self._send_key(pane_id, key or self.default_send_key)

    def append_attr(self, pane_id: str, name: str, value: str) -> str:
        combined = (self.get_attr(pane_id, name) or "") + value
        self.set_attr(pane_id, name, combined)
        return combined

    def take_attr(self, pane_id: str, name: str) -> str:
        """Read an attribute and clear it."""
        value = self.get_attr(pane_id, name) or ""
        if value:
            self.unset_attr(pane_id, name)
        return value
