"""tmux backend: pane attributes live in tmux user options (@editprompt_*)."""
from __future__ import annotations

import os
import re
import shlex
from typing import List, Optional, Sequence, Tuple

from ..errors import ExternalCommandError
from .base import Multiplexer, check_command, run_command

OPTION_PREFIX = "@editprompt_"
REUSE_OPTION_PREFIX = "@editprompt_reuse::"


def _run_tmux(args: List[str]) -> Tuple[int, str, str]:
    return run_command(["tmux", *args])


def _check_tmux(args: List[str]) -> str:
    return check_command(["tmux", *args])


def option_name(name: str) -> str:
    return f"{OPTION_PREFIX}{name}"


def reuse_option_name(target_pane: str) -> str:
    return REUSE_OPTION_PREFIX + re.sub(r"[^A-Za-z0-9_-]", "_", target_pane)


def _strip_value(out: str) -> str:
    # tmux terminates the printed value with exactly one newline.
    return out[:-1] if out.endswith("\n") else out


class TmuxMultiplexer(Multiplexer):
    name = "tmux"
    default_send_key = "C-m"

    def current_pane_id(self) -> str:
        env = os.environ.get("TMUX_PANE", "").strip()
        if env:
            return env
        pane = _check_tmux(["display-message", "-p", "#{pane_id}"]).strip()
        if not pane:
            raise ExternalCommandError("tmux did not report a current pane")
        return pane

    def list_pane_ids(self) -> List[str]:
        code, out, _ = _run_tmux(["list-panes", "-a", "-F", "#{pane_id}"])
        if code != 0:
            return []
        return [ln.strip() for ln in out.splitlines() if ln.strip()]

    def pane_exists(self, pane_id: str) -> bool:
        return pane_id in self.list_pane_ids()

    def focus(self, pane_id: str) -> None:
        _check_tmux(["select-window", "-t", pane_id])
        _check_tmux(["select-pane", "-t", pane_id])

    def _leave_copy_mode(self, pane_id: str) -> None:
        code, out, _ = _run_tmux(["display-message", "-p", "-t", pane_id, "#{pane_in_mode}"])
        if code == 0 and out.strip() == "1":
            _run_tmux(["send-keys", "-t", pane_id, "-X", "cancel"])

    def send_text(self, pane_id: str, content: str) -> None:
        self._leave_copy_mode(pane_id)
        _check_tmux(["send-keys", "-t", pane_id, "-l", "--", content])

    def _send_key(self, pane_id: str, key: str) -> None:
        _check_tmux(["send-keys", "-t", pane_id, key])

    def get_attr(self, pane_id: str, name: str) -> Optional[str]:
        code, out, _ = _run_tmux(["show-options", "-pqv", "-t", pane_id, option_name(name)])
        if code != 0:
            return None
        value = _strip_value(out)
        return value or None

    def set_attr(self, pane_id: str, name: str, value: str) -> None:
        _check_tmux(["set-option", "-p", "-t", pane_id, option_name(name), value])

    def unset_attr(self, pane_id: str, name: str) -> None:
        _check_tmux(["set-option", "-pu", "-t", pane_id, option_name(name)])

    # Server-global options, used to remember launched editor panes.

    def get_global_option(self, name: str) -> Optional[str]:
        code, out, _ = _run_tmux(["show-options", "-gqv", name])
        if code != 0:
            return None
        return out.strip() or None

    def set_global_option(self, name: str, value: str) -> None:
        _check_tmux(["set-option", "-gq", name, value])

    def unset_global_option(self, name: str) -> None:
        _run_tmux(["set-option", "-gu", name])

    def split_window(
        self,
        command: Sequence[str],
        *,
        split_options: str = "",
        cwd: str = "",
    ) -> str:
        """Split the current window running `command`; return the new pane id."""
        args = ["split-window", "-P", "-F", "#{pane_id}"]
        if split_options.strip():
            args += shlex.split(split_options)
        if cwd:
            args += ["-c", cwd]
        args.append("exec " + " ".join(shlex.quote(c) for c in command))
        pane = _check_tmux(args).strip()
        if not pane:
            raise ExternalCommandError("tmux split-window did not report a pane id")
        return pane
