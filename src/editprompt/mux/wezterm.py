"""wezterm backend.

wezterm has no per-pane user variables writable from the CLI, so pane
attributes are kept in the local state store under
``wezterm.editorPane.pane_{id}`` and ``wezterm.targetPane.pane_{id}``.
"""
from __future__ import annotations

import json
import os
import time
from typing import Any, Callable, Dict, List, Optional

from ..errors import ExternalCommandError
from ..kernel.store import EDITOR_ROLE, TARGET_ROLE, StateStore, open_store, pane_key
from .base import (
    ATTR_EDITOR_PANE,
    ATTR_IS_EDITOR,
    ATTR_QUOTE,
    ATTR_TARGET_PANES,
    Multiplexer,
    check_command,
)

# attribute name -> (record role, field in the record)
_FIELDS = {
    ATTR_IS_EDITOR: (EDITOR_ROLE, "isEditor"),
    ATTR_TARGET_PANES: (EDITOR_ROLE, "targetPaneIds"),
    ATTR_EDITOR_PANE: (TARGET_ROLE, "editorPaneId"),
    ATTR_QUOTE: (TARGET_ROLE, "quoteText"),
}

_KEY_ESCAPES = {"\\r": "\r", "\\n": "\n", "\\t": "\t", "\\e": "\x1b", "\\\\": "\\"}


def decode_key(key: str) -> str:
    r"""Turn a key spelled with backslash escapes (``\r``) into the bytes to type."""
    out: List[str] = []
    i = 0
    while i < len(key):
        pair = key[i : i + 2]
        if pair in _KEY_ESCAPES:
            out.append(_KEY_ESCAPES[pair])
            i += 2
            continue
        out.append(key[i])
        i += 1
    return "".join(out)


def _wezterm(args: List[str]) -> str:
    return check_command(["wezterm", "cli", *args])


class WeztermMultiplexer(Multiplexer):
    name = "wezterm"
    default_send_key = "\\r"

    def __init__(
        self,
        store: Optional[StateStore] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(sleep=sleep)
        self.store = store or open_store()

    def list_panes(self) -> List[Dict[str, Any]]:
        out = _wezterm(["list", "--format", "json"])
        try:
            panes = json.loads(out)
        except ValueError as e:
            raise ExternalCommandError(f"wezterm cli list returned invalid JSON: {e}") from e
        if not isinstance(panes, list):
            raise ExternalCommandError("wezterm cli list returned an unexpected document")
        return [p for p in panes if isinstance(p, dict)]

    def current_pane_id(self) -> str:
        env = os.environ.get("WEZTERM_PANE", "").strip()
        if env:
            return env
        for pane in self.list_panes():
            if pane.get("is_active") is True:
                return str(pane.get("pane_id"))
        raise ExternalCommandError("wezterm did not report an active pane")

    def pane_exists(self, pane_id: str) -> bool:
        try:
            panes = self.list_panes()
        except ExternalCommandError:
            return False
        return any(str(p.get("pane_id")) == str(pane_id) for p in panes)

    def focus(self, pane_id: str) -> None:
        _wezterm(["activate-pane", "--pane-id", str(pane_id)])

    def send_text(self, pane_id: str, content: str) -> None:
        _wezterm(["send-text", "--no-paste", "--pane-id", str(pane_id), "--", content])

    def _send_key(self, pane_id: str, key: str) -> None:
        _wezterm(["send-text", "--no-paste", "--pane-id", str(pane_id), "--", decode_key(key)])

    def _path(self, pane_id: str, name: str) -> List[str]:
        try:
            role, field = _FIELDS[name]
        except KeyError:
            raise ValueError(f"unknown pane attribute: {name}") from None
        return pane_key(self.name, role, str(pane_id)) + [field]

    def get_attr(self, pane_id: str, name: str) -> Optional[str]:
        value = self.store.get(self._path(pane_id, name))
        if value is None or value == "":
            return None
        return str(value)

    def set_attr(self, pane_id: str, name: str, value: str) -> None:
        self.store.set(self._path(pane_id, name), value)

    def unset_attr(self, pane_id: str, name: str) -> None:
        self.store.delete(self._path(pane_id, name))

    def append_attr(self, pane_id: str, name: str, value: str) -> str:
        path = self._path(pane_id, name)
        with self.store.transaction() as doc:
            combined = str(doc.get(path) or "") + value
            doc.set(path, combined)
        return combined

    def take_attr(self, pane_id: str, name: str) -> str:
        path = self._path(pane_id, name)
        with self.store.transaction() as doc:
            value = str(doc.get(path) or "")
            doc.delete(path)
        return value
