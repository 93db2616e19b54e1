"""Pane Registry: which editor pane serves which target panes.

The relationship is stored on both sides through the multiplexer's pane
attributes:

- editor pane: ``is_editor`` marker and ``target_panes`` (ordered, comma-joined)
- target pane: ``editor_pane`` back-reference and the ``quote`` buffer

A target has at most one back-reference; the last editor to register it wins.
Nothing is cached, every call reads the backend again.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, TypeVar

from ..errors import ExternalCommandError, RegistryError, ValidationError
from ..mux.base import ATTR_EDITOR_PANE, ATTR_IS_EDITOR, ATTR_QUOTE, ATTR_TARGET_PANES, Multiplexer

logger = logging.getLogger(__name__)

T = TypeVar("T")


def unique_panes(pane_ids: Iterable[str]) -> List[str]:
    """Strip, drop empties and duplicates, keep first-seen order."""
    seen: List[str] = []
    for raw in pane_ids:
        pid = str(raw or "").strip()
        if pid and pid not in seen:
            seen.append(pid)
    return seen


def _split_ids(raw: Optional[str]) -> List[str]:
    return unique_panes((raw or "").split(","))


class PaneRegistry:
    def __init__(self, mux: Multiplexer) -> None:
        self.mux = mux

    @property
    def backend(self) -> str:
        return self.mux.name

    def _call(self, fn: Callable[..., T], *args: str) -> T:
        try:
            return fn(*args)
        except ExternalCommandError as e:
            raise RegistryError(str(e)) from e

    def register(self, editor_pane_id: str, target_pane_ids: Iterable[str]) -> List[str]:
        """Merge targets into the editor's set and point each target back at the editor.

        Returns the merged target list.
        """
        editor = str(editor_pane_id or "").strip()
        targets = unique_panes(target_pane_ids)
        if not editor:
            raise ValidationError("editor pane id is required")
        if not targets:
            raise ValidationError("at least one target pane is required")
        if editor in targets:
            raise ValidationError(f"pane {editor} cannot be its own target")

        merged = unique_panes(self.get_target_pane_ids(editor) + targets)
        self._call(self.mux.set_attr, editor, ATTR_IS_EDITOR, "1")
        self._call(self.mux.set_attr, editor, ATTR_TARGET_PANES, ",".join(merged))
        for target in targets:
            self._call(self.mux.set_attr, target, ATTR_EDITOR_PANE, editor)
        logger.debug(
            "registered editor %s -> %s",
            editor,
            ", ".join(merged),
            extra={"op": "register", "backend": self.backend, "editor_pane_id": editor},
        )
        return merged

    def try_register(self, editor_pane_id: str, target_pane_ids: Iterable[str]) -> bool:
        """Fire-and-forget registration: failing to record must not stop an edit session."""
        try:
            self.register(editor_pane_id, target_pane_ids)
        except (RegistryError, ValidationError) as e:
            logger.debug("registration skipped: %s", e)
            return False
        return True

    def is_editor_pane(self, pane_id: str) -> bool:
        return self._call(self.mux.get_attr, pane_id, ATTR_IS_EDITOR) is not None

    def get_target_pane_ids(self, editor_pane_id: str) -> List[str]:
        return _split_ids(self._call(self.mux.get_attr, editor_pane_id, ATTR_TARGET_PANES))

    def get_editor_pane_id(self, target_pane_id: str) -> Optional[str]:
        value = self._call(self.mux.get_attr, target_pane_id, ATTR_EDITOR_PANE)
        return value.strip() if value and value.strip() else None

    def clear_editor_marker(self, editor_pane_id: str) -> None:
        self._call(self.mux.unset_attr, editor_pane_id, ATTR_IS_EDITOR)
        self._call(self.mux.unset_attr, editor_pane_id, ATTR_TARGET_PANES)

    def clear_target_backref(self, target_pane_id: str) -> None:
        self._call(self.mux.unset_attr, target_pane_id, ATTR_EDITOR_PANE)

    def end_session(self, editor_pane_id: str, target_pane_ids: Iterable[str]) -> bool:
        """Best-effort teardown after an edit session.

        A target's back-reference is only cleared while it still names this
        editor, so a newer editor that took the target over keeps it.
        """
        ok = True
        for target in unique_panes(target_pane_ids):
            try:
                if self.get_editor_pane_id(target) == editor_pane_id:
                    self.clear_target_backref(target)
            except RegistryError as e:
                logger.debug("could not clear back-reference of %s: %s", target, e)
                ok = False
        if editor_pane_id:
            try:
                self.clear_editor_marker(editor_pane_id)
            except RegistryError as e:
                logger.debug("could not clear editor marker of %s: %s", editor_pane_id, e)
                ok = False
        return ok

    # Quote buffers

    def append_quote(self, target_pane_id: str, text: str) -> str:
        return self._call(self.mux.append_attr, target_pane_id, ATTR_QUOTE, text)

    def get_quote(self, target_pane_id: str) -> str:
        return self._call(self.mux.get_attr, target_pane_id, ATTR_QUOTE) or ""

    def clear_quote(self, target_pane_id: str) -> None:
        self._call(self.mux.unset_attr, target_pane_id, ATTR_QUOTE)

    def take_quote(self, target_pane_id: str) -> str:
        """Read and clear the target's quote buffer."""
        return self._call(self.mux.take_attr, target_pane_id, ATTR_QUOTE)
