"""Resume: jump between an editor pane and its partner.

Two states, derived from the registry on every call:

- AT_EDITOR: the current pane carries the editor marker. Focus the first
  registered target that is still alive; later targets are not tried.
- AT_TARGET: otherwise. Focus the editor pane the target points back to. A
  back-reference to a pane that no longer exists is cleared on the way out.

Every failure is terminal for the invocation; nothing is retried.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..contracts.v1 import ResumeResult, ResumeState
from ..errors import ExternalCommandError
from .registry import PaneRegistry

logger = logging.getLogger(__name__)


def _focus(registry: PaneRegistry, state: ResumeState, pane_id: str) -> ResumeResult:
    try:
        registry.mux.focus(pane_id)
    except ExternalCommandError as e:
        return ResumeResult(state=state, ok=False, reason=f"cannot focus pane {pane_id}: {e}")
    return ResumeResult(state=state, ok=True, focused_pane=pane_id)


def resume_from_editor(registry: PaneRegistry, editor_pane_id: str) -> ResumeResult:
    state = ResumeState.AT_EDITOR
    targets = registry.get_target_pane_ids(editor_pane_id)
    if not targets:
        return ResumeResult(state=state, ok=False, reason=f"no target panes registered for editor pane {editor_pane_id}")
    for target in targets:
        if registry.mux.pane_exists(target):
            return _focus(registry, state, target)
        logger.debug("target pane %s is gone", target)
    return ResumeResult(state=state, ok=False, reason="none of the registered target panes exist")


def resume_from_target(registry: PaneRegistry, target_pane_id: str) -> ResumeResult:
    state = ResumeState.AT_TARGET
    editor = registry.get_editor_pane_id(target_pane_id)
    if not editor:
        return ResumeResult(state=state, ok=False, reason=f"no editor pane registered for pane {target_pane_id}")
    if not registry.mux.pane_exists(editor):
        registry.clear_target_backref(target_pane_id)
        logger.info("editor pane %s no longer exists; cleared reference from %s", editor, target_pane_id)
        return ResumeResult(
            state=state,
            ok=False,
            reason=f"editor pane {editor} no longer exists",
            cleared_backref=True,
        )
    return _focus(registry, state, editor)


def resume(
    registry: PaneRegistry,
    target_pane_id: Optional[str] = None,
    *,
    current_pane_id: Optional[str] = None,
) -> ResumeResult:
    """Run one resume step from the current pane.

    `target_pane_id` is the pane the command was invoked against; it defaults
    to the current pane and only matters in the AT_TARGET state.
    """
    current = current_pane_id or registry.mux.current_pane_id()
    if registry.is_editor_pane(current):
        return resume_from_editor(registry, current)
    return resume_from_target(registry, target_pane_id or current)
