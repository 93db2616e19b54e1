"""Open (or reuse) a dedicated tmux editor pane for a target pane."""
from __future__ import annotations

import logging
import sys
from typing import List, Optional, Sequence

from ..errors import ExternalCommandError, ValidationError
from ..mux.tmux import TmuxMultiplexer, reuse_option_name

logger = logging.getLogger(__name__)


def editor_command(target_pane_id: str, open_args: Sequence[str] = ()) -> List[str]:
    """Command the new pane runs: `editprompt open` bound to the target."""
    return [sys.executable, "-m", "editprompt", "open", "--mux", "tmux", "--target-pane", target_pane_id, *open_args]


def launch(
    mux: TmuxMultiplexer,
    target_pane_id: str,
    *,
    split_options: str = "",
    cwd: str = "",
    open_args: Sequence[str] = (),
) -> str:
    """Return the editor pane serving `target_pane_id`, creating it when needed.

    A remembered pane that is still alive is focused and reused. A remembered
    pane that has gone away is forgotten and replaced.
    """
    target = str(target_pane_id or "").strip()
    if not target:
        raise ValidationError("--target-pane is required")

    option = reuse_option_name(target)
    remembered: Optional[str] = mux.get_global_option(option)
    if remembered:
        if mux.pane_exists(remembered):
            try:
                mux.focus(remembered)
            except ExternalCommandError as e:
                logger.warning("Could not focus editor pane %s, opening a new one: %s", remembered, e)
            else:
                logger.debug("reusing editor pane %s", remembered, extra={"op": "launch", "target_pane_id": target})
                return remembered
        else:
            mux.unset_global_option(option)
            logger.debug("forgot dead editor pane %s", remembered, extra={"op": "launch", "target_pane_id": target})

    pane = mux.split_window(editor_command(target, open_args), split_options=split_options, cwd=cwd)
    try:
        mux.set_global_option(option, pane)
    except ExternalCommandError as e:
        logger.warning("Could not remember editor pane %s: %s", pane, e)
    return pane
