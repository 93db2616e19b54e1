from __future__ import annotations

from typing import Optional

from ..kernel.settings import SUPPORTED_MUXES, validate_mux
from ..kernel.store import StateStore
from .base import Multiplexer
from .tmux import TmuxMultiplexer
from .wezterm import WeztermMultiplexer


def get_multiplexer(name: str, *, store: Optional[StateStore] = None) -> Multiplexer:
    """Select the backend once per invocation."""
    if validate_mux(name) == "wezterm":
        return WeztermMultiplexer(store=store)
    return TmuxMultiplexer()


__all__ = ["Multiplexer", "SUPPORTED_MUXES", "TmuxMultiplexer", "WeztermMultiplexer", "get_multiplexer"]
