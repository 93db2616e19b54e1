from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ResumeState(str, Enum):
    AT_EDITOR = "at_editor"
    AT_TARGET = "at_target"


class ResumeResult(BaseModel):
    state: ResumeState
    ok: bool
    focused_pane: Optional[str] = None
    reason: str = ""
    cleared_backref: bool = False

    model_config = ConfigDict(extra="forbid")
