from __future__ import annotations

from .delivery import DeliveryResult
from .resume import ResumeResult, ResumeState
from .stash import StashEntry

__all__ = [
    "DeliveryResult",
    "ResumeResult",
    "ResumeState",
    "StashEntry",
]
