from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class DeliveryResult(BaseModel):
    """Outcome of fanning content out to target panes.

    Callers must test `all_failed` explicitly; the model itself has no truthiness.
    """

    success_count: int = 0
    total_count: int = 0
    failed_panes: List[str] = Field(default_factory=list)
    copied_to_clipboard: bool = False

    model_config = ConfigDict(extra="forbid")

    @property
    def all_success(self) -> bool:
        return not self.failed_panes

    @property
    def all_failed(self) -> bool:
        return self.total_count > 0 and self.success_count == 0

    @property
    def partial(self) -> bool:
        return not self.all_success and not self.all_failed
