from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StashEntry(BaseModel):
    key: str
    content: str

    model_config = ConfigDict(extra="forbid")
