"""Stash: timestamp-keyed history of pushed content per (backend, pane).

Keys are fixed-width UTC ISO timestamps, so the lexicographically greatest
key is the latest entry. Two pushes within the same millisecond share a key
and the second overwrites the first.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from ..contracts.v1 import StashEntry
from ..util.time import utc_now_iso
from .store import TARGET_ROLE, StateDoc, StateStore, dotted, pane_key


def _resolve_key(data: Dict[str, str], key: Optional[str]) -> Optional[str]:
    if key:
        return key if key in data else None
    return max(data) if data else None


class StashStore:
    def __init__(
        self,
        store: StateStore,
        backend: str,
        pane_id: str,
        *,
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.store = store
        self.path = pane_key(backend, TARGET_ROLE, str(pane_id)) + ["stash"]
        self._clock = clock

    def __repr__(self) -> str:
        return f"StashStore({dotted(self.path)})"

    def _entries(self, doc: StateDoc) -> Dict[str, str]:
        raw = doc.get(self.path)
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _write(self, doc: StateDoc, data: Dict[str, str]) -> None:
        if data:
            doc.set(self.path, data)
        else:
            doc.delete(self.path)

    def push(self, content: str) -> str:
        with self.store.transaction() as doc:
            data = self._entries(doc)
            key = self._clock()
            data[key] = content
            self._write(doc, data)
        return key

    def list(self) -> List[StashEntry]:
        data = self._entries(self.store.snapshot())
        return [StashEntry(key=k, content=data[k]) for k in sorted(data, reverse=True)]

    def get(self, key: Optional[str] = None) -> str:
        data = self._entries(self.store.snapshot())
        resolved = _resolve_key(data, key)
        return data[resolved] if resolved is not None else ""

    def drop(self, key: Optional[str] = None) -> bool:
        with self.store.transaction() as doc:
            data = self._entries(doc)
            resolved = _resolve_key(data, key)
            if resolved is None:
                return False
            del data[resolved]
            self._write(doc, data)
        return True

    def pop(self, key: Optional[str] = None) -> str:
        """Return and remove one entry; the key is resolved once, under the store lock."""
        with self.store.transaction() as doc:
            data = self._entries(doc)
            resolved = _resolve_key(data, key)
            if resolved is None:
                return ""
            content = data.pop(resolved)
            self._write(doc, data)
        return content
