"""Local persistent key-value document.

One JSON file ($EDITPROMPT_HOME/state.json) holds every record that is not
kept inside the multiplexer itself: the wezterm pane relationships and the
stash of both backends. Records are addressed by key paths such as
("wezterm", "targetPane", "pane_3"), rendered for humans as
"wezterm.targetPane.pane_3".

Every mutation runs as a locked read-modify-write; nothing is cached between
calls, so each command sees what the previous one wrote.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..errors import RegistryError
from ..paths import state_path
from ..util.file_lock import locked
from ..util.fs import atomic_write_json, read_json
from ..util.time import utc_now_iso

EDITOR_ROLE = "editorPane"
TARGET_ROLE = "targetPane"


def pane_key(backend: str, role: str, pane_id: str) -> List[str]:
    return [backend, role, f"pane_{pane_id}"]


def dotted(path: Sequence[str]) -> str:
    return ".".join(path)


@dataclass
class StateDoc:
    data: Dict[str, Any]
    dirty: bool = False

    def get(self, path: Sequence[str], default: Any = None) -> Any:
        node: Any = self.data
        for part in path:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, path: Sequence[str], value: Any) -> None:
        if not path:
            raise ValueError("empty key path")
        node = self.data
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path[-1]] = value
        self.dirty = True

    def delete(self, path: Sequence[str]) -> bool:
        """Remove the value at `path`, pruning parents left empty."""
        if not path:
            return False
        trail: List[Dict[str, Any]] = [self.data]
        node: Any = self.data
        for part in path[:-1]:
            node = node.get(part) if isinstance(node, dict) else None
            if not isinstance(node, dict):
                return False
            trail.append(node)
        if path[-1] not in node:
            return False
        del node[path[-1]]
        for depth in range(len(path) - 1, 0, -1):
            if trail[depth]:
                break
            del trail[depth - 1][path[depth - 1]]
        self.dirty = True
        return True


@dataclass
class StateStore:
    path: Path
    _lock_path: Optional[Path] = field(default=None, repr=False)

    @property
    def lock_path(self) -> Path:
        return self._lock_path or self.path.with_name(self.path.name + ".lock")

    def snapshot(self) -> StateDoc:
        return StateDoc(read_json(self.path))

    @contextmanager
    def transaction(self) -> Iterator[StateDoc]:
        """Hold the store lock while the caller reads and mutates the document."""
        try:
            with locked(self.lock_path):
                doc = self.snapshot()
                yield doc
                if doc.dirty:
                    doc.data["v"] = 1
                    doc.data["updated_at"] = utc_now_iso()
                    atomic_write_json(self.path, doc.data)
        except OSError as e:
            raise RegistryError(f"state store {self.path}: {e}") from e

    def get(self, path: Sequence[str], default: Any = None) -> Any:
        return self.snapshot().get(path, default)

    def set(self, path: Sequence[str], value: Any) -> None:
        with self.transaction() as doc:
            doc.set(path, value)

    def delete(self, path: Sequence[str]) -> bool:
        with self.transaction() as doc:
            return doc.delete(path)


def open_store() -> StateStore:
    try:
        return StateStore(path=state_path())
    except OSError as e:
        raise RegistryError(f"state directory unavailable: {e}") from e
