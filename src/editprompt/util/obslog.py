from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, TextIO


_CONFIGURED: Dict[str, bool] = {}

# Correlation keys lifted from `logger.*(..., extra={...})` into JSONL records.
_EXTRA_KEYS = ("op", "backend", "pane_id", "editor_pane_id", "target_pane_id")


def _utc_ts_iso(ts: float) -> str:
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat().replace("+00:00", "Z")
    except (OverflowError, OSError, ValueError):
        return ""


class JsonlFormatter(logging.Formatter):
    """Minimal JSONL formatter for the optional --log-file sink.

    Keep fields stable and small; extra fields can be added via `logger.*(..., extra={...})`.
    """

    def __init__(self, *, component: str):
        super().__init__()
        self._component = str(component or "").strip() or "editprompt"

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": _utc_ts_iso(getattr(record, "created", 0.0) or 0.0),
            "level": str(getattr(record, "levelname", "") or ""),
            "logger": str(getattr(record, "name", "") or ""),
            "component": self._component,
            "msg": record.getMessage(),
        }

        for k in _EXTRA_KEYS:
            v = getattr(record, k, None)
            if v is None:
                continue
            sv = str(v).strip()
            if sv:
                payload[k] = sv

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        try:
            return json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError):
            # Last resort: never crash logging.
            return '{"component":"%s","level":"%s","msg":"(log serialization failed)"}' % (
                self._component,
                payload.get("level", "INFO"),
            )


def _parse_level(level: str, default: int = logging.INFO) -> int:
    s = str(level or "").strip().upper()
    if not s:
        return default
    v = getattr(logging, s, default)
    return v if isinstance(v, int) else default


def resolve_level(*, quiet: bool = False, verbose: bool = False) -> Optional[int]:
    """Level for the editprompt logger; None means logging is silenced."""
    if quiet:
        return None
    if verbose:
        return logging.DEBUG
    return _parse_level(os.environ.get("EDITPROMPT_LOG_LEVEL", ""))


def setup_logging(
    *,
    quiet: bool = False,
    verbose: bool = False,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
    force: bool = False,
) -> None:
    """Configure the `editprompt` logger once per process.

    - Human-readable lines go to stderr; stdout stays reserved for content.
    - `log_file` adds a JSONL sink.
    - `force=True` replaces previously installed handlers.
    """
    key = "editprompt"
    if _CONFIGURED.get(key) and not force:
        return
    _CONFIGURED[key] = True

    logger = logging.getLogger("editprompt")
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    level = resolve_level(quiet=quiet, verbose=verbose)
    if level is None:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname).4s %(name)s: %(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(handler)

    if log_file:
        p = Path(log_file).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(p, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(JsonlFormatter(component="editprompt"))
        logger.addHandler(fh)
