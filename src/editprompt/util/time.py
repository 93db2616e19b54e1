from __future__ import annotations

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """UTC timestamp with fixed millisecond precision, e.g. 2025-01-02T03:04:05.678Z.

    The width never varies, so lexicographic order of these strings matches
    chronological order.
    """
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_stamp() -> str:
    return datetime.now().strftime("%Y%m%d%H%M%S")
