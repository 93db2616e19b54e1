"""Multi-target content delivery.

Every requested pane gets an attempt, whatever happened to the ones before
it. Only when all of them fail is the content copied to the clipboard, so the
composed text is never lost. Focus is resolved afterwards, from the original
target order, never from completion order.
"""
from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from ..contracts.v1 import DeliveryResult
from ..errors import ExternalCommandError
from ..mux.base import Multiplexer
from .clipboard import copy_to_clipboard
from .registry import unique_panes

logger = logging.getLogger(__name__)

Clipboard = Callable[[str], None]

_IMAGE_PATH_RE = re.compile(r"\.(png|jpe?g|gif|webp|bmp|tiff?|heic|avif)$", re.IGNORECASE)


def looks_like_image_path(content: str) -> bool:
    text = content.strip()
    return bool(text) and "\n" not in text and bool(_IMAGE_PATH_RE.search(text))


def send_key_delay_ms(content: str, *, default_ms: int, image_ms: int) -> int:
    """Receivers take longer to settle after an image path is typed (they attach the file)."""
    if looks_like_image_path(content):
        return max(default_ms, image_ms)
    return default_ms


@dataclass
class AutoSend:
    """Submit key pressed after the content, e.g. Enter for a REPL prompt."""

    key: str
    delay_ms: int = 0
    retries: int = 1


def _copy(clipboard: Clipboard, content: str) -> bool:
    try:
        clipboard(content)
    except ExternalCommandError as e:
        logger.warning("Failed to copy to clipboard: %s", e)
        return False
    return True


def _deliver_one(mux: Multiplexer, pane_id: str, content: str, auto_send: Optional[AutoSend]) -> Optional[str]:
    """Return None on success, else the reason this pane failed."""
    try:
        mux.send_text(pane_id, content)
    except ExternalCommandError as e:
        return str(e)
    if auto_send is None:
        return None

    # The key is retried on its own; the content is never typed twice.
    reason = ""
    for attempt in range(1 + max(0, auto_send.retries)):
        try:
            mux.send_key(pane_id, auto_send.key, auto_send.delay_ms)
            return None
        except ExternalCommandError as e:
            reason = f"send key {auto_send.key!r}: {e}"
            logger.debug("pane %s attempt %d: %s", pane_id, attempt + 1, reason)
    return reason


def deliver(
    content: str,
    mux: Multiplexer,
    target_pane_ids: Iterable[str],
    *,
    clipboard: Clipboard = copy_to_clipboard,
    auto_send: Optional[AutoSend] = None,
    workers: int = 1,
) -> DeliveryResult:
    targets = unique_panes(target_pane_ids)
    if not targets:
        copied = _copy(clipboard, content)
        if copied:
            logger.info("Content copied to clipboard.")
        return DeliveryResult(copied_to_clipboard=copied)

    if workers > 1 and len(targets) > 1:
        with ThreadPoolExecutor(max_workers=min(workers, len(targets))) as pool:
            errors = list(pool.map(lambda pane: _deliver_one(mux, pane, content, auto_send), targets))
    else:
        errors = [_deliver_one(mux, pane, content, auto_send) for pane in targets]

    failed: List[str] = []
    for pane, err in zip(targets, errors):
        if err is None:
            logger.debug("content sent to pane %s", pane, extra={"op": "deliver", "backend": mux.name, "pane_id": pane})
            continue
        failed.append(pane)
        logger.error("Failed to send to pane %s: %s", pane, err, extra={"op": "deliver", "pane_id": pane})

    success = len(targets) - len(failed)
    copied = False
    if success == 0:
        logger.info("Falling back to clipboard...")
        copied = _copy(clipboard, content)

    return DeliveryResult(
        success_count=success,
        total_count=len(targets),
        failed_panes=failed,
        copied_to_clipboard=copied,
    )


def focus_first_success(mux: Multiplexer, target_pane_ids: Iterable[str], failed_panes: Iterable[str]) -> Optional[str]:
    """Focus the first pane, in original order, that did not fail. Returns it, or None."""
    failed = set(failed_panes)
    for pane in unique_panes(target_pane_ids):
        if pane in failed:
            continue
        try:
            mux.focus(pane)
        except ExternalCommandError as e:
            logger.warning("Failed to focus pane %s: %s", pane, e)
            return None
        return pane
    return None
