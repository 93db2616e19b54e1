from __future__ import annotations

import logging

import pyperclip

from ..errors import ExternalCommandError

logger = logging.getLogger(__name__)


def copy_to_clipboard(content: str) -> None:
    try:
        pyperclip.copy(content)
    except pyperclip.PyperclipException as e:
        raise ExternalCommandError(f"clipboard unavailable: {e}") from e


def try_copy(content: str) -> bool:
    """Best-effort clipboard write; failures are logged, never raised."""
    try:
        copy_to_clipboard(content)
    except ExternalCommandError as e:
        logger.warning("Failed to copy to clipboard: %s", e)
        return False
    return True
