"""Error taxonomy.

Library code raises these; only `editprompt.cli` turns them into user-facing
messages and exit codes.
"""
from __future__ import annotations

from typing import Optional, Sequence


class EditPromptError(Exception):
    """Base class for every error editprompt raises on purpose."""


class ValidationError(EditPromptError, ValueError):
    """Missing or malformed user input; nothing has been attempted yet."""


class ExternalCommandError(EditPromptError):
    """A multiplexer CLI or editor subprocess failed."""

    def __init__(
        self,
        message: str,
        *,
        argv: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.argv = list(argv or [])
        self.returncode = returncode
        self.stderr = stderr


class RegistryError(EditPromptError):
    """Persisted pane-relationship state could not be read or written."""


class EmptyContentError(EditPromptError):
    """Nothing to deliver. Not a failure: commands exit 0."""
