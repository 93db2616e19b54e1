from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from ..errors import ValidationError


def process_content(content: str) -> str:
    """Prepare composed text for typing into a pane.

    Drops a single trailing newline. If the last token on the final line
    contains "@", a space is appended so the receiving prompt does not open
    its file-completion menu on it.
    """
    processed = content[:-1] if content.endswith("\n") else content
    last_line = processed.rsplit("\n", 1)[-1]
    tokens = last_line.split()
    if tokens and "@" in tokens[-1] and not last_line[-1:].isspace():
        processed += " "
    return processed


def parse_env_vars(env_strings: Optional[Iterable[str]]) -> Dict[str, str]:
    """Parse ["KEY=VALUE", ...]; values may contain "=" and may be empty."""
    result: Dict[str, str] = {}
    for item in env_strings or []:
        key, sep, value = item.partition("=")
        if not key or not sep:
            raise ValidationError(f"Invalid environment variable format: {item}")
        result[key] = value
    return result


def extract_raw_content(rest: Sequence[str], positionals: Sequence[str]) -> Optional[str]:
    """Arguments after `--` win over the first positional."""
    if rest:
        return " ".join(rest)
    if positionals:
        return positionals[0]
    return None
