"""Configuration for send/delivery behaviour.

Sources, highest priority first: command-line flags (applied by the caller),
EDITPROMPT_* environment variables, $EDITPROMPT_HOME/settings.yaml, built-in
defaults. The environment matters most: an editor launched by `open` passes
EDITPROMPT_MUX / EDITPROMPT_ALWAYS_COPY on, so commands run from inside the
editor (`input`, `dump`, `stash`) talk to the same backend.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import yaml  # type: ignore

from ..errors import ValidationError
from ..paths import settings_path
from ..util.conv import coerce_bool, coerce_int

SUPPORTED_MUXES = ("tmux", "wezterm")
DEFAULT_MUX = "tmux"
DEFAULT_EDITOR = "vim"
DEFAULT_SEND_KEY_DELAY_MS = 1000
DEFAULT_IMAGE_SEND_KEY_DELAY_MS = 1500
DEFAULT_DELIVERY_WORKERS = 1
DEFAULT_SEND_KEYS: Dict[str, str] = {"tmux": "C-m", "wezterm": "\\r"}


@dataclass
class SendConfig:
    mux: str = DEFAULT_MUX
    always_copy: bool = False
    send_key_delay_ms: int = DEFAULT_SEND_KEY_DELAY_MS
    image_send_key_delay_ms: int = DEFAULT_IMAGE_SEND_KEY_DELAY_MS
    editor: str = ""
    delivery_workers: int = DEFAULT_DELIVERY_WORKERS
    send_keys: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SEND_KEYS))

    def send_key_for(self, mux: Optional[str] = None) -> str:
        name = mux or self.mux
        return self.send_keys.get(name) or DEFAULT_SEND_KEYS.get(name, "")

    def editor_env(self) -> Dict[str, str]:
        """Variables handed to the editor so nested commands inherit the session."""
        return {
            "EDITPROMPT": "1",
            "EDITPROMPT_MUX": self.mux,
            "EDITPROMPT_ALWAYS_COPY": "1" if self.always_copy else "0",
        }


def load_settings() -> Dict[str, Any]:
    """Load $EDITPROMPT_HOME/settings.yaml; a missing or broken file reads as empty."""
    p = settings_path()
    if not p.exists():
        return {}
    try:
        doc = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return doc if isinstance(doc, dict) else {}


def validate_mux(value: Any, *, source: str = "multiplexer type") -> str:
    mux = str(value or DEFAULT_MUX).strip()
    if mux not in SUPPORTED_MUXES:
        raise ValidationError(f"Invalid {source} '{mux}'. Supported values: {', '.join(SUPPORTED_MUXES)}")
    return mux


def read_send_config(
    environ: Optional[Mapping[str, str]] = None,
    settings: Optional[Dict[str, Any]] = None,
) -> SendConfig:
    env = os.environ if environ is None else environ
    doc = load_settings() if settings is None else settings

    mux_raw = env.get("EDITPROMPT_MUX") or doc.get("mux") or DEFAULT_MUX
    mux = validate_mux(mux_raw, source="EDITPROMPT_MUX value")

    always_copy = coerce_bool(doc.get("always_copy"), default=False)
    always_copy = coerce_bool(env.get("EDITPROMPT_ALWAYS_COPY"), default=always_copy)

    delay = coerce_int(doc.get("send_key_delay_ms"), default=DEFAULT_SEND_KEY_DELAY_MS)
    delay = coerce_int(env.get("EDITPROMPT_SEND_KEY_DELAY"), default=delay)
    image_delay = coerce_int(doc.get("image_send_key_delay_ms"), default=DEFAULT_IMAGE_SEND_KEY_DELAY_MS)
    workers = max(1, coerce_int(doc.get("delivery_workers"), default=DEFAULT_DELIVERY_WORKERS))

    send_keys = dict(DEFAULT_SEND_KEYS)
    raw_keys = doc.get("send_keys")
    if isinstance(raw_keys, dict):
        for k, v in raw_keys.items():
            if k in SUPPORTED_MUXES and isinstance(v, str) and v:
                send_keys[k] = v

    return SendConfig(
        mux=mux,
        always_copy=always_copy,
        send_key_delay_ms=delay,
        image_send_key_delay_ms=image_delay,
        editor=str(doc.get("editor") or ""),
        delivery_workers=workers,
        send_keys=send_keys,
    )


def resolve_editor(option: Optional[str], config: SendConfig, environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    return option or env.get("EDITOR") or config.editor or DEFAULT_EDITOR
