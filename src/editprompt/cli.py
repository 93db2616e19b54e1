from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from typing import Any, List, Optional, Sequence, Tuple

from . import __version__
from .contracts.v1 import DeliveryResult
from .errors import EditPromptError, EmptyContentError, ValidationError
from .kernel.clipboard import copy_to_clipboard, try_copy
from .kernel.content import extract_raw_content, parse_env_vars, process_content
from .kernel.delivery import AutoSend, deliver, focus_first_success, send_key_delay_ms
from .kernel.editor import open_editor_and_get_content
from .kernel.launch import launch
from .kernel.quote import normalize
from .kernel.registry import PaneRegistry, unique_panes
from .kernel.resume import resume
from .kernel.settings import SUPPORTED_MUXES, SendConfig, read_send_config, resolve_editor, validate_mux
from .kernel.stash import StashStore
from .kernel.store import open_store
from .mux import Multiplexer, TmuxMultiplexer, get_multiplexer
from .util.obslog import setup_logging

logger = logging.getLogger("editprompt.cli")


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def _split_rest(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Everything after the first `--` is raw content, never options."""
    items = list(argv)
    if "--" in items:
        i = items.index("--")
        return items[:i], items[i + 1 :]
    return items, []


def _config(args: argparse.Namespace) -> SendConfig:
    config = read_send_config()
    if getattr(args, "mux", None):
        config.mux = validate_mux(args.mux)
    if getattr(args, "always_copy", False):
        config.always_copy = True
    return config


def _mux(config: SendConfig) -> Multiplexer:
    return get_multiplexer(config.mux)


def _auto_send(args: argparse.Namespace, config: SendConfig, content: str) -> Optional[AutoSend]:
    if not getattr(args, "auto_send", False):
        return None
    delay = send_key_delay_ms(
        content,
        default_ms=config.send_key_delay_ms,
        image_ms=config.image_send_key_delay_ms,
    )
    return AutoSend(key=args.send_key or config.send_key_for(), delay_ms=delay)


def _editor_targets(registry: PaneRegistry) -> Tuple[str, List[str]]:
    """Current pane and its targets; the current pane must be a registered editor."""
    current = registry.mux.current_pane_id()
    if not registry.is_editor_pane(current):
        raise ValidationError("Current pane is not an editor pane")
    targets = registry.get_target_pane_ids(current)
    if not targets:
        raise ValidationError("No target panes registered for this editor pane")
    return current, targets


def _report_delivery(result: DeliveryResult) -> None:
    if result.all_failed:
        print(
            "Error: All target panes failed to receive content: " + ", ".join(result.failed_panes),
            file=sys.stderr,
        )
    elif result.partial:
        print(
            f"Warning: failed to send to {len(result.failed_panes)} of {result.total_count} panes: "
            + ", ".join(result.failed_panes),
            file=sys.stderr,
        )


def cmd_open(args: argparse.Namespace) -> int:
    config = _config(args)
    if args.send_key and not args.auto_send:
        raise ValidationError("--send-key requires --auto-send to be enabled")
    env = config.editor_env()
    env.update(parse_env_vars(args.env))
    mux = _mux(config)
    registry = PaneRegistry(mux)
    targets = unique_panes(args.target_pane or [])

    editor_pane = ""
    if targets:
        try:
            editor_pane = mux.current_pane_id()
        except EditPromptError as e:
            logger.debug("current pane unknown, skipping registration: %s", e)
        if editor_pane:
            registry.try_register(editor_pane, targets)

    try:
        content = open_editor_and_get_content(resolve_editor(args.editor, config), env)
        if not content:
            raise EmptyContentError("No content entered. Exiting.")

        result = deliver(
            content,
            mux,
            targets,
            auto_send=_auto_send(args, config, content),
            workers=config.delivery_workers,
        )
        _report_delivery(result)
        if targets and not result.all_failed:
            if not args.auto_send:
                focus_first_success(mux, targets, result.failed_panes)
            if config.always_copy and try_copy(content):
                logger.info("Also copied to clipboard.")

        print("---")
        print(content)
        return 1 if result.all_failed else 0
    finally:
        if editor_pane:
            registry.end_session(editor_pane, targets)


def cmd_resume(args: argparse.Namespace) -> int:
    config = _config(args)
    result = resume(PaneRegistry(_mux(config)), args.target_pane or None)
    if not result.ok:
        print(f"Error: {result.reason}", file=sys.stderr)
        return 1
    return 0


def cmd_input(args: argparse.Namespace) -> int:
    raw = extract_raw_content(args.rest, [args.content] if args.content else [])
    if raw is None:
        raise ValidationError('Content is required. Use: editprompt input -- "your content"')
    if args.send_key and not args.auto_send:
        raise ValidationError("--send-key requires --auto-send to be enabled")

    content = process_content(raw)
    if not content:
        raise EmptyContentError("No content to send. Exiting.")

    config = _config(args)
    mux = _mux(config)
    _, targets = _editor_targets(PaneRegistry(mux))

    auto_send = _auto_send(args, config, content)
    result = deliver(content, mux, targets, auto_send=auto_send, workers=config.delivery_workers)
    _report_delivery(result)
    if config.always_copy and not result.all_failed and try_copy(content):
        logger.info("Also copied to clipboard.")

    if auto_send is not None:
        if result.success_count == 0:
            return 1
        logger.info("Content sent and submitted.")
        return 0

    if result.success_count > 0:
        focus_first_success(mux, targets, result.failed_panes)
    return 1 if result.all_failed else 0


def _read_stdin() -> str:
    return sys.stdin.read()


def cmd_collect(args: argparse.Namespace) -> int:
    config = _config(args)
    raw = extract_raw_content(args.rest, [args.content] if args.content else [])
    if raw is None:
        raw = _read_stdin()
    text = normalize(raw, with_quote_prefix=not args.no_quote)

    if args.output == "stdout":
        sys.stdout.write(text)
        return 0
    target = str(args.target_pane or "").strip()
    if not target:
        raise ValidationError("--target-pane is required for collect")
    PaneRegistry(_mux(config)).append_quote(target, text)
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    config = _config(args)
    registry = PaneRegistry(_mux(config))
    _, targets = _editor_targets(registry)

    parts: List[str] = []
    for target in targets:
        content = registry.take_quote(target)
        if content.strip():
            parts.append(content)
    sys.stdout.write(re.sub(r"\n{3,}$", "\n\n", "\n".join(parts)))
    return 0


def cmd_capture(args: argparse.Namespace) -> int:
    config = _config(args)
    target = str(args.target_pane or "").strip()
    if not target:
        raise ValidationError("--target-pane is required for capture")
    registry = PaneRegistry(_mux(config))
    content = registry.get_quote(target)
    copy_to_clipboard(content)
    # cleared only once the clipboard holds the quotes
    if content:
        registry.clear_quote(target)
    return 0


def cmd_register(args: argparse.Namespace) -> int:
    config = _config(args)
    targets = unique_panes(args.target_pane or [])
    if not targets:
        raise ValidationError("--target-pane is required for register")
    registry = PaneRegistry(_mux(config))

    editor = str(args.editor_pane or "").strip()
    if not editor:
        editor = registry.mux.current_pane_id()
        if not registry.is_editor_pane(editor):
            raise ValidationError(
                "Current pane is not an editor pane. Run this command from an editor pane or pass --editor-pane."
            )

    merged = registry.register(editor, targets)
    logger.info("Editor pane %s registered with target panes: %s", editor, ", ".join(merged))
    return 0


def cmd_launch(args: argparse.Namespace) -> int:
    mux = _mux(_config(args))
    if not isinstance(mux, TmuxMultiplexer):
        raise ValidationError("launch is only supported with tmux")
    pane = launch(
        mux,
        args.target_pane,
        split_options=args.split_options,
        cwd=args.cwd,
        open_args=args.rest,
    )
    logger.debug("editor pane %s serves %s", pane, args.target_pane)
    return 0


def _stash_store(args: argparse.Namespace) -> StashStore:
    config = _config(args)
    _, targets = _editor_targets(PaneRegistry(_mux(config)))
    return StashStore(open_store(), config.mux, targets[0])


def _missing_entry(key: Optional[str]) -> ValidationError:
    if key:
        return ValidationError(f"No stash entry found with key: {key}")
    return ValidationError("No stash entries found")


def cmd_stash_push(args: argparse.Namespace) -> int:
    raw = extract_raw_content(args.rest, [args.content] if args.content else [])
    if raw is None or not raw.strip():
        raise ValidationError('Content is required. Use: editprompt stash push -- "your content"')
    key = _stash_store(args).push(raw)
    print(f"Stashed with key: {key}")
    return 0


def cmd_stash_list(args: argparse.Namespace) -> int:
    _print_json([e.model_dump() for e in _stash_store(args).list()])
    return 0


def cmd_stash_apply(args: argparse.Namespace) -> int:
    content = _stash_store(args).get(args.key)
    if not content:
        raise _missing_entry(args.key)
    sys.stdout.write(content)
    return 0


def cmd_stash_drop(args: argparse.Namespace) -> int:
    if not _stash_store(args).drop(args.key):
        raise _missing_entry(args.key)
    logger.info("Stash entry dropped.")
    return 0


def cmd_stash_pop(args: argparse.Namespace) -> int:
    content = _stash_store(args).pop(args.key)
    if not content:
        raise _missing_entry(args.key)
    sys.stdout.write(content)
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-m", "--mux", default="", help=f"Multiplexer ({', '.join(SUPPORTED_MUXES)}; default: from env)")

    p = argparse.ArgumentParser(prog="editprompt", description="Compose prompts in your editor and send them to terminal panes")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-q", "--quiet", action="store_true", help="Suppress log output")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug log output")
    p.add_argument("--log-file", default="", help="Also write JSONL logs to this file")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_open = sub.add_parser("open", parents=[common], help="Open the editor and send the result to target panes")
    p_open.add_argument("-t", "--target-pane", action="append", default=[], help="Target pane id (repeatable)")
    p_open.add_argument("-e", "--editor", default="", help="Editor command (default: $EDITOR, then vim)")
    p_open.add_argument("-E", "--env", action="append", default=[], help="KEY=VALUE passed to the editor (repeatable)")
    p_open.add_argument("--always-copy", action="store_true", help="Also copy the content to the clipboard")
    p_open.add_argument("--auto-send", action="store_true", help="Press the submit key after the content")
    p_open.add_argument("--send-key", default="", help="Submit key (requires --auto-send)")
    p_open.set_defaults(func=cmd_open)

    p_resume = sub.add_parser("resume", parents=[common], help="Jump between an editor pane and its target")
    p_resume.add_argument("-t", "--target-pane", default="", help="Pane to resume from (default: current pane)")
    p_resume.set_defaults(func=cmd_resume)

    p_input = sub.add_parser("input", parents=[common], help="Send content from an editor pane to its targets")
    p_input.add_argument("content", nargs="?", default=None, help="Content (or pass it after --)")
    p_input.add_argument("--auto-send", action="store_true", help="Press the submit key after the content")
    p_input.add_argument("--send-key", default="", help="Submit key (requires --auto-send)")
    p_input.set_defaults(func=cmd_input)

    p_collect = sub.add_parser("collect", parents=[common], help="Quote text and add it to a pane's quote buffer")
    p_collect.add_argument("content", nargs="?", default=None, help="Text (default: after --, else stdin)")
    p_collect.add_argument("-t", "--target-pane", default="", help="Pane whose quote buffer receives the text")
    p_collect.add_argument("--no-quote", action="store_true", help="Reflow only, without the '> ' prefix")
    p_collect.add_argument("--output", choices=["buffer", "stdout"], default="buffer", help="Where the result goes (default: buffer)")
    p_collect.set_defaults(func=cmd_collect)

    p_dump = sub.add_parser("dump", parents=[common], help="Print and clear the quote buffers of this editor's targets")
    p_dump.set_defaults(func=cmd_dump)

    p_capture = sub.add_parser("capture", parents=[common], help="Copy and clear a pane's quote buffer")
    p_capture.add_argument("-t", "--target-pane", default="", help="Pane whose quote buffer is captured")
    p_capture.set_defaults(func=cmd_capture)

    p_register = sub.add_parser("register", parents=[common], help="Register an editor pane with target panes")
    p_register.add_argument("-t", "--target-pane", action="append", default=[], help="Target pane id (repeatable)")
    p_register.add_argument("--editor-pane", default="", help="Editor pane id (default: current pane, must be an editor)")
    p_register.set_defaults(func=cmd_register)

    p_launch = sub.add_parser("launch", parents=[common], help="Open or reuse a tmux editor pane for a target")
    p_launch.add_argument("-t", "--target-pane", required=True, help="Target pane id")
    p_launch.add_argument("--split-options", default="-v -l 10", help="Options for tmux split-window (default: -v -l 10)")
    p_launch.add_argument("--cwd", default="", help="Working directory of the new pane")
    p_launch.set_defaults(func=cmd_launch)

    p_stash = sub.add_parser("stash", help="Keep prompts for later, per target pane")
    stash_sub = p_stash.add_subparsers(dest="action", required=True)

    p_push = stash_sub.add_parser("push", parents=[common], help="Stash content")
    p_push.add_argument("content", nargs="?", default=None, help="Content (or pass it after --)")
    p_push.set_defaults(func=cmd_stash_push)

    p_list = stash_sub.add_parser("list", parents=[common], help="List stashed entries as JSON, newest first")
    p_list.set_defaults(func=cmd_stash_list)

    for name, func, help_text in (
        ("apply", cmd_stash_apply, "Print a stashed entry"),
        ("drop", cmd_stash_drop, "Remove a stashed entry"),
        ("pop", cmd_stash_pop, "Print and remove a stashed entry"),
    ):
        p_entry = stash_sub.add_parser(name, parents=[common], help=help_text)
        p_entry.add_argument("-k", "--key", default=None, help="Entry key (default: latest)")
        p_entry.set_defaults(func=func)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    head, rest = _split_rest(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(head)
    args.rest = rest
    setup_logging(quiet=args.quiet, verbose=args.verbose, log_file=args.log_file or None, force=True)
    try:
        return int(args.func(args))
    except EmptyContentError as e:
        logger.info("%s", e)
        return 0
    except EditPromptError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
