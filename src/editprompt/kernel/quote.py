"""Quote normalizer for collected snippets.

Text selected in a terminal arrives hard-wrapped and indented by whatever
layout it was copied from. `normalize` picks one of two strategies:

- Pattern A (keep line breaks): some later line starts at column 0, so the
  line structure is intentional. Lines are trimmed; an indented line directly
  under an unindented one is glued back as a soft-wrapped continuation.
- Pattern B (unwrap): every later line is indented, so the block is one
  wrapped region. The common indentation is removed and adjacent lines are
  merged into paragraphs, except before list items and between two
  "key: value" lines.

The function is pure; applying it twice without the quote prefix gives the
same text as applying it once.
"""
from __future__ import annotations

import re
from string import ascii_letters
from typing import List

_HSPACE = " \t"
_LIST_ITEM_RE = re.compile(r"^[-*+]\s")
_COLONS = (":", "：")
QUOTE_PREFIX = "> "


def _is_indented(line: str) -> bool:
    return line[:1] in (" ", "\t")


def _is_list_item(line: str) -> bool:
    return bool(_LIST_ITEM_RE.match(line))


def _has_colon(line: str) -> bool:
    return any(c in line for c in _COLONS)


def _leading_width(line: str) -> int:
    return len(line) - len(line.lstrip(_HSPACE))


def _needs_space(prev: str, current: str) -> bool:
    # Latin words need a separator; ideographic text must not get one.
    if not prev or not current:
        return False
    return prev[-1] in ascii_letters and current[0] in ascii_letters


def _split_lines(text: str) -> List[str]:
    lines = [line.rstrip(_HSPACE + "\r") for line in text.replace("\r\n", "\n").split("\n")]
    start, end = 0, len(lines)
    while start < end and not lines[start]:
        start += 1
    while end > start and not lines[end - 1]:
        end -= 1
    return lines[start:end]


def _keep_line_breaks(lines: List[str]) -> List[str]:
    out: List[str] = []
    for i, raw in enumerate(lines):
        line = raw.strip(_HSPACE)
        prev = lines[i - 1] if i else ""
        if (
            out
            and prev
            and not _is_indented(prev)
            and _is_indented(raw)
            and line
            and not _is_list_item(line)
        ):
            out[-1] += (" " if _needs_space(out[-1], line) else "") + line
            continue
        out.append(line)
    return out


def _unwrap(lines: List[str]) -> List[str]:
    width = min((_leading_width(line) for line in lines if line), default=0)
    body = [line[width:] if line else line for line in lines]

    # Un-indent continuation lines hanging under an unindented line.
    for i in range(1, len(body)):
        prev, cur = body[i - 1], body[i]
        if prev and not _is_indented(prev) and _is_indented(cur):
            trimmed = cur.lstrip(_HSPACE)
            if not _is_list_item(trimmed):
                body[i] = trimmed

    out: List[str] = []
    paragraph = None
    prev_line = ""
    for line in body:
        if not line:
            if paragraph is not None:
                out.append(paragraph)
                paragraph = None
            out.append("")
            prev_line = ""
            continue
        if paragraph is None:
            paragraph = line
        else:
            trimmed = line.lstrip(_HSPACE)
            if _is_list_item(trimmed) or (_has_colon(prev_line) and _has_colon(line)):
                out.append(paragraph)
                paragraph = line
            else:
                paragraph += (" " if _needs_space(paragraph, trimmed) else "") + trimmed
        prev_line = line
    if paragraph is not None:
        out.append(paragraph)
    # Residual nesting is dropped so a second pass sees exactly this text.
    return [line.lstrip(_HSPACE) for line in out]


def normalize(text: str, with_quote_prefix: bool = True) -> str:
    lines = _split_lines(text)
    if not lines:
        return ""

    if any(line and not _is_indented(line) for line in lines[1:]):
        result = _keep_line_breaks(lines)
    else:
        result = _unwrap(lines)

    if with_quote_prefix:
        return "\n".join(QUOTE_PREFIX + line for line in result) + "\n\n"
    return "\n".join(result)
