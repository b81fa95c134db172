from __future__ import annotations

import sys
from typing import Iterable, Iterator, List, Optional, TextIO

from .freqmap import FrequencyMap, Pair

# Shift-out control code, shown as "\s".
ASCII_SHIFT = 14

_ESCAPES_FULL = {
    ord("\n"): "\\n",
    ord("\t"): "\\t",
    ASCII_SHIFT: "\\s",
    ord("\b"): "\\b",
    ord("\\"): "\\\\",
}
_ESCAPES_MIN = {
    ord("\n"): "\\n",
    ASCII_SHIFT: "\\s",
    ord("\b"): "\\b",
}


def extract_pairs(fmap: FrequencyMap, limit: int = 0) -> List[Pair]:
    """Value-sorted snapshot of ``fmap``, truncated to ``limit`` when positive."""
    return fmap.extract_sorted(limit=limit)


def render_key(key: bytes, ctrl_to_escape: bool = True) -> str:
    table = _ESCAPES_FULL if ctrl_to_escape else _ESCAPES_MIN
    return "".join(table.get(b, chr(b)) for b in key)


def format_pairs(pairs: Iterable[Pair], ctrl_to_escape: bool = True) -> Iterator[str]:
    for key, value in pairs:
        yield f"{render_key(key, ctrl_to_escape)} {int(value)}"


def print_pairs(pairs: Iterable[Pair], stream: Optional[TextIO] = None, ctrl_to_escape: bool = True) -> None:
    out = stream or sys.stdout
    for line in format_pairs(pairs, ctrl_to_escape):
        out.write(line + "\n")
    out.write("\n")


def print_pairs_short(pairs: Iterable[Pair], stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    for key, _ in pairs:
        out.write(render_key(key, True) + " ")
    out.write("\n")
