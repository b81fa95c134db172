from __future__ import annotations

"""Regex scanning over a byte buffer.

Each match attempt only sees a bounded window of ``MAX_TOKEN_LEN`` bytes
starting at the current offset, so a pattern never walks the rest of a large
file for a single match. The window is a ``memoryview`` over the caller's
buffer; it is released when the attempt finishes, whether it matched, failed,
or raised.

Normalization is two-pass: count matches first, then insert each match with
weight ``multiplier / count`` so that every file contributes exactly its
multiplier in total.
"""

import logging
import re
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from .errors import InvalidPattern, MatcherResourceExhausted, NoMatchesError
from .freqmap import FrequencyMap

logger = logging.getLogger(__name__)

MAX_TOKEN_LEN = 1000

# Printable ASCII plus newline and tab.
_LEGAL_BYTES = frozenset(range(0x20, 0x7F)) | {ord("\n"), ord("\t")}

BufferLike = Union[bytes, bytearray, memoryview]
PatternLike = Union[str, bytes, "re.Pattern[bytes]"]


def compile_pattern(pattern: PatternLike) -> "re.Pattern[bytes]":
    """Compile a case-insensitive bytes pattern where "." also matches newline.

    Only the first capturing group is used as the key; further groups are
    ignored.
    """
    if isinstance(pattern, re.Pattern):
        if not isinstance(pattern.pattern, bytes):
            raise InvalidPattern("compiled pattern must be a bytes pattern")
        return pattern
    if isinstance(pattern, str):
        pattern = pattern.encode("utf-8")
    try:
        return re.compile(pattern, re.IGNORECASE | re.DOTALL)
    except re.error as e:
        raise InvalidPattern(f"invalid pattern {pattern!r}: {e}") from e


def legal_chars(seq: BufferLike) -> bool:
    return all(b in _LEGAL_BYTES for b in seq)


@contextmanager
def masked_window(buffer: BufferLike, start: int, size: int = MAX_TOKEN_LEN) -> Iterator[memoryview]:
    """Expose ``buffer[start:start+size]`` without copying; released on exit."""
    view = memoryview(buffer)
    window = view[start : start + size]
    try:
        yield window
    finally:
        window.release()
        view.release()


def _match_key(window: memoryview, m: "re.Match[bytes]") -> bytes:
    if m.re.groups >= 1:
        s, e = m.span(1)
        if s != e and s >= 0:
            return bytes(window[s:e])
    s, e = m.span(0)
    return bytes(window[s:e])


def scan(
    fmap: Optional[FrequencyMap],
    buffer: BufferLike,
    pattern: PatternLike,
    overlap: bool,
    weight: float = 1.0,
) -> int:
    """Walk ``buffer`` and feed matches into ``fmap``.

    With ``fmap=None`` nothing is inserted and only the match count is
    returned. Matches whose key contains a non-printable byte are counted but
    not inserted.
    """
    compiled = compile_pattern(pattern)
    length = len(buffer)
    matches = 0
    i = 0

    while i < length:
        with masked_window(buffer, i) as window:
            try:
                m = compiled.search(window)
            except (MemoryError, RecursionError, OverflowError) as e:
                raise MatcherResourceExhausted(f"matcher failed at offset {i}: {e}") from e
            if m is None:
                break
            matches += 1
            if fmap is not None:
                key = _match_key(window, m)
                if legal_chars(key):
                    fmap.increment_or_insert(key, weight)
                else:
                    logger.debug("Discarding key with illegal bytes at offset %d", i)
            step = m.start() + 1 if overlap else m.end()

        i += max(step, 1)

    return matches


def normalized_weight(multiplier: float, match_count: int) -> float:
    if match_count <= 0:
        raise NoMatchesError("no matches; normalization weight is undefined")
    return multiplier / match_count


def scan_normalized(
    fmap: FrequencyMap,
    buffer: BufferLike,
    pattern: PatternLike,
    overlap: bool,
    multiplier: float,
) -> int:
    """Count pass, then weighted pass. Returns the raw match count."""
    compiled = compile_pattern(pattern)
    count = scan(None, buffer, compiled, overlap)
    weight = normalized_weight(multiplier, count)
    scan(fmap, buffer, compiled, overlap, weight)
    return count
