from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Iterator, Optional

from .errors import OversizedToken
from .freqmap import FrequencyMap
from .scanner import BufferLike

logger = logging.getLogger(__name__)

MAX_WORD_LEN = 1000

_ALNUM = frozenset(b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")
_APOSTROPHE = ord("'")


def _check_word(word: bytes, max_word_len: int) -> None:
    if len(word) > max_word_len:
        raise OversizedToken(len(word), max_word_len)


def iter_words(buffer: BufferLike, max_word_len: int = MAX_WORD_LEN) -> Iterator[Optional[bytes]]:
    """Yield words made of ASCII alphanumerics and apostrophes.

    A word must start with an alphanumeric byte; one trailing apostrophe is
    dropped. A word longer than ``max_word_len`` is rejected: ``None`` is
    yielded in its place so that callers can break any window spanning it.
    """
    data = bytes(buffer)
    n = len(data)
    i = 0
    while i < n:
        while i < n and data[i] not in _ALNUM:
            i += 1
        if i >= n:
            return
        start = i
        while i < n and (data[i] in _ALNUM or data[i] == _APOSTROPHE):
            i += 1
        word = data[start:i]
        if word.endswith(b"'"):
            word = word[:-1]
        try:
            _check_word(word, max_word_len)
        except OversizedToken as e:
            logger.debug("Rejecting word at offset %d: %s", start, e)
            yield None
            continue
        yield word


def extract_ngrams(
    fmap: FrequencyMap,
    buffer: BufferLike,
    word_count: int,
    weight: float = 1.0,
    max_word_len: int = MAX_WORD_LEN,
) -> int:
    """Insert every window of ``word_count`` consecutive words into ``fmap``.

    The window slides by one word. Unlike regex scanning, ``weight`` is applied
    as-is with no per-file match-count normalization. Returns the number of
    windows inserted.
    """
    if word_count < 1:
        raise ValueError("word_count must be >= 1")

    window: Deque[bytes] = deque(maxlen=word_count)
    inserted = 0
    for word in iter_words(buffer, max_word_len):
        if word is None:
            window.clear()
            continue
        window.append(word)
        if len(window) == word_count:
            fmap.increment_or_insert(b" ".join(window), weight)
            inserted += 1
    return inserted
