from __future__ import annotations


class FreqStatError(Exception):
    """Base class for all freqstat errors."""


class AllocationFailure(FreqStatError):
    """The frequency map could not grow. Fatal: the map must not be reused."""


class MapClearedError(FreqStatError):
    """Operation on a map that was cleared and not reinitialized."""


class InvalidPattern(FreqStatError, ValueError):
    """The supplied regular expression does not compile."""


class MatcherResourceExhausted(FreqStatError):
    """The regex engine ran out of resources while matching."""


class OversizedToken(FreqStatError):
    """A token would exceed the maximum token length."""

    def __init__(self, length: int, limit: int):
        super().__init__(f"token of {length} bytes exceeds limit of {limit}")
        self.length = length
        self.limit = limit


class NoMatchesError(FreqStatError):
    """A file produced zero matches, so its normalization weight is undefined."""


class CorpusReadError(FreqStatError):
    """A corpus file could not be read."""


class ConfigError(FreqStatError, ValueError):
    """Invalid run configuration."""
