from .errors import (
    AllocationFailure,
    ConfigError,
    CorpusReadError,
    FreqStatError,
    InvalidPattern,
    MapClearedError,
    MatcherResourceExhausted,
    NoMatchesError,
    OversizedToken,
)
from .freqmap import FrequencyMap, Pair, merge
from .ngrams import extract_ngrams
from .pairs import extract_pairs, print_pairs, render_key
from .scanner import normalized_weight, scan, scan_normalized

__all__ = [
    "AllocationFailure",
    "ConfigError",
    "CorpusReadError",
    "FreqStatError",
    "FrequencyMap",
    "InvalidPattern",
    "MapClearedError",
    "MatcherResourceExhausted",
    "NoMatchesError",
    "OversizedToken",
    "Pair",
    "extract_ngrams",
    "extract_pairs",
    "merge",
    "normalized_weight",
    "print_pairs",
    "render_key",
    "scan",
    "scan_normalized",
]
