from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from tqdm import tqdm

from .corpus import CorpusFile, filter_chars, parse_corpus_spec, read_corpus
from .errors import (
    ConfigError,
    CorpusReadError,
    InvalidPattern,
    MatcherResourceExhausted,
    NoMatchesError,
)
from .freqmap import FrequencyMap
from .ngrams import extract_ngrams
from .patterns import detect_overlap, resolve_pattern
from .scanner import compile_pattern, scan_normalized

logger = logging.getLogger(__name__)

# Per-file failures: the file contributes nothing and the run goes on.
PER_FILE_ERRORS = (CorpusReadError, InvalidPattern, MatcherResourceExhausted, NoMatchesError)

_MODES = ("regex", "ngrams")


def _progress(it, total=None, desc: str = "", unit: str = "it", enabled: bool = True):
    if not enabled:
        return it
    return tqdm(it, total=total, desc=desc, unit=unit, file=sys.stderr, dynamic_ncols=True)


def _parse_overlap(v: Any) -> Optional[bool]:
    """None means auto-detect from the pattern."""
    if v is None or isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s == "auto":
        return None
    if s in {"1", "true", "on", "yes"}:
        return True
    if s in {"0", "false", "off", "no"}:
        return False
    raise ConfigError(f"overlap must be auto|on|off, got {v!r}")


def _parse_file(v: Any) -> CorpusFile:
    if isinstance(v, CorpusFile):
        return v
    if isinstance(v, str):
        return parse_corpus_spec(v)
    if isinstance(v, Mapping):
        if "path" not in v:
            raise ConfigError(f"file entry is missing 'path': {dict(v)}")
        try:
            multiplier = float(v.get("multiplier", 1.0))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"multiplier must be a number, got {v.get('multiplier')!r}") from e
        return CorpusFile(str(v["path"]), multiplier)
    raise ConfigError(f"Unsupported file entry: {v!r}")


@dataclass
class FreqConfig:
    """Run configuration: which files, what to count, how to print."""

    files: List[CorpusFile] = field(default_factory=list)
    pattern: str = "chars"
    mode: str = "regex"
    word_count: int = 2
    overlap: Optional[bool] = None
    max_results: int = 0
    case_sensitive: bool = False
    ctrl_to_escape: bool = True
    format: str = "txt"
    text_key: str = "text"
    short: bool = False
    progress: bool = True

    def __post_init__(self) -> None:
        if self.mode not in _MODES:
            raise ConfigError(f"mode must be one of {_MODES}, got {self.mode!r}")
        if self.mode == "ngrams" and self.word_count < 1:
            raise ConfigError("word_count must be >= 1")
        if self.max_results < 0:
            raise ConfigError("max_results must be >= 0 (0 = unlimited)")

    @property
    def regex(self) -> str:
        return resolve_pattern(self.pattern)

    def resolved_overlap(self) -> bool:
        return detect_overlap(self.regex) if self.overlap is None else self.overlap

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "FreqConfig":
        known = set(FreqConfig.__dataclass_fields__)
        unknown = set(d) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")
        kw: Dict[str, Any] = dict(d)
        kw["files"] = [_parse_file(f) for f in d.get("files") or []]
        if "overlap" in kw:
            kw["overlap"] = _parse_overlap(kw["overlap"])
        for k in ("word_count", "max_results"):
            if k in kw:
                try:
                    kw[k] = int(kw[k])
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"{k} must be an integer, got {kw[k]!r}") from e
        return FreqConfig(**kw)


@dataclass
class FileReport:
    path: str
    multiplier: float
    matches: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def count_file(fmap: FrequencyMap, buffer: bytes, pattern, overlap: bool, multiplier: float) -> int:
    """Two-pass normalized regex count of one buffer into ``fmap``."""
    return scan_normalized(fmap, buffer, pattern, overlap, multiplier)


def ngram_file(fmap: FrequencyMap, buffer: bytes, word_count: int, multiplier: float) -> int:
    return extract_ngrams(fmap, buffer, word_count, multiplier)


def _process_file(cfg: FreqConfig, cf: CorpusFile, compiled, overlap: bool) -> Tuple[FrequencyMap, int]:
    buffer = read_corpus(cf.path, fmt=cfg.format, text_key=cfg.text_key)
    buffer = filter_chars(buffer, lowercase=not cfg.case_sensitive)
    local = FrequencyMap()
    if cfg.mode == "ngrams":
        n = ngram_file(local, buffer, cfg.word_count, cf.multiplier)
    else:
        n = count_file(local, buffer, compiled, overlap, cf.multiplier)
    return local, n


def run(cfg: FreqConfig, fmap: Optional[FrequencyMap] = None) -> Tuple[FrequencyMap, List[FileReport]]:
    """Count every configured file into one aggregate map.

    Each file is counted into its own map and merged only when it succeeds,
    so a failed file leaves the aggregate untouched.
    """
    total = fmap if fmap is not None else FrequencyMap()
    reports: List[FileReport] = []

    compiled = None
    overlap = False
    if cfg.mode == "regex":
        overlap = cfg.resolved_overlap()
        try:
            compiled = compile_pattern(cfg.regex)
        except InvalidPattern as e:
            logger.error("%s", e)
            return total, [FileReport(cf.path, cf.multiplier, error=str(e)) for cf in cfg.files]
        logger.info("Pattern %r (overlap=%s)", cfg.regex, overlap)

    for cf in _progress(cfg.files, total=len(cfg.files), desc="Counting", unit="files", enabled=cfg.progress):
        report = FileReport(cf.path, cf.multiplier)
        try:
            local, report.matches = _process_file(cfg, cf, compiled, overlap)
        except PER_FILE_ERRORS as e:
            report.error = str(e)
            logger.warning("Skipping %s: %s", cf.path, e)
        else:
            total.merge(local)
            local.clear()
            logger.info("done with %s at %g (%d matches)", cf.path, cf.multiplier, report.matches)
        reports.append(report)

    return total, reports


def summarize(reports: Iterable[FileReport]) -> str:
    reports = list(reports)
    ok = sum(1 for r in reports if r.ok)
    return f"{ok}/{len(reports)} files counted"


__all__ = [
    "FreqConfig",
    "FileReport",
    "PER_FILE_ERRORS",
    "count_file",
    "ngram_file",
    "run",
    "summarize",
]
