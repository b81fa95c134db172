from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, TextIO

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from .errors import ConfigError
from .freqmap import FrequencyMap
from .pairs import extract_pairs, print_pairs, print_pairs_short
from .patterns import PATTERNS, list_patterns
from .runner import FreqConfig, run, summarize

logger = logging.getLogger(__name__)


def emit(fmap: FrequencyMap, cfg: FreqConfig, stream: Optional[TextIO] = None) -> None:
    pairs = extract_pairs(fmap, limit=cfg.max_results)
    if cfg.short:
        print_pairs_short(pairs, stream)
    else:
        print_pairs(pairs, stream, ctrl_to_escape=cfg.ctrl_to_escape)


def add_common_output_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--file", dest="files", action="append", default=[], metavar="PATH[:MULT]",
                   help="Corpus file with optional multiplier (repeatable).")
    p.add_argument("--config", default=None, help="Optional YAML/JSON config file. Flags override it.")
    p.add_argument("--format", default=None, choices=["txt", "jsonl", "parquet"])
    p.add_argument("--text-key", default=None, help="Field key for jsonl/parquet.")
    p.add_argument("--max-results", type=int, default=None, help="Print at most this many entries (0 = all).")
    p.add_argument("--case-sensitive", action="store_true", help="Do not lower-case the corpus.")
    p.add_argument("--no-escape", action="store_true", help="Print tabs and backslashes raw.")
    p.add_argument("--short", action="store_true", help="Print keys only, on one line.")
    p.add_argument("--no-progress", action="store_true")
    p.add_argument("-v", "--verbose", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="freqstat", description="Weighted frequency statistics over text corpora")
    sub = parser.add_subparsers(dest="cmd", required=True)

    count_p = sub.add_parser("count", help="Count regex matches (letters, digraphs, words, ...).")
    count_p.add_argument("--pattern", default=None,
                         help=f"Preset name ({', '.join(list_patterns())}) or a regular expression.")
    count_p.add_argument("--overlap", default=None, choices=["auto", "on", "off"])
    add_common_output_args(count_p)

    ngram_p = sub.add_parser("ngrams", help="Count sequences of N consecutive words.")
    ngram_p.add_argument("-n", "--word-count", type=int, default=None)
    add_common_output_args(ngram_p)

    sub.add_parser("patterns", help="List pattern presets.")
    return parser


def _read_config_file(path: str) -> dict:
    try:
        loaded = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
    except (OmegaConfBaseException, yaml.YAMLError) as e:
        raise ConfigError(f"cannot parse config {path}: {e}") from e
    if not isinstance(loaded, dict):
        raise ConfigError(f"config {path} must be a mapping, got {type(loaded).__name__}")
    return loaded


def load_config(args: argparse.Namespace) -> FreqConfig:
    base = {}
    if args.config:
        base = _read_config_file(args.config)
    overrides = {
        "mode": "ngrams" if args.cmd == "ngrams" else "regex",
        "pattern": getattr(args, "pattern", None),
        "overlap": getattr(args, "overlap", None),
        "word_count": getattr(args, "word_count", None),
        "format": args.format,
        "text_key": args.text_key,
        "max_results": args.max_results,
    }
    merged = dict(base)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    if args.files:
        merged["files"] = list(args.files)
    if args.case_sensitive:
        merged["case_sensitive"] = True
    if args.no_escape:
        merged["ctrl_to_escape"] = False
    if args.short:
        merged["short"] = True
    if args.no_progress:
        merged["progress"] = False
    return FreqConfig.from_dict(merged)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "patterns":
        for name in list_patterns():
            print(f"{name}\t{PATTERNS[name]!r}")
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        cfg = load_config(args)
    except (ConfigError, OSError) as e:
        parser.error(str(e))
    if not cfg.files:
        parser.error("no corpus files given (use --file or --config)")

    fmap, reports = run(cfg)
    emit(fmap, cfg)
    logger.info(summarize(reports))
    return 0 if any(r.ok for r in reports) else 1


if __name__ == "__main__":
    sys.exit(main())
