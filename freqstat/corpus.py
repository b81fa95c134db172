from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from .errors import ConfigError, CorpusReadError

_LOWER = bytes.maketrans(b"ABCDEFGHIJKLMNOPQRSTUVWXYZ", b"abcdefghijklmnopqrstuvwxyz")


@dataclass(frozen=True)
class CorpusFile:
    """A corpus file and the total weight it contributes."""

    path: str
    multiplier: float = 1.0

    def __post_init__(self) -> None:
        if not self.path:
            raise ConfigError("corpus path must be non-empty")
        if not math.isfinite(self.multiplier) or self.multiplier <= 0:
            raise ConfigError(f"multiplier must be a positive finite number, got {self.multiplier} for {self.path}")


def parse_corpus_spec(spec: str) -> CorpusFile:
    """Parse ``PATH`` or ``PATH:MULTIPLIER``."""
    path, sep, mult = spec.rpartition(":")
    if not sep or not path:
        return CorpusFile(spec, 1.0)
    try:
        multiplier = float(mult)
    except ValueError:
        # A colon inside the path, no multiplier given.
        return CorpusFile(spec, 1.0)
    return CorpusFile(path, multiplier)


def _read_txt(path: Path) -> bytes:
    with path.open("rb") as f:
        return f.read()


def _read_jsonl(path: Path, text_key: str) -> bytes:
    parts: List[bytes] = []
    with path.open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            obj = json.loads(line)
            if isinstance(obj, dict) and text_key in obj:
                s = str(obj[text_key])
            else:
                s = json.dumps(obj, ensure_ascii=False)
            parts.append(s.encode("utf-8"))
    return b"\n".join(parts)


def _read_parquet(path: Path, text_key: str) -> bytes:
    import pyarrow as pa
    import pyarrow.parquet as pq

    try:
        table = pq.read_table(str(path), columns=[text_key])
    except pa.ArrowException as e:
        raise CorpusReadError(f"cannot read column {text_key!r} from {path}: {e}") from e
    col = table.column(text_key).to_pylist()
    return b"\n".join(str(s).encode("utf-8") for s in col if s is not None)


def read_corpus(path: Union[str, Path], fmt: str = "txt", text_key: str = "text") -> bytes:
    """Read a corpus file into one byte buffer.

    ``txt`` is read verbatim; ``jsonl`` and ``parquet`` records are joined with
    newlines.
    """
    p = Path(path)
    fmt = fmt.lower()
    try:
        if fmt == "txt":
            return _read_txt(p)
        if fmt == "jsonl":
            return _read_jsonl(p, text_key)
        if fmt == "parquet":
            return _read_parquet(p, text_key)
    except (OSError, ValueError, KeyError) as e:
        raise CorpusReadError(f"cannot read {p}: {e}") from e
    raise ConfigError(f"Unknown format: {fmt}. Use txt|jsonl|parquet.")


def filter_chars(buffer: bytes, lowercase: bool = True) -> bytes:
    """ASCII lower-casing; other bytes pass through."""
    if not lowercase:
        return buffer
    return buffer.translate(_LOWER)
