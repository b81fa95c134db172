#!/usr/bin/env python3
from __future__ import annotations

import logging
import sys
from pathlib import Path

import hydra
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf

# Ensure repo root is on sys.path when running as a script.
repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from freqstat.cli import emit
from freqstat.corpus import parse_corpus_spec
from freqstat.runner import FreqConfig, run, summarize

log = logging.getLogger(__name__)


def _cfg_to_freq_config(cfg: DictConfig) -> FreqConfig:
    d = OmegaConf.to_container(cfg, resolve=True)
    # Hydra changes the working directory per run; corpus paths are relative to the launch dir.
    files = []
    for f in d.get("files") or []:
        if isinstance(f, str):
            f = parse_corpus_spec(f)
            f = {"path": f.path, "multiplier": f.multiplier}
        if isinstance(f, dict) and "path" in f:
            f = dict(f, path=to_absolute_path(str(f["path"])))
        files.append(f)
    d["files"] = files
    return FreqConfig.from_dict(d)


@hydra.main(config_path="../conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    freq_cfg = _cfg_to_freq_config(cfg)
    fmap, reports = run(freq_cfg)
    emit(fmap, freq_cfg)
    log.info(summarize(reports))


if __name__ == "__main__":
    main()
