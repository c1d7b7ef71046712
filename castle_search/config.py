"""
Search configuration and the case list of Lemma 3.11.

YAML layout (see configs/):

  search:
    castle_cutoff: 5.1
    workers: 8
    executor: process       # process | thread | serial
    mp_start_method: null   # fork | spawn | forkserver | null (platform default)
    verbose: true
  cases:
    - [420, 7]
    - [31, 6]
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

import yaml

from .discard import CASTLE_CUTOFF


# (level N, maximum number of terms n)
LEMMA_CASES: List[Tuple[int, int]] = [
    (2 * 2 * 3 * 5 * 7, 7),            # Proposition 4.3
    (31, 6),                           # Remark 8.3
    (3 * 5 * 7 * 13, 5),               # Section 8.3.1
    (2 * 2 * 3 * 5 * 7 * 11, 5),       # Sections 4.2.1, 8.2.1
    (5 * 19, 4),                       # Section 4.2.4
    (5 * 17, 4),                       # Section 4.2.4
    (2 * 2 * 3 * 5 * 7 * 11 * 13, 4),  # Section 4.2.2
    (2 * 2 * 2 * 3 * 3 * 5 * 7, 4),    # Proposition 4.1
]

EXECUTORS = ("process", "thread", "serial")


@dataclass
class SearchConfig:
    """Configuration for one candidate search.

    The castle cutoff is the exact constant of Lemma 3.11; only tests
    should change it.
    """
    castle_cutoff: float = CASTLE_CUTOFF
    workers: Optional[int] = None        # None -> os.cpu_count()
    executor: str = "process"
    mp_start_method: Optional[str] = None
    verbose: bool = False

    def __post_init__(self):
        if self.executor not in EXECUTORS:
            raise ValueError(
                f"Unknown executor: {self.executor!r} (expected one of {EXECUTORS})"
            )
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")

    @property
    def n_workers(self) -> int:
        if self.executor == "serial":
            return 1
        return self.workers or os.cpu_count() or 1


def load_config(config_path: str) -> dict:
    """Load YAML configuration."""
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config {config_path} must be a mapping, got {type(config).__name__}")
    return config


def search_config_from_dict(config: dict) -> SearchConfig:
    """Build a SearchConfig from the `search:` section of a config dict."""
    search_cfg = dict(config.get("search") or {})
    unknown = set(search_cfg) - set(SearchConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown search options: {sorted(unknown)}")
    return SearchConfig(**search_cfg)


def cases_from_config(config: dict) -> List[Tuple[int, int]]:
    """Read `cases:` as (level, max_length) pairs; default LEMMA_CASES."""
    raw = config.get("cases")
    if raw is None:
        return list(LEMMA_CASES)
    cases = []
    for entry in raw:
        if isinstance(entry, dict):
            level, max_length = entry["level"], entry["max_length"]
        else:
            level, max_length = entry
        cases.append((int(level), int(max_length)))
    return cases


def apply_overrides(
    config: dict,
    workers: Optional[int] = None,
    executor: Optional[str] = None,
    quiet: bool = False,
    cases: Optional[List[Tuple[int, int]]] = None,
) -> dict:
    """Return a copy of config with command-line overrides applied.

    `quiet` always wins over `search.verbose` from the file.
    """
    config = dict(config)
    search_cfg = dict(config.get("search") or {})
    if workers is not None:
        search_cfg["workers"] = workers
    if executor is not None:
        search_cfg["executor"] = executor
    if quiet:
        search_cfg["verbose"] = False
    else:
        search_cfg.setdefault("verbose", True)
    config["search"] = search_cfg
    if cases:
        config["cases"] = [list(c) for c in cases]
    return config
