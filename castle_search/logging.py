"""
Structured logging for candidate search runs.

Produces:
  - manifest.json: One-time run metadata (git hash, config, cases, node info)
  - waves.jsonl:   One record per drained wave (level, j2, units, survivors,
                   discard counts per rule, wall time)
  - cases.jsonl:   One record per finished (level, max_length) case
"""

import json
import os
import hashlib
import platform
import subprocess
import sys
import time
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, List, Tuple


@dataclass
class RunManifest:
    """Run-level metadata, saved once per run."""
    run_id: str
    timestamp: str
    git_commit: str
    config_hash: str
    node_name: str
    python_version: str
    n_workers: int
    config: Dict[str, Any]
    cases: List[Tuple[int, int]]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, path: Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


def _get_git_commit() -> str:
    """Get current git commit hash, or 'unknown'."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True, text=True, timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return "unknown"
    return result.stdout.strip() if result.returncode == 0 else "unknown"


def _config_hash(config: Dict[str, Any]) -> str:
    """Deterministic hash of config dict."""
    s = json.dumps(config, sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()[:16]


def create_manifest(
    run_id: str,
    config: Dict[str, Any],
    cases: List[Tuple[int, int]],
    n_workers: int = 1,
) -> RunManifest:
    """Create a RunManifest with auto-detected metadata."""
    return RunManifest(
        run_id=run_id,
        timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        git_commit=_get_git_commit(),
        config_hash=_config_hash(config),
        node_name=os.environ.get("SLURMD_NODENAME", platform.node()),
        python_version=sys.version,
        n_workers=n_workers,
        config=config,
        cases=[tuple(c) for c in cases],
    )


class RunLogger:
    """Structured JSONL logger for one search run.

    Writes two files:
      - waves.jsonl  (one record per wave)
      - cases.jsonl  (one record per case)
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self._waves_path = self.output_dir / "waves.jsonl"
        self._cases_path = self.output_dir / "cases.jsonl"

        # Append mode so reruns into the same directory keep history
        self._waves_f = open(self._waves_path, 'a')
        self._cases_f = open(self._cases_path, 'a')

        self._waves_count = 0
        self._cases_count = 0
        self._survivors_count = 0

    def log_wave(self, record: Dict[str, Any]):
        """Log the summary of one drained wave."""
        record["timestamp"] = time.time()
        self._waves_f.write(json.dumps(record, default=str) + "\n")
        self._waves_count += 1
        self._survivors_count += int(record.get("n_survivors", 0))

        # Flush periodically
        if self._waves_count % 10 == 0:
            self._waves_f.flush()

    def log_case(self, record: Dict[str, Any]):
        """Log the summary of one finished case."""
        record["timestamp"] = time.time()
        self._cases_f.write(json.dumps(record, default=str) + "\n")
        self._cases_f.flush()
        self._cases_count += 1

    def close(self):
        """Flush and close all log files."""
        for f in [self._waves_f, self._cases_f]:
            f.flush()
            f.close()

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "waves_logged": self._waves_count,
            "cases_logged": self._cases_count,
            "survivors_logged": self._survivors_count,
        }

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
