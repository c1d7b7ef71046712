#!/usr/bin/env python3
"""
Run the Lemma 3.11 candidate search.

Runs every configured (level, max_length) case and writes:
  <output_dir>/tables.txt     sin/cos tables, `<NN> <j> <cos> <sin>`
  <output_dir>/output.txt     candidates, `<NN>; [e0, e1, ...]`
  <output_dir>/manifest.json  run metadata
  <output_dir>/waves.jsonl, cases.jsonl  per-wave / per-case metrics

The candidate file is the input of the Sage verification step.

Usage:
    python scripts/run_candidates.py                                # all Lemma 3.11 cases
    python scripts/run_candidates.py --config configs/local_small.yaml
    python scripts/run_candidates.py --case 31 6 --workers 8
    python scripts/run_candidates.py --list-cases
"""

import argparse
import json
import sys
import time
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from castle_search.config import (
    apply_overrides, load_config, search_config_from_dict, cases_from_config,
)
from castle_search.discard import normalize_level
from castle_search.logging import RunLogger, create_manifest
from castle_search.search import get_candidates


def main():
    parser = argparse.ArgumentParser(
        description="Candidate search for cyclotomic integers of castle < 5.1"
    )
    parser.add_argument("--config", type=str, default=None,
                        help="YAML config file (default: built-in Lemma 3.11 cases)")
    parser.add_argument("--case", type=int, nargs=2, action="append",
                        metavar=("LEVEL", "MAX_LENGTH"),
                        help="Run only this case (repeatable)")
    parser.add_argument("--workers", type=int, default=None,
                        help="Override number of parallel workers")
    parser.add_argument("--executor", choices=["process", "thread", "serial"],
                        default=None, help="Override executor type")
    parser.add_argument("--list-cases", action="store_true",
                        help="List configured cases and exit")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Output directory (default: ./outputs/run_<timestamp>)")
    parser.add_argument("--quiet", action="store_true",
                        help="No per-wave progress output")
    args = parser.parse_args()

    config = load_config(args.config) if args.config else {}
    config = apply_overrides(
        config, workers=args.workers, executor=args.executor,
        quiet=args.quiet, cases=args.case,
    )

    search_config = search_config_from_dict(config)
    cases = cases_from_config(config)

    if args.list_cases:
        print("Configured cases:")
        for i, (level, max_length) in enumerate(cases):
            print(f"  [{i}] N={level} (NN={normalize_level(level)}), n={max_length}")
        return

    run_id = f"run_{int(time.time())}"
    output_dir = Path(args.output_dir or f"./outputs/{run_id}")
    output_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 60)
    print("castle-search: Lemma 3.11 candidates")
    print("=" * 60)
    print(f"  Config:   {args.config or '(built-in)'}")
    print(f"  Output:   {output_dir}")
    print(f"  Run ID:   {run_id}")
    print(f"  Cases:    {len(cases)}")
    print(f"  Cutoff:   {search_config.castle_cutoff}")
    print(f"  Executor: {search_config.executor} x {search_config.n_workers}")
    print("=" * 60)

    manifest = create_manifest(
        run_id=run_id, config=config, cases=cases,
        n_workers=search_config.n_workers,
    )
    manifest.save(output_dir / "manifest.json")

    t_total = time.time()
    counts = []
    with RunLogger(output_dir) as logger, \
            open(output_dir / "tables.txt", "w") as table_sink, \
            open(output_dir / "output.txt", "w") as candidate_sink:
        for level, max_length in cases:
            print(f"\n{'─' * 60}")
            print(f"Case N={level}, n={max_length}")
            print(f"{'─' * 60}")
            candidates = get_candidates(
                level, max_length, table_sink, candidate_sink,
                config=search_config, logger=logger,
            )
            counts.append({"level": level, "max_length": max_length,
                           "n_candidates": len(candidates)})

    total_wall = time.time() - t_total
    summary = {
        "run_id": run_id,
        "cases": counts,
        "total_candidates": sum(c["n_candidates"] for c in counts),
        "wall_time_sec": total_wall,
        "completed": True,
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S%z"),
    }
    with open(output_dir / "summary.json", 'w') as f:
        json.dump(summary, f, indent=2, default=str)

    print(f"\n{'=' * 60}")
    print(f"All cases checked: {run_id}")
    print(f"  Wall time:   {total_wall:.1f}s")
    print(f"  Candidates:  {summary['total_candidates']}")
    print(f"  Output:      {output_dir}")
    print(f"{'=' * 60}")


if __name__ == "__main__":
    main()
