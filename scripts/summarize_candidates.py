#!/usr/bin/env python3
"""
summarize_candidates.py

Read a candidate file (`<NN>; [e0, e1, ...]` per line) and report how many
candidates survive per (modulus, number of terms).  Also checks that the
file is in canonical order, which the Sage side relies on for diffing runs.

Optionally writes the counts as JSONL and recomputes the float castle of
every candidate.

Usage:
  python scripts/summarize_candidates.py outputs/run_<id>/output.txt
  python scripts/summarize_candidates.py output.txt --jsonl summary.jsonl --castle
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Tuple

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from castle_search.aggregate import read_candidates, sort_candidates
from castle_search.cyclotomic import CyclotomicInteger
from castle_search.trig_table import sin_cos_table


def write_jsonl(path: str, rows: List[dict]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        for r in rows:
            f.write(json.dumps(r, separators=(",", ":")) + "\n")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("candidates", help="Candidate file written by run_candidates.py")
    ap.add_argument("--jsonl", default=None, help="Write per-(modulus, length) counts here")
    ap.add_argument("--castle", action="store_true",
                    help="Recompute the castle of every candidate and report the maximum")
    args = ap.parse_args()

    candidates = read_candidates(args.candidates)
    if not candidates:
        raise SystemExit(f"No candidates in {args.candidates}")

    in_order = candidates == sort_candidates(candidates)

    counts: Dict[Tuple[int, int], int] = defaultdict(int)
    best_castle: Dict[Tuple[int, int], float] = {}
    tables = {}
    for c in candidates:
        key = (c.level, len(c.exponents))
        counts[key] += 1
        if args.castle:
            if c.level not in tables:
                tables[c.level] = sin_cos_table(c.level)
            ci = CyclotomicInteger(exponents=c.exponents, level=c.level,
                                   table=tables[c.level])
            best_castle[key] = max(best_castle.get(key, 0.0), ci.castle())

    rows = []
    for (level, length) in sorted(counts):
        row = {"level": level, "n_terms": length, "n_candidates": counts[(level, length)]}
        if args.castle:
            row["max_castle"] = best_castle[(level, length)]
        rows.append(row)
        extra = f"  max castle {row['max_castle']:.6f}" if args.castle else ""
        print(f"[summary] NN={level:>6d} terms={length}: {row['n_candidates']:>7d}{extra}")

    print(f"[summary] total candidates: {len(candidates)}")
    print(f"[summary] canonical order: {'yes' if in_order else 'NO'}")

    if args.jsonl:
        write_jsonl(args.jsonl, rows)
        print(f"[summary] wrote {len(rows)} rows -> {args.jsonl}")

    if not in_order:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
