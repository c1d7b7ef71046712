"""
Candidate records and their canonical ordering.

Search units finish in arbitrary order; the candidate file is made
deterministic by sorting all survivors with an explicit total order:

  1. modulus (level NN)
  2. exponents, element by element; a proper prefix sorts first

Line format of the candidate file:

  <NN>; [e0, e1, ..., ek]
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, List, TextIO, Tuple


@dataclass(frozen=True)
class Candidate:
    """A surviving exponent tuple at modulus `level`."""
    level: int
    exponents: Tuple[int, ...]


def _cmp(x: int, y: int) -> int:
    return (x > y) - (x < y)


def compare_candidates(a: Candidate, b: Candidate) -> int:
    """Three-way comparison: modulus first, then exponents lexicographically."""
    c = _cmp(a.level, b.level)
    if c:
        return c
    for x, y in zip(a.exponents, b.exponents):
        c = _cmp(x, y)
        if c:
            return c
    return _cmp(len(a.exponents), len(b.exponents))


def sort_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Return the candidates in canonical order."""
    return sorted(candidates, key=cmp_to_key(compare_candidates))


def format_candidate(candidate: Candidate) -> str:
    exps = ", ".join(str(e) for e in candidate.exponents)
    return f"{candidate.level}; [{exps}]"


def write_candidates(candidates: Iterable[Candidate], sink: TextIO) -> int:
    """Write one line per candidate; returns the number of lines."""
    n = 0
    for candidate in candidates:
        sink.write(format_candidate(candidate) + "\n")
        n += 1
    return n


def parse_candidate_line(line: str) -> Candidate:
    """Inverse of format_candidate."""
    try:
        level_str, exps_str = line.strip().split(";", 1)
        exps_str = exps_str.strip()
        if not (exps_str.startswith("[") and exps_str.endswith("]")):
            raise ValueError("exponents must be a bracketed list")
        body = exps_str[1:-1].strip()
        exponents = tuple(int(x) for x in body.split(",")) if body else ()
        return Candidate(level=int(level_str), exponents=exponents)
    except ValueError as e:
        raise ValueError(f"Malformed candidate line {line!r}: {e}") from e


def read_candidates(path: str) -> List[Candidate]:
    """Read a candidate file, skipping blank lines."""
    candidates = []
    with open(path) as f:
        for line in f:
            if line.strip():
                candidates.append(parse_candidate_line(line))
    return candidates
