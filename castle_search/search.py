"""
Enumeration engine for the Lemma 3.11 candidate search.

For a level N (NN = N or 2N, whichever is even) and a maximum number of
terms n, every exponent tuple

  (0, j2, j3, j4, ..., j_len),   3 <= len <= n

is generated and passed through the discard predicate, where

  - j2 runs over the divisors 1 <= j2 < NN of NN               (one wave each)
  - j3 runs over [0, NN) with gcd(j3, NN) >= j2                (one unit each)
  - j4 <= ... <= j_len run over [j3, NN), with gcd(j, NN) >= j2
    unless j2 == 1

Note the asymmetry: j2 is an exact divisor, the later exponents only carry a
gcd lower bound.

Parallel model:
  - the sin/cos table is built once, before any unit starts, and only read
  - each wave (one j2) fans out over an executor and is fully drained
    before the next wave is submitted
  - results return through futures; any exception in a unit aborts the
    run (pending units are cancelled)
  - output order is fixed afterwards by the aggregator sort, never by
    completion order
"""

from __future__ import annotations

import itertools
import math
import multiprocessing
import time
from collections import Counter
from concurrent.futures import (
    Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed,
)
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, TextIO, Tuple

from .aggregate import Candidate, sort_candidates, write_candidates
from .config import SearchConfig
from .cyclotomic import CyclotomicInteger
from .discard import (
    DivisorConstants, discard_reason, divisor_constants, normalize_level,
)
from .logging import RunLogger
from .trig_table import SinCosTable, dump_table, sin_cos_table


# ── Index ranges ─────────────────────────────────────────────────────────

def admissible_j2(nn: int) -> List[int]:
    """Divisors d of NN with 1 <= d < NN."""
    return [d for d in range(1, nn) if nn % d == 0]


def admissible_j3(nn: int, j2: int) -> List[int]:
    """Values 0 <= j3 < NN with gcd(j3, NN) >= j2 (gcd(0, NN) = NN)."""
    return [x for x in range(nn) if math.gcd(x, nn) >= j2]


def tail_pool(nn: int, j2: int, j3: int) -> List[int]:
    """Values allowed for j4, ..., j_len."""
    return [x for x in range(j3, nn) if j2 == 1 or math.gcd(x, nn) >= j2]


def unit_exponents(
    nn: int, j2: int, j3: int, max_length: int,
) -> Iterator[Tuple[int, ...]]:
    """Yield every exponent tuple of the (j2, j3) unit, shortest first."""
    pool = tail_pool(nn, j2, j3)
    head = (0, j2, j3)
    for length in range(3, max_length + 1):
        for tail in itertools.combinations_with_replacement(pool, length - 3):
            yield head + tail


# ── Units ────────────────────────────────────────────────────────────────

@dataclass
class UnitResult:
    """Output of one (j2, j3) unit."""
    j2: int
    j3: int
    survivors: List[Candidate] = field(default_factory=list)
    n_checked: int = 0
    discards: Dict[str, int] = field(default_factory=dict)


def search_unit(
    table: SinCosTable,
    constants: DivisorConstants,
    j2: int,
    j3: int,
    max_length: int,
    cutoff: float,
) -> UnitResult:
    """Run the discard predicate over every tuple of one unit."""
    nn = constants.nn
    survivors: List[Candidate] = []
    discards: Counter = Counter()
    n_checked = 0

    for exponents in unit_exponents(nn, j2, j3, max_length):
        n_checked += 1
        ci = CyclotomicInteger(exponents=exponents, level=nn, table=table)
        reason = discard_reason(ci, constants, cutoff)
        if reason is None:
            survivors.append(Candidate(level=nn, exponents=exponents))
        else:
            discards[reason] += 1

    return UnitResult(
        j2=j2, j3=j3, survivors=survivors,
        n_checked=n_checked, discards=dict(discards),
    )


# Per-process state, installed once per worker by the pool initializer.
_WORKER_TABLE: Optional[SinCosTable] = None
_WORKER_CONSTANTS: Optional[DivisorConstants] = None


def _init_worker(table: SinCosTable, constants: DivisorConstants) -> None:
    global _WORKER_TABLE, _WORKER_CONSTANTS
    _WORKER_TABLE = table
    _WORKER_CONSTANTS = constants


def _unit_worker(j2: int, j3: int, max_length: int, cutoff: float) -> UnitResult:
    return search_unit(_WORKER_TABLE, _WORKER_CONSTANTS, j2, j3, max_length, cutoff)


def _make_executor(
    config: SearchConfig,
    table: SinCosTable,
    constants: DivisorConstants,
) -> Optional[Executor]:
    """Create the executor for one modulus; None means run in-process."""
    if config.executor == "serial":
        return None
    if config.executor == "thread":
        return ThreadPoolExecutor(max_workers=config.n_workers)
    ctx = multiprocessing.get_context(config.mp_start_method)
    return ProcessPoolExecutor(
        max_workers=config.n_workers,
        mp_context=ctx,
        initializer=_init_worker,
        initargs=(table, constants),
    )


# ── Waves ────────────────────────────────────────────────────────────────

def run_wave(
    executor: Optional[Executor],
    table: SinCosTable,
    constants: DivisorConstants,
    j2: int,
    max_length: int,
    cutoff: float,
) -> List[UnitResult]:
    """Run every unit of the j2 wave and wait for all of them.

    Results are returned in completion order.
    """
    j3_values = admissible_j3(constants.nn, j2)

    if executor is None:
        return [
            search_unit(table, constants, j2, j3, max_length, cutoff)
            for j3 in j3_values
        ]

    if isinstance(executor, ProcessPoolExecutor):
        futures = [
            executor.submit(_unit_worker, j2, j3, max_length, cutoff)
            for j3 in j3_values
        ]
    else:
        futures = [
            executor.submit(search_unit, table, constants, j2, j3, max_length, cutoff)
            for j3 in j3_values
        ]

    results = []
    try:
        for future in as_completed(futures):
            results.append(future.result())
    except BaseException:
        for f in futures:
            f.cancel()
        raise
    return results


def collect_survivors(
    table: SinCosTable,
    constants: DivisorConstants,
    max_length: int,
    config: Optional[SearchConfig] = None,
    logger: Optional[RunLogger] = None,
) -> List[Candidate]:
    """Run all waves for one modulus; survivors are returned unsorted."""
    config = config or SearchConfig()
    nn = constants.nn
    survivors: List[Candidate] = []

    executor = _make_executor(config, table, constants)
    try:
        for j2 in admissible_j2(nn):
            t0 = time.time()
            results = run_wave(
                executor, table, constants, j2, max_length, config.castle_cutoff,
            )
            discards: Counter = Counter()
            n_checked = 0
            n_wave = 0
            for res in results:
                survivors.extend(res.survivors)
                discards.update(res.discards)
                n_checked += res.n_checked
                n_wave += len(res.survivors)
            wall = time.time() - t0

            if config.verbose:
                print(f"  NN={nn} j2={j2:>5d}: {len(results):4d} units, "
                      f"{n_checked:>10,} tuples, {n_wave:5d} survivors "
                      f"({wall:.1f}s)", flush=True)
            if logger is not None:
                logger.log_wave({
                    "level": nn,
                    "j2": j2,
                    "n_units": len(results),
                    "n_checked": n_checked,
                    "n_survivors": n_wave,
                    "discards": dict(discards),
                    "wall_time_sec": wall,
                })
    finally:
        if executor is not None:
            executor.shutdown(wait=True, cancel_futures=True)

    return survivors


# ── Entry point ──────────────────────────────────────────────────────────

def get_candidates(
    level: int,
    max_length: int,
    table_sink: TextIO,
    candidate_sink: TextIO,
    config: Optional[SearchConfig] = None,
    logger: Optional[RunLogger] = None,
) -> List[Candidate]:
    """Search all candidates for (level, max_length).

    Writes the sin/cos table to `table_sink` and the sorted candidates to
    `candidate_sink`; returns the sorted candidates.  Sink I/O errors and
    unit failures propagate.
    """
    if max_length < 3:
        raise ValueError(f"max_length must be >= 3, got {max_length}")
    config = config or SearchConfig()
    t0 = time.time()

    nn = normalize_level(level)
    constants = divisor_constants(nn)
    table = sin_cos_table(nn)
    dump_table(table, table_sink)

    if config.verbose:
        print(f"Searching level {level} (NN={nn}), up to {max_length} terms, "
              f"{len(table.units)} conjugates, {config.n_workers} workers",
              flush=True)

    survivors = collect_survivors(table, constants, max_length, config, logger)
    candidates = sort_candidates(survivors)
    write_candidates(candidates, candidate_sink)

    wall = time.time() - t0
    if config.verbose:
        print(f"All cases checked for NN={nn}: {len(candidates)} candidates "
              f"({wall:.1f}s)", flush=True)
    if logger is not None:
        logger.log_case({
            "level": level,
            "modulus": nn,
            "max_length": max_length,
            "n_candidates": len(candidates),
            "wall_time_sec": wall,
        })
    return candidates
