"""
castle-search: candidate search for cyclotomic integers of small castle.

Enumerates sums of roots of unity z^{e_0} + ... + z^{e_k} (z a primitive
NN-th root of unity) and keeps those whose Galois conjugates all have
squared modulus < 5.1, after removing cases that are equivalent to others or
already covered by Cassels's theorem.  Survivors are written to a candidate
file for exact verification in Sage.

Pipeline per (level, max_length):
  sin_cos_table(NN)  ->  waves over j2 | NN  ->  units over j3
  ->  discard predicate  ->  sorted candidates
"""

__version__ = "0.1.0"

from .trig_table import SinCosTable, sin_cos_table, dump_table
from .cyclotomic import CyclotomicInteger, cyclotomic_integer
from .discard import (
    CASTLE_CUTOFF, DISCARD_RULES, DivisorConstants,
    normalize_level, divisor_constants,
    discard_reason, discard_candidate,
)
from .aggregate import (
    Candidate, compare_candidates, sort_candidates,
    format_candidate, write_candidates,
    parse_candidate_line, read_candidates,
)
from .config import (
    SearchConfig, LEMMA_CASES,
    apply_overrides, load_config, search_config_from_dict, cases_from_config,
)
from .search import (
    admissible_j2, admissible_j3, tail_pool, unit_exponents,
    UnitResult, search_unit, run_wave, collect_survivors,
    get_candidates,
)
from .logging import RunLogger, RunManifest, create_manifest

__all__ = [
    "SinCosTable", "sin_cos_table", "dump_table",
    "CyclotomicInteger", "cyclotomic_integer",
    "CASTLE_CUTOFF", "DISCARD_RULES", "DivisorConstants",
    "normalize_level", "divisor_constants",
    "discard_reason", "discard_candidate",
    "Candidate", "compare_candidates", "sort_candidates",
    "format_candidate", "write_candidates",
    "parse_candidate_line", "read_candidates",
    "SearchConfig", "LEMMA_CASES",
    "apply_overrides", "load_config", "search_config_from_dict", "cases_from_config",
    "admissible_j2", "admissible_j3", "tail_pool", "unit_exponents",
    "UnitResult", "search_unit", "run_wave", "collect_survivors",
    "get_candidates",
    "RunLogger", "RunManifest", "create_manifest",
]
