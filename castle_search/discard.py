"""
Discard predicate for the candidate search.

A candidate exponent tuple l = (0, j2, j3, ...) is dropped when one of the
rules below fires.  Rules run in a fixed order; cheap integer checks come
before the float castle test, theorem-specific exclusions come last.

  1. conjugation         l[2] + l[-1] > NN + l[1]  (complex conjugate copy)
  2. sign_pair           two terms differ by a factor -1
  3. cube_root           two terms differ by a factor zeta_3 or zeta_3^2
  4. fifth_root_chain    three terms linked by powers of zeta_5
  5. castle              some conjugate has |.|^2 >= cutoff (default 5.1)
  6. cassels_form_2      three-term sums of Cassels's form (2)
  7. cassels_form_3      four-term sums of Cassels's form (3)
  8. seventh_root_chain  four terms linked by powers of zeta_7

Every rule either removes an algebraically equivalent copy of a case kept
elsewhere, or a case covered by Cassels's theorem.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Sequence, Tuple

from .cyclotomic import CyclotomicInteger


CASTLE_CUTOFF = 5.1

CASSELS_FORM_3_TRIPLES = ((1, 2, 3), (2, 1, 3), (3, 1, 2))

DISCARD_RULES = (
    "conjugation",
    "sign_pair",
    "cube_root",
    "fifth_root_chain",
    "castle",
    "cassels_form_2",
    "cassels_form_3",
    "seventh_root_chain",
)


class DivisorConstants(NamedTuple):
    """NN and its fractions NN/2, NN/3, NN/5, NN/7 (0 if not a divisor)."""
    nn: int
    n2: int
    n3: int
    n5: int
    n7: int


def normalize_level(level: int) -> int:
    """Return NN: the level itself if even, else twice the level."""
    if level < 1:
        raise ValueError(f"Level must be positive, got {level}")
    return level if level % 2 == 0 else 2 * level


def divisor_constants(nn: int) -> DivisorConstants:
    """Derive the rule constants for an (even) modulus NN."""
    if nn < 2 or nn % 2:
        raise ValueError(f"Modulus must be even and positive, got {nn}")
    return DivisorConstants(
        nn=nn,
        n2=nn // 2,
        n3=nn // 3 if nn % 3 == 0 else 0,
        n5=nn // 5 if nn % 5 == 0 else 0,
        n7=nn // 7 if nn % 7 == 0 else 0,
    )


def _has_root_chain(l: Sequence[int], step: int, links: int) -> bool:
    """True if indices a_0 > a_1 > ... > a_links exist such that the values
    strictly decrease along the chain and every consecutive difference is a
    multiple of `step`.
    """
    def extend(a: int, remaining: int) -> bool:
        if remaining == 0:
            return True
        for b in range(a):
            if l[a] > l[b] and (l[a] - l[b]) % step == 0 and extend(b, remaining - 1):
                return True
        return False

    return any(extend(a, links) for a in range(len(l)))


def _is_cassels_form_2(l: Sequence[int], c: DivisorConstants) -> bool:
    return (
        l[2] == c.n2 - l[1]
        or l[2] == c.n2 + 2 * l[1]
        or (2 * l[2]) % c.nn == c.n2 + l[1]
    )


def _is_cassels_form_3(l: Sequence[int], c: DivisorConstants) -> bool:
    # Plain signed differences; l[i2] - l[i1] may be negative.
    for i, i1, i2 in CASSELS_FORM_3_TRIPLES:
        head = l[i] - l[0]
        tail = l[i2] - l[i1]
        if (
            head % c.n5 == 0
            and tail % c.n5 == 0
            and head != tail
            and (l[1] - l[0]) + tail != c.nn
        ):
            return True
    return False


def discard_reason(
    cyclotomic_integer: CyclotomicInteger,
    constants: DivisorConstants,
    cutoff: float = CASTLE_CUTOFF,
) -> Optional[str]:
    """Name of the first rule discarding the candidate, or None to keep it."""
    l: Tuple[int, ...] = cyclotomic_integer.exponents
    n = len(l)
    nn, n2, n3, n5, n7 = constants

    if l[2] + l[n - 1] > nn + l[1]:
        return "conjugation"

    for a in range(n):
        for b in range(a):
            if l[a] == l[b] + n2:
                return "sign_pair"

    if n3:
        for a in range(n):
            for b in range(a):
                if l[a] - l[b] in (n3, 2 * n3):
                    return "cube_root"

    if n5 and _has_root_chain(l, n5, 2):
        return "fifth_root_chain"

    if not cyclotomic_integer.castle_strictly_less(cutoff):
        return "castle"

    if n == 3 and _is_cassels_form_2(l, constants):
        return "cassels_form_2"

    if n5 and n == 4 and _is_cassels_form_3(l, constants):
        return "cassels_form_3"

    if n7 and _has_root_chain(l, n7, 3):
        return "seventh_root_chain"

    return None


def discard_candidate(
    cyclotomic_integer: CyclotomicInteger,
    constants: DivisorConstants,
    cutoff: float = CASTLE_CUTOFF,
) -> bool:
    """True if the candidate can be dropped without losing any case."""
    return discard_reason(cyclotomic_integer, constants, cutoff) is not None
