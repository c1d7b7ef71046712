"""
Cyclotomic integers z^{e_0} + ... + z^{e_{k-1}} and their castle.

z is a primitive n-th root of unity, n = `level`.  The Galois conjugates are
indexed by the units k of Z/nZ; the k-th conjugate replaces each exponent
e by k*e mod n.  The castle is the maximum squared modulus over all
conjugates.

Float path (hot loop):
  conjugates_abs_squared() -> lazy generator over the table units
  castle_strictly_less(c)  -> stops at the first conjugate >= c

High-precision path (spot checks only):
  castle_hp(dps)           -> mpmath maximum at dps digits
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from .trig_table import SinCosTable, sin_cos_table


@dataclass(frozen=True, eq=False)
class CyclotomicInteger:
    """Sum of the roots of unity z^e for e in `exponents`.

    The table is shared, never copied; it must belong to the same level.
    """
    exponents: Tuple[int, ...]
    level: int
    table: SinCosTable
    _exps: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        exps = tuple(int(e) for e in self.exponents)
        if self.table.modulus != self.level:
            raise ValueError(
                f"Table modulus {self.table.modulus} does not match level {self.level}"
            )
        for e in exps:
            if not 0 <= e < self.level:
                raise ValueError(f"Exponent {e} outside [0, {self.level})")
        object.__setattr__(self, "exponents", exps)
        object.__setattr__(self, "_exps", np.array(exps, dtype=np.int64))

    def conjugates_abs_squared(self) -> Iterator[float]:
        """Yield |sigma_k(x)|^2 for every unit k, in increasing k."""
        sin, cos = self.table.sin, self.table.cos
        for k in self.table.units:
            idx = (k * self._exps) % self.level
            sin_sum = float(sin[idx].sum())
            cos_sum = float(cos[idx].sum())
            yield sin_sum * sin_sum + cos_sum * cos_sum

    def castle_strictly_less(self, cutoff: float) -> bool:
        """True iff every conjugate has squared modulus < cutoff."""
        return not any(x >= cutoff for x in self.conjugates_abs_squared())

    def castle(self) -> float:
        """Maximum squared modulus over all conjugates (float64)."""
        return max(self.conjugates_abs_squared(), default=0.0)

    def castle_hp(self, dps: int = 50):
        """Castle evaluated with mpmath at `dps` digits.

        Returns an mpmath mpf.  Intended for checking individual candidates,
        not for use inside the search loop.
        """
        import mpmath as mp

        with mp.workdps(dps):
            angle0 = 2 * mp.pi / self.level
            best = mp.mpf(0)
            for k in self.table.units:
                re = mp.mpf(0)
                im = mp.mpf(0)
                for e in self.exponents:
                    a = angle0 * ((k * e) % self.level)
                    re += mp.cos(a)
                    im += mp.sin(a)
                best = max(best, re * re + im * im)
            return +best


def cyclotomic_integer(
    exponents: Sequence[int], level: int, table: Optional[SinCosTable] = None,
) -> CyclotomicInteger:
    """Convenience constructor; builds the table when none is given."""
    if table is None:
        table = sin_cos_table(level)
    return CyclotomicInteger(exponents=tuple(exponents), level=level, table=table)
