"""
Sine/cosine tables for one cyclotomic modulus.

A table holds sin(2*pi*j/n) and cos(2*pi*j/n) for 0 <= j < n, both taken
from the same angle array so that conjugate sums stay consistent.  It also
caches the unit group (k with gcd(k, n) == 1), which indexes the Galois
conjugates.

Tables are immutable: the arrays are flagged read-only and stay read-only
after pickling into worker processes, so one table can be shared by every
search unit of a modulus without locking.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, TextIO, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class SinCosTable:
    """Read-only sin/cos table for modulus n."""
    modulus: int
    sin: np.ndarray
    cos: np.ndarray
    units: Tuple[int, ...] = field(init=False)

    def __post_init__(self):
        sin = np.array(self.sin, dtype=np.float64)
        cos = np.array(self.cos, dtype=np.float64)
        if sin.shape != (self.modulus,) or cos.shape != (self.modulus,):
            raise ValueError(
                f"Table arrays must have shape ({self.modulus},), "
                f"got {sin.shape} and {cos.shape}"
            )
        sin.flags.writeable = False
        cos.flags.writeable = False
        object.__setattr__(self, "sin", sin)
        object.__setattr__(self, "cos", cos)
        object.__setattr__(self, "units", tuple(
            k for k in range(1, self.modulus) if math.gcd(k, self.modulus) == 1
        ))

    def __reduce__(self):
        # Rebuild through __init__ so the read-only flags are restored.
        return (type(self), (self.modulus, self.sin, self.cos))

    def __len__(self) -> int:
        return self.modulus

    def __getitem__(self, j: int) -> Tuple[float, float]:
        return float(self.sin[j]), float(self.cos[j])

    def rows(self) -> Iterator[Tuple[int, float, float]]:
        """Yield (j, cos, sin) for every residue j."""
        for j in range(self.modulus):
            yield j, float(self.cos[j]), float(self.sin[j])


def sin_cos_table(modulus: int) -> SinCosTable:
    """Build the table of (sin, cos) of j * 2*pi/modulus, 0 <= j < modulus."""
    if modulus < 1:
        raise ValueError(f"Modulus must be positive, got {modulus}")
    angle0 = 2.0 * math.pi / modulus
    angles = angle0 * np.arange(modulus, dtype=np.float64)
    return SinCosTable(modulus=modulus, sin=np.sin(angles), cos=np.cos(angles))


def _format_float(x: float) -> str:
    # Shortest round-trip digits, never exponent notation: 1.0 -> "1".
    return np.format_float_positional(x, trim="-")


def dump_table(table: SinCosTable, sink: TextIO) -> int:
    """Write `<n> <j> <cos> <sin>` lines to sink.

    Values are plain decimals (`1`, `0.00000000000000006123233995736766`).
    Returns the number of lines written.
    """
    n = 0
    for j, cos, sin in table.rows():
        sink.write(f"{table.modulus} {j} {_format_float(cos)} {_format_float(sin)}\n")
        n += 1
    return n
