"""
Cascade coefficient model shared by the designer and the filter.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .exceptions import DesignFailure


class FilterType(str, Enum):
    """Butterworth response shape."""
    LOW = "low"
    HIGH = "high"
    BAND_STOP = "bandstop"
    BAND_PASS = "bandpass"


class Biquad(NamedTuple):
    """One 3-term coefficient triple of a second-order section."""
    c0: float
    c1: float
    c2: float


@dataclass(frozen=True)
class FilterCoefficients:
    """
    Digital filter as a cascade of second-order sections.

    ``numerator[k]`` holds (a0, a1, a2) and ``denominator[k]`` holds
    (b0, b1, b2) of section k. The whole cascade gain lives in
    ``numerator[0]``; every other numerator has a leading term of 1.
    """
    numerator: Tuple[Biquad, ...]
    denominator: Tuple[Biquad, ...]
    sections: int
    order: int
    filter_type: Optional[FilterType] = None

    def __post_init__(self):
        num = tuple(Biquad(*(float(c) for c in s)) for s in self.numerator)
        den = tuple(Biquad(*(float(c) for c in s)) for s in self.denominator)
        object.__setattr__(self, "numerator", num)
        object.__setattr__(self, "denominator", den)

        if not (len(num) == len(den) == self.sections):
            raise DesignFailure(
                f"Section count mismatch: {len(num)} numerator, "
                f"{len(den)} denominator, sections={self.sections}")
        for k, (n, d) in enumerate(zip(num, den)):
            if not all(math.isfinite(c) for c in n + d):
                raise DesignFailure(f"Non-finite coefficient in section {k}: {n} / {d}")

    @property
    def gain(self) -> float:
        """Product of the numerator leading terms (overall cascade gain)."""
        return math.prod(n.c0 for n in self.numerator)

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Numerator and denominator as (sections, 3) arrays, unmodified."""
        return (np.array(self.numerator, dtype=np.float64).reshape(-1, 3),
                np.array(self.denominator, dtype=np.float64).reshape(-1, 3))

    def to_sos(self) -> np.ndarray:
        """
        Return an (sections, 6) array in scipy's ``sos`` layout.

        Rows are scaled so the denominator leading term is exactly 1, which
        ``scipy.signal.sosfilt`` and friends require.
        """
        num, den = self.to_arrays()
        d0 = den[:, :1]
        return np.hstack([num / d0, den / d0])

    @classmethod
    def from_sos(cls, sos: Sequence[Sequence[float]], order: int,
                 filter_type: Optional[FilterType] = None) -> 'FilterCoefficients':
        sos = np.atleast_2d(np.asarray(sos, dtype=np.float64))
        if sos.shape[1] != 6:
            raise DesignFailure(f"sos array must have 6 columns, got shape {sos.shape}")
        return cls(
            numerator=tuple(Biquad(*row[:3]) for row in sos),
            denominator=tuple(Biquad(*row[3:]) for row in sos),
            sections=sos.shape[0],
            order=int(order),
            filter_type=filter_type,
        )
