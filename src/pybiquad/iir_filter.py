#!/usr/bin/env python3
"""
Cascaded IIR Filter - Direct-Form-II-Transposed biquads
=======================================================

Runs samples one at a time through every section of a
:class:`~pybiquad.coefficients.FilterCoefficients` cascade. Each instance owns
its delay line; coefficients are shared read-only.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np

from .coefficients import FilterCoefficients
from .exceptions import NotConfigured


class CascadedIIRFilter:
    """
    Stateful cascade of second-order sections.

    The filter starts unconfigured. :meth:`configure` assigns coefficients
    and zeroes one ``[u0, u1]`` delay pair per section; calling it again
    swaps coefficients and resets the state. An instance is not thread-safe,
    use one per stream.
    """

    def __init__(self, coefficients: Optional[FilterCoefficients] = None):
        """
        Parameters
        ----------
        coefficients : FilterCoefficients, optional
            Configure immediately with these coefficients
        """
        self.log = logging.getLogger(__name__)
        self._coeffs: Optional[FilterCoefficients] = None
        self._sections: tuple = ()
        self._delay: List[List[float]] = []

        if coefficients is not None:
            self.configure(coefficients)

    @property
    def coefficients(self) -> Optional[FilterCoefficients]:
        return self._coeffs

    @property
    def is_configured(self) -> bool:
        return self._coeffs is not None

    @property
    def state(self) -> List[List[float]]:
        """Copy of the per-section delay line."""
        return [list(pair) for pair in self._delay]

    def configure(self, coefficients: FilterCoefficients) -> None:
        """Assign coefficients and allocate a zeroed delay line."""
        if not isinstance(coefficients, FilterCoefficients):
            raise TypeError(f"Expected FilterCoefficients, got {type(coefficients).__name__}")

        sections = tuple(zip(coefficients.numerator, coefficients.denominator))
        delay = [[0.0, 0.0] for _ in range(coefficients.sections)]

        self._coeffs = coefficients
        self._sections = sections
        self._delay = delay
        self.log.debug("Configured %d sections (order %d, %s)",
                       coefficients.sections, coefficients.order,
                       coefficients.filter_type.value if coefficients.filter_type else "custom")

    def reset(self) -> None:
        """Zero the delay line, keeping the coefficients."""
        if self._coeffs is None:
            raise NotConfigured("Filter has no coefficients; call configure() first")
        for pair in self._delay:
            pair[0] = 0.0
            pair[1] = 0.0

    def process(self, sample: float) -> float:
        """Filter one sample and return one output sample."""
        if self._coeffs is None:
            raise NotConfigured("Filter has no coefficients; call configure() first")

        x = float(sample)
        y = 0.0
        for (n, d), u in zip(self._sections, self._delay):
            y = (n.c0 * x + u[0]) / d.c0
            u[0] = n.c1 * x - d.c1 * y + u[1]
            u[1] = n.c2 * x - d.c2 * y
            x = y
        return y

    def process_block(self, samples: Iterable[float]) -> np.ndarray:
        """Run :meth:`process` over ``samples`` in order."""
        if self._coeffs is None:
            raise NotConfigured("Filter has no coefficients; call configure() first")
        return np.fromiter((self.process(s) for s in samples), dtype=np.float64)
