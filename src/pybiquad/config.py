"""
Filter specifications and coefficient persistence.
"""

from __future__ import annotations
import json, logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional, Tuple, Dict, Any, Union

import numpy as np

from .butterworth import ParameterSelection, design_butterworth
from .coefficients import FilterCoefficients, FilterType
from .exceptions import InvalidParameter

log = logging.getLogger(__name__)


# ───────────────────────── Data structures ────────────────────────── #

@dataclass
class FilterSpec:
    """Complete description of one Butterworth design request."""
    filter_type: FilterType
    order: int
    frequency: float  # cutoff, center, or low edge (normalized)
    bandwidth: Optional[float] = None  # bandwidth or high edge (normalized)
    selection: ParameterSelection = ParameterSelection.CENTER_BANDWIDTH
    sample_rate: Optional[float] = None  # Hz, informational only

    def __post_init__(self):
        try:
            self.filter_type = FilterType(self.filter_type)
            self.selection = ParameterSelection(self.selection)
        except ValueError as e:
            raise InvalidParameter(str(e)) from None

    @property
    def is_band(self) -> bool:
        return self.filter_type in (FilterType.BAND_STOP, FilterType.BAND_PASS)

    def validate(self) -> None:
        """Reject structurally incomplete specs; ranges are checked on design."""
        if self.is_band and self.bandwidth is None:
            raise InvalidParameter(
                f"{self.filter_type.value} spec needs a bandwidth (or high edge)")
        if self.sample_rate is not None and not self.sample_rate > 0:
            raise InvalidParameter(f"Sample rate must be positive, got {self.sample_rate}")

    def design(self) -> FilterCoefficients:
        self.validate()
        return design_butterworth(self.order, self.filter_type, self.frequency,
                                  self.bandwidth if self.is_band else None,
                                  self.selection)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['filter_type'] = self.filter_type.value
        d['selection'] = self.selection.value
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'FilterSpec':
        return cls(**d)

    @classmethod
    def from_hz(cls, filter_type, order: int, sample_rate: float, frequency: float,
                bandwidth: Optional[float] = None,
                selection: ParameterSelection = ParameterSelection.CENTER_BANDWIDTH
                ) -> 'FilterSpec':
        """Build a spec from frequencies in Hz (normalized as ``f / fs * 2``)."""
        if not sample_rate > 0:
            raise InvalidParameter(f"Sample rate must be positive, got {sample_rate}")
        return cls(
            filter_type=filter_type,
            order=order,
            frequency=frequency / sample_rate * 2,
            bandwidth=None if bandwidth is None else bandwidth / sample_rate * 2,
            selection=selection,
            sample_rate=sample_rate,
        )


# ───────────────────────── persistence ────────────────────────── #

def save_coefficients(path: Union[str, Path], coefficients: FilterCoefficients,
                      spec: Optional[FilterSpec] = None) -> Path:
    """
    Save coefficients (and optionally their spec) to a ``.npz`` file.

    Returns
    -------
    Path
        The file written (``.npz`` is appended if missing)
    """
    path = Path(path)
    if path.suffix != ".npz":
        path = path.with_name(path.name + ".npz")

    num, den = coefficients.to_arrays()
    ftype = coefficients.filter_type.value if coefficients.filter_type else ""
    np.savez(path,
             numerator=num,
             denominator=den,
             order=np.int64(coefficients.order),
             filter_type=np.str_(ftype),
             spec=np.str_(json.dumps(spec.to_dict()) if spec else ""))

    log.info("Saved %d-section %s filter to %s",
             coefficients.sections, ftype or "custom", path)
    return path


def load_coefficients(path: Union[str, Path]
                      ) -> Tuple[FilterCoefficients, Optional[FilterSpec]]:
    """Load coefficients and spec written by :func:`save_coefficients`."""
    log.info("Loading filter from %s...", path)
    with np.load(path) as data:
        num = data['numerator']
        den = data['denominator']
        order = int(data['order'])
        ftype = str(data['filter_type'])
        spec_json = str(data['spec'])

    coeffs = FilterCoefficients(
        numerator=num,
        denominator=den,
        sections=num.shape[0],
        order=order,
        filter_type=FilterType(ftype) if ftype else None,
    )
    spec = FilterSpec.from_dict(json.loads(spec_json)) if spec_json else None
    return coeffs, spec
