#!/usr/bin/env python3
"""
Butterworth IIR Designer - Cascaded Second-Order Sections
=========================================================

Designs low-pass, high-pass, band-stop and band-pass Butterworth filters as
cascades of biquads:

- Analog prototype poles placed on the unit circle of the s-plane
- Closed-form low-pass to band transformation for band designs
- Bilinear transform with pre-warping so the requested normalized
  frequency is hit exactly
- Whole cascade gain collected into the first section

All frequencies are normalized to Nyquist, i.e. ``2 * f / fs`` in (0, 1).
"""

from __future__ import annotations
import logging, math
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .coefficients import FilterCoefficients, FilterType
from .exceptions import InvalidParameter

log = logging.getLogger(__name__)


class ParameterSelection(str, Enum):
    """How the two frequencies of a band design are interpreted."""
    CENTER_BANDWIDTH = "center_bandwidth"
    BAND_EDGES = "band_edges"


# ───────────────────────── validation ────────────────────────── #

def _check_order(order) -> int:
    if isinstance(order, bool) or not isinstance(order, (int, np.integer)):
        raise InvalidParameter(f"Filter order must be an integer, got {order!r}")
    if order < 1:
        raise InvalidParameter(f"Filter order must be >= 1, got {order}")
    return int(order)


def _check_normalized(value, name: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number, got {value!r}") from None
    if not (math.isfinite(value) and 0 < value < 1):
        raise InvalidParameter(f"{name} must lie in (0, 1) (fraction of Nyquist), got {value}")
    return value


# ───────────────────────── frequency warping ────────────────────────── #

def prewarp(wd: float) -> float:
    """Map a normalized digital frequency to its pre-warped analog value."""
    return 2 / math.pi * math.tan(math.pi / 2 * wd)


def unwarp(wa: float) -> float:
    """Inverse of :func:`prewarp`."""
    return 2 / math.pi * math.atan(math.pi / 2 * wa)


def band_edges_to_center(low: float, high: float) -> Tuple[float, float]:
    """
    Convert band edges into the center/bandwidth pair used by band designs.

    The analog center is the geometric mean of the pre-warped edges, mapped
    back to the digital domain. The bandwidth is the plain difference of the
    digital edges.

    Parameters
    ----------
    low, high : float
        Normalized band edges, 0 < low < high < 1

    Returns
    -------
    center : float
        Normalized center frequency
    bandwidth : float
        Normalized bandwidth (``high - low``)
    """
    low = _check_normalized(low, "Low band edge")
    high = _check_normalized(high, "High band edge")
    if not low < high:
        raise InvalidParameter(f"Low band edge {low} must be below high band edge {high}")

    wa = math.sqrt(prewarp(low) * prewarp(high))
    center = unwarp(wa)
    bandwidth = high - low
    log.debug("Band edges %.6f..%.6f -> center %.6f, bandwidth %.6f",
              low, high, center, bandwidth)
    return center, bandwidth


# ───────────────────────── analog prototype ────────────────────────── #

def normalized_butterworth_poles(order: int) -> np.ndarray:
    """
    Angles of the normalized Butterworth poles in the upper half s-plane.

    Odd orders give ``k*pi/N`` (k = 0 is the real pole); even orders give
    ``(2k+1)*pi/(2N)``. There are ``ceil(N/2)`` angles.
    """
    order = _check_order(order)
    k = np.arange((order + 1) // 2, dtype=np.float64)
    if order % 2:
        return k * np.pi / order
    return (2 * k + 1) * np.pi / 2 / order


def bilinear_transform(a_analog: np.ndarray, b_analog: np.ndarray, h: float,
                       first_order: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    """
    Bilinear transform of analog sections to digital biquads.

    Parameters
    ----------
    a_analog, b_analog : np.ndarray
        Analog numerator/denominator triples, shape (sections, 3)
    h : float
        Transform constant ``1 / (W * pi / 2)``
    first_order : bool
        Section 0 is a one-pole section (odd low/high-pass designs)

    Returns
    -------
    a, b : np.ndarray
        Digital numerator/denominator triples. Numerators are normalized to
        a leading 1 except section 0, which carries the cascade gain.
    """
    a_analog = np.asarray(a_analog, dtype=np.float64)
    b_analog = np.asarray(b_analog, dtype=np.float64)
    h2 = h * h

    a0, a1, a2 = a_analog.T
    b1, b2 = b_analog[:, 1], b_analog[:, 2]

    BB = 1 / (h2 + b1 * h + b2)
    a = np.stack([
        BB * (a2 * h2 + a1 * h + a0),
        BB * 2 * (-a2 * h2 + a0),
        BB * (a2 * h2 - a1 * h + a0),
    ], axis=1)
    b = np.stack([
        BB * (h2 + b1 * h + b2),
        BB * (-2 * h2 + 2 * b2),
        BB * (h2 - b1 * h + b2),
    ], axis=1)

    if first_order:
        b0 = b_analog[0, 0]
        BB0 = 1 / (h + b0)
        a[0] = [BB0 * (a1[0] * h + a0[0]), BB0 * (-a1[0] * h + a0[0]), 0.0]
        b[0] = [BB0 * (h + b0), BB0 * (-h + b0), 0.0]

    # Collect the gain into section 0
    lead = a[:, 0].copy()
    gain = float(np.prod(lead))
    a /= lead[:, np.newaxis]
    a[0] *= gain
    return a, b


# ───────────────────────── low / high pass ────────────────────────── #

def _low_high(order: int, wd: float, filter_type: FilterType) -> FilterCoefficients:
    wc = prewarp(wd)
    odd = order % 2 != 0
    sections = (order + 1) // 2
    pk = normalized_butterworth_poles(order)

    a_analog = np.zeros((sections, 3))
    b_analog = np.zeros((sections, 3))
    a_analog[:, 0] = 1
    b_analog[:, 0] = 1
    b_analog[:, 1] = 2 * np.cos(pk)
    b_analog[:, 2] = 1
    if odd:
        b_analog[0] = [1, 1, 0]

    if filter_type is FilterType.HIGH:
        a_analog = a_analog[:, ::-1].copy()
        b_analog = b_analog[:, ::-1].copy()
        if odd:
            # one-pole section swaps its two terms instead of a full reversal
            a_analog[0] = [0, 1, 0]
            b_analog[0] = [1, 1, 0]

    h = 1 / (wc * math.pi / 2)
    log.debug("%s-pass order %d: Wd=%.6f Wc=%.6f h=%.6f sections=%d",
              filter_type.value, order, wd, wc, h, sections)

    a, b = bilinear_transform(a_analog, b_analog, h, first_order=odd)
    return FilterCoefficients(numerator=a, denominator=b, sections=sections,
                              order=order, filter_type=filter_type)


def design_low_pass(order: int, cutoff: float) -> FilterCoefficients:
    """
    Butterworth low-pass filter.

    Parameters
    ----------
    order : int
        Filter order (>= 1)
    cutoff : float
        -3 dB frequency as a fraction of Nyquist, in (0, 1)

    Returns
    -------
    FilterCoefficients
        ``ceil(order / 2)`` sections
    """
    order = _check_order(order)
    cutoff = _check_normalized(cutoff, "Cutoff")
    coeffs = _low_high(order, cutoff, FilterType.LOW)
    log.info("Designed low-pass: order %d, cutoff %.6f, %d sections",
             order, cutoff, coeffs.sections)
    return coeffs


def design_high_pass(order: int, cutoff: float) -> FilterCoefficients:
    """Butterworth high-pass filter; same contract as :func:`design_low_pass`."""
    order = _check_order(order)
    cutoff = _check_normalized(cutoff, "Cutoff")
    coeffs = _low_high(order, cutoff, FilterType.HIGH)
    log.info("Designed high-pass: order %d, cutoff %.6f, %d sections",
             order, cutoff, coeffs.sections)
    return coeffs


# ───────────────────────── band stop / band pass ────────────────────────── #

def _band(order: int, wd: float, bd: float, filter_type: FilterType) -> FilterCoefficients:
    wa = prewarp(wd)
    ba = (1 + math.pi ** 2 / 4 * wa) * 2 / math.pi * math.tan(math.pi / 2 * bd)
    qa = wa / ba

    odd = order % 2 != 0
    sections = order
    pk = normalized_butterworth_poles(order)

    # Radius (ap) and damping (ceta) of the transformed pole pairs.
    # Clipping only absorbs rounding; the arguments are >= 0 analytically.
    q2 = qa ** 2
    x = 4 * qa / (1 + 4 * q2)
    r = np.sqrt(np.clip(1 - np.cos(pk) ** 2 * x ** 2, 0, None))
    scale = 1 / 2.0 / math.sqrt(2) * math.sqrt(1 / q2 + 4)
    ceta = scale * np.sqrt(np.clip(1 - r, 0, None))
    ap = scale * (np.sqrt(1 + r)
                  + np.sqrt(np.clip((1 - 4 * q2) / (1 + 4 * q2) + r, 0, None)))

    if filter_type is FilterType.BAND_STOP:
        zeros = [1, 0, 1]
    else:
        zeros = [0, 1 / qa, 0]

    a_analog = np.zeros((sections, 3))
    b_analog = np.zeros((sections, 3))
    section = 0
    for k in range(len(pk)):
        a_analog[section] = zeros
        b_analog[section] = [1, 2 * ap[k] * ceta[k], ap[k] ** 2]
        section += 1

        # the real pole of an odd order maps to a single section
        if k > 0 or not odd:
            a_analog[section] = zeros
            b_analog[section] = [1, 2 / ap[k] * ceta[k], 1 / ap[k] ** 2]
            section += 1

    h = 1 / (wa * math.pi / 2)
    log.debug("%s order %d: Wd=%.6f Bd=%.6f Wa=%.6f Ba=%.6f Qa=%.6f h=%.6f",
              filter_type.value, order, wd, bd, wa, ba, qa, h)

    a, b = bilinear_transform(a_analog, b_analog, h, first_order=False)
    return FilterCoefficients(numerator=a, denominator=b, sections=sections,
                              order=order, filter_type=filter_type)


def _band_request(order, f1, f2, selection, filter_type: FilterType) -> FilterCoefficients:
    order = _check_order(order)
    try:
        selection = ParameterSelection(selection)
    except ValueError:
        raise InvalidParameter(f"Unknown parameter selection: {selection!r}") from None
    if selection is ParameterSelection.BAND_EDGES:
        center, bandwidth = band_edges_to_center(f1, f2)
    else:
        center, bandwidth = f1, f2
    center = _check_normalized(center, "Center frequency")
    bandwidth = _check_normalized(bandwidth, "Bandwidth")

    coeffs = _band(order, center, bandwidth, filter_type)
    log.info("Designed %s: order %d, center %.6f, bandwidth %.6f, %d sections",
             filter_type.value, order, center, bandwidth, coeffs.sections)
    return coeffs


def design_band_stop(order: int, center: float, bandwidth: float,
                     selection: ParameterSelection = ParameterSelection.CENTER_BANDWIDTH
                     ) -> FilterCoefficients:
    """
    Butterworth band-stop (notch) filter.

    Parameters
    ----------
    order : int
        Prototype order (>= 1); the design has ``order`` sections
    center : float
        Normalized center frequency, or the low band edge when ``selection``
        is ``BAND_EDGES``
    bandwidth : float
        Normalized bandwidth, or the high band edge when ``selection`` is
        ``BAND_EDGES``
    selection : ParameterSelection
        How ``center`` and ``bandwidth`` are interpreted

    Returns
    -------
    FilterCoefficients
    """
    return _band_request(order, center, bandwidth, selection, FilterType.BAND_STOP)


def design_band_pass(order: int, center: float, bandwidth: float,
                     selection: ParameterSelection = ParameterSelection.CENTER_BANDWIDTH
                     ) -> FilterCoefficients:
    """Butterworth band-pass filter; same contract as :func:`design_band_stop`."""
    return _band_request(order, center, bandwidth, selection, FilterType.BAND_PASS)


def design_butterworth(order: int, filter_type, frequency: float,
                       bandwidth: Optional[float] = None,
                       selection: ParameterSelection = ParameterSelection.CENTER_BANDWIDTH
                       ) -> FilterCoefficients:
    """Design any of the four Butterworth types from a ``FilterType``."""
    try:
        filter_type = FilterType(filter_type)
    except ValueError:
        raise InvalidParameter(f"Unknown filter type: {filter_type!r}") from None

    if filter_type is FilterType.LOW:
        return design_low_pass(order, frequency)
    if filter_type is FilterType.HIGH:
        return design_high_pass(order, frequency)
    if bandwidth is None:
        raise InvalidParameter(f"{filter_type.value} design needs a bandwidth (or high edge)")
    if filter_type is FilterType.BAND_STOP:
        return design_band_stop(order, frequency, bandwidth, selection)
    return design_band_pass(order, frequency, bandwidth, selection)
