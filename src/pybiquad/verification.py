#!/usr/bin/env python3
"""
Verification tools for filter coefficients.
"""

import logging
import warnings
import numpy as np
from scipy import signal
from typing import Tuple, Dict, Any, Optional, Union

from .coefficients import FilterCoefficients, FilterType
from .iir_filter import CascadedIIRFilter

log = logging.getLogger(__name__)

# -3 dB expressed exactly as half power
HALF_POWER_DB = -10 * np.log10(2)


def frequency_response(
    coefficients: FilterCoefficients,
    worN: Union[int, np.ndarray] = 8192
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Complex frequency response of the cascade.

    Parameters
    ----------
    coefficients : FilterCoefficients
        Filter to evaluate
    worN : int or array_like
        Number of evenly spaced points in [0, 1), or explicit normalized
        frequencies (fractions of Nyquist)

    Returns
    -------
    w : np.ndarray
        Normalized frequencies (1.0 == Nyquist)
    h : np.ndarray
        Complex response
    """
    if np.ndim(worN) > 0:
        worN = np.asarray(worN, dtype=np.float64) * np.pi
    w, h = signal.sosfreqz(coefficients.to_sos(), worN=worN)
    return w / np.pi, h


def magnitude_at(coefficients: FilterCoefficients, frequency):
    """|H| at one or more normalized frequencies."""
    freqs = np.atleast_1d(np.asarray(frequency, dtype=np.float64))
    _, h = frequency_response(coefficients, worN=freqs)
    mag = np.abs(h)
    return float(mag[0]) if np.ndim(frequency) == 0 else mag


def pole_radii(coefficients: FilterCoefficients) -> np.ndarray:
    _, p, _ = signal.sos2zpk(coefficients.to_sos())
    return np.abs(p)


def impulse_response(coefficients: FilterCoefficients, length: int = 1000) -> np.ndarray:
    """Run a unit impulse through a fresh :class:`CascadedIIRFilter`."""
    impulse = np.zeros(length)
    impulse[0] = 1.0
    return CascadedIIRFilter(coefficients).process_block(impulse)


def verify_filter_response(
    coefficients: FilterCoefficients,
    sample_rate: Optional[float] = None,
    worN: int = 8192,
    plot: bool = False
) -> Dict[str, Any]:
    """
    Summarize the response of a designed filter.

    Parameters
    ----------
    coefficients : FilterCoefficients
        Filter to check
    sample_rate : float, optional
        If given, ``f_3db`` is reported in Hz and the plot uses Hz
    worN : int
        Frequency grid size
    plot : bool
        Whether to plot magnitude and phase response

    Returns
    -------
    dict
        Verification results
    """
    w, h = frequency_response(coefficients, worN=worN)
    mag_db = 20 * np.log10(np.abs(h) + 1e-300)
    phase = np.unwrap(np.angle(h))

    # First half-power crossing
    below = mag_db < HALF_POWER_DB
    crossings = np.nonzero(np.diff(below))[0]
    f_3db = float(w[crossings[0] + 1]) if len(crossings) else np.nan

    radii = pole_radii(coefficients)
    max_radius = float(radii.max()) if len(radii) else 0.0
    sos = coefficients.to_sos()

    scale = sample_rate / 2 if sample_rate else 1.0
    results = {
        'dc_gain': magnitude_at(coefficients, 0.0),
        'nyquist_gain': magnitude_at(coefficients, 1.0),
        'peak_gain_db': float(mag_db.max()),
        'f_3db': f_3db * scale,
        'max_pole_radius': max_radius,
        'is_stable': max_radius < 1.0,
        'all_finite': bool(np.all(np.isfinite(sos))),
    }

    log.info("Sections %d: DC %.6f, Nyquist %.6f, -3dB @ %.6g, max |pole| %.9f",
             coefficients.sections, results['dc_gain'], results['nyquist_gain'],
             results['f_3db'], max_radius)

    if plot:
        try:
            import matplotlib.pyplot as plt
        except ImportError:
            warnings.warn("matplotlib not installed; skipping plot")
        else:
            freq = w * scale
            unit = 'Hz' if sample_rate else 'x Nyquist'
            fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8))

            # Magnitude response
            ax1.plot(freq, mag_db)
            ax1.axhline(HALF_POWER_DB, color='r', linestyle='--', label='-3 dB')
            if np.isfinite(f_3db):
                ax1.axvline(f_3db * scale, color='g', linestyle='--',
                            label=f'-3 dB: {f_3db * scale:.4g} {unit}')
            ax1.set_xlabel(f'Frequency ({unit})')
            ax1.set_ylabel('Magnitude (dB)')
            ax1.set_title('Frequency Response')
            ax1.grid(True, alpha=0.3)
            ax1.legend()
            ax1.set_ylim(-120, 5)

            # Phase response
            ax2.plot(freq, phase)
            ax2.set_xlabel(f'Frequency ({unit})')
            ax2.set_ylabel('Phase (radians)')
            ax2.set_title('Phase Response')
            ax2.grid(True, alpha=0.3)

            plt.tight_layout()
            plt.show()

    return results


def compare_with_scipy(
    coefficients: FilterCoefficients,
    cutoff: float,
    worN: int = 4096,
    plot: bool = False
) -> Dict[str, Any]:
    """
    Compare a low/high-pass design against ``scipy.signal.butter``.

    Band designs use their own bandwidth warp and are reported as not
    comparable.

    Parameters
    ----------
    coefficients : FilterCoefficients
        Our filter coefficients
    cutoff : float
        Normalized cutoff the design was made for
    worN : int
        Frequency grid size
    plot : bool
        Whether to plot both magnitude responses

    Returns
    -------
    dict
        Comparison results
    """
    btype = {FilterType.LOW: 'lowpass', FilterType.HIGH: 'highpass'}.get(coefficients.filter_type)
    if btype is None:
        log.info("No scipy reference for %s designs", coefficients.filter_type)
        return {'comparable': False}

    reference = signal.butter(coefficients.order, cutoff, btype=btype, output='sos')
    w, h_our = frequency_response(coefficients, worN=worN)
    _, h_ref = signal.sosfreqz(reference, worN=worN)

    err = np.abs(np.abs(h_our) - np.abs(h_ref))
    results = {
        'comparable': True,
        'max_abs_error': float(err.max()),
        'reference_sections': reference.shape[0],
    }
    log.info("Max |H| deviation from scipy.signal.butter: %.3e", results['max_abs_error'])

    if plot:
        try:
            import matplotlib.pyplot as plt
        except ImportError:
            warnings.warn("matplotlib not installed; skipping plot")
        else:
            fig, ax = plt.subplots(figsize=(10, 6))
            ax.plot(w, 20*np.log10(np.abs(h_our) + 1e-300),
                    label='pybiquad', linewidth=2)
            ax.plot(w, 20*np.log10(np.abs(h_ref) + 1e-300),
                    label='scipy.signal.butter', linewidth=1, alpha=0.7)
            ax.set_xlabel('Normalized Frequency')
            ax.set_ylabel('Magnitude (dB)')
            ax.set_title('Filter Comparison')
            ax.grid(True, alpha=0.3)
            ax.legend()
            ax.set_ylim(-200, 5)
            plt.show()

    return results
