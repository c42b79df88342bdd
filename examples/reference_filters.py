#!/usr/bin/env python3
"""
Example: Design the four reference Butterworth filters and run a chirp through them.

fs = 1000 Hz, order 5, cutoff/center 20 Hz, bandwidth 5 Hz.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pybiquad import CascadedIIRFilter, FilterSpec, FilterType
from pybiquad.verification import verify_filter_response, compare_with_scipy
import numpy as np
import logging


def main():
    # Setup logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s'
    )

    fs = 1000.0
    specs = {
        'low': FilterSpec.from_hz(FilterType.LOW, 5, fs, 20.0),
        'high': FilterSpec.from_hz(FilterType.HIGH, 5, fs, 20.0),
        'bandstop': FilterSpec.from_hz(FilterType.BAND_STOP, 5, fs, 20.0, 5.0),
        'bandpass': FilterSpec.from_hz(FilterType.BAND_PASS, 5, fs, 20.0, 5.0),
    }

    # Linear chirp 1..100 Hz over 4 s
    t = np.arange(int(4 * fs)) / fs
    chirp = np.sin(2 * np.pi * (1.0 * t + (100.0 - 1.0) / (2 * 4.0) * t**2))

    print("Reference filters (fs = 1000 Hz, order 5)")
    print("-" * 60)
    for name, spec in specs.items():
        coeffs = spec.design()
        results = verify_filter_response(coeffs, sample_rate=fs)
        out = CascadedIIRFilter(coeffs).process_block(chirp)

        print(f"{name:9s} sections={coeffs.sections}  "
              f"DC={results['dc_gain']:.4f}  Nyq={results['nyquist_gain']:.4f}  "
              f"-3dB@{results['f_3db']:.2f} Hz  stable={results['is_stable']}  "
              f"out RMS={np.sqrt(np.mean(out**2)):.4f}")

        if spec.filter_type in (FilterType.LOW, FilterType.HIGH):
            cmp = compare_with_scipy(coeffs, spec.frequency)
            print(f"          max |H| deviation vs scipy.signal.butter: {cmp['max_abs_error']:.2e}")


if __name__ == '__main__':
    main()
