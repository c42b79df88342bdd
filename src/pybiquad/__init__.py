"""
Pybiquad - Butterworth IIR design and cascaded-biquad filtering.
"""

from .coefficients import Biquad, FilterCoefficients, FilterType
from .butterworth import (
    ParameterSelection,
    band_edges_to_center,
    design_band_pass,
    design_band_stop,
    design_butterworth,
    design_high_pass,
    design_low_pass,
)
from .iir_filter import CascadedIIRFilter
from .config import FilterSpec, save_coefficients, load_coefficients
from .exceptions import FilterDesignError, InvalidParameter, DesignFailure, NotConfigured
from .verification import verify_filter_response, compare_with_scipy

__version__ = "0.1.0"
__all__ = [
    "Biquad",
    "FilterCoefficients",
    "FilterType",
    "ParameterSelection",
    "band_edges_to_center",
    "design_band_pass",
    "design_band_stop",
    "design_butterworth",
    "design_high_pass",
    "design_low_pass",
    "CascadedIIRFilter",
    "FilterSpec",
    "save_coefficients",
    "load_coefficients",
    "FilterDesignError",
    "InvalidParameter",
    "DesignFailure",
    "NotConfigured",
    "verify_filter_response",
    "compare_with_scipy",
]
