#!/usr/bin/env python3
"""
Tests for the coefficient model, filter specs, persistence and response checks.
"""

import dataclasses
import math
import sys
import os

import numpy as np
import pytest

# Add the src directory to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from pybiquad import (
    Biquad,
    DesignFailure,
    FilterCoefficients,
    FilterSpec,
    FilterType,
    InvalidParameter,
    ParameterSelection,
    design_band_pass,
    design_band_stop,
    design_high_pass,
    design_low_pass,
    load_coefficients,
    save_coefficients,
)
from pybiquad.verification import (
    compare_with_scipy,
    frequency_response,
    magnitude_at,
    verify_filter_response,
)


# ───────────────────────── coefficient model ────────────────────────── #

def test_coefficients_are_immutable_records():
    coeffs = design_low_pass(4, 0.2)
    assert isinstance(coeffs.numerator, tuple)
    assert isinstance(coeffs.numerator[0], Biquad)
    with pytest.raises(dataclasses.FrozenInstanceError):
        coeffs.sections = 7


def test_section_count_mismatch_is_design_failure():
    with pytest.raises(DesignFailure):
        FilterCoefficients(numerator=[(1, 0, 0)], denominator=[(1, 0, 0), (1, 0, 0)],
                           sections=2, order=3)
    with pytest.raises(DesignFailure):
        FilterCoefficients(numerator=[(1, 0, 0)], denominator=[(1, 0, 0)],
                           sections=2, order=3)


@pytest.mark.parametrize("bad", [float('nan'), float('inf'), -float('inf')])
def test_non_finite_is_design_failure(bad):
    with pytest.raises(DesignFailure):
        FilterCoefficients(numerator=[(1, bad, 0)], denominator=[(1, 0, 0)],
                           sections=1, order=1)


def test_sos_layout():
    coeffs = design_band_stop(3, 0.3, 0.05)
    sos = coeffs.to_sos()
    assert sos.shape == (3, 6)
    assert np.all(sos[:, 3] == 1.0)
    np.testing.assert_allclose(sos[:, :3], np.array(coeffs.numerator), rtol=1e-14)

    back = FilterCoefficients.from_sos(sos, order=3, filter_type=FilterType.BAND_STOP)
    assert back.sections == 3
    np.testing.assert_array_equal(back.to_sos(), sos)

    with pytest.raises(DesignFailure):
        FilterCoefficients.from_sos(np.ones((2, 5)), order=2)


def test_to_arrays_is_unmodified():
    coeffs = design_high_pass(5, 0.3)
    num, den = coeffs.to_arrays()
    assert num.shape == den.shape == (3, 3)
    assert tuple(map(tuple, num)) == tuple(map(tuple, coeffs.numerator))
    assert tuple(map(tuple, den)) == tuple(map(tuple, coeffs.denominator))


# ───────────────────────── FilterSpec ────────────────────────── #

def test_spec_from_hz_normalizes_to_nyquist():
    spec = FilterSpec.from_hz(FilterType.BAND_STOP, 5, 1000.0, 20.0, 5.0)
    assert spec.frequency == pytest.approx(0.04)
    assert spec.bandwidth == pytest.approx(0.01)
    assert spec.sample_rate == 1000.0
    assert spec.design() == design_band_stop(5, 20.0 / 1000.0 * 2, 5.0 / 1000.0 * 2)


def test_spec_design_dispatch():
    assert FilterSpec("low", 5, 0.04).design() == design_low_pass(5, 0.04)
    assert FilterSpec(FilterType.HIGH, 5, 0.04).design() == design_high_pass(5, 0.04)
    # bandwidth is ignored for low/high-pass
    assert FilterSpec("low", 5, 0.04, bandwidth=0.5).design() == design_low_pass(5, 0.04)
    edges = FilterSpec("bandpass", 5, 0.03, 0.05, selection=ParameterSelection.BAND_EDGES)
    assert edges.design() == design_band_pass(5, 0.03, 0.05, ParameterSelection.BAND_EDGES)


def test_spec_validation():
    with pytest.raises(InvalidParameter):
        FilterSpec("chebyshev", 4, 0.1)
    with pytest.raises(InvalidParameter):
        FilterSpec("bandstop", 4, 0.1, selection="sideways")
    with pytest.raises(InvalidParameter):
        FilterSpec("bandstop", 4, 0.1).design()
    with pytest.raises(InvalidParameter):
        FilterSpec.from_hz("low", 4, 0.0, 20.0)
    with pytest.raises(InvalidParameter):
        FilterSpec("low", 4, 0.1, sample_rate=-1.0).validate()
    with pytest.raises(InvalidParameter):
        FilterSpec("low", 0, 0.1).design()


def test_spec_dict_round_trip():
    spec = FilterSpec.from_hz("bandpass", 4, 48000.0, 1000.0, 200.0)
    d = spec.to_dict()
    assert d['filter_type'] == 'bandpass'
    assert d['selection'] == 'center_bandwidth'
    assert FilterSpec.from_dict(d) == spec


# ───────────────────────── persistence ────────────────────────── #

def test_save_and_load(tmp_path):
    spec = FilterSpec.from_hz("bandstop", 5, 1000.0, 20.0, 5.0)
    coeffs = spec.design()
    path = save_coefficients(tmp_path / "notch", coeffs, spec)
    assert path.suffix == ".npz"
    assert path.exists()

    loaded, loaded_spec = load_coefficients(path)
    assert loaded == coeffs
    assert loaded_spec == spec


def test_save_without_spec(tmp_path):
    coeffs = FilterCoefficients.from_sos(design_low_pass(3, 0.2).to_sos(), order=3)
    path = save_coefficients(tmp_path / "plain.npz", coeffs)
    loaded, loaded_spec = load_coefficients(path)
    assert loaded_spec is None
    assert loaded.filter_type is None
    assert loaded == coeffs


# ───────────────────────── verification ────────────────────────── #

def test_frequency_response_grid():
    w, h = frequency_response(design_low_pass(3, 0.2), worN=256)
    assert w.shape == h.shape == (256,)
    assert w[0] == 0.0 and w[-1] < 1.0


def test_magnitude_at_scalar_and_array():
    coeffs = design_low_pass(3, 0.2)
    assert isinstance(magnitude_at(coeffs, 0.1), float)
    assert magnitude_at(coeffs, [0.1, 0.2]).shape == (2,)


def test_verify_low_pass():
    results = verify_filter_response(design_low_pass(5, 0.04))
    assert results['dc_gain'] == pytest.approx(1.0, abs=1e-9)
    assert results['nyquist_gain'] < 1e-9
    assert results['f_3db'] == pytest.approx(0.04, abs=2e-4)
    assert results['peak_gain_db'] == pytest.approx(0.0, abs=1e-6)
    assert results['is_stable']
    assert results['all_finite']
    assert results['max_pole_radius'] < 1.0


def test_verify_reports_hz():
    results = verify_filter_response(design_high_pass(4, 0.04), sample_rate=1000.0)
    assert results['f_3db'] == pytest.approx(20.0, abs=0.1)
    assert results['nyquist_gain'] == pytest.approx(1.0, abs=1e-9)


def test_verify_band_pass():
    results = verify_filter_response(design_band_pass(5, 0.04, 0.01))
    assert results['dc_gain'] < 1e-12
    assert results['is_stable']
    assert 0.0 < results['f_3db'] < 0.04


def test_compare_with_scipy():
    for coeffs in (design_low_pass(5, 0.04), design_high_pass(6, 0.3)):
        cutoff = 0.04 if coeffs.filter_type is FilterType.LOW else 0.3
        results = compare_with_scipy(coeffs, cutoff)
        assert results['comparable']
        assert results['max_abs_error'] < 1e-8
        assert results['reference_sections'] == math.ceil(coeffs.order / 2)

    assert compare_with_scipy(design_band_stop(5, 0.04, 0.01), 0.04) == {'comparable': False}
