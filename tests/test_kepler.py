"""Tests for the Kepler equation solver."""
from __future__ import annotations

import math
import warnings

import numpy as np
import pytest

from neoveil.core.kepler import (
    mean_anomaly_from_true,
    normalize_angle,
    solve_eccentric_anomaly,
    solve_eccentric_anomaly_array,
    solve_kepler,
    true_anomaly,
    true_anomaly_array,
)
from neoveil.exceptions import ConvergenceWarning, InvalidInputError


ECCENTRICITIES = [0.0, 0.01671022, 0.2, 0.5, 0.79, 0.8, 0.9, 0.97, 0.99]
MEAN_ANOMALIES = np.linspace(-2 * math.pi, 2 * math.pi, 37)


class TestSolveKepler:
    @pytest.mark.parametrize("e", ECCENTRICITIES)
    def test_residual_below_tolerance(self, e: float):
        for m in MEAN_ANOMALIES:
            sol = solve_kepler(float(m), e)
            assert sol.converged
            residual = sol.eccentric_anomaly - e * math.sin(sol.eccentric_anomaly) - normalize_angle(float(m))
            assert abs(residual) < 1e-6

    def test_circular_short_circuit(self):
        sol = solve_kepler(1.234, 0.0)
        assert sol.eccentric_anomaly == pytest.approx(1.234)
        assert sol.iterations == 0

    def test_odd_in_mean_anomaly(self):
        pos = solve_kepler(0.7, 0.6).eccentric_anomaly
        neg = solve_kepler(-0.7, 0.6).eccentric_anomaly
        assert neg == pytest.approx(-pos)

    @pytest.mark.parametrize("e", [-0.1, 1.0, 1.5])
    def test_invalid_eccentricity(self, e: float):
        with pytest.raises(InvalidInputError, match="Eccentricity"):
            solve_kepler(0.5, e)

    def test_invalid_eccentricity_is_value_error(self):
        with pytest.raises(ValueError):
            solve_kepler(0.5, 1.0)


def test_iteration_cap_warns_but_returns():
    with pytest.warns(ConvergenceWarning):
        e_anom = solve_eccentric_anomaly(0.1, 0.9, max_iter=1)
    assert math.isfinite(e_anom)


def test_converged_solve_does_not_warn():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        solve_eccentric_anomaly(2.0, 0.5)


def test_array_solver_matches_scalar():
    m = np.linspace(-10.0, 10.0, 101)
    for e in (0.0, 0.3, 0.95):
        expected = [solve_eccentric_anomaly(float(x), e) for x in m]
        np.testing.assert_allclose(solve_eccentric_anomaly_array(m, e), expected, atol=1e-9)


def test_array_solver_per_element_eccentricity():
    m = np.array([0.5, 1.5, 3.0])
    e = np.array([0.1, 0.5, 0.9])
    out = solve_eccentric_anomaly_array(m, e)
    np.testing.assert_allclose(out - e * np.sin(out), m, atol=1e-9)


def test_array_solver_rejects_bad_eccentricity():
    with pytest.raises(InvalidInputError):
        solve_eccentric_anomaly_array(np.array([0.1, 0.2]), np.array([0.5, 1.0]))


def test_array_cap_warns():
    with pytest.warns(ConvergenceWarning):
        solve_eccentric_anomaly_array(np.array([0.1, 0.2]), 0.9, max_iter=1)


class TestTrueAnomaly:
    def test_circular_orbit_equals_eccentric_anomaly(self):
        for e_anom in (0.3, 1.2, 2.9, -2.0):
            assert true_anomaly(e_anom, 0.0) == pytest.approx(e_anom)

    def test_apsides(self):
        assert true_anomaly(0.0, 0.5) == pytest.approx(0.0)
        assert abs(true_anomaly(math.pi, 0.5)) == pytest.approx(math.pi)

    def test_array_matches_scalar(self):
        e_anom = np.linspace(-3.0, 3.0, 13)
        expected = [true_anomaly(float(x), 0.4) for x in e_anom]
        np.testing.assert_allclose(true_anomaly_array(e_anom, 0.4), expected)

    @pytest.mark.parametrize("e", [0.0, 0.2, 0.7])
    def test_mean_anomaly_from_true_inverts(self, e: float):
        for m in (-2.5, -0.4, 0.0, 1.0, 3.0):
            nu = true_anomaly(solve_eccentric_anomaly(m, e), e)
            assert mean_anomaly_from_true(nu, e) == pytest.approx(m, abs=1e-9)


@pytest.mark.parametrize(
    "angle, expected",
    [(0.0, 0.0), (math.pi, math.pi), (-math.pi, math.pi), (-4.0, 2 * math.pi - 4.0), (7.0, 7.0 - 2 * math.pi)],
)
def test_normalize_angle(angle: float, expected: float):
    assert normalize_angle(angle) == pytest.approx(expected)
