"""Tests for two-body propagation."""
from __future__ import annotations

import numpy as np
import pytest

from neoveil.core.elements import EARTH_ELEMENTS, OrbitalElements
from neoveil.core.propagation import (
    ElementBatch,
    StateVector,
    earth_position,
    position,
    propagate,
    propagate_batch,
    propagate_positions,
    velocity,
)


@pytest.fixture
def eccentric() -> OrbitalElements:
    return OrbitalElements(
        semi_major_axis_au=1.412229596305856,
        eccentricity=0.209068868470435,
        inclination_deg=9.899225662489052,
        ascending_node_deg=287.8095343596706,
        arg_periapsis_deg=248.9151299336569,
        mean_anomaly_deg=130.9032525461727,
        name="(2015 AC246)",
    )


@pytest.fixture
def catalog(eccentric: OrbitalElements) -> list[OrbitalElements]:
    return [
        eccentric,
        EARTH_ELEMENTS,
        OrbitalElements(2.7, 0.08, inclination_deg=12.0, ascending_node_deg=80.0, mean_anomaly_deg=10.0),
        OrbitalElements(0.9, 0.0),
        OrbitalElements(1.8, 0.85, inclination_deg=160.0, arg_periapsis_deg=45.0, mean_anomaly_deg=300.0),
    ]


def test_position_is_periodic(eccentric: OrbitalElements):
    period = eccentric.orbital_period_days
    for t in (0.0, 17.5, 250.0, -40.0):
        np.testing.assert_allclose(position(eccentric, t + period), position(eccentric, t), atol=1e-9)
        np.testing.assert_allclose(position(eccentric, t + 3 * period), position(eccentric, t), atol=1e-9)


def test_circular_orbit_radius_is_constant():
    el = OrbitalElements(2.5, 0.0, inclination_deg=20.0, ascending_node_deg=45.0)
    for t in np.linspace(-500.0, 2000.0, 41):
        assert np.linalg.norm(position(el, float(t))) == pytest.approx(2.5, abs=1e-9)


def test_position_at_epoch_periapsis():
    el = OrbitalElements(2.0, 0.5, epoch_days=100.0)
    np.testing.assert_allclose(position(el, 100.0), [1.0, 0.0, 0.0], atol=1e-12)


def test_radius_within_apsides(eccentric: OrbitalElements):
    radii = np.linalg.norm(propagate_positions(eccentric, np.linspace(0.0, 700.0, 200)), axis=1)
    assert radii.min() >= eccentric.perihelion_au - 1e-9
    assert radii.max() <= eccentric.aphelion_au + 1e-9


def test_out_buffer_written_in_place(eccentric: OrbitalElements):
    buf = np.empty(3)
    result = position(eccentric, 12.0, buf)
    assert result is buf
    np.testing.assert_allclose(buf, position(eccentric, 12.0))


def test_velocity_matches_finite_difference(eccentric: OrbitalElements):
    t, h = 123.0, 1e-3
    numeric = (position(eccentric, t + h) - position(eccentric, t - h)) / (2 * h)
    np.testing.assert_allclose(velocity(eccentric, t), numeric, rtol=1e-6, atol=1e-10)


def test_earth_distance_range():
    for t in np.linspace(0.0, 365.25, 50):
        r = np.linalg.norm(earth_position(float(t)))
        assert 0.983 < r < 1.017


def test_negative_times_valid(eccentric: OrbitalElements):
    assert np.all(np.isfinite(position(eccentric, -36525.0)))


def test_propagate_returns_state_vectors(eccentric: OrbitalElements):
    states = propagate(eccentric, [0.0, 10.0, 20.0])
    assert len(states) == 3
    assert all(isinstance(s, StateVector) for s in states)
    assert states[1].time_days == 10.0
    assert states[1].distance_au == pytest.approx(np.linalg.norm(position(eccentric, 10.0)))


def test_propagate_positions_matches_scalar(eccentric: OrbitalElements):
    times = np.linspace(-100.0, 900.0, 57)
    expected = np.array([position(eccentric, float(t)) for t in times])
    np.testing.assert_allclose(propagate_positions(eccentric, times), expected, atol=1e-10)


def test_propagate_positions_scalar_time(eccentric: OrbitalElements):
    assert propagate_positions(eccentric, 5.0).shape == (1, 3)


class TestBatch:
    def test_matches_single_propagation(self, catalog: list[OrbitalElements]):
        expected = np.array([position(el, 321.0) for el in catalog])
        np.testing.assert_allclose(propagate_batch(catalog, 321.0), expected, atol=1e-10)

    def test_reuses_element_batch_and_buffer(self, catalog: list[OrbitalElements]):
        batch = ElementBatch.from_elements(catalog)
        assert len(batch) == len(catalog)
        out = np.empty((len(catalog), 3))
        for t in (0.0, 50.0, 1000.0):
            result = propagate_batch(batch, t, out)
            assert result is out
            np.testing.assert_allclose(out, [position(el, t) for el in catalog], atol=1e-10)

    def test_empty_batch(self):
        assert propagate_batch([], 0.0).shape == (0, 3)
