"""Tests for deflection planning."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from neoveil.core.deflection import ASTEROID_DENSITY_KG_M3, DeflectionMethod, plan_deflection
from neoveil.core.elements import OrbitalElements
from neoveil.core.impact import mass_from_diameter
from neoveil.core.threat import CloseApproach, ObjectRecord, ThreatAssessment, assess_object
from neoveil.exceptions import InvalidInputError
from neoveil.utils.constants import AU_KM


NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def record() -> ObjectRecord:
    return ObjectRecord(
        object_id="D1",
        name="Deflection target",
        elements=OrbitalElements(1.1, 0.2, inclination_deg=3.0),
        diameter_min_m=300.0,
        diameter_max_m=500.0,
        close_approaches=(CloseApproach(9600.0, 18.0, 0.0005),),
    )


@pytest.fixture
def assessment(record: ObjectRecord) -> ThreatAssessment:
    return assess_object(record, now=NOW)


def test_catalog_values():
    kinetic = DeflectionMethod.KINETIC_IMPACTOR
    assert kinetic.delta_v_km_s == 0.01
    assert kinetic.efficiency == 0.8
    assert kinetic.reliability == 0.85
    assert DeflectionMethod.GRAVITY_TRACTOR.duration_hours == 168.0
    assert DeflectionMethod.NUCLEAR_STANDOFF.direction_change_deg == 1.0


def test_linear_displacement(assessment: ThreatAssessment):
    result = plan_deflection(assessment, DeflectionMethod.KINETIC_IMPACTOR, lead_time_days=1000.0)
    dv = 0.01 * 0.8
    assert result.delta_v_km_s == pytest.approx(dv)
    assert result.displacement_km == pytest.approx(3.0 * dv * 1000.0 * 86400.0)
    assert result.new_miss_distance_au == pytest.approx(assessment.miss_distance_au + result.displacement_km / AU_KM)


def test_probability_drops(assessment: ThreatAssessment):
    result = plan_deflection(assessment, DeflectionMethod.NUCLEAR_STANDOFF, lead_time_days=2000.0)
    assert result.impact_probability_before == assessment.impact_probability
    assert result.impact_probability_after < result.impact_probability_before
    assert 0.0 < result.probability_reduction_pct <= 100.0


def test_longer_lead_moves_further(assessment: ThreatAssessment):
    short = plan_deflection(assessment, "gravity_tractor", 100.0)
    long = plan_deflection(assessment, "gravity_tractor", 1000.0)
    assert long.displacement_km > short.displacement_km
    assert long.impact_probability_after < short.impact_probability_after
    assert long.success_probability >= short.success_probability


def test_energy_required(assessment: ThreatAssessment, record: ObjectRecord):
    result = plan_deflection(assessment, DeflectionMethod.KINETIC_IMPACTOR, 500.0)
    mass = mass_from_diameter(record.diameter_m, ASTEROID_DENSITY_KG_M3)
    assert result.energy_required_j == pytest.approx(0.5 * mass * (result.delta_v_km_s * 1000.0) ** 2)


def test_success_probability_is_deterministic(assessment: ThreatAssessment):
    first = plan_deflection(assessment, DeflectionMethod.NUCLEAR_STANDOFF, 800.0)
    second = plan_deflection(assessment, DeflectionMethod.NUCLEAR_STANDOFF, 800.0)
    assert first == second
    assert first.success_probability == pytest.approx(0.95 * 0.9)


def test_accepts_record(record: ObjectRecord, assessment: ThreatAssessment):
    from_record = plan_deflection(record, DeflectionMethod.KINETIC_IMPACTOR, 700.0, now=NOW)
    from_assessment = plan_deflection(assessment, DeflectionMethod.KINETIC_IMPACTOR, 700.0)
    assert from_record == from_assessment


@pytest.mark.parametrize("name", ["Kinetic Impactor", "kinetic_impactor", "KINETIC_IMPACTOR", " kinetic impactor "])
def test_method_lookup(name: str):
    assert DeflectionMethod.from_name(name) is DeflectionMethod.KINETIC_IMPACTOR


def test_unknown_method(assessment: ThreatAssessment):
    with pytest.raises(InvalidInputError, match="Unknown deflection method"):
        plan_deflection(assessment, "laser ablation", 100.0)


@pytest.mark.parametrize("lead", [0.0, -5.0, float("nan")])
def test_invalid_lead_time(assessment: ThreatAssessment, lead: float):
    with pytest.raises(InvalidInputError):
        plan_deflection(assessment, DeflectionMethod.KINETIC_IMPACTOR, lead)
