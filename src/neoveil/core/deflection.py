"""Deflection mission planning.

A linear along-track model: a velocity change ``dv`` applied ``t`` before the
encounter shifts the arrival point by about ``3·dv·t``. The result reports a
success probability instead of drawing a random outcome, so plans are
reproducible.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from neoveil.core.impact import kinetic_energy, mass_from_diameter
from neoveil.core.threat import ObjectRecord, ThreatAssessment, assess_object, impact_probability
from neoveil.exceptions import InvalidInputError
from neoveil.utils.constants import AU_KM, SECONDS_PER_DAY

logger = logging.getLogger(__name__)

ASTEROID_DENSITY_KG_M3 = 2600.0
"""Bulk density assumed when estimating the energy a deflection needs."""

_ALONG_TRACK_FACTOR = 3.0


class DeflectionMethod(Enum):
    """Catalog of deflection techniques.

    Each member carries its nominal velocity change (km/s), trajectory
    direction change (deg), coupling efficiency, reliability and the time
    the maneuver itself takes (hours).
    """

    KINETIC_IMPACTOR = ("Kinetic Impactor", 0.01, 0.5, 0.8, 0.85, 24.0)
    GRAVITY_TRACTOR = ("Gravity Tractor", 0.005, 0.2, 0.6, 0.70, 168.0)
    NUCLEAR_STANDOFF = ("Nuclear Standoff Burst", 0.02, 1.0, 0.9, 0.95, 48.0)

    def __init__(
        self,
        label: str,
        delta_v_km_s: float,
        direction_change_deg: float,
        efficiency: float,
        reliability: float,
        duration_hours: float,
    ) -> None:
        self.label = label
        self.delta_v_km_s = delta_v_km_s
        self.direction_change_deg = direction_change_deg
        self.efficiency = efficiency
        self.reliability = reliability
        self.duration_hours = duration_hours

    @classmethod
    def from_name(cls, name: str) -> DeflectionMethod:
        """Look up a method by member name or label, case-insensitively."""
        key = name.strip().lower()
        for method in cls:
            if key in (method.name.lower(), method.label.lower()):
                return method
        raise InvalidInputError(f"Unknown deflection method {name!r}")


@dataclass(frozen=True)
class DeflectionResult:
    """Outcome of a planned deflection.

    Attributes:
        method: Technique used.
        delta_v_km_s: Effective velocity change after coupling losses.
        displacement_km: Along-track shift of the encounter point.
        new_miss_distance_au: Miss distance after deflection.
        impact_probability_before: Heuristic probability before deflection.
        impact_probability_after: Heuristic probability after deflection.
        probability_reduction_pct: Relative reduction in [0, 100].
        energy_required_j: Kinetic energy of the velocity change.
        success_probability: Chance the maneuver performs as planned.
    """

    method: DeflectionMethod
    delta_v_km_s: float
    displacement_km: float
    new_miss_distance_au: float
    impact_probability_before: float
    impact_probability_after: float
    probability_reduction_pct: float
    energy_required_j: float
    success_probability: float


def _success_probability(method: DeflectionMethod, lead_time_days: float) -> float:
    # more warning means more room to correct a partial miss
    time_factor = max(0.1, min(1.0, lead_time_days / 365.0))
    return method.reliability * method.efficiency * time_factor


def plan_deflection(
    target: ThreatAssessment | ObjectRecord,
    method: DeflectionMethod | str,
    lead_time_days: float,
    now: datetime | None = None,
) -> DeflectionResult:
    """Estimate the effect of deflecting an object.

    Args:
        target: An existing assessment, or a record to assess first.
        method: A DeflectionMethod or its name.
        lead_time_days: Days between the maneuver and the encounter.
        now: Assessment time when ``target`` is a record.

    Returns:
        DeflectionResult for the plan.

    Raises:
        InvalidInputError: If the lead time is not positive or the method is
            unknown.
    """
    if not math.isfinite(lead_time_days) or lead_time_days <= 0:
        logger.error("Invalid deflection lead time %r", lead_time_days)
        raise InvalidInputError(f"Lead time must be positive, got {lead_time_days!r}")
    if isinstance(method, str):
        method = DeflectionMethod.from_name(method)

    assessment = target if isinstance(target, ThreatAssessment) else assess_object(target, now=now)
    record = assessment.record

    delta_v = method.delta_v_km_s * method.efficiency
    displacement_km = _ALONG_TRACK_FACTOR * delta_v * lead_time_days * SECONDS_PER_DAY
    new_miss = assessment.miss_distance_au + displacement_km / AU_KM

    before = assessment.impact_probability
    after = impact_probability(new_miss, record.diameter_max_m)
    reduction = max(0.0, min(100.0, (before - after) / before * 100.0)) if before > 0 else 0.0

    mass = mass_from_diameter(record.diameter_m, ASTEROID_DENSITY_KG_M3)
    result = DeflectionResult(
        method=method,
        delta_v_km_s=delta_v,
        displacement_km=displacement_km,
        new_miss_distance_au=new_miss,
        impact_probability_before=before,
        impact_probability_after=after,
        probability_reduction_pct=reduction,
        energy_required_j=kinetic_energy(mass, delta_v),
        success_probability=_success_probability(method, lead_time_days),
    )
    logger.info(
        "%s on %s with %.0f d lead: shift %.0f km, p %.3g -> %.3g",
        method.label, record.object_id, lead_time_days, displacement_km, before, after,
    )
    return result
