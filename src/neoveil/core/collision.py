"""Synthetic collision orbits.

Builds a fictitious element set whose propagated position at a chosen lead
time coincides with Earth's. This is a heuristic targeting fit, not a
physical n-body or Lambert solve: its only contract is that propagating the
returned orbit to the lead time lands within a small tolerance of Earth.
"""
from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from neoveil.core.elements import OrbitalElements
from neoveil.core.kepler import mean_anomaly_from_true
from neoveil.core.propagation import earth_position, position
from neoveil.exceptions import DegenerateTrajectoryWarning
from neoveil.utils.constants import (
    COLLISION_TOLERANCE_AU,
    MAX_COLLISION_ECCENTRICITY,
    MIN_LEAD_TIME_DAYS,
    SUN_MU_AU3_DAY2,
)

logger = logging.getLogger(__name__)

_CROSSING_MARGIN = 0.05
"""Extra eccentricity added when the base orbit has to be stretched to cross 1 AU."""

_FALLBACK_ECCENTRICITY = 0.5


@dataclass(frozen=True)
class CollisionOrbit:
    """An element set constructed to meet Earth at ``collision_time_days``.

    Attributes:
        elements: The synthetic orbital elements (epoch at the build start).
        collision_time_days: Time of the encounter in days since J2000.0.
        target_position_au: Earth's position at the encounter.
        miss_distance_au: Distance between the propagated orbit and Earth at
            the encounter.
        degenerate: True when the lead time had to be clamped or the
            intersection constraint was not met within tolerance.
        reason: Why the result is degenerate, if it is.
    """

    elements: OrbitalElements
    collision_time_days: float
    target_position_au: NDArray[np.float64]
    miss_distance_au: float
    degenerate: bool = False
    reason: str | None = None

    @property
    def semi_major_axis_au(self) -> float:
        return self.elements.semi_major_axis_au

    @property
    def eccentricity(self) -> float:
        return self.elements.eccentricity

    @property
    def inclination_deg(self) -> float:
        return self.elements.inclination_deg

    @property
    def mean_anomaly_deg(self) -> float:
        return self.elements.mean_anomaly_deg


def _fold_inclination(inclination_deg: float) -> float:
    inc = inclination_deg % 360.0
    return 360.0 - inc if inc > 180.0 else inc


def _crossing_shape(a: float, e: float, r_target: float) -> tuple[float, float, str | None]:
    """Return (a, e) whose radial range contains ``r_target``."""
    if a * (1.0 - e) <= r_target <= a * (1.0 + e):
        return a, e, None

    e_required = abs(1.0 - r_target / a)
    if e_required + _CROSSING_MARGIN <= MAX_COLLISION_ECCENTRICITY:
        return a, e_required + _CROSSING_MARGIN, "eccentricity raised to cross Earth's orbit"

    return r_target, _FALLBACK_ECCENTRICITY, "semi-major axis moved to Earth's orbital radius"


def _plane_solutions(target: NDArray[np.float64], inclination_deg: float) -> list[tuple[float, float]]:
    """Return (ascending node, argument of latitude) pairs in radians.

    Each pair defines a plane with the given inclination that contains the
    Sun and ``target``, with ``target`` at the returned argument of latitude.
    """
    x, y, z = (float(c) for c in target)
    r = math.sqrt(x * x + y * y + z * z)
    inc = math.radians(inclination_deg)
    sin_i, cos_i = math.sin(inc), math.cos(inc)
    lon = math.atan2(y, x)

    if abs(sin_i) < 1e-9:
        # ecliptic plane: node is arbitrary, pin it at 0
        return [(0.0, math.atan2(math.sin(lon) * cos_i, math.cos(lon)))]

    s = max(-1.0, min(1.0, z / (r * sin_i)))
    u1 = math.asin(s)
    solutions = []
    for u in (u1, math.pi - u1):
        node = lon - math.atan2(math.sin(u) * cos_i, math.cos(u))
        solutions.append((node, u))
    return solutions


def build_collision_orbit(
    base: OrbitalElements,
    lead_time_days: float,
    tolerance_au: float = COLLISION_TOLERANCE_AU,
    start_days: float = 0.0,
) -> CollisionOrbit:
    """Construct an orbit that reaches Earth's position after ``lead_time_days``.

    The base object's inclination is kept, and its semi-major axis and
    eccentricity are kept when the orbit already crosses Earth's heliocentric
    distance at the encounter; otherwise the shape is stretched until it
    does. Node and argument of periapsis are placed so the orbital plane
    contains the Sun and the target point. Among the geometrically valid
    solutions (inbound/outbound branch, two plane orientations) the one whose
    starting position is nearest the base object's current position wins.
    The mean anomaly is back-solved with the physical mean motion.

    Args:
        base: The real object's elements.
        lead_time_days: Days from ``start_days`` to the encounter.
        tolerance_au: Maximum accepted miss distance at the encounter.
        start_days: Build time in days since J2000.0; becomes the epoch of
            the returned elements.

    Returns:
        A CollisionOrbit. Its elements are always valid; ``degenerate`` flags
        a clamped lead time or a miss beyond tolerance.
    """
    degenerate = False
    reasons: list[str] = []

    if not math.isfinite(lead_time_days) or lead_time_days < MIN_LEAD_TIME_DAYS:
        logger.warning("Lead time %r below minimum, clamping to %.1f days", lead_time_days, MIN_LEAD_TIME_DAYS)
        warnings.warn(
            f"Lead time {lead_time_days!r} is below {MIN_LEAD_TIME_DAYS} days; clamped",
            DegenerateTrajectoryWarning,
            stacklevel=2,
        )
        degenerate = True
        reasons.append(f"lead time clamped to {MIN_LEAD_TIME_DAYS} days")
        lead_time_days = MIN_LEAD_TIME_DAYS

    t_target = start_days + lead_time_days
    target = earth_position(t_target)
    r_target = float(np.linalg.norm(target))

    a, e, shape_note = _crossing_shape(base.semi_major_axis_au, base.eccentricity, r_target)
    if shape_note:
        logger.debug("Collision orbit for %s: %s (a=%.4f, e=%.4f)", base.name or "object", shape_note, a, e)

    inclination_deg = _fold_inclination(base.inclination_deg)
    p = a * (1.0 - e * e)
    if e < 1e-12:
        anomalies = [0.0]
    else:
        nu = math.acos(max(-1.0, min(1.0, (p / r_target - 1.0) / e)))
        anomalies = [nu, -nu] if nu > 0.0 else [nu]

    n = math.sqrt(SUN_MU_AU3_DAY2 / a ** 3)
    current = position(base, start_days)
    scratch = np.empty(3)
    candidates: list[tuple[float, OrbitalElements]] = []

    for node, arg_lat in _plane_solutions(target, inclination_deg):
        for nu_target in anomalies:
            m_target = mean_anomaly_from_true(nu_target, e)
            candidate = OrbitalElements(
                semi_major_axis_au=a,
                eccentricity=e,
                inclination_deg=inclination_deg,
                ascending_node_deg=math.degrees(node) % 360.0,
                arg_periapsis_deg=math.degrees(arg_lat - nu_target) % 360.0,
                mean_anomaly_deg=math.degrees(m_target - n * lead_time_days) % 360.0,
                epoch_days=start_days,
                name=f"{base.name} (collision)" if base.name else "collision orbit",
            )
            offset = float(np.linalg.norm(position(candidate, start_days, scratch) - current))
            candidates.append((offset, candidate))

    best_offset, best = min(candidates, key=lambda c: c[0])
    miss = float(np.linalg.norm(position(best, t_target) - target))
    if miss > tolerance_au:
        logger.warning("Collision orbit misses Earth by %.4g AU (tolerance %.4g)", miss, tolerance_au)
        warnings.warn(
            f"Collision orbit misses Earth by {miss:.4g} AU",
            DegenerateTrajectoryWarning,
            stacklevel=2,
        )
        degenerate = True
        reasons.append(f"miss distance {miss:.4g} AU exceeds tolerance")

    logger.debug(
        "Built collision orbit: lead %.1f d, a=%.4f, e=%.4f, start offset %.4f AU, miss %.2e AU",
        lead_time_days, a, e, best_offset, miss,
    )
    return CollisionOrbit(
        elements=best,
        collision_time_days=t_target,
        target_position_au=target,
        miss_distance_au=miss,
        degenerate=degenerate,
        reason="; ".join(reasons) if reasons else None,
    )


def collision_orbit_position(
    orbit: CollisionOrbit,
    time_days: float,
    out: NDArray[np.float64] | None = None,
) -> NDArray[np.float64]:
    """Position on a collision orbit at ``time_days`` since J2000.0."""
    return position(orbit.elements, time_days, out)
