"""Keplerian orbital element records.

This module provides the immutable element set consumed by the propagator,
the search and the collision-orbit builder, plus Earth's fixed element set.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from functools import cached_property

from neoveil.exceptions import InvalidInputError
from neoveil.utils.constants import (
    EARTH_ARG_PERIAPSIS_DEG,
    EARTH_ASCENDING_NODE_DEG,
    EARTH_ECCENTRICITY,
    EARTH_INCLINATION_DEG,
    EARTH_MEAN_MOTION_DEG_PER_DAY,
    EARTH_SEMI_MAJOR_AXIS_AU,
    SUN_MU_AU3_DAY2,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrbitalElements:
    """A heliocentric Keplerian element set.

    Attributes:
        semi_major_axis_au: Semi-major axis in AU (> 0).
        eccentricity: Orbital eccentricity in [0, 1).
        inclination_deg: Inclination to the ecliptic in degrees.
        ascending_node_deg: Longitude of the ascending node in degrees.
        arg_periapsis_deg: Argument of periapsis in degrees.
        mean_anomaly_deg: Mean anomaly at ``epoch_days`` in degrees.
        period_days: Orbital period in days, optional.
        mean_motion_deg_per_day: Mean motion in degrees/day, optional.
            Takes precedence over ``period_days``. When neither is given the
            mean motion follows from Kepler's third law.
        epoch_days: Epoch of the mean anomaly in days since J2000.0.
        name: Optional label.
    """

    semi_major_axis_au: float
    eccentricity: float
    inclination_deg: float = 0.0
    ascending_node_deg: float = 0.0
    arg_periapsis_deg: float = 0.0
    mean_anomaly_deg: float = 0.0
    period_days: float | None = None
    mean_motion_deg_per_day: float | None = None
    epoch_days: float = 0.0
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        numeric = {
            "semi_major_axis_au": self.semi_major_axis_au,
            "eccentricity": self.eccentricity,
            "inclination_deg": self.inclination_deg,
            "ascending_node_deg": self.ascending_node_deg,
            "arg_periapsis_deg": self.arg_periapsis_deg,
            "mean_anomaly_deg": self.mean_anomaly_deg,
            "epoch_days": self.epoch_days,
        }
        if self.period_days is not None:
            numeric["period_days"] = self.period_days
        if self.mean_motion_deg_per_day is not None:
            numeric["mean_motion_deg_per_day"] = self.mean_motion_deg_per_day

        for key, value in numeric.items():
            try:
                finite = not isinstance(value, bool) and math.isfinite(value)
            except TypeError:
                finite = False
            if not finite:
                logger.error("Invalid orbital element %s=%r for %r", key, value, self.name)
                raise InvalidInputError(f"Orbital element {key} must be a finite number, got {value!r}")

        if self.semi_major_axis_au <= 0:
            raise InvalidInputError(f"Semi-major axis must be positive, got {self.semi_major_axis_au}")
        if not (0.0 <= self.eccentricity < 1.0):
            raise InvalidInputError(f"Eccentricity must lie in [0, 1), got {self.eccentricity}")
        if self.period_days is not None and self.period_days <= 0:
            raise InvalidInputError(f"Orbital period must be positive, got {self.period_days}")
        if self.mean_motion_deg_per_day is not None and self.mean_motion_deg_per_day <= 0:
            raise InvalidInputError(f"Mean motion must be positive, got {self.mean_motion_deg_per_day}")

    @classmethod
    def earth(cls) -> OrbitalElements:
        """Earth's fixed near-circular element set (J2000.0)."""
        return EARTH_ELEMENTS

    @property
    def mean_motion_rad_per_day(self) -> float:
        """Mean motion in radians/day."""
        if self.mean_motion_deg_per_day is not None:
            return math.radians(self.mean_motion_deg_per_day)
        if self.period_days is not None:
            return 2.0 * math.pi / self.period_days
        return math.sqrt(SUN_MU_AU3_DAY2 / self.semi_major_axis_au ** 3)

    @property
    def orbital_period_days(self) -> float:
        """Orbital period in days, derived from the mean motion."""
        return 2.0 * math.pi / self.mean_motion_rad_per_day

    @property
    def perihelion_au(self) -> float:
        return self.semi_major_axis_au * (1.0 - self.eccentricity)

    @property
    def aphelion_au(self) -> float:
        return self.semi_major_axis_au * (1.0 + self.eccentricity)

    @property
    def semi_latus_rectum_au(self) -> float:
        return self.semi_major_axis_au * (1.0 - self.eccentricity ** 2)

    @cached_property
    def basis(self) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Perifocal unit vectors (P, Q) in the heliocentric ecliptic frame.

        P points to periapsis, Q is 90° ahead in the orbital plane. They are
        the first two columns of the 3-1-3 rotation Rz(Ω)·Rx(i)·Rz(ω), which
        depends only on the immutable angles, so it is computed once per
        record.
        """
        node = math.radians(self.ascending_node_deg % 360.0)
        inc = math.radians(self.inclination_deg % 360.0)
        argp = math.radians(self.arg_periapsis_deg % 360.0)

        cos_o, sin_o = math.cos(node), math.sin(node)
        cos_i, sin_i = math.cos(inc), math.sin(inc)
        cos_w, sin_w = math.cos(argp), math.sin(argp)

        p = (
            cos_o * cos_w - sin_o * sin_w * cos_i,
            sin_o * cos_w + cos_o * sin_w * cos_i,
            sin_w * sin_i,
        )
        q = (
            -cos_o * sin_w - sin_o * cos_w * cos_i,
            -sin_o * sin_w + cos_o * cos_w * cos_i,
            cos_w * sin_i,
        )
        return p, q

    def mean_anomaly_at(self, time_days: float) -> float:
        """Mean anomaly in radians (unwrapped) at ``time_days`` since J2000.0."""
        m0 = math.radians(self.mean_anomaly_deg % 360.0)
        return m0 + self.mean_motion_rad_per_day * (time_days - self.epoch_days)

    def __str__(self) -> str:
        label = f"{self.name} " if self.name else ""
        return (
            f"{label}a={self.semi_major_axis_au:.6f} AU e={self.eccentricity:.6f} "
            f"i={self.inclination_deg:.4f}° Ω={self.ascending_node_deg:.4f}° "
            f"ω={self.arg_periapsis_deg:.4f}° M={self.mean_anomaly_deg:.4f}°"
        )


EARTH_ELEMENTS = OrbitalElements(
    semi_major_axis_au=EARTH_SEMI_MAJOR_AXIS_AU,
    eccentricity=EARTH_ECCENTRICITY,
    inclination_deg=EARTH_INCLINATION_DEG,
    ascending_node_deg=EARTH_ASCENDING_NODE_DEG,
    arg_periapsis_deg=EARTH_ARG_PERIAPSIS_DEG,
    mean_anomaly_deg=0.0,
    mean_motion_deg_per_day=EARTH_MEAN_MOTION_DEG_PER_DAY,
    epoch_days=0.0,
    name="Earth",
)
"""Earth's element set; the mean anomaly is zero at J2000.0."""
