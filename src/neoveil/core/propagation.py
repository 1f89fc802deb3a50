"""Two-body Keplerian propagation in the heliocentric ecliptic frame."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from neoveil.core.elements import EARTH_ELEMENTS, OrbitalElements
from neoveil.core.kepler import (
    solve_eccentric_anomaly,
    solve_eccentric_anomaly_array,
    true_anomaly,
    true_anomaly_array,
)

logger = logging.getLogger(__name__)


@dataclass
class StateVector:
    """Position and velocity in the heliocentric ecliptic frame.

    Attributes:
        time_days: Simulation time in days since J2000.0.
        position_au: [x, y, z] position in AU.
        velocity_au_day: [vx, vy, vz] velocity in AU/day.
    """

    time_days: float
    position_au: NDArray[np.float64]  # shape (3,)
    velocity_au_day: NDArray[np.float64]  # shape (3,)

    @property
    def distance_au(self) -> float:
        """Heliocentric distance in AU."""
        return float(np.linalg.norm(self.position_au))


def _orbital_plane(elements: OrbitalElements, time_days: float) -> tuple[float, float]:
    """Return (r, ν) at ``time_days``."""
    e = elements.eccentricity
    e_anom = solve_eccentric_anomaly(elements.mean_anomaly_at(time_days), e)
    nu = true_anomaly(e_anom, e)
    r = elements.semi_latus_rectum_au / (1.0 + e * math.cos(nu))
    return r, nu


def position(
    elements: OrbitalElements,
    time_days: float,
    out: NDArray[np.float64] | None = None,
) -> NDArray[np.float64]:
    """Heliocentric ecliptic position of ``elements`` at ``time_days``.

    This is the per-frame hot path. Pass a caller-owned ``out`` array of
    shape (3,) to have the result written in place; no array is allocated
    in that case.

    Args:
        elements: Orbital element set.
        time_days: Time in days since J2000.0. Negative values are valid.
        out: Optional scratch buffer of shape (3,).

    Returns:
        The position in AU (``out`` when given).
    """
    r, nu = _orbital_plane(elements, time_days)
    x_orb = r * math.cos(nu)
    y_orb = r * math.sin(nu)
    p, q = elements.basis

    if out is None:
        out = np.empty(3, dtype=np.float64)
    out[0] = x_orb * p[0] + y_orb * q[0]
    out[1] = x_orb * p[1] + y_orb * q[1]
    out[2] = x_orb * p[2] + y_orb * q[2]
    return out


def velocity(
    elements: OrbitalElements,
    time_days: float,
    out: NDArray[np.float64] | None = None,
) -> NDArray[np.float64]:
    """Heliocentric ecliptic velocity in AU/day.

    Uses the gravitational parameter implied by the element set's own mean
    motion (μ = n²a³) so the velocity is the exact time derivative of
    :func:`position`, even for element sets with a tabulated period.
    """
    e = elements.eccentricity
    a = elements.semi_major_axis_au
    n = elements.mean_motion_rad_per_day
    _, nu = _orbital_plane(elements, time_days)

    mu = n * n * a ** 3
    scale = math.sqrt(mu / elements.semi_latus_rectum_au)
    vx_orb = -scale * math.sin(nu)
    vy_orb = scale * (e + math.cos(nu))
    p, q = elements.basis

    if out is None:
        out = np.empty(3, dtype=np.float64)
    out[0] = vx_orb * p[0] + vy_orb * q[0]
    out[1] = vx_orb * p[1] + vy_orb * q[1]
    out[2] = vx_orb * p[2] + vy_orb * q[2]
    return out


def earth_position(time_days: float, out: NDArray[np.float64] | None = None) -> NDArray[np.float64]:
    """Earth's heliocentric position at ``time_days``."""
    return position(EARTH_ELEMENTS, time_days, out)


def propagate(elements: OrbitalElements, times: Sequence[float]) -> list[StateVector]:
    """Propagate one element set to multiple times.

    Args:
        elements: Orbital element set.
        times: Times in days since J2000.0.

    Returns:
        List of StateVector objects, one per requested time.
    """
    result = [
        StateVector(
            time_days=float(t),
            position_au=position(elements, t),
            velocity_au_day=velocity(elements, t),
        )
        for t in times
    ]
    logger.debug("Propagated %s to %d times", elements.name or "orbit", len(result))
    return result


def propagate_positions(elements: OrbitalElements, times: NDArray[np.float64] | Sequence[float]) -> NDArray[np.float64]:
    """Vectorized positions of one element set at many times.

    Args:
        elements: Orbital element set.
        times: Array of times in days since J2000.0.

    Returns:
        Array of shape (m, 3) with positions in AU.
    """
    t = np.atleast_1d(np.asarray(times, dtype=np.float64))
    e = elements.eccentricity
    m = math.radians(elements.mean_anomaly_deg % 360.0) + elements.mean_motion_rad_per_day * (t - elements.epoch_days)
    nu = true_anomaly_array(solve_eccentric_anomaly_array(m, e), e)
    r = elements.semi_latus_rectum_au / (1.0 + e * np.cos(nu))

    p, q = elements.basis
    x_orb = (r * np.cos(nu))[:, None]
    y_orb = (r * np.sin(nu))[:, None]
    return x_orb * np.asarray(p) + y_orb * np.asarray(q)


@dataclass(frozen=True)
class ElementBatch:
    """Column-oriented copy of many element sets for vectorized propagation.

    Build it once per catalog and reuse it every frame; together with a
    caller-owned output buffer, :func:`propagate_batch` then does no
    per-object Python work.
    """

    semi_latus_rectum: NDArray[np.float64]
    eccentricity: NDArray[np.float64]
    mean_anomaly0: NDArray[np.float64]
    mean_motion: NDArray[np.float64]
    epoch: NDArray[np.float64]
    p: NDArray[np.float64]  # shape (n, 3)
    q: NDArray[np.float64]  # shape (n, 3)

    @classmethod
    def from_elements(cls, elements: Sequence[OrbitalElements]) -> ElementBatch:
        bases = [el.basis for el in elements]
        return cls(
            semi_latus_rectum=np.array([el.semi_latus_rectum_au for el in elements], dtype=np.float64),
            eccentricity=np.array([el.eccentricity for el in elements], dtype=np.float64),
            mean_anomaly0=np.array([math.radians(el.mean_anomaly_deg % 360.0) for el in elements], dtype=np.float64),
            mean_motion=np.array([el.mean_motion_rad_per_day for el in elements], dtype=np.float64),
            epoch=np.array([el.epoch_days for el in elements], dtype=np.float64),
            p=np.array([b[0] for b in bases], dtype=np.float64).reshape(-1, 3),
            q=np.array([b[1] for b in bases], dtype=np.float64).reshape(-1, 3),
        )

    def __len__(self) -> int:
        return len(self.eccentricity)


def propagate_batch(
    elements: ElementBatch | Sequence[OrbitalElements],
    time_days: float,
    out: NDArray[np.float64] | None = None,
) -> NDArray[np.float64]:
    """Propagate many element sets to a single time.

    Args:
        elements: An ElementBatch (fast path) or a list of element sets.
        time_days: Time in days since J2000.0.
        out: Optional caller-owned buffer of shape (n, 3).

    Returns:
        Array of shape (n, 3) with positions in AU.
    """
    batch = elements if isinstance(elements, ElementBatch) else ElementBatch.from_elements(list(elements))
    n = len(batch)
    if out is None:
        out = np.empty((n, 3), dtype=np.float64)
    if n == 0:
        return out

    m = batch.mean_anomaly0 + batch.mean_motion * (time_days - batch.epoch)
    e = batch.eccentricity
    nu = true_anomaly_array(solve_eccentric_anomaly_array(m, e), e)
    r = batch.semi_latus_rectum / (1.0 + e * np.cos(nu))

    x_orb = (r * np.cos(nu))[:, None]
    y_orb = (r * np.sin(nu))[:, None]
    np.multiply(batch.p, x_orb, out=out)
    out += batch.q * y_orb
    return out
