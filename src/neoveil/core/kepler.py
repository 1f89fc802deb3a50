"""Kepler's equation solver.

Solves ``M = E - e·sin(E)`` for the eccentric anomaly with Newton's method
and converts eccentric anomaly to true anomaly. Pure math, no state.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from neoveil.exceptions import ConvergenceWarning, InvalidInputError
from neoveil.utils.constants import HIGH_ECCENTRICITY, KEPLER_MAX_ITERATIONS, KEPLER_TOLERANCE

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class KeplerSolution:
    """Result of a Kepler solve.

    Attributes:
        eccentric_anomaly: Eccentric anomaly E in radians.
        iterations: Newton iterations performed.
        converged: False if the iteration cap was hit before |ΔE| < tol.
    """

    eccentric_anomaly: float
    iterations: int
    converged: bool


def normalize_angle(angle_rad: float) -> float:
    """Wrap an angle to (-π, π]."""
    wrapped = math.fmod(angle_rad, TWO_PI)
    if wrapped > math.pi:
        wrapped -= TWO_PI
    elif wrapped <= -math.pi:
        wrapped += TWO_PI
    return wrapped


def _check_eccentricity(eccentricity: float) -> None:
    if not (0.0 <= eccentricity < 1.0):
        logger.error("Eccentricity %r outside [0, 1)", eccentricity)
        raise InvalidInputError(f"Eccentricity must lie in [0, 1), got {eccentricity!r}")


def solve_kepler(
    mean_anomaly_rad: float,
    eccentricity: float,
    tol: float = KEPLER_TOLERANCE,
    max_iter: int = KEPLER_MAX_ITERATIONS,
) -> KeplerSolution:
    """Solve Kepler's equation by Newton iteration.

    The mean anomaly is normalized to (-π, π] and the equation is solved on
    |M| with the sign restored afterwards (E is odd in M). The initial guess
    is E0 = M, or E0 = π for e >= 0.8 where Newton from M can overshoot.

    Args:
        mean_anomaly_rad: Mean anomaly in radians (any range).
        eccentricity: Orbital eccentricity in [0, 1).
        tol: Stop when |ΔE| falls below this value.
        max_iter: Hard cap on iterations.

    Returns:
        KeplerSolution with the best estimate, even when not converged.

    Raises:
        InvalidInputError: If eccentricity is outside [0, 1).
    """
    _check_eccentricity(eccentricity)

    m = normalize_angle(mean_anomaly_rad)
    sign = -1.0 if m < 0.0 else 1.0
    m = abs(m)

    if eccentricity == 0.0:
        return KeplerSolution(sign * m, 0, True)

    e_anom = math.pi if eccentricity >= HIGH_ECCENTRICITY else m
    iterations = 0
    converged = False

    while iterations < max_iter:
        f = e_anom - eccentricity * math.sin(e_anom) - m
        fp = 1.0 - eccentricity * math.cos(e_anom)  # >= 1 - e > 0
        delta = f / fp
        e_anom -= delta
        iterations += 1
        if abs(delta) < tol:
            converged = True
            break

    return KeplerSolution(sign * e_anom, iterations, converged)


def solve_eccentric_anomaly(
    mean_anomaly_rad: float,
    eccentricity: float,
    tol: float = KEPLER_TOLERANCE,
    max_iter: int = KEPLER_MAX_ITERATIONS,
) -> float:
    """Return the eccentric anomaly for ``mean_anomaly_rad``.

    Emits a ConvergenceWarning instead of failing when the iteration cap is
    reached; the best estimate is still returned.
    """
    solution = solve_kepler(mean_anomaly_rad, eccentricity, tol, max_iter)
    if not solution.converged:
        logger.warning(
            "Kepler solve hit %d iterations (M=%.6f, e=%.6f)",
            solution.iterations, mean_anomaly_rad, eccentricity,
        )
        warnings.warn(
            f"Kepler's equation did not converge within {max_iter} iterations "
            f"(M={mean_anomaly_rad:.6f}, e={eccentricity:.6f})",
            ConvergenceWarning,
            stacklevel=2,
        )
    return solution.eccentric_anomaly


def solve_eccentric_anomaly_array(
    mean_anomaly_rad: NDArray[np.float64],
    eccentricity: NDArray[np.float64] | float,
    tol: float = KEPLER_TOLERANCE,
    max_iter: int = KEPLER_MAX_ITERATIONS,
) -> NDArray[np.float64]:
    """Vectorized Newton solve over arrays of mean anomalies.

    ``eccentricity`` may be a scalar or an array broadcastable against the
    mean anomalies. Same tolerance, cap and warning contract as
    :func:`solve_eccentric_anomaly`.
    """
    m = np.asarray(mean_anomaly_rad, dtype=np.float64)
    e = np.broadcast_to(np.asarray(eccentricity, dtype=np.float64), m.shape)
    if e.size and (np.any(e < 0.0) or np.any(e >= 1.0)):
        logger.error("Eccentricity outside [0, 1) in batch solve")
        raise InvalidInputError("Eccentricity must lie in [0, 1) for every element set")

    m = np.remainder(m + np.pi, 2.0 * np.pi) - np.pi
    sign = np.where(m < 0.0, -1.0, 1.0)
    m = np.abs(m)

    e_anom = np.where(e >= HIGH_ECCENTRICITY, np.pi, m)
    delta = np.zeros_like(m)
    for _ in range(max_iter):
        delta = (e_anom - e * np.sin(e_anom) - m) / (1.0 - e * np.cos(e_anom))
        e_anom = e_anom - delta
        if not np.any(np.abs(delta) >= tol):
            break
    else:
        if np.any(np.abs(delta) >= tol):
            n_bad = int(np.count_nonzero(np.abs(delta) >= tol))
            logger.warning("Batch Kepler solve: %d/%d values did not converge", n_bad, m.size)
            warnings.warn(
                f"Kepler's equation did not converge for {n_bad} of {m.size} values",
                ConvergenceWarning,
                stacklevel=2,
            )

    return sign * e_anom


def true_anomaly(eccentric_anomaly_rad: float, eccentricity: float) -> float:
    """Convert eccentric anomaly to true anomaly.

    ν = 2·atan2(√(1+e)·sin(E/2), √(1−e)·cos(E/2)); square-root arguments
    are clamped at zero so e → 1 degrades instead of producing NaN.
    """
    half = 0.5 * eccentric_anomaly_rad
    return 2.0 * math.atan2(
        math.sqrt(max(0.0, 1.0 + eccentricity)) * math.sin(half),
        math.sqrt(max(0.0, 1.0 - eccentricity)) * math.cos(half),
    )


def true_anomaly_array(
    eccentric_anomaly_rad: NDArray[np.float64],
    eccentricity: NDArray[np.float64] | float,
) -> NDArray[np.float64]:
    """Vectorized :func:`true_anomaly`."""
    half = 0.5 * np.asarray(eccentric_anomaly_rad, dtype=np.float64)
    e = np.asarray(eccentricity, dtype=np.float64)
    return 2.0 * np.arctan2(
        np.sqrt(np.maximum(0.0, 1.0 + e)) * np.sin(half),
        np.sqrt(np.maximum(0.0, 1.0 - e)) * np.cos(half),
    )


def mean_anomaly_from_true(true_anomaly_rad: float, eccentricity: float) -> float:
    """Inverse conversion: true anomaly to mean anomaly, in (-π, π]."""
    half = 0.5 * true_anomaly_rad
    e_anom = 2.0 * math.atan2(
        math.sqrt(max(0.0, 1.0 - eccentricity)) * math.sin(half),
        math.sqrt(max(0.0, 1.0 + eccentricity)) * math.cos(half),
    )
    return normalize_angle(e_anom - eccentricity * math.sin(e_anom))
