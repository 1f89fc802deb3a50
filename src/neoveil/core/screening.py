"""Close-approach screening: sample two trajectories and find intersection events.

Sampling is uniform and coarse. Both ``step_days`` and ``threshold_au`` are
caller-supplied: halving the step doubles the number of propagations and
tightens the timing of every event by the same factor. There is no hidden
refinement in :func:`find_intersections`; :func:`closest_approach` offers an
opt-in scipy polish for the single global minimum.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import minimize_scalar

from neoveil.core.elements import EARTH_ELEMENTS, OrbitalElements
from neoveil.core.propagation import position, propagate_positions
from neoveil.exceptions import InvalidInputError
from neoveil.utils.constants import (
    DEFAULT_CLOSE_APPROACH_AU,
    DEFAULT_SEARCH_STEP_DAYS,
    DEFAULT_SEARCH_WINDOW_DAYS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntersectionEvent:
    """A close approach between two trajectories.

    Attributes:
        time_days: Time of the event in days from the search start.
        position_au: Position of the first orbit at that time, in AU.
        distance_au: Separation between the two bodies in AU.
    """

    time_days: float
    position_au: NDArray[np.float64]
    distance_au: float


def _sample_times(window_days: float, step_days: float, start_days: float) -> NDArray[np.float64]:
    if not math.isfinite(step_days) or step_days <= 0:
        logger.error("Invalid search step %r", step_days)
        raise InvalidInputError(f"Search step must be positive, got {step_days!r}")
    if not math.isfinite(window_days) or window_days < 0:
        logger.error("Invalid search window %r", window_days)
        raise InvalidInputError(f"Search window must be non-negative, got {window_days!r}")
    if not math.isfinite(start_days):
        raise InvalidInputError(f"Search start must be finite, got {start_days!r}")

    steps = int(math.floor(window_days / step_days + 1e-9))
    offsets = np.arange(steps + 1, dtype=np.float64) * step_days
    if window_days - offsets[-1] > 1e-9 * max(1.0, window_days):
        # step does not divide the window; close the grid on its end
        offsets = np.append(offsets, window_days)
    return offsets


def sample_distances(
    elements_a: OrbitalElements,
    elements_b: OrbitalElements,
    window_days: float = DEFAULT_SEARCH_WINDOW_DAYS,
    step_days: float = DEFAULT_SEARCH_STEP_DAYS,
    start_days: float = 0.0,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Sample the separation of two orbits on a uniform time grid.

    Args:
        elements_a: First orbit.
        elements_b: Second orbit.
        window_days: Length of the window in days.
        step_days: Sampling step in days. The last sample always falls on
            the window end.
        start_days: Window start in days since J2000.0.

    Returns:
        Tuple of (offsets from start in days, distances in AU), both shape (m,).
    """
    offsets = _sample_times(window_days, step_days, start_days)
    times = start_days + offsets
    pos_a = propagate_positions(elements_a, times)
    pos_b = propagate_positions(elements_b, times)
    distances = np.linalg.norm(pos_a - pos_b, axis=1)
    logger.debug("Sampled %d steps over %.1f days (step %.3f days)", len(times), window_days, step_days)
    return offsets, distances


def find_intersections(
    elements_a: OrbitalElements,
    elements_b: OrbitalElements,
    window_days: float = DEFAULT_SEARCH_WINDOW_DAYS,
    step_days: float = DEFAULT_SEARCH_STEP_DAYS,
    threshold_au: float = DEFAULT_CLOSE_APPROACH_AU,
    start_days: float = 0.0,
) -> list[IntersectionEvent]:
    """Find close-approach events between two orbits.

    Every sample whose separation is below ``threshold_au`` is a candidate.
    Runs of adjacent candidates belong to the same approach and are
    coalesced into one event, the sample with minimum distance.

    Args:
        elements_a: First orbit (event positions are reported for this one).
        elements_b: Second orbit.
        window_days: Length of the search window in days.
        step_days: Sampling step in days.
        threshold_au: Close-approach threshold in AU.
        start_days: Window start in days since J2000.0.

    Returns:
        Events in time order. Empty when no sample is below the threshold.

    Raises:
        InvalidInputError: If the step or threshold is not positive, or the
            window is negative.
    """
    if not math.isfinite(threshold_au) or threshold_au <= 0:
        logger.error("Invalid close-approach threshold %r", threshold_au)
        raise InvalidInputError(f"Close-approach threshold must be positive, got {threshold_au!r}")

    offsets, distances = sample_distances(elements_a, elements_b, window_days, step_days, start_days)
    candidates = np.flatnonzero(distances < threshold_au)
    if candidates.size == 0:
        logger.debug("No samples below %.4g AU", threshold_au)
        return []

    # split into runs of consecutive sample indices
    breaks = np.flatnonzero(np.diff(candidates) > 1) + 1
    events = []
    for run in np.split(candidates, breaks):
        best = int(run[np.argmin(distances[run])])
        t = float(offsets[best])
        events.append(
            IntersectionEvent(
                time_days=t,
                position_au=position(elements_a, start_days + t),
                distance_au=float(distances[best]),
            )
        )

    logger.debug("find_intersections: %d candidate samples -> %d events", candidates.size, len(events))
    return events


def closest_approach(
    elements_a: OrbitalElements,
    elements_b: OrbitalElements,
    window_days: float = DEFAULT_SEARCH_WINDOW_DAYS,
    step_days: float = DEFAULT_SEARCH_STEP_DAYS,
    start_days: float = 0.0,
    refine: bool = False,
) -> IntersectionEvent:
    """Global minimum separation of two orbits over a window.

    Args:
        elements_a: First orbit.
        elements_b: Second orbit.
        window_days: Length of the window in days.
        step_days: Sampling step in days.
        start_days: Window start in days since J2000.0.
        refine: If True, polish the sampled minimum with a bounded scalar
            minimization inside the neighbouring steps.

    Returns:
        The closest sampled (or refined) approach.
    """
    offsets, distances = sample_distances(elements_a, elements_b, window_days, step_days, start_days)
    best = int(np.argmin(distances))
    t_best = float(offsets[best])
    d_best = float(distances[best])

    if refine and len(offsets) > 1:
        lo = max(0.0, t_best - step_days)
        hi = min(float(offsets[-1]), t_best + step_days)
        buf_a = np.empty(3)
        buf_b = np.empty(3)

        def separation(t: float) -> float:
            position(elements_a, start_days + t, buf_a)
            position(elements_b, start_days + t, buf_b)
            return float(np.linalg.norm(buf_a - buf_b))

        res = minimize_scalar(separation, bounds=(lo, hi), method="bounded", options={"xatol": 1e-6})
        if res.success and res.fun < d_best:
            t_best, d_best = float(res.x), float(res.fun)

    return IntersectionEvent(
        time_days=t_best,
        position_au=position(elements_a, start_days + t_best),
        distance_au=d_best,
    )


def find_earth_intersections(
    elements: OrbitalElements,
    window_days: float = DEFAULT_SEARCH_WINDOW_DAYS,
    step_days: float = DEFAULT_SEARCH_STEP_DAYS,
    threshold_au: float = DEFAULT_CLOSE_APPROACH_AU,
    start_days: float = 0.0,
) -> list[IntersectionEvent]:
    """Close approaches between an orbit and Earth.

    Event positions are Earth's position at the event time.
    """
    return find_intersections(EARTH_ELEMENTS, elements, window_days, step_days, threshold_au, start_days)
