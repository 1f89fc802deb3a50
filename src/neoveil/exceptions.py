"""Errors and warnings raised by NEOVeil."""

from __future__ import annotations


class NEOVeilError(Exception):
    """Base class for NEOVeil errors."""


class InvalidInputError(NEOVeilError, ValueError):
    """Malformed orbital elements or non-positive physical quantities.

    Subclasses ValueError so callers that already guard numeric input
    with ``except ValueError`` keep working.
    """


class ConvergenceWarning(RuntimeWarning):
    """Kepler's equation did not reach the target tolerance.

    The returned anomaly is still usable but should be treated as
    low-confidence.
    """


class DegenerateTrajectoryWarning(RuntimeWarning):
    """A collision orbit could not satisfy the intersection constraint exactly."""
