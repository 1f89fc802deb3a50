"""
NEOVeil — Near-Earth object orbits and impact threat assessment for Python.

Open-source library for propagating heliocentric Keplerian orbits,
searching for close approaches with Earth, estimating impact effects,
and ranking a catalog of objects by threat. Every formula is an
explicit, documented approximation.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from neoveil.exceptions import NEOVeilError, InvalidInputError, ConvergenceWarning, DegenerateTrajectoryWarning
from neoveil.core.kepler import solve_kepler, solve_eccentric_anomaly, true_anomaly, KeplerSolution
from neoveil.core.elements import OrbitalElements, EARTH_ELEMENTS
from neoveil.core.propagation import (
    position,
    velocity,
    earth_position,
    propagate,
    propagate_positions,
    propagate_batch,
    ElementBatch,
    StateVector,
)
from neoveil.core.screening import (
    sample_distances,
    find_intersections,
    find_earth_intersections,
    closest_approach,
    IntersectionEvent,
)
from neoveil.core.collision import build_collision_orbit, collision_orbit_position, CollisionOrbit
from neoveil.core.impact import compute_impact, compare_impacts, ImpactPhysicsResult, ImpactComparison, RiskLevel
from neoveil.core.threat import (
    assess,
    assess_object,
    assess_async,
    rank_assessments,
    run_assessment,
    iter_assessment_batches,
    AssessmentBatch,
    AssessmentRun,
    CancellationToken,
    CloseApproach,
    MitigationStrategy,
    ObjectRecord,
    ThreatAssessment,
    ThreatLevel,
)
from neoveil.core.deflection import plan_deflection, DeflectionMethod, DeflectionResult
from neoveil.data.neows import parse_neows_object, parse_neows_objects

__all__ = [
    "__version__",
    "NEOVeilError",
    "InvalidInputError",
    "ConvergenceWarning",
    "DegenerateTrajectoryWarning",
    "solve_kepler",
    "solve_eccentric_anomaly",
    "true_anomaly",
    "KeplerSolution",
    "OrbitalElements",
    "EARTH_ELEMENTS",
    "position",
    "velocity",
    "earth_position",
    "propagate",
    "propagate_positions",
    "propagate_batch",
    "ElementBatch",
    "StateVector",
    "sample_distances",
    "find_intersections",
    "find_earth_intersections",
    "closest_approach",
    "IntersectionEvent",
    "build_collision_orbit",
    "collision_orbit_position",
    "CollisionOrbit",
    "compute_impact",
    "compare_impacts",
    "ImpactPhysicsResult",
    "ImpactComparison",
    "RiskLevel",
    "assess",
    "assess_object",
    "assess_async",
    "rank_assessments",
    "run_assessment",
    "iter_assessment_batches",
    "AssessmentBatch",
    "AssessmentRun",
    "CancellationToken",
    "CloseApproach",
    "MitigationStrategy",
    "ObjectRecord",
    "ThreatAssessment",
    "ThreatLevel",
    "plan_deflection",
    "DeflectionMethod",
    "DeflectionResult",
    "parse_neows_object",
    "parse_neows_objects",
]
