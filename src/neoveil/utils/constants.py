from __future__ import annotations

"""Physical constants and default thresholds for heliocentric orbits and impacts.

Distances in AU and times in days unless otherwise noted.
"""

import math
from datetime import datetime, timezone

# --- Units ---
AU_KM: float = 149_597_870.7
"""Astronomical unit in km."""

SECONDS_PER_DAY: float = 86400.0
"""Seconds in one day."""

J2000_JD: float = 2451545.0
"""Julian date of the J2000.0 epoch."""

J2000_EPOCH: datetime = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
"""The J2000.0 epoch as a UTC datetime."""

TNT_J_PER_MT: float = 4.184e15
"""Energy of one megaton of TNT in joules."""

# --- Sun / Earth ---
GAUSSIAN_GRAVITATIONAL_CONSTANT: float = 0.01720209895
"""Gaussian gravitational constant k in rad/day (AU, day, solar-mass units)."""

SUN_MU_AU3_DAY2: float = GAUSSIAN_GRAVITATIONAL_CONSTANT ** 2
"""Heliocentric gravitational parameter (GM) in AU³/day²."""

EARTH_RADIUS_KM: float = 6371.0
"""Mean radius of Earth in km."""

EARTH_RADIUS_AU: float = EARTH_RADIUS_KM / AU_KM
"""Mean radius of Earth in AU."""

EARTH_SEMI_MAJOR_AXIS_AU: float = 1.00000011
EARTH_ECCENTRICITY: float = 0.01671022
EARTH_INCLINATION_DEG: float = 0.00005
EARTH_ASCENDING_NODE_DEG: float = 0.0
EARTH_ARG_PERIAPSIS_DEG: float = 102.94719
EARTH_MEAN_MOTION_DEG_PER_DAY: float = math.degrees(GAUSSIAN_GRAVITATIONAL_CONSTANT)
"""Earth's mean motion, ~0.9856 deg/day (period ~365.2569 days)."""

# --- Kepler solver ---
KEPLER_TOLERANCE: float = 1e-8
"""Convergence tolerance on |ΔE| in radians."""

KEPLER_MAX_ITERATIONS: int = 30
"""Hard iteration cap before a ConvergenceWarning is emitted."""

HIGH_ECCENTRICITY: float = 0.8
"""Above this eccentricity the solver starts from E0 = π."""

# --- Intersection search ---
DEFAULT_SEARCH_WINDOW_DAYS: float = 365.0 * 2
"""Default forward search window in days."""

DEFAULT_SEARCH_STEP_DAYS: float = 0.5
"""Default sampling step in days."""

DEFAULT_CLOSE_APPROACH_AU: float = 0.01
"""Default close-approach threshold in AU."""

# --- Collision orbit targeting ---
MIN_LEAD_TIME_DAYS: float = 1.0
"""Shortest lead time for which a collision orbit is built."""

COLLISION_TOLERANCE_AU: float = 0.01
"""Maximum allowed distance between the built orbit and Earth at the lead time."""

MAX_COLLISION_ECCENTRICITY: float = 0.95
"""Upper bound on the eccentricity of a synthetic collision orbit."""

# --- Impact physics ---
DEFAULT_DENSITY_KG_M3: float = 3000.0
"""Default bulk density for rocky asteroids."""

DEFAULT_IMPACT_ANGLE_DEG: float = 45.0
"""Default impact angle measured from horizontal."""

MIN_IMPACT_ANGLE_DEG: float = 1.0
"""Lower clamp for the impact angle."""

DEFAULT_OCEAN_DEPTH_M: float = 4000.0
"""Average ocean depth used by the tsunami model."""

MAX_TSUNAMI_HEIGHT_M: float = 300.0
"""Cap on the tsunami wave height."""

# --- Threat assessment ---
DEFAULT_IMPACT_VELOCITY_KM_S: float = 20.0
"""Typical NEO impact velocity used when no close approach is recorded."""

REFERENCE_DIAMETER_M: float = 1000.0
"""Diameter scale of the size bias in the impact probability heuristic."""

REMOTE_PROBABILITY: float = 1e-6
"""Below this impact probability energy-based threat tiers drop one level."""

DEFAULT_SCAN_WINDOW_DAYS: float = 365.0 * 10
"""Look-ahead window for the closest approach to Earth."""

DEFAULT_SCAN_STEP_DAYS: float = 7.0
"""Sampling step for the closest-approach scan."""

DEFAULT_BATCH_SIZE: int = 5
"""Objects assessed per cooperative batch."""

POPULATION_DENSITY_PER_KM2: float = 50.0
"""Average population density used for affected-population estimates."""

MAX_EVACUATION_RADIUS_KM: float = 2000.0
"""Cap on the evacuation radius."""
