"""Threat assessment for near-Earth objects.

Combines the impact scaling laws with a miss-distance heuristic to classify
and rank a catalog of objects. Large catalogs are processed in fixed-size
batches so a host application can interleave other work or cancel between
batches.
"""

from __future__ import annotations

import asyncio
import logging
import math
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Iterator, Sequence

import numpy as np

from neoveil.core.elements import EARTH_ELEMENTS, OrbitalElements
from neoveil.core.impact import ImpactPhysicsResult, RiskLevel, compute_impact
from neoveil.core.propagation import position
from neoveil.core.screening import closest_approach
from neoveil.exceptions import InvalidInputError
from neoveil.utils.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DENSITY_KG_M3,
    DEFAULT_IMPACT_ANGLE_DEG,
    DEFAULT_IMPACT_VELOCITY_KM_S,
    DEFAULT_SCAN_STEP_DAYS,
    DEFAULT_SCAN_WINDOW_DAYS,
    EARTH_RADIUS_AU,
    J2000_EPOCH,
    MAX_EVACUATION_RADIUS_KM,
    POPULATION_DENSITY_PER_KM2,
    REFERENCE_DIAMETER_M,
    REMOTE_PROBABILITY,
    SECONDS_PER_DAY,
)

logger = logging.getLogger(__name__)


class ThreatLevel(Enum):
    """Threat classes, lowest first, with display color and description."""

    LOW = ("low", "#32CD32", "Low threat - Minimal risk")
    MODERATE = ("moderate", "#FFA500", "Moderate threat - Local damage possible")
    HIGH = ("high", "#FF4500", "Significant damage - City-level destruction possible")
    EXTREME = ("extreme", "#FF0000", "Regional devastation - Continental damage possible")
    EXTINCTION = ("extinction", "#8B0000", "Global catastrophe - Mass extinction event possible")

    def __init__(self, label: str, color: str, description: str) -> None:
        self.label = label
        self.color = color
        self.description = description

    @property
    def priority(self) -> int:
        """1 for LOW up to 5 for EXTINCTION."""
        return list(ThreatLevel).index(self) + 1


class MitigationStrategy(Enum):
    """Mitigation strategies in their fixed presentation order."""

    KINETIC_IMPACTOR = ("Kinetic Impactor", 1825.0)
    GRAVITY_TRACTOR = ("Gravity Tractor", 3650.0)
    NUCLEAR_STANDOFF = ("Nuclear Standoff Burst", 365.0)
    EVACUATION_ONLY = ("Evacuation Only", 0.0)

    def __init__(self, label: str, min_lead_days: float) -> None:
        self.label = label
        self.min_lead_days = min_lead_days


@dataclass(frozen=True)
class CloseApproach:
    """A recorded close approach of an object to Earth.

    Attributes:
        time_days: Time of the approach in days since J2000.0.
        relative_velocity_km_s: Speed relative to Earth in km/s.
        miss_distance_au: Miss distance in AU.
    """

    time_days: float
    relative_velocity_km_s: float
    miss_distance_au: float


@dataclass(frozen=True)
class ObjectRecord:
    """Orbital and physical data for one object.

    Attributes:
        object_id: Catalog identifier.
        name: Display name.
        elements: Heliocentric orbital elements.
        diameter_min_m: Lower diameter estimate in meters.
        diameter_max_m: Upper diameter estimate in meters.
        close_approaches: Recorded close approaches to Earth.
        is_potentially_hazardous: Catalog hazard flag.
    """

    object_id: str
    name: str
    elements: OrbitalElements
    diameter_min_m: float
    diameter_max_m: float
    close_approaches: tuple[CloseApproach, ...] = ()
    is_potentially_hazardous: bool = False

    def __post_init__(self) -> None:
        for key in ("diameter_min_m", "diameter_max_m"):
            value = getattr(self, key)
            if not math.isfinite(value) or value <= 0:
                logger.error("Invalid %s=%r for object %s", key, value, self.object_id)
                raise InvalidInputError(f"{key} must be a positive finite number, got {value!r}")
        if self.diameter_min_m > self.diameter_max_m:
            raise InvalidInputError(
                f"diameter_min_m ({self.diameter_min_m}) exceeds diameter_max_m ({self.diameter_max_m})"
            )
        # accept any iterable, store a tuple
        object.__setattr__(self, "close_approaches", tuple(self.close_approaches))

    @property
    def diameter_m(self) -> float:
        """Midpoint of the diameter estimate."""
        return (self.diameter_min_m + self.diameter_max_m) / 2.0

    @property
    def nearest_approach(self) -> CloseApproach | None:
        """The recorded approach with the smallest miss distance."""
        if not self.close_approaches:
            return None
        return min(self.close_approaches, key=lambda ca: ca.miss_distance_au)


@dataclass(frozen=True)
class ThreatAssessment:
    """Outcome of assessing one object. Built once, never mutated."""

    record: ObjectRecord
    impact_probability: float
    threat_level: ThreatLevel
    impact_date: datetime | None
    impact_location: tuple[float, float] | None
    physics: ImpactPhysicsResult
    miss_distance_au: float
    affected_population: int
    evacuation_radius_km: float
    mitigation_options: tuple[str, ...]
    time_to_impact_days: float

    @property
    def object_id(self) -> str:
        return self.record.object_id

    @property
    def tnt_equivalent_mt(self) -> float:
        return self.physics.tnt_equivalent_mt

    @property
    def kinetic_energy_j(self) -> float:
        return self.physics.kinetic_energy_j

    @property
    def crater_diameter_m(self) -> float:
        return self.physics.crater_diameter_m

    @property
    def risk_level(self) -> RiskLevel:
        return self.physics.risk_level


class CancellationToken:
    """Thread-safe flag checked at every batch boundary."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class AssessmentBatch:
    """Results for one fixed-size slice of the input."""

    index: int
    start: int
    assessments: list[ThreatAssessment]
    failed_ids: list[str]


@dataclass
class AssessmentRun:
    """Results of a (possibly cancelled) batched run, in input order."""

    assessments: list[ThreatAssessment] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)
    cancelled: bool = False
    batches_completed: int = 0


def days_since_j2000(when: datetime) -> float:
    """Convert a datetime (naive means UTC) to days since J2000.0."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return (when - J2000_EPOCH).total_seconds() / SECONDS_PER_DAY


def impact_probability(miss_distance_au: float, diameter_max_m: float) -> float:
    """Heuristic impact probability in [0, 1].

    ``1 - (1 - min(1, R_earth / miss))^w`` with ``w = 1 + D_max / 1000 m``:
    decreasing in miss distance, increasing in object size.
    """
    if miss_distance_au <= EARTH_RADIUS_AU:
        return 1.0
    base = EARTH_RADIUS_AU / miss_distance_au
    weight = 1.0 + max(0.0, diameter_max_m) / REFERENCE_DIAMETER_M
    return min(1.0, max(0.0, -math.expm1(weight * math.log1p(-base))))


def classify_threat(probability: float, energy_mt: float) -> ThreatLevel:
    """Threat level from energy tiers and probability.

    Energy tiers (>1e6 Mt, >1e4 Mt, >100 Mt) drop one level when the
    probability is remote.
    """
    if energy_mt > 1e6:
        level = ThreatLevel.EXTINCTION
    elif energy_mt > 1e4:
        level = ThreatLevel.EXTREME
    elif energy_mt > 100:
        level = ThreatLevel.HIGH
    elif probability > 0.01:
        return ThreatLevel.MODERATE
    else:
        return ThreatLevel.LOW

    if probability < REMOTE_PROBABILITY:
        levels = list(ThreatLevel)
        level = levels[levels.index(level) - 1]
    return level


def mitigation_options(time_to_impact_days: float) -> tuple[str, ...]:
    """Feasible strategies for the lead time, in fixed order.

    Evacuation is offered only when no deflection option is feasible.
    """
    deflection = [
        s.label
        for s in MitigationStrategy
        if s is not MitigationStrategy.EVACUATION_ONLY and time_to_impact_days >= s.min_lead_days
    ]
    if not deflection:
        return (MitigationStrategy.EVACUATION_ONLY.label,)
    return tuple(deflection)


def evacuation_radius_km(energy_mt: float) -> float:
    return min(50.0 * math.sqrt(max(0.0, energy_mt) / 100.0), MAX_EVACUATION_RADIUS_KM)


def _impact_location(elements: OrbitalElements, time_days: float, earth: np.ndarray) -> tuple[float, float]:
    relative = position(elements, time_days) - earth
    dist = float(np.linalg.norm(relative))
    if dist == 0.0:
        return 0.0, 0.0
    lat = math.degrees(math.asin(max(-1.0, min(1.0, relative[2] / dist))))
    lon = math.degrees(math.atan2(relative[1], relative[0]))
    return lat, lon


def assess_object(
    record: ObjectRecord,
    now: datetime | None = None,
    is_ocean: bool = False,
    scan_window_days: float = DEFAULT_SCAN_WINDOW_DAYS,
    scan_step_days: float = DEFAULT_SCAN_STEP_DAYS,
    density_kg_m3: float = DEFAULT_DENSITY_KG_M3,
    angle_deg: float = DEFAULT_IMPACT_ANGLE_DEG,
) -> ThreatAssessment:
    """Assess a single object.

    Args:
        record: The object to assess.
        now: Assessment time; defaults to the current UTC time. Pass it
            explicitly for reproducible results.
        is_ocean: Whether to model an ocean impact.
        scan_window_days: Length of the Earth closest-approach scan.
        scan_step_days: Sampling step of the scan.
        density_kg_m3: Impactor density.
        angle_deg: Impact angle from horizontal.

    Returns:
        ThreatAssessment for the object.

    Raises:
        InvalidInputError: If the record cannot be assessed.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now_days = days_since_j2000(now)

    nearest = record.nearest_approach
    velocity_km_s = nearest.relative_velocity_km_s if nearest else DEFAULT_IMPACT_VELOCITY_KM_S
    physics = compute_impact(record.diameter_m, velocity_km_s, density_kg_m3, angle_deg, is_ocean)

    approach = closest_approach(
        EARTH_ELEMENTS, record.elements, scan_window_days, scan_step_days, start_days=now_days
    )
    miss = approach.distance_au
    if record.close_approaches:
        miss = min(miss, min(ca.miss_distance_au for ca in record.close_approaches))

    probability = impact_probability(miss, record.diameter_max_m)
    level = classify_threat(probability, physics.tnt_equivalent_mt)

    time_to_impact = approach.time_days
    impact_time = now_days + time_to_impact
    impact_date = J2000_EPOCH + timedelta(days=impact_time)
    location = None
    if approach.distance_au <= EARTH_RADIUS_AU:
        location = _impact_location(record.elements, impact_time, approach.position_au)

    radius = 0.0
    population = 0
    if location is not None:
        radius = evacuation_radius_km(physics.tnt_equivalent_mt)
        population = int(math.pi * radius ** 2 * POPULATION_DENSITY_PER_KM2)

    logger.debug(
        "Assessed %s: miss=%.4g AU p=%.3g level=%s energy=%.3g Mt",
        record.object_id, miss, probability, level.label, physics.tnt_equivalent_mt,
    )
    return ThreatAssessment(
        record=record,
        impact_probability=probability,
        threat_level=level,
        impact_date=impact_date,
        impact_location=location,
        physics=physics,
        miss_distance_au=miss,
        affected_population=population,
        evacuation_radius_km=radius,
        mitigation_options=mitigation_options(time_to_impact),
        time_to_impact_days=time_to_impact,
    )


def _assess_or_skip(record: ObjectRecord, now: datetime, options: dict) -> ThreatAssessment | None:
    try:
        return assess_object(record, now=now, **options)
    except InvalidInputError as exc:
        logger.warning("No assessment available for object %s: %s", record.object_id, exc)
        return None


def assess(objects: Iterable[ObjectRecord], now: datetime | None = None, **options) -> list[ThreatAssessment]:
    """Assess every object, preserving input order.

    Objects that fail validation are skipped and logged. Keyword options are
    passed through to :func:`assess_object`.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    results = []
    for record in objects:
        assessment = _assess_or_skip(record, now, options)
        if assessment is not None:
            results.append(assessment)
    return results


def rank_assessments(assessments: Iterable[ThreatAssessment]) -> list[ThreatAssessment]:
    """Sort by threat level (highest first), then probability descending.

    The sort is stable, so ties keep their input order.
    """
    return sorted(assessments, key=lambda a: (-a.threat_level.priority, -a.impact_probability))


def iter_assessment_batches(
    objects: Sequence[ObjectRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
    cancel: CancellationToken | None = None,
    now: datetime | None = None,
    executor: Executor | None = None,
    **options,
) -> Iterator[AssessmentBatch]:
    """Assess objects one fixed-size batch at a time.

    The generator checks ``cancel`` before each batch and stops early when
    it is set. With an ``executor`` the objects of a batch are assessed
    concurrently; results keep input order either way.

    Raises:
        InvalidInputError: If ``batch_size`` is less than 1.
    """
    if batch_size < 1:
        logger.error("Invalid batch size %r", batch_size)
        raise InvalidInputError(f"Batch size must be at least 1, got {batch_size!r}")
    if now is None:
        now = datetime.now(timezone.utc)

    objects = list(objects)
    for index, start in enumerate(range(0, len(objects), batch_size)):
        if cancel is not None and cancel.cancelled:
            logger.info("Assessment cancelled after %d batches", index)
            return
        chunk = objects[start:start + batch_size]
        if executor is not None:
            results = list(executor.map(lambda r: _assess_or_skip(r, now, options), chunk))
        else:
            results = [_assess_or_skip(r, now, options) for r in chunk]

        yield AssessmentBatch(
            index=index,
            start=start,
            assessments=[a for a in results if a is not None],
            failed_ids=[r.object_id for r, a in zip(chunk, results) if a is None],
        )


def _total_batches(count: int, batch_size: int) -> int:
    return (count + batch_size - 1) // batch_size if batch_size > 0 else 0


def _collect(run: AssessmentRun, batch: AssessmentBatch) -> None:
    run.assessments.extend(batch.assessments)
    run.failed_ids.extend(batch.failed_ids)
    run.batches_completed += 1


def run_assessment(
    objects: Sequence[ObjectRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
    cancel: CancellationToken | None = None,
    max_workers: int | None = None,
    now: datetime | None = None,
    **options,
) -> AssessmentRun:
    """Batched assessment with optional cancellation and worker pool.

    Args:
        objects: Records to assess.
        batch_size: Objects per batch.
        cancel: Token checked between batches.
        max_workers: When given, each batch is fanned out over a thread pool
            of this size; otherwise batches run in the calling thread.
        now: Assessment time shared by every object.
        **options: Passed through to :func:`assess_object`.

    Returns:
        AssessmentRun with assessments in input order. ``cancelled`` is True
        when the run stopped before the last batch.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    objects = list(objects)
    run = AssessmentRun()

    if max_workers is not None:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            for batch in iter_assessment_batches(objects, batch_size, cancel, now, executor=pool, **options):
                _collect(run, batch)
    else:
        for batch in iter_assessment_batches(objects, batch_size, cancel, now, **options):
            _collect(run, batch)

    run.cancelled = run.batches_completed < _total_batches(len(objects), batch_size)
    logger.info(
        "Assessment run: %d assessed, %d failed, %d batches%s",
        len(run.assessments), len(run.failed_ids), run.batches_completed,
        " (cancelled)" if run.cancelled else "",
    )
    return run


async def assess_async(
    objects: Sequence[ObjectRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
    cancel: CancellationToken | None = None,
    now: datetime | None = None,
    **options,
) -> AssessmentRun:
    """Batched assessment that yields to the event loop between batches."""
    if now is None:
        now = datetime.now(timezone.utc)
    objects = list(objects)
    run = AssessmentRun()

    for batch in iter_assessment_batches(objects, batch_size, cancel, now, **options):
        _collect(run, batch)
        await asyncio.sleep(0)

    run.cancelled = run.batches_completed < _total_batches(len(objects), batch_size)
    logger.info("Async assessment complete: %d/%d objects", len(run.assessments), len(objects))
    return run
