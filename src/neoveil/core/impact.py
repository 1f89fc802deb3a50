"""Impact effects from impactor size and speed.

Every step is an explicit empirical scaling law. These are pedagogical
approximations kept for numeric reproducibility, not validated physics.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from neoveil.exceptions import InvalidInputError
from neoveil.utils.constants import (
    DEFAULT_DENSITY_KG_M3,
    DEFAULT_IMPACT_ANGLE_DEG,
    DEFAULT_OCEAN_DEPTH_M,
    MAX_TSUNAMI_HEIGHT_M,
    MIN_IMPACT_ANGLE_DEG,
    TNT_J_PER_MT,
)

logger = logging.getLogger(__name__)


class RiskLevel(Enum):
    """Impact risk level derived from TNT-equivalent energy."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CATASTROPHIC = "catastrophic"


@dataclass(frozen=True)
class ImpactPhysicsResult:
    """Physical consequences of a single impact.

    Attributes:
        mass_kg: Impactor mass.
        kinetic_energy_j: Kinetic energy at impact in joules.
        tnt_equivalent_mt: Energy in megatons of TNT.
        crater_diameter_m: Final crater diameter in meters.
        crater_depth_m: Crater depth in meters.
        seismic_magnitude: Equivalent Richter magnitude (>= 0).
        airblast_radius_km: Severe airblast damage radius.
        thermal_radius_km: Third-degree burn radius.
        tsunami_height_m: Wave height for ocean impacts, 0 on land.
        ejecta_radius_km: Ejecta blanket radius.
        risk_level: Risk band from the energy.
        description: Human-readable summary of the effects.
    """

    mass_kg: float
    kinetic_energy_j: float
    tnt_equivalent_mt: float
    crater_diameter_m: float
    crater_depth_m: float
    seismic_magnitude: float
    airblast_radius_km: float
    thermal_radius_km: float
    tsunami_height_m: float
    ejecta_radius_km: float
    risk_level: RiskLevel
    description: str


@dataclass(frozen=True)
class ImpactComparison:
    """Percentage reductions between two impact scenarios (floored at 0)."""

    energy_reduction_pct: float
    crater_reduction_pct: float
    casualty_reduction_pct: float


def _require_positive(name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        logger.error("Invalid impact input %s=%r", name, value)
        raise InvalidInputError(f"{name} must be a positive finite number, got {value!r}")


def mass_from_diameter(diameter_m: float, density_kg_m3: float = DEFAULT_DENSITY_KG_M3) -> float:
    """Mass of a sphere of ``diameter_m`` in kg."""
    radius = diameter_m / 2.0
    return (4.0 / 3.0) * math.pi * radius ** 3 * density_kg_m3


def kinetic_energy(mass_kg: float, velocity_km_s: float) -> float:
    """KE = ½·m·v² in joules, velocity given in km/s."""
    return 0.5 * mass_kg * (velocity_km_s * 1000.0) ** 2


def energy_to_megatons(energy_j: float) -> float:
    return energy_j / TNT_J_PER_MT


def clamp_angle(angle_deg: float) -> float:
    """Clamp an impact angle (from horizontal) to [1°, 90°]."""
    if not math.isfinite(angle_deg):
        return DEFAULT_IMPACT_ANGLE_DEG
    return max(MIN_IMPACT_ANGLE_DEG, min(90.0, angle_deg))


def crater_size(energy_mt: float, angle_deg: float = DEFAULT_IMPACT_ANGLE_DEG) -> tuple[float, float]:
    """Crater (diameter, depth) in meters.

    D(km) ≈ 0.4·Mt^0.33, reduced by sin(angle)^(1/3) for oblique impacts;
    depth is a fifth of the diameter.
    """
    angle_factor = math.sin(math.radians(clamp_angle(angle_deg))) ** (1.0 / 3.0)
    diameter = 0.4 * energy_mt ** 0.33 * 1000.0 * angle_factor
    return diameter, diameter / 5.0


def seismic_magnitude(energy_j: float) -> float:
    """M ≈ 0.67·log10(E) − 5.87, floored at 0."""
    if energy_j <= 0:
        return 0.0
    return max(0.0, 0.67 * math.log10(energy_j) - 5.87)


def airblast_radius_km(energy_mt: float) -> float:
    """Severe damage radius (~20 psi overpressure), R ≈ 2.2·Mt^0.33."""
    return 2.2 * energy_mt ** 0.33


def thermal_radius_km(energy_mt: float) -> float:
    """Third-degree burn radius, R ≈ 1.5·Mt^0.41."""
    return 1.5 * energy_mt ** 0.41


def tsunami_height_m(energy_mt: float, is_ocean: bool, water_depth_m: float = DEFAULT_OCEAN_DEPTH_M) -> float:
    """H ≈ 0.1·√Mt·√(depth/1000), capped at 300 m; 0 for land impacts."""
    if not is_ocean:
        return 0.0
    height = 0.1 * math.sqrt(energy_mt) * math.sqrt(max(0.0, water_depth_m) / 1000.0)
    return min(height, MAX_TSUNAMI_HEIGHT_M)


def ejecta_radius_km(crater_diameter_m: float) -> float:
    """Ejecta extends ~2.5 crater radii."""
    return crater_diameter_m / 2.0 * 2.5 / 1000.0


def risk_level(energy_mt: float) -> RiskLevel:
    if energy_mt < 0.01:
        return RiskLevel.LOW
    if energy_mt < 1:
        return RiskLevel.MODERATE
    if energy_mt < 100:
        return RiskLevel.HIGH
    return RiskLevel.CATASTROPHIC


def impact_description(energy_mt: float) -> str:
    if energy_mt < 0.001:
        return "Airburst in atmosphere, minimal surface damage"
    elif energy_mt < 0.01:
        return "Local damage, similar to a small bomb"
    elif energy_mt < 1:
        return "Regional devastation, city-scale destruction"
    elif energy_mt < 100:
        return "Major regional catastrophe, country-scale effects"
    elif energy_mt < 10000:
        return "Continental devastation, global climate effects"
    else:
        return "Mass extinction event, global catastrophe"


def compute_impact(
    diameter_m: float,
    velocity_km_s: float,
    density_kg_m3: float = DEFAULT_DENSITY_KG_M3,
    angle_deg: float = DEFAULT_IMPACT_ANGLE_DEG,
    is_ocean: bool = False,
    water_depth_m: float = DEFAULT_OCEAN_DEPTH_M,
) -> ImpactPhysicsResult:
    """Compute all impact effects for one impactor.

    Args:
        diameter_m: Impactor diameter in meters.
        velocity_km_s: Impact velocity in km/s.
        density_kg_m3: Bulk density.
        angle_deg: Impact angle from horizontal, clamped to [1°, 90°].
        is_ocean: Whether the impact point is at sea.
        water_depth_m: Water depth for the tsunami model.

    Returns:
        ImpactPhysicsResult with every derived quantity.

    Raises:
        InvalidInputError: If diameter, velocity or density is not positive.
    """
    _require_positive("diameter_m", diameter_m)
    _require_positive("velocity_km_s", velocity_km_s)
    _require_positive("density_kg_m3", density_kg_m3)

    mass = mass_from_diameter(diameter_m, density_kg_m3)
    energy = kinetic_energy(mass, velocity_km_s)
    energy_mt = energy_to_megatons(energy)
    crater_d, crater_depth = crater_size(energy_mt, angle_deg)

    result = ImpactPhysicsResult(
        mass_kg=mass,
        kinetic_energy_j=energy,
        tnt_equivalent_mt=energy_mt,
        crater_diameter_m=crater_d,
        crater_depth_m=crater_depth,
        seismic_magnitude=seismic_magnitude(energy),
        airblast_radius_km=airblast_radius_km(energy_mt),
        thermal_radius_km=thermal_radius_km(energy_mt),
        tsunami_height_m=tsunami_height_m(energy_mt, is_ocean, water_depth_m),
        ejecta_radius_km=ejecta_radius_km(crater_d),
        risk_level=risk_level(energy_mt),
        description=impact_description(energy_mt),
    )
    logger.debug(
        "Impact d=%.1f m v=%.2f km/s: %.3g Mt, crater %.0f m, risk=%s",
        diameter_m, velocity_km_s, energy_mt, crater_d, result.risk_level.value,
    )
    return result


def compare_impacts(before: ImpactPhysicsResult, after: ImpactPhysicsResult) -> ImpactComparison:
    """Compare a baseline impact with a mitigated one.

    Casualty reduction is taken as proportional to the airblast area.
    """

    def reduction(old: float, new: float) -> float:
        if old <= 0:
            return 0.0
        return max(0.0, (old - new) / old * 100.0)

    return ImpactComparison(
        energy_reduction_pct=reduction(before.tnt_equivalent_mt, after.tnt_equivalent_mt),
        crater_reduction_pct=reduction(before.crater_diameter_m, after.crater_diameter_m),
        casualty_reduction_pct=reduction(before.airblast_radius_km ** 2, after.airblast_radius_km ** 2),
    )
