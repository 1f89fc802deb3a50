"""NEOVeil Quickstart — propagate an orbit and estimate an impact."""

from neoveil import OrbitalElements, closest_approach, compute_impact, position, EARTH_ELEMENTS

# (2015 AC246), elements at JD 2461000.5
neo = OrbitalElements(
    semi_major_axis_au=1.412229596305856,
    eccentricity=0.209068868470435,
    inclination_deg=9.899225662489052,
    ascending_node_deg=287.8095343596706,
    arg_periapsis_deg=248.9151299336569,
    mean_anomaly_deg=130.9032525461727,
    mean_motion_deg_per_day=0.5872812164835453,
    epoch_days=2461000.5 - 2451545.0,
    name="(2015 AC246)",
)

print(neo)
print(f"Period:    {neo.orbital_period_days:.1f} days")
print(f"q / Q:     {neo.perihelion_au:.3f} / {neo.aphelion_au:.3f} AU")

pos = position(neo, neo.epoch_days)
print(f"Position at epoch: {pos} AU")

event = closest_approach(EARTH_ELEMENTS, neo, window_days=3650, step_days=1.0, start_days=neo.epoch_days, refine=True)
print(f"Closest approach to Earth: {event.distance_au:.4f} AU after {event.time_days:.1f} days")

impact = compute_impact(diameter_m=90, velocity_km_s=6.06)
print(f"If it hit: {impact.tnt_equivalent_mt:.2f} Mt, crater {impact.crater_diameter_m:.0f} m")
print(f"           {impact.description} ({impact.risk_level.value})")
