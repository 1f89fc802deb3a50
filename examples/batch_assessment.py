"""NEOVeil Batch Assessment — rank a catalog of objects by threat.

Generates a synthetic catalog, assesses it in batches on a thread pool,
and prints the ranked list.
"""

import logging
from datetime import datetime, timezone

import numpy as np

from neoveil import CloseApproach, ObjectRecord, OrbitalElements, rank_assessments, run_assessment

logging.basicConfig(level=logging.INFO)

rng = np.random.default_rng(7)
catalog = []
for i in range(25):
    diameter = float(rng.uniform(20, 800))
    catalog.append(
        ObjectRecord(
            object_id=f"SYN-{i:03d}",
            name=f"Synthetic {i}",
            elements=OrbitalElements(
                semi_major_axis_au=float(rng.uniform(0.8, 2.5)),
                eccentricity=float(rng.uniform(0.0, 0.6)),
                inclination_deg=float(rng.uniform(0, 20)),
                ascending_node_deg=float(rng.uniform(0, 360)),
                arg_periapsis_deg=float(rng.uniform(0, 360)),
                mean_anomaly_deg=float(rng.uniform(0, 360)),
            ),
            diameter_min_m=diameter * 0.7,
            diameter_max_m=diameter,
            close_approaches=(CloseApproach(9500.0, float(rng.uniform(5, 30)), float(rng.uniform(0.001, 0.3))),),
        )
    )

run = run_assessment(catalog, batch_size=5, max_workers=4, now=datetime(2026, 1, 1, tzinfo=timezone.utc))

for a in rank_assessments(run.assessments)[:10]:
    print(
        f"{a.record.object_id} | {a.threat_level.label:<10} | p={a.impact_probability:.2e} | "
        f"{a.tnt_equivalent_mt:10.2f} Mt | {', '.join(a.mitigation_options)}"
    )
