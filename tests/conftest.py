"""Shared fixtures."""
from __future__ import annotations

import copy

import pytest


NEOWS_SAMPLE = {
    "id": "3704144",
    "neo_reference_id": "3704144",
    "name": "(2015 AC246)",
    "absolute_magnitude_h": 23.4,
    "estimated_diameter": {
        "kilometers": {"estimated_diameter_min": 0.0555334912, "estimated_diameter_max": 0.1241766613},
        "meters": {"estimated_diameter_min": 55.5334911581, "estimated_diameter_max": 124.1766612574},
    },
    "is_potentially_hazardous_asteroid": False,
    "close_approach_data": [
        {
            "close_approach_date": "2025-01-06",
            "close_approach_date_full": "2025-Jan-06 03:24",
            "epoch_date_close_approach": 1736133840000,
            "relative_velocity": {
                "kilometers_per_second": "6.0620992868",
                "kilometers_per_hour": "21823.557432531",
            },
            "miss_distance": {
                "astronomical": "0.3530850459",
                "kilometers": "52820770.795492233",
            },
            "orbiting_body": "Earth",
        }
    ],
    "orbital_data": {
        "orbit_id": "10",
        "epoch_osculation": "2461000.5",
        "eccentricity": ".209068868470435",
        "semi_major_axis": "1.412229596305856",
        "inclination": "9.899225662489052",
        "ascending_node_longitude": "287.8095343596706",
        "orbital_period": "612.9942349519818",
        "perihelion_argument": "248.9151299336569",
        "mean_anomaly": "130.9032525461727",
        "mean_motion": ".5872812164835453",
        "equinox": "J2000",
    },
}


@pytest.fixture
def neows_sample() -> dict:
    """One NeoWs browse record, (2015 AC246)."""
    return copy.deepcopy(NEOWS_SAMPLE)
