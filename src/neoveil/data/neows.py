"""Adapter for NASA NeoWs near-Earth object records.

NeoWs serves numbers as strings and nests units several levels deep. This
module converts already-downloaded JSON into validated ObjectRecords; it does
no network I/O.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from neoveil.core.elements import OrbitalElements
from neoveil.core.threat import CloseApproach, ObjectRecord, days_since_j2000
from neoveil.exceptions import InvalidInputError
from neoveil.utils.constants import J2000_JD

logger = logging.getLogger(__name__)


def _number(data: dict[str, Any], key: str) -> float:
    try:
        return float(data[key])
    except KeyError:
        raise InvalidInputError(f"Missing required field: {key}")
    except (TypeError, ValueError):
        raise InvalidInputError(f"Field {key} is not a number: {data[key]!r}")


def _optional_number(data: dict[str, Any], key: str) -> float | None:
    if data.get(key) in (None, ""):
        return None
    return _number(data, key)


def _parse_elements(orbital_data: dict[str, Any], name: str) -> OrbitalElements:
    epoch_jd = _optional_number(orbital_data, "epoch_osculation")
    return OrbitalElements(
        semi_major_axis_au=_number(orbital_data, "semi_major_axis"),
        eccentricity=_number(orbital_data, "eccentricity"),
        inclination_deg=_number(orbital_data, "inclination"),
        ascending_node_deg=_number(orbital_data, "ascending_node_longitude"),
        arg_periapsis_deg=_number(orbital_data, "perihelion_argument"),
        mean_anomaly_deg=_number(orbital_data, "mean_anomaly"),
        period_days=_optional_number(orbital_data, "orbital_period"),
        mean_motion_deg_per_day=_optional_number(orbital_data, "mean_motion"),
        epoch_days=epoch_jd - J2000_JD if epoch_jd is not None else 0.0,
        name=name,
    )


def _parse_close_approach(data: dict[str, Any]) -> CloseApproach:
    try:
        epoch_ms = float(data["epoch_date_close_approach"])
        velocity = _number(data["relative_velocity"], "kilometers_per_second")
        miss = _number(data["miss_distance"], "astronomical")
    except KeyError as e:
        raise InvalidInputError(f"Missing close-approach field: {e}")
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid close-approach data: {e}")

    when = datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)
    return CloseApproach(
        time_days=days_since_j2000(when),
        relative_velocity_km_s=velocity,
        miss_distance_au=miss,
    )


def parse_neows_object(data: dict[str, Any]) -> ObjectRecord:
    """Convert one NeoWs object into an ObjectRecord.

    Args:
        data: A single element of a NeoWs ``near_earth_objects`` list.

    Returns:
        The validated record.

    Raises:
        InvalidInputError: If required fields are missing or invalid.
    """
    if not isinstance(data, dict):
        raise InvalidInputError(f"NeoWs object must be a mapping, got {type(data).__name__}")

    object_id = str(data.get("id") or data.get("neo_reference_id") or "")
    name = str(data.get("name", object_id))
    if not object_id:
        logger.error("NeoWs object without id: %r", name)
        raise InvalidInputError("NeoWs object has no id")

    try:
        diameters = data["estimated_diameter"]["meters"]
        orbital_data = data["orbital_data"]
    except (KeyError, TypeError) as e:
        logger.error("NeoWs object %s is missing %s", object_id, e)
        raise InvalidInputError(f"NeoWs object {object_id} is missing {e}")
    for field, value in (("estimated_diameter", diameters), ("orbital_data", orbital_data)):
        if not isinstance(value, dict):
            logger.error("NeoWs object %s has malformed %s: %r", object_id, field, value)
            raise InvalidInputError(f"NeoWs object {object_id} has malformed {field}")

    approaches = data.get("close_approach_data") or ()
    if not isinstance(approaches, list) or not all(isinstance(ca, dict) for ca in approaches):
        raise InvalidInputError(f"NeoWs object {object_id} has malformed close_approach_data")

    return ObjectRecord(
        object_id=object_id,
        name=name,
        elements=_parse_elements(orbital_data, name),
        diameter_min_m=_number(diameters, "estimated_diameter_min"),
        diameter_max_m=_number(diameters, "estimated_diameter_max"),
        close_approaches=tuple(_parse_close_approach(ca) for ca in approaches),
        is_potentially_hazardous=bool(data.get("is_potentially_hazardous_asteroid", False)),
    )


def parse_neows_objects(payload: list[dict[str, Any]] | dict[str, Any]) -> list[ObjectRecord]:
    """Convert a list of NeoWs objects (or a browse page) into records.

    Malformed objects are skipped with a warning.

    Args:
        payload: A list of objects, or a response dict with a
            ``near_earth_objects`` list.

    Returns:
        Records in input order.
    """
    if isinstance(payload, dict):
        objects = payload.get("near_earth_objects", [])
        if isinstance(objects, dict):
            # feed responses group objects by date
            objects = [obj for day in objects.values() for obj in day]
    else:
        objects = payload

    records = []
    for obj in objects:
        try:
            records.append(parse_neows_object(obj))
        except InvalidInputError as e:
            logger.warning("Skipping NeoWs object: %s", e)
    logger.info("Parsed %d/%d NeoWs objects", len(records), len(objects))
    return records
