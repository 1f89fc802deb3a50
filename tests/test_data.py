"""Tests for the NeoWs record adapter."""
from __future__ import annotations

import copy
import logging
import math

import pytest

from neoveil.core.threat import ObjectRecord
from neoveil.data.neows import parse_neows_object, parse_neows_objects
from neoveil.exceptions import InvalidInputError


class TestParseObject:
    def test_fields(self, neows_sample: dict):
        rec = parse_neows_object(neows_sample)
        assert isinstance(rec, ObjectRecord)
        assert rec.object_id == "3704144"
        assert rec.name == "(2015 AC246)"
        assert rec.diameter_min_m == pytest.approx(55.5334911581)
        assert rec.diameter_max_m == pytest.approx(124.1766612574)
        assert rec.is_potentially_hazardous is False

    def test_elements(self, neows_sample: dict):
        el = parse_neows_object(neows_sample).elements
        assert el.semi_major_axis_au == pytest.approx(1.412229596305856)
        assert el.eccentricity == pytest.approx(0.209068868470435)
        assert el.mean_motion_rad_per_day == pytest.approx(math.radians(0.5872812164835453))
        assert el.epoch_days == pytest.approx(9455.5)
        assert el.name == "(2015 AC246)"

    def test_close_approach(self, neows_sample: dict):
        (ca,) = parse_neows_object(neows_sample).close_approaches
        assert ca.relative_velocity_km_s == pytest.approx(6.0620992868)
        assert ca.miss_distance_au == pytest.approx(0.3530850459)
        # 2025-01-06 03:24 UTC
        assert ca.time_days == pytest.approx((1736133840 - 946728000) / 86400.0)

    def test_without_close_approaches(self, neows_sample: dict):
        neows_sample["close_approach_data"] = []
        assert parse_neows_object(neows_sample).close_approaches == ()

    def test_optional_period_fields(self, neows_sample: dict):
        del neows_sample["orbital_data"]["mean_motion"]
        del neows_sample["orbital_data"]["orbital_period"]
        el = parse_neows_object(neows_sample).elements
        assert el.mean_motion_deg_per_day is None
        assert el.period_days is None

    def test_missing_orbital_data(self, neows_sample: dict):
        del neows_sample["orbital_data"]
        with pytest.raises(InvalidInputError, match="orbital_data"):
            parse_neows_object(neows_sample)

    def test_null_orbital_data(self, neows_sample: dict):
        neows_sample["orbital_data"] = None
        with pytest.raises(InvalidInputError, match="malformed orbital_data"):
            parse_neows_object(neows_sample)

    def test_missing_element(self, neows_sample: dict):
        del neows_sample["orbital_data"]["eccentricity"]
        with pytest.raises(InvalidInputError, match="eccentricity"):
            parse_neows_object(neows_sample)

    def test_non_numeric_element(self, neows_sample: dict):
        neows_sample["orbital_data"]["inclination"] = "n/a"
        with pytest.raises(InvalidInputError, match="inclination"):
            parse_neows_object(neows_sample)

    def test_hyperbolic_orbit_rejected(self, neows_sample: dict):
        neows_sample["orbital_data"]["eccentricity"] = "1.2"
        with pytest.raises(InvalidInputError):
            parse_neows_object(neows_sample)

    def test_missing_id(self, neows_sample: dict):
        del neows_sample["id"]
        del neows_sample["neo_reference_id"]
        with pytest.raises(InvalidInputError, match="no id"):
            parse_neows_object(neows_sample)

    def test_not_a_mapping(self):
        with pytest.raises(InvalidInputError):
            parse_neows_object(["not", "a", "dict"])


class TestParseObjects:
    def test_list_skips_bad_records(self, caplog, neows_sample: dict):
        bad = copy.deepcopy(neows_sample)
        bad["id"] = "bad"
        del bad["estimated_diameter"]
        second = copy.deepcopy(neows_sample)
        second["id"] = "2"
        with caplog.at_level(logging.WARNING, logger="neoveil.data.neows"):
            records = parse_neows_objects([neows_sample, bad, second])
        assert [r.object_id for r in records] == ["3704144", "2"]
        assert "Skipping NeoWs object" in caplog.text

    def test_browse_page(self, neows_sample: dict):
        records = parse_neows_objects({"page": {"number": 0}, "near_earth_objects": [neows_sample]})
        assert len(records) == 1

    def test_feed_grouped_by_date(self, neows_sample: dict):
        other = copy.deepcopy(neows_sample)
        other["id"] = "2"
        payload = {"element_count": 2, "near_earth_objects": {"2025-01-06": [neows_sample], "2025-01-07": [other]}}
        assert [r.object_id for r in parse_neows_objects(payload)] == ["3704144", "2"]

    @pytest.mark.parametrize(
        "field, value",
        [
            ("orbital_data", None),
            ("orbital_data", "1.41"),
            ("estimated_diameter", {"meters": None}),
            ("close_approach_data", [None]),
        ],
    )
    def test_malformed_section_is_skipped(self, caplog, neows_sample: dict, field: str, value):
        bad = copy.deepcopy(neows_sample)
        bad["id"] = "2"
        bad[field] = value
        with caplog.at_level(logging.WARNING, logger="neoveil.data.neows"):
            records = parse_neows_objects([bad, neows_sample])
        assert [r.object_id for r in records] == ["3704144"]
        assert "malformed" in caplog.text
