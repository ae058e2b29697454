"""
Tests for geospatial and time utilities
"""
import math
import pytest
from datetime import datetime, timezone

import sys
sys.path.insert(0, '.')

from disasteralert.core.constants import EARTH_RADIUS_M
from disasteralert.core.geo_utils import (
    Coordinates,
    build_map_link,
    build_search_link,
    haversine_distance_m,
    is_valid_coordinate,
    parse_coordinate_pair,
    spherical_distance_m,
)
from disasteralert.core.time_utils import format_display_datetime


class TestDistances:
    """Test suite for great-circle distances."""

    def test_same_point_is_zero(self):
        """Identical points are 0 m apart, without acos domain errors."""
        assert spherical_distance_m(12.9716, 77.5946, 12.9716, 77.5946) == 0.0
        assert haversine_distance_m(12.9716, 77.5946, 12.9716, 77.5946) == 0.0

    def test_one_degree_of_latitude(self):
        """One degree along a meridian is R * pi / 180."""
        expected = EARTH_RADIUS_M * math.pi / 180
        assert spherical_distance_m(0, 0, 1, 0) == pytest.approx(expected, rel=1e-9)
        assert haversine_distance_m(0, 0, 1, 0) == pytest.approx(expected, rel=1e-9)

    def test_formulas_agree(self):
        """Law of cosines and haversine agree for typical distances."""
        pairs = [
            (12.9716, 77.5946, 13.0827, 80.2707),
            (28.6139, 77.2090, 19.0760, 72.8777),
            (12.9716, 77.5946, 12.9800, 77.6000),
        ]
        for lat1, lon1, lat2, lon2 in pairs:
            assert spherical_distance_m(lat1, lon1, lat2, lon2) == pytest.approx(
                haversine_distance_m(lat1, lon1, lat2, lon2), abs=0.01
            )

    def test_antipodal_points(self):
        """Cosine is clamped so antipodes give half the circumference."""
        assert spherical_distance_m(0, 0, 0, 180) == pytest.approx(EARTH_RADIUS_M * math.pi)


class TestCoordinates:
    """Test suite for coordinate parsing and validation."""

    def test_valid_ranges(self):
        assert is_valid_coordinate(90, 180)
        assert is_valid_coordinate(-90, -180)
        assert is_valid_coordinate(0, 0)
        assert not is_valid_coordinate(90.0001, 0)
        assert not is_valid_coordinate(0, -180.5)
        assert not is_valid_coordinate(float("nan"), 0)

    def test_parse_numeric_strings(self):
        coords = parse_coordinate_pair("12.9716", " 77.5946 ")
        assert coords == Coordinates(12.9716, 77.5946)

    def test_parse_rejects_bad_values(self):
        assert parse_coordinate_pair(None, 77.5) is None
        assert parse_coordinate_pair("", "77.5") is None
        assert parse_coordinate_pair("abc", "77.5") is None
        assert parse_coordinate_pair(95, 77.5) is None
        assert parse_coordinate_pair("nan", "1") is None

    def test_zero_zero_is_valid(self):
        assert parse_coordinate_pair(0, 0) == Coordinates(0.0, 0.0)


class TestLinks:
    """Test suite for map links."""

    def test_map_link(self):
        assert build_map_link(12.9716, 77.5946) == "https://www.google.com/maps?q=12.9716,77.5946"

    def test_search_link_is_url_encoded(self):
        assert build_search_link("MG Road, Bengaluru") == (
            "https://www.google.com/maps/search/MG%20Road%2C%20Bengaluru"
        )


class TestDisplayDatetime:
    """Test suite for reported_datetime formatting."""

    def test_naive_utc_shown_at_ist(self):
        assert format_display_datetime(datetime(2024, 1, 1, 0, 0, 0), offset_minutes=330) == (
            "01-01-2024 05:30:00 AM"
        )

    def test_aware_datetime_converted(self):
        value = datetime(2024, 6, 15, 10, 45, 5, tzinfo=timezone.utc)
        assert format_display_datetime(value, offset_minutes=330) == "15-06-2024 04:15:05 PM"

    def test_date_rollover(self):
        assert format_display_datetime(datetime(2024, 12, 31, 20, 0, 0), offset_minutes=330) == (
            "01-01-2025 01:30:00 AM"
        )
