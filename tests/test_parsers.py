"""
Tests for the time and geo range parsers
"""
import pytest
from datetime import datetime, timezone

from bopws.errors import InvalidRangeError, MalformedRangeError
from bopws.services.parsers import (
    WORLD_BOUNDS,
    Point,
    format_instant,
    parse_date_time_range,
    parse_geo_box,
    to_lat_lon,
)


def test_open_ended_time_range():
    """Both sides '*' means no constraint"""
    assert parse_date_time_range("[* TO *]") == (None, None)


def test_none_time_range():
    assert parse_date_time_range(None) == (None, None)


def test_time_range_formats():
    """Date-only and date-time forms are accepted and UTC is implied"""
    start, end = parse_date_time_range("[2017-01-01 TO 2017-04-01T00:00:00]")

    assert start == datetime(2017, 1, 1, tzinfo=timezone.utc)
    assert end == datetime(2017, 4, 1, tzinfo=timezone.utc)


def test_time_range_with_zone():
    """Full instants with Z or an offset are normalized to UTC"""
    start, end = parse_date_time_range("[2017-01-01T10:00:00Z TO 2017-01-01T12:00:00+02:00]")

    assert start == datetime(2017, 1, 1, 10, tzinfo=timezone.utc)
    assert end == datetime(2017, 1, 1, 10, tzinfo=timezone.utc)


def test_half_open_time_range():
    start, end = parse_date_time_range("[* TO 2017-01-01]")

    assert start is None
    assert end == datetime(2017, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("literal", [
    "2017-01-01 TO 2017-02-01",
    "[2017-01-01 to 2017-02-01]",
    "[yesterday TO *]",
])
def test_malformed_time_range(literal):
    with pytest.raises(MalformedRangeError):
        parse_date_time_range(literal)


def test_format_instant():
    assert format_instant(datetime(2017, 1, 1, tzinfo=timezone.utc)) == "2017-01-01T00:00:00Z"
    assert format_instant(datetime(2017, 1, 1, 0, 0, 1, 123000, tzinfo=timezone.utc)) == \
        "2017-01-01T00:00:01.123Z"


def test_parse_world_box():
    rect = parse_geo_box("[-90,-180 TO 90,180]")

    assert rect == WORLD_BOUNDS
    assert rect.is_world()
    assert rect.width == 360.0
    assert rect.height == 180.0


def test_parse_geo_box_lat_lon_order():
    """Literals are lat,lon; the rectangle is in x (lon) / y (lat)"""
    rect = parse_geo_box("[10,20 TO 30,40]")

    assert (rect.min_x, rect.max_x, rect.min_y, rect.max_y) == (20.0, 40.0, 10.0, 30.0)
    assert rect.center == Point(x=30.0, y=20.0)
    assert to_lat_lon(rect.center) == "20.0,30.0"
    assert not rect.is_world()


def test_geo_box_across_dateline():
    rect = parse_geo_box("[0,170 TO 10,-170]")

    assert rect.crosses_dateline
    assert rect.width == 20.0
    assert rect.center.x == 180.0


def test_geo_box_area():
    small = parse_geo_box("[40,-75 TO 41,-74]")

    assert small.has_area()
    assert small.area < WORLD_BOUNDS.area * 0.05
    assert WORLD_BOUNDS.area == pytest.approx(41252.96, rel=1e-4)


def test_zero_area_box():
    assert not parse_geo_box("[0,0 TO 0,10]").has_area()


def test_geo_box_latitudes_out_of_order():
    with pytest.raises(InvalidRangeError):
        parse_geo_box("[30,20 TO 10,40]")


@pytest.mark.parametrize("literal", [
    "[10 TO 30,40]",
    "[a,b TO c,d]",
    "[100,20 TO 30,40]",
    "10,20 TO 30,40",
])
def test_malformed_geo_box(literal):
    with pytest.raises(MalformedRangeError):
        parse_geo_box(literal)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
