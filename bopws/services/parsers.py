"""
Range literal parsers

Parses the bracketed `[A TO B]` literals accepted by the q.time, q.geo,
a.time.filter and a.hm.filter params.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple
import math
import re

from bopws.errors import InvalidRangeError, MalformedRangeError

TIME_RANGE_PATTERN = r"\[(\S+) TO (\S+)\]"
GEO_RANGE_PATTERN = r"\[(\S+,\S+) TO (\S+,\S+)\]"

_TIME_RANGE_RE = re.compile(rf"^{TIME_RANGE_PATTERN}$")
_GEO_RANGE_RE = re.compile(rf"^{GEO_RANGE_PATTERN}$")

OPEN_BOUND = "*"


# =============================================================================
# TIME
# =============================================================================

def parse_date_time_range(literal: Optional[str]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Parse a time range literal such as `[2017-01-01 TO 2017-04-01T00:00:00]`

    Either side may be `*` for open-ended. Accepted formats are a plain date,
    a date-time, or a full ISO instant with `Z` or an offset. UTC is implied
    when no zone is given.

    Args:
        literal: The range literal, or None

    Returns:
        (start, end) as aware UTC datetimes; (None, None) means no constraint
    """
    if literal is None:
        return None, None

    match = _TIME_RANGE_RE.match(literal.strip())
    if not match:
        raise MalformedRangeError(f"Malformed time range: {literal}")

    return _parse_instant(match.group(1)), _parse_instant(match.group(2))


def _parse_instant(text: str) -> Optional[datetime]:
    if text == OPEN_BOUND:
        return None

    # fromisoformat only learned 'Z' in 3.11
    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        value = datetime.fromisoformat(normalized)
    except ValueError:
        raise MalformedRangeError(f"Unparseable date/time: {text}")

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_instant(value: datetime) -> str:
    """Format as an ISO instant in UTC, e.g. 2017-01-01T00:00:00Z"""
    value = value.astimezone(timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        if value.microsecond % 1000 == 0:
            text += f".{value.microsecond // 1000:03d}"
        else:
            text += f".{value.microsecond:06d}"
    return text + "Z"


# =============================================================================
# GEO
# =============================================================================

@dataclass(frozen=True)
class Point:
    x: float  # longitude
    y: float  # latitude


@dataclass(frozen=True)
class Rectangle:
    """
    Axis-aligned lat/lon rectangle in decimal degrees

    min_x > max_x means the box crosses the antimeridian.
    """

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def crosses_dateline(self) -> bool:
        return self.min_x > self.max_x

    @property
    def width(self) -> float:
        if self.crosses_dateline:
            return 360.0 + self.max_x - self.min_x
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    @property
    def center(self) -> Point:
        x = self.min_x + self.width / 2.0
        if x > 180.0:
            x -= 360.0
        return Point(x=x, y=(self.min_y + self.max_y) / 2.0)

    @property
    def area(self) -> float:
        """Surface area on the sphere, in square degrees"""
        band = math.sin(math.radians(self.max_y)) - math.sin(math.radians(self.min_y))
        return self.width * band * math.degrees(1.0)

    def is_world(self) -> bool:
        return self == WORLD_BOUNDS


WORLD_BOUNDS = Rectangle(min_x=-180.0, max_x=180.0, min_y=-90.0, max_y=90.0)
WORLD_BOX_LITERAL = "[-90,-180 TO 90,180]"


def parse_geo_box(literal: str) -> Rectangle:
    """
    Parse a geo box literal `[lat,lon TO lat,lon]`, lower-left to upper-right

    Raises:
        MalformedRangeError: On syntax or coordinate range problems
        InvalidRangeError: If the lower latitude is above the upper one
    """
    match = _GEO_RANGE_RE.match(literal.strip())
    if not match:
        raise MalformedRangeError(f"Malformed geo box: {literal}")

    min_y, min_x = _parse_lat_lon(match.group(1))
    max_y, max_x = _parse_lat_lon(match.group(2))
    if min_y > max_y:
        raise InvalidRangeError(f"Geo box latitudes are out of order: {literal}")

    return Rectangle(min_x=min_x, max_x=max_x, min_y=min_y, max_y=max_y)


def _parse_lat_lon(text: str) -> Tuple[float, float]:
    lat_str, _, lon_str = text.partition(",")
    try:
        lat = float(lat_str)
        lon = float(lon_str)
    except ValueError:
        raise MalformedRangeError(f"Unparseable coordinate: {text}")

    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        raise MalformedRangeError(f"Coordinate out of bounds: {text}")
    return lat, lon


def to_lat_lon(point: Point) -> str:
    return f"{point.y},{point.x}"
