"""
Time facet gap calculation

A Gap is a calendar interval of a single unit (e.g. 5 MINUTES, 1 DAYS). It
converts to/from a subset of ISO-8601 durations for the public API and to/from
Solr date math for the facet.range.gap param.
"""
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Union
import math
import re


class GapUnit(str, Enum):
    SECONDS = "SECONDS"
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"
    YEARS = "YEARS"


# Estimated durations; months and years use the mean Gregorian length
_UNIT_MILLIS = {
    GapUnit.SECONDS: 1000,
    GapUnit.MINUTES: 60 * 1000,
    GapUnit.HOURS: 60 * 60 * 1000,
    GapUnit.DAYS: 24 * 60 * 60 * 1000,
    GapUnit.WEEKS: 7 * 24 * 60 * 60 * 1000,
    GapUnit.MONTHS: 2629746 * 1000,
    GapUnit.YEARS: 31556952 * 1000,
}

# ISO designator, and whether it belongs after the 'T'
_ISO_DESIGNATORS = {
    GapUnit.YEARS: ("Y", False),
    GapUnit.MONTHS: ("M", False),
    GapUnit.WEEKS: ("W", False),
    GapUnit.DAYS: ("D", False),
    GapUnit.HOURS: ("H", True),
    GapUnit.MINUTES: ("M", True),
    GapUnit.SECONDS: ("S", True),
}
_ISO_DATE_UNITS = {"Y": GapUnit.YEARS, "M": GapUnit.MONTHS, "W": GapUnit.WEEKS, "D": GapUnit.DAYS}
_ISO_TIME_UNITS = {"H": GapUnit.HOURS, "M": GapUnit.MINUTES, "S": GapUnit.SECONDS}

_ISO_RE = re.compile(r"^P(?:(\d+)([YMWD])|T(\d+)([HMS]))$")
_SOLR_RE = re.compile(r"^\+?(\d+)([A-Z]+)$")

# Solr date math has no week unit
_SOLR_UNITS = {
    "SECOND": GapUnit.SECONDS,
    "MINUTE": GapUnit.MINUTES,
    "HOUR": GapUnit.HOURS,
    "DAY": GapUnit.DAYS,
    "DATE": GapUnit.DAYS,
    "MONTH": GapUnit.MONTHS,
    "YEAR": GapUnit.YEARS,
}


@dataclass(frozen=True)
class Gap:
    quantity: int
    unit: GapUnit

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Gap quantity must be positive: {self.quantity}")

    def to_millis(self) -> int:
        return self.quantity * _UNIT_MILLIS[self.unit]

    # ---- ISO-8601 subset ----

    def to_iso8601(self) -> str:
        designator, is_time = _ISO_DESIGNATORS[self.unit]
        return f"PT{self.quantity}{designator}" if is_time else f"P{self.quantity}{designator}"

    @staticmethod
    def parse_iso8601(text: str) -> "Gap":
        """Parse `P<n>[YMWD]` or `PT<n>[HMS]`; mixed units are not accepted"""
        match = _ISO_RE.match(text)
        if not match:
            raise ValueError(f"Unsupported ISO-8601 gap: {text}")
        if match.group(1) is not None:
            return Gap(int(match.group(1)), _ISO_DATE_UNITS[match.group(2)])
        return Gap(int(match.group(3)), _ISO_TIME_UNITS[match.group(4)])

    # ---- Solr date math ----

    def to_solr(self) -> str:
        if self.unit == GapUnit.WEEKS:
            return f"+{self.quantity * 7}DAYS"
        return f"+{self.quantity}{self.unit.value}"

    @staticmethod
    def parse_solr(text: str) -> "Gap":
        """Parse a Solr gap as echoed in a range facet, e.g. `+1DAY`"""
        match = _SOLR_RE.match(text.strip().upper())
        if not match:
            raise ValueError(f"Unsupported Solr gap: {text}")
        name = match.group(2)
        if name.endswith("S"):
            name = name[:-1]
        if name not in _SOLR_UNITS:
            raise ValueError(f"Unsupported Solr gap unit: {text}")
        quantity, unit = int(match.group(1)), _SOLR_UNITS[name]
        # weeks go out as days, see to_solr
        if unit == GapUnit.DAYS and quantity % 7 == 0:
            return Gap(quantity // 7, GapUnit.WEEKS)
        return Gap(quantity, unit)

    # ---- computing ----

    @staticmethod
    def compute_gap(span: Union[timedelta, int], target_bars: int) -> "Gap":
        """
        Pick the finest gap from GAP_LADDER that yields at most target_bars bars

        Args:
            span: Range duration, as a timedelta or in milliseconds
            target_bars: Soft maximum number of bars

        Returns:
            The first ladder gap with span / gap <= target_bars, or a whole
            number of years beyond the ladder
        """
        if target_bars < 1:
            raise ValueError(f"target_bars must be positive: {target_bars}")
        span_ms = _to_millis(span)

        for gap in GAP_LADDER:
            if span_ms <= target_bars * gap.to_millis():
                return gap

        year_ms = _UNIT_MILLIS[GapUnit.YEARS]
        return Gap(math.ceil(span_ms / (target_bars * year_ms)), GapUnit.YEARS)


def _to_millis(span: Union[timedelta, int]) -> int:
    if isinstance(span, timedelta):
        return span // timedelta(milliseconds=1)
    return int(span)


GAP_LADDER = (
    Gap(1, GapUnit.SECONDS),
    Gap(5, GapUnit.SECONDS),
    Gap(10, GapUnit.SECONDS),
    Gap(15, GapUnit.SECONDS),
    Gap(30, GapUnit.SECONDS),
    Gap(1, GapUnit.MINUTES),
    Gap(5, GapUnit.MINUTES),
    Gap(10, GapUnit.MINUTES),
    Gap(15, GapUnit.MINUTES),
    Gap(30, GapUnit.MINUTES),
    Gap(1, GapUnit.HOURS),
    Gap(2, GapUnit.HOURS),
    Gap(3, GapUnit.HOURS),
    Gap(6, GapUnit.HOURS),
    Gap(12, GapUnit.HOURS),
    Gap(1, GapUnit.DAYS),
    Gap(2, GapUnit.DAYS),
    Gap(1, GapUnit.WEEKS),
    Gap(1, GapUnit.MONTHS),
    Gap(3, GapUnit.MONTHS),
    Gap(6, GapUnit.MONTHS),
    Gap(1, GapUnit.YEARS),
)
