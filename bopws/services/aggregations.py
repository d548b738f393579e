"""
Document and aggregation (facet) request builders

One builder per d.*/a.* feature. Each returns a QueryFragment; none of them
touch the request being assembled by the orchestrator.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import math

from bopws.errors import (
    DegenerateGeometryError,
    GapTooSmallError,
    InvalidRangeError,
    MalformedRangeError,
    MissingGeoForDistanceSortError,
)
from bopws.models.requests import ConstraintSet, DocSort
from bopws.services.constraints import active_text_query
from bopws.services.fields import (
    FACET_RANGE_METHOD,
    GEO_FILTER_FIELD,
    GEO_HEATMAP_FIELD,
    GEO_POS_SENT_HEATMAP_FIELD,
    GEO_SORT_FIELD,
    TIME_FILTER_DV_FIELD,
    TIME_FILTER_FIELD,
    TIME_SORT_FIELD,
)
from bopws.services.fragment import QueryFragment
from bopws.services.gap import Gap
from bopws.services.parsers import (
    WORLD_BOX_LITERAL,
    format_instant,
    parse_date_time_range,
    parse_geo_box,
    to_lat_lon,
)
from bopws.utils.diagnostics import Diagnostics

TIME_FACET_KEY = "a.time"
DEFAULT_TIME_WINDOW = timedelta(days=90)
MAX_TIME_BARS = 1000
# Beyond this many bars the filterCache would churn; use DocValues instead
DV_TIME_BARS_THRESHOLD = 80

EARTH_MEAN_RADIUS_KM = 6371.0087714
DEG_TO_KM = EARTH_MEAN_RADIUS_KM * math.pi / 180.0


# =============================================================================
# DOCUMENTS
# =============================================================================

def request_docs(limit: int, sort: DocSort, constraints: ConstraintSet) -> QueryFragment:
    """
    Ask for the top `limit` documents in the requested order

    Sorting by score needs a keyword query; without q.text we fall back to
    time rather than fail.

    Raises:
        MissingGeoForDistanceSortError: distance sort without q.geo
    """
    fragment = QueryFragment().set("rows", limit)
    if limit == 0:
        return fragment

    if sort == DocSort.SCORE and active_text_query(constraints) is None:
        sort = DocSort.TIME

    if sort == DocSort.SCORE:
        return fragment.add("sort", "score desc")
    if sort == DocSort.TIME:
        return fragment.add("sort", f"{TIME_SORT_FIELD} desc")

    rect = constraints.geo_rect
    if rect is None:
        raise MissingGeoForDistanceSortError()
    return (
        fragment.add("sort", "geodist() asc")
        .set("sfield", GEO_SORT_FIELD)
        .set("pt", to_lat_lon(rect.center))
    )


# =============================================================================
# TIME HISTOGRAM
# =============================================================================

@dataclass(frozen=True)
class TimeFacetRequest:
    start: datetime
    end: datetime
    gap: Gap

    @property
    def span(self) -> timedelta:
        return self.end - self.start

    @property
    def num_bars(self) -> int:
        """Estimated number of bars; the last partial one isn't counted"""
        return (self.span // timedelta(milliseconds=1)) // self.gap.to_millis()


def resolve_time_facet(
    limit: int,
    time_filter: Optional[str],
    time_gap: Optional[str],
    now: Optional[datetime] = None,
) -> TimeFacetRequest:
    """
    Work out the range and gap for a.time

    Args:
        limit: Soft maximum number of bars when time_gap is not given
        time_filter: a.time.filter, else q.time; defaults to the last 90 days
        time_gap: Explicit ISO-8601 gap, overriding limit
        now: Reference time for the default window

    Raises:
        InvalidRangeError: The range ends before it starts
        GapTooSmallError: More than MAX_TIME_BARS bars would result
    """
    now = now or datetime.now(timezone.utc)
    start, end = parse_date_time_range(time_filter)
    start = start or now - DEFAULT_TIME_WINDOW
    end = end or now

    span = end - start
    if span < timedelta(0):
        raise InvalidRangeError(f"date ordering problem: {time_filter}")

    if time_gap is None:
        gap = Gap.compute_gap(span, limit)
    else:
        try:
            gap = Gap.parse_iso8601(time_gap)
        except ValueError as e:
            raise MalformedRangeError(str(e))

    request = TimeFacetRequest(start=start, end=end, gap=gap)
    if request.num_bars > MAX_TIME_BARS:
        raise GapTooSmallError(f"Gap {gap.to_iso8601()} is too small for this range {time_filter}")
    return request


def request_time_facet(
    limit: int,
    time_filter: Optional[str],
    time_gap: Optional[str],
    doc_values: bool = False,
    diagnostics: Optional[Diagnostics] = None,
    now: Optional[datetime] = None,
) -> QueryFragment:
    """
    Range-facet on time; see resolve_time_facet for the arguments

    Args:
        doc_values: Whether facet.range.method=dv was already chosen
        diagnostics: Optional sink for notes about the translation
    """
    request = resolve_time_facet(limit, time_filter, time_gap, now)
    num_bars = request.num_bars

    fragment = QueryFragment()
    if num_bars > DV_TIME_BARS_THRESHOLD and not doc_values:
        if diagnostics is not None:
            diagnostics.info(
                __name__, f"Too many bars requested ({num_bars}), switching to {FACET_RANGE_METHOD}=dv"
            )
        fragment = fragment.set(FACET_RANGE_METHOD, "dv")
        doc_values = True

    field = TIME_FILTER_DV_FIELD if doc_values else TIME_FILTER_FIELD
    return (
        fragment.set("facet", True)
        .add(
            "facet.range",
            f"{{!key={TIME_FACET_KEY} "
            f"facet.range.start={format_instant(request.start)} "
            f"facet.range.end={format_instant(request.end)} "
            f"facet.range.gap={request.gap.to_solr()}}}{field}",
        )
        # mincount in local params is lost in distributed search
        .set(f"f.{TIME_FACET_KEY}.facet.mincount", 0)
        .set(f"f.{field}.facet.mincount", 0)
    )


# =============================================================================
# GEO HEATMAP
# =============================================================================

def heatmap_dist_err_km(geom: str, limit: int) -> float:
    """
    Max error (km) that approximates `limit` cells as an upper bound

    distErr is a maximum; doubling the side length assumes a quad tree (side
    halves at each level) and so tends to pick the coarser level.

    Raises:
        DegenerateGeometryError: The box has no area
    """
    rect = parse_geo_box(geom)
    if not rect.has_area():
        raise DegenerateGeometryError(f"Can't compute heatmap; the rect geom has no area: {geom}")

    degrees_side_len = (rect.width + rect.height) / 2.0
    cells_side_len = math.sqrt(limit)
    cell_side_len_degrees = degrees_side_len / cells_side_len * 2.0
    return cell_side_len_degrees * DEG_TO_KM


def request_heatmap_facet(
    limit: int,
    hm_filter: Optional[str],
    grid_level: Optional[int],
    pos_sent: bool = False,
) -> QueryFragment:
    """
    Heatmap facet over hm_filter (a.hm.filter, else q.geo, else the world)

    The q.geo filter is always excluded so the grid shows the distribution
    around it. An explicit grid_level wins over limit.
    """
    exclude = f"{{!ex={GEO_FILTER_FIELD}}}"
    geom = hm_filter or WORLD_BOX_LITERAL

    fragment = QueryFragment().set("facet", True).set("facet.heatmap", f"{exclude}{GEO_HEATMAP_FIELD}")
    if pos_sent:
        fragment = fragment.add("facet.heatmap", f"{exclude}{GEO_POS_SENT_HEATMAP_FIELD}")

    # the options below apply to every heatmap
    fragment = fragment.set("facet.heatmap.geom", geom)
    if grid_level is not None:
        return fragment.set("facet.heatmap.gridLevel", grid_level)

    dist_err = heatmap_dist_err_km(geom, limit)
    return fragment.set("facet.heatmap.distErr", repr(float(f"{dist_err:.7g}")))


# =============================================================================
# FIELD TOP VALUES
# =============================================================================

def request_field_facet(field: str, limit: int, exclude_own_filter: bool = True) -> QueryFragment:
    """Most frequent values of `field`; other tuning is left to Solr config"""
    facet_field = f"{{!ex={field}}}{field}" if exclude_own_filter else field
    return (
        QueryFragment()
        .set("facet", True)
        .add("facet.field", facet_field)
        .set(f"f.{field}.facet.limit", limit)
    )
