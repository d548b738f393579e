"""
Response Shaper

Converts a decoded Solr JSON response into the public SearchResponse. Solr's
named lists arrive as JSON objects (json.nl=map) but a flat [k1, v1, k2, v2]
array is accepted too; every lookup below is explicit and a missing key is
None.
"""
from typing import Any, Dict, List, Optional, Tuple

from bopws.models.responses import FacetValue, HeatmapFacet, SearchResponse, TimeFacet, Timing
from bopws.services.aggregations import TIME_FACET_KEY
from bopws.services.fields import (
    GEO_HEATMAP_FIELD,
    GEO_POS_SENT_HEATMAP_FIELD,
    ID_FIELD,
    TEXT_FIELD,
    USER_FIELD,
)
from bopws.services.gap import Gap
from bopws.services.parsers import format_instant, parse_date_time_range
from bopws.utils.diagnostics import Diagnostics
from bopws.utils.solr_client import SolrResult

HEATMAP_PROJECTION = "EPSG:4326"  # WGS84
ROOT_TIMING_LABEL = "callSolr.elapsed"
QTIME_LABEL = "QTime"
QTIME_TOLERANCE_MS = 5

_UNSIGNED_64 = 1 << 64


# =============================================================================
# NAMED LIST ACCESS
# =============================================================================

def named_list_items(value: Any) -> List[Tuple[str, Any]]:
    """Entries of a Solr named list, in order"""
    if isinstance(value, dict):
        return list(value.items())
    if isinstance(value, list):
        return [(str(value[i]), value[i + 1]) for i in range(0, len(value) - 1, 2)]
    return []


def find_path(value: Any, *keys: str) -> Any:
    """Walk nested named lists by key; None if any step is missing"""
    for key in keys:
        if isinstance(value, list):
            value = dict(named_list_items(value))
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


# =============================================================================
# DOCUMENTS
# =============================================================================

def solr_id_to_tweet_id(value: Any) -> str:
    """
    Tweet ids are unsigned 64-bit but stored in Solr as a signed long; undo that
    """
    return str(int(value) % _UNSIGNED_64)


def tweet_id_to_solr_id(tweet_id: str) -> int:
    """Inverse of solr_id_to_tweet_id, as done on ingest"""
    value = int(tweet_id)
    return value - _UNSIGNED_64 if value >= 1 << 63 else value


def doc_to_map(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Copy a Solr doc, dropping internal fields like _version_"""
    result: Dict[str, Any] = {}
    for name, value in doc.items():
        if name.startswith("_"):
            continue
        result[name] = solr_id_to_tweet_id(value) if name == ID_FIELD else value
    return result


# =============================================================================
# FACETS
# =============================================================================

def field_vals_facet(body: Dict[str, Any], field: str) -> Optional[List[FacetValue]]:
    facet = find_path(body, "facet_counts", "facet_fields", field)
    if facet is None:
        return None
    return [FacetValue(value=str(v), count=int(c)) for v, c in named_list_items(facet)]


def time_facet(body: Dict[str, Any]) -> Optional[TimeFacet]:
    rng = find_path(body, "facet_counts", "facet_ranges", TIME_FACET_KEY)
    if rng is None:
        return None
    return TimeFacet(
        start=_normalize_instant(find_path(rng, "start")),
        end=_normalize_instant(find_path(rng, "end")),
        gap=Gap.parse_solr(find_path(rng, "gap")).to_iso8601(),
        counts=[FacetValue(value=str(v), count=int(c)) for v, c in named_list_items(find_path(rng, "counts"))],
    )


def _normalize_instant(value: str) -> str:
    start, _ = parse_date_time_range(f"[{value} TO *]")
    return format_instant(start)


def heatmap_facet(body: Dict[str, Any], field: str) -> Optional[HeatmapFacet]:
    hm = find_path(body, "facet_counts", "facet_heatmaps", field)
    if hm is None:
        return None
    hm = dict(named_list_items(hm))
    return HeatmapFacet(
        gridLevel=hm["gridLevel"],
        rows=hm["rows"],
        columns=hm["columns"],
        minX=hm["minX"],
        maxX=hm["maxX"],
        minY=hm["minY"],
        maxY=hm["maxY"],
        counts_ints2D=hm.get("counts_ints2D"),
        projection=HEATMAP_PROJECTION,
    )


# =============================================================================
# TIMING
# =============================================================================

def convert_timing_tree(label: str, node: Any, diagnostics: Optional[Diagnostics] = None) -> Optional[Timing]:
    """
    Convert Solr's debug timing named list into a Timing tree

    Stages that took 0ms are dropped; there are usually lots of them.
    """
    if isinstance(node, (dict, list)):
        entries = named_list_items(node)
        millis = None
        subs = []
        for key, value in entries:
            if key == "time":
                millis = int(value)
            else:
                subs.append((key, value))
        if millis is None:
            _warn(diagnostics, f"No time in timing for label {label}: {node}")
            return None
        if millis == 0:
            return None
        children = [convert_timing_tree(key, value, diagnostics) for key, value in subs]
        return Timing(label=label, millis=millis, subs=[c for c in children if c is not None])

    if isinstance(node, (int, float)) and not isinstance(node, bool):  # atypical
        millis = int(node)
        return Timing(label=label, millis=millis) if millis != 0 else None

    _warn(diagnostics, f"Unexpected timing for label {label}: {node}")
    return None


def timing_from_solr(result: SolrResult, diagnostics: Optional[Diagnostics] = None) -> Timing:
    """
    Wall-clock time of the Solr call, with Solr's own breakdown beneath it
    """
    timing = find_path(result.body, "debug", "timing")
    tree = convert_timing_tree(QTIME_LABEL, timing, diagnostics) if timing is not None else None

    qtime = find_path(result.body, "responseHeader", "QTime")
    # QTime and debug.timing.time don't always agree; not understood yet
    if tree is not None and qtime is not None and abs(int(qtime) - tree.millis) > QTIME_TOLERANCE_MS:
        if diagnostics is not None:
            diagnostics.debug(__name__, f"QTime != debug.timing.time: {qtime} {tree.millis}")

    return Timing(label=ROOT_TIMING_LABEL, millis=result.elapsed_ms, subs=[tree] if tree else [])


def _warn(diagnostics: Optional[Diagnostics], message: str) -> None:
    if diagnostics is not None:
        diagnostics.warning(__name__, message)


# =============================================================================
# SEARCH RESPONSE
# =============================================================================

def shape_search_response(
    result: SolrResult,
    docs_requested: bool,
    diagnostics: Optional[Diagnostics] = None,
) -> SearchResponse:
    """
    Build the public response from a Solr search response

    Args:
        result: The Solr response
        docs_requested: Whether rows > 0 was asked for; if not, d.docs is null
        diagnostics: Optional sink for notes about the conversion
    """
    body = result.body
    response = find_path(body, "response")
    if response is None:
        raise ValueError("Solr response has no 'response' section")
    docs = find_path(response, "docs") or []
    return SearchResponse(
        match_docs=int(find_path(response, "numFound")),
        docs=[doc_to_map(doc) for doc in docs] if docs_requested else None,
        time=time_facet(body),
        hm=heatmap_facet(body, GEO_HEATMAP_FIELD),
        hm_pos_sent=heatmap_facet(body, GEO_POS_SENT_HEATMAP_FIELD),
        user=field_vals_facet(body, USER_FIELD),
        text=field_vals_facet(body, TEXT_FIELD),
        timing=timing_from_solr(result, diagnostics),
    )
