"""
Constraint Builder

Turns the q.* constraints into Solr query/filter params.
"""
from typing import Optional

from bopws.models.requests import ConstraintSet
from bopws.services.fields import (
    FACET_RANGE_METHOD,
    GEO_FILTER_FIELD,
    ROUTE_END_PARAM,
    ROUTE_START_PARAM,
    TIME_FILTER_FIELD,
    USER_FIELD,
)
from bopws.services.fragment import QueryFragment
from bopws.services.parsers import WORLD_BOUNDS, format_instant, parse_date_time_range
from bopws.utils.diagnostics import Diagnostics

MATCH_ALL_QUERIES = ("*", "*:*")

# A geo filter smaller than this share of the world is considered selective
SELECTIVE_GEO_AREA_RATIO = 0.05


def apply_constraints(constraints: ConstraintSet, diagnostics: Optional[Diagnostics] = None) -> QueryFragment:
    """
    Build the Solr params for the q.* constraints

    Also decides whether range faceting should use the DocValues method. Solr
    doesn't work this out itself; we ask for it when the per-shard result is
    likely heavily filtered.

    Args:
        constraints: Parsed request constraints
        diagnostics: Optional sink for notes about the translation

    Returns:
        QueryFragment with q, fq, routing and facet method params
    """
    fragment = QueryFragment()
    doc_values = False

    # q.text
    text = active_text_query(constraints)
    if text is not None:
        doc_values = True
        fragment = fragment.set("q", text)

    # q.user
    if constraints.user is not None:
        doc_values = True
        fragment = fragment.add("fq", f"{{!field f={USER_FIELD} tag={USER_FIELD}}}{constraints.user}")

    # q.time
    if constraints.time is not None:
        start, end = parse_date_time_range(constraints.time)
        if start is not None or end is not None:
            start_str = format_instant(start) if start is not None else "*"
            end_str = format_instant(end) if end is not None else "*"
            # tagged so a.time could exclude it
            fragment = fragment.add(
                "fq",
                f"{{!field tag={TIME_FILTER_FIELD} f={TIME_FILTER_FIELD}}}[{start_str} TO {end_str}]",
            )
            fragment = fragment + route_params(
                start_str if start is not None else None,
                end_str if end is not None else None,
            )

    # q.geo
    rect = constraints.geo_rect
    if rect is not None:
        if rect.is_world():
            # every doc has a point; a world filter matches everything
            if diagnostics is not None:
                diagnostics.debug(__name__, "q.geo is the whole world; no geo filter applied")
        else:
            if rect.area < WORLD_BOUNDS.area * SELECTIVE_GEO_AREA_RATIO:
                doc_values = True
            # {!field} can't be used; ranges need the Lucene query parser. Tagged for a.hm.
            fragment = fragment.add(
                "fq", f"{{!lucene tag={GEO_FILTER_FIELD} df={GEO_FILTER_FIELD}}}{constraints.geo}"
            )

    if doc_values:
        fragment = fragment.set(FACET_RANGE_METHOD, "dv")

    return fragment


def route_params(start: Optional[str], end: Optional[str]) -> QueryFragment:
    """Shard routing hints; passed through to Solr untouched"""
    fragment = QueryFragment()
    if start is not None:
        fragment = fragment.set(ROUTE_START_PARAM, start)
    if end is not None:
        fragment = fragment.set(ROUTE_END_PARAM, end)
    return fragment


def active_text_query(constraints: ConstraintSet) -> Optional[str]:
    """q.text unless it is absent, blank or a match-all query"""
    text = constraints.text.strip() if constraints.text is not None else ""
    if not text or text in MATCH_ALL_QUERIES:
        return None
    return text
