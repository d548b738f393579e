"""
Query Orchestrator

Composes the constraint, document and aggregation builders into one Solr
request, executes it, and hands the response to the shaper. Owns the two
public operations: search and export.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
import logging

from bopws.config import settings
from bopws.errors import ExportConfigurationError
from bopws.models.requests import ConstraintSet, DocSort, SearchParams
from bopws.models.responses import SearchResponse
from bopws.services.aggregations import (
    request_docs,
    request_field_facet,
    request_heatmap_facet,
    request_time_facet,
)
from bopws.services.constraints import apply_constraints
from bopws.services.fields import FACET_RANGE_METHOD, TEXT_FIELD, USER_FIELD
from bopws.services.fragment import QueryFragment, SolrParams, merge_params, render
from bopws.services.response_shaper import find_path, shape_search_response
from bopws.utils.diagnostics import Diagnostics
from bopws.utils.solr_client import SolrClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """Columns echoed by Solr and the raw docs to write under them"""

    field_list: List[str]
    docs: List[Dict[str, Any]]


# =============================================================================
# SEARCH
# =============================================================================

def build_search_query(
    constraints: ConstraintSet,
    params: SearchParams,
    diagnostics: Optional[Diagnostics] = None,
    now: Optional[datetime] = None,
) -> QueryFragment:
    """Translate search params into one Solr request fragment"""
    fragment = apply_constraints(constraints, diagnostics)

    # d.docs
    fragment = fragment + request_docs(params.docs_limit, params.docs_sort, constraints)

    # a.time
    if params.time_limit > 0:
        fragment = fragment + request_time_facet(
            params.time_limit,
            params.time_filter or constraints.time,
            params.time_gap,
            doc_values=fragment.get(FACET_RANGE_METHOD) == "dv",
            diagnostics=diagnostics,
            now=now,
        )

    # a.hm
    if params.hm_limit > 0:
        fragment = fragment + request_heatmap_facet(
            params.hm_limit,
            params.hm_filter or constraints.geo,
            params.hm_grid_level,
            params.hm_pos_sent,
        )

    # a.text
    if params.text_limit > 0:
        fragment = fragment + request_field_facet(TEXT_FIELD, params.text_limit, exclude_own_filter=False)

    # a.user
    if params.user_limit > 0:
        fragment = fragment + request_field_facet(USER_FIELD, params.user_limit)

    return fragment.add("debug", "timing")


async def search(
    client: SolrClient,
    constraints: ConstraintSet,
    params: SearchParams,
    diagnostics: Optional[Diagnostics] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> SearchResponse:
    """
    Run a search/analytics request

    Args:
        client: Shared Solr client
        constraints: q.* constraints
        params: d.* and a.* params
        diagnostics: Optional sink for notes about the request
        overrides: Solr params taking precedence; defaults to settings

    Returns:
        SearchResponse

    Raises:
        GatewayError: For invalid combinations of params, or Solr failures
    """
    diagnostics = diagnostics or Diagnostics()
    fragment = build_search_query(constraints, params, diagnostics)
    solr_params = _with_overrides(render(fragment), overrides)

    result = await client.query(settings.search_handler, solr_params)
    logger.info(
        f"Search matched {find_path(result.body, 'response', 'numFound')} docs "
        f"in {result.elapsed_ms}ms"
    )
    return shape_search_response(result, params.docs_limit > 0, diagnostics)


# =============================================================================
# EXPORT
# =============================================================================

def build_export_query(constraints: ConstraintSet, limit: int, diagnostics: Optional[Diagnostics] = None) -> QueryFragment:
    """Export is always time descending; 'fl' comes back via echoParams"""
    return (
        apply_constraints(constraints, diagnostics)
        + request_docs(limit, DocSort.TIME, constraints)
    ).set("echoParams", "all")


async def export(
    client: SolrClient,
    constraints: ConstraintSet,
    limit: int,
    diagnostics: Optional[Diagnostics] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> ExportResult:
    """
    Fetch docs for bulk export

    Raises:
        ExportConfigurationError: Solr did not echo its 'fl' param
    """
    diagnostics = diagnostics or Diagnostics()
    fragment = build_export_query(constraints, limit, diagnostics)
    solr_params = _with_overrides(render(fragment), overrides)

    result = await client.query(settings.export_handler, solr_params)

    # solrconfig is expected to set 'fl' and echo it back
    fl = find_path(result.body, "responseHeader", "params", "fl")
    if fl is None:
        raise ExportConfigurationError("Expected echoParams=all and 'fl' to be set")
    if isinstance(fl, list):
        fl = ",".join(fl)
    field_list = [f.strip() for f in fl.split(",") if f.strip()]

    docs = find_path(result.body, "response", "docs") or []
    logger.info(f"Exporting {len(docs)} docs with fields {field_list}")
    return ExportResult(field_list=field_list, docs=docs)


def _with_overrides(params: SolrParams, overrides: Optional[Mapping[str, str]]) -> SolrParams:
    if overrides is None:
        overrides = settings.solr_override_params
    return merge_params(params, overrides.items())
