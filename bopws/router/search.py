"""
Search API Router
Handles the search/analytics and bulk export endpoints

The q.* params constrain the matching documents, d.* control returning the
documents, and a.* are facets/aggregations on document fields. The *.limit
params limit how many top values/docs come back. The formatting and response
structure are close to Apache Solr's, unsurprisingly.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from typing import Iterator, Optional
import logging

from bopws.config import settings
from bopws.models.requests import ConstraintSet, DocSort, SearchParams
from bopws.models.responses import SearchResponse
from bopws.services import query as query_service
from bopws.services.csv_export import iter_csv
from bopws.services.parsers import GEO_RANGE_PATTERN, TIME_RANGE_PATTERN
from bopws.utils.diagnostics import Diagnostics
from bopws.utils.solr_client import SolrClient, get_solr_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["search"])

TIME_RANGE_REGEX = f"^{TIME_RANGE_PATTERN}$"
GEO_RANGE_REGEX = f"^{GEO_RANGE_PATTERN}$"
GAP_REGEX = r"^P((\d+[YMWD])|(T\d+[HMS]))$"


def constraint_params(
    q_text: Optional[str] = Query(
        None, alias="q.text", min_length=1,
        description="Constrains docs by keyword search query."
    ),
    q_user: Optional[str] = Query(
        None, alias="q.user", min_length=1,
        description="Constrains docs by matching exactly a certain user"
    ),
    q_time: Optional[str] = Query(
        None, alias="q.time", pattern=TIME_RANGE_REGEX,
        description="Constrains docs by time range. Either side can be '*' to signify open-ended."
                    " Otherwise it must be a date, date-time or ISO instant. UTC is implied.",
        examples=["[2017-01-01 TO 2017-04-01T00:00:00]"]
    ),
    q_geo: Optional[str] = Query(
        None, alias="q.geo", pattern=GEO_RANGE_REGEX,
        description="A rectangular geospatial filter in decimal degrees going from the lower-left"
                    " to the upper-right. The coordinates are in lat,lon format.",
        examples=["[-90,-180 TO 90,180]"]
    ),
) -> ConstraintSet:
    """Shared q.* params of search and export"""
    return ConstraintSet(text=q_text, user=q_user, time=q_time, geo=q_geo)


@router.get("/search", response_model=SearchResponse)
async def search(
    constraints: ConstraintSet = Depends(constraint_params),
    d_docs_limit: int = Query(
        0, alias="d.docs.limit", ge=0, le=100,
        description="How many documents to return in the search results."
    ),
    d_docs_sort: DocSort = Query(
        DocSort.TIME, alias="d.docs.sort",
        description="How to order the documents before returning the top X. 'score' is keyword"
                    " search relevancy. 'time' is time descending. 'distance' is the distance"
                    " between the doc and the middle of q.geo."
    ),
    a_time_limit: int = Query(
        0, alias="a.time.limit", ge=0, le=1000,
        description="Non-0 triggers time range faceting. The maximum number of time ranges to"
                    " return when a.time.gap is unspecified; a soft maximum, 80 is suggested."
                    " The counts DO NOT ignore the q.time filter."
    ),
    a_time_gap: Optional[str] = Query(
        None, alias="a.time.gap", pattern=GAP_REGEX,
        description="The time interval of each range, a subset of ISO-8601 durations. If blank,"
                    " the smallest meaningful unit producing no more than a.time.limit ranges.",
        examples=["P1D"]
    ),
    a_time_filter: Optional[str] = Query(
        None, alias="a.time.filter", pattern=TIME_RANGE_REGEX,
        description="Time range to divide by a.time.gap. Defaults to q.time, else 90 days."
    ),
    a_hm_limit: int = Query(
        0, alias="a.hm.limit", ge=0, le=10000,
        description="Non-0 triggers heatmap faceting; a soft maximum on the number of cells."
                    " There may be as few as 1/4th this number. The counts ignore q.geo."
    ),
    a_hm_grid_level: Optional[int] = Query(
        None, alias="a.hm.gridLevel", ge=1, le=100,
        description="Explicit grid level, e.g. for a finer or coarser resolution than the last"
                    " request. Ignores a.hm.limit."
    ),
    a_hm_filter: Optional[str] = Query(
        None, alias="a.hm.filter", pattern=GEO_RANGE_REGEX,
        description="Region to plot the heatmap over. Defaults to q.geo, else the world."
    ),
    a_hm_pos_sent: bool = Query(
        False, alias="a.hm.posSent",
        description="If true, an additional heatmap is returned for positive sentiment tweets"
    ),
    a_text_limit: int = Query(
        0, alias="a.text.limit", ge=0, le=1000,
        description="Returns the most frequently occurring words. Usually expensive."
    ),
    a_user_limit: int = Query(
        0, alias="a.user.limit", ge=0, le=1000,
        description="Returns the most frequently occurring users. The counts ignore q.user."
    ),
    client: SolrClient = Depends(get_solr_client),
):
    """
    Search/analytics endpoint; highly configurable. Not for bulk doc retrieval.
    """
    params = SearchParams(
        docs_limit=d_docs_limit,
        docs_sort=d_docs_sort,
        time_limit=a_time_limit,
        time_gap=a_time_gap,
        time_filter=a_time_filter,
        hm_limit=a_hm_limit,
        hm_grid_level=a_hm_grid_level,
        hm_filter=a_hm_filter,
        hm_pos_sent=a_hm_pos_sent,
        text_limit=a_text_limit,
        user_limit=a_user_limit,
    )
    return await query_service.search(client, constraints, params, Diagnostics())


@router.get("/export")
async def export(
    constraints: ConstraintSet = Depends(constraint_params),
    d_docs_limit: int = Query(
        ..., alias="d.docs.limit", ge=1, le=10000,
        description="How many documents to return."
    ),
    client: SolrClient = Depends(get_solr_client),
):
    """
    Search export endpoint for bulk doc retrieval

    Documents come back sorted by time descending as text/csv with a header
    row. Values are enclosed in double quotes if they contain a double quote,
    comma or newline; embedded double quotes are doubled, so foo"bar becomes
    "foo""bar". Multi-valued fields are joined with '|'.
    """
    # TODO only let one export run at a time (metered, or by authorization)
    result = await query_service.export(client, constraints, d_docs_limit, Diagnostics())

    return StreamingResponse(
        _log_disconnect(iter_csv(result.field_list, result.docs)),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment"},
    )


def _log_disconnect(chunks: Iterator[str]) -> Iterator[str]:
    try:
        yield from chunks
    except GeneratorExit:
        logger.info("Export client went away mid-stream; abandoning")
        raise
