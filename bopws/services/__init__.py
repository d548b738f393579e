"""
Core service modules for the BOP web service
"""
from .constraints import apply_constraints
from .aggregations import (
    request_docs,
    request_time_facet,
    request_heatmap_facet,
    request_field_facet,
)
from .gap import Gap, GapUnit
from .response_shaper import shape_search_response, solr_id_to_tweet_id
from .csv_export import iter_csv
from .query import search, export, build_search_query, build_export_query

__all__ = [
    "apply_constraints",
    "request_docs",
    "request_time_facet",
    "request_heatmap_facet",
    "request_field_facet",
    "Gap",
    "GapUnit",
    "shape_search_response",
    "solr_id_to_tweet_id",
    "iter_csv",
    "search",
    "export",
    "build_search_query",
    "build_export_query",
]
