"""
Data models for the BOP web service
"""
from .requests import ConstraintSet, DocSort, SearchParams
from .responses import (
    FacetValue,
    HeatmapFacet,
    SearchResponse,
    TimeFacet,
    Timing,
)

__all__ = [
    # Request
    "ConstraintSet",
    "DocSort",
    "SearchParams",
    # Response
    "SearchResponse",
    "TimeFacet",
    "HeatmapFacet",
    "FacetValue",
    "Timing",
]
