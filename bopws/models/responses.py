"""
Response models for the search endpoint

Field order is part of the contract; pydantic dumps fields in declaration
order.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_serializer


class FacetValue(BaseModel):
    """A value and how many matching docs have it"""

    value: str
    count: int


class Timing(BaseModel):
    """Elapsed time of a processing stage, with its sub-stages"""

    label: str
    millis: int
    subs: List["Timing"] = Field(default_factory=list)

    @model_serializer(mode="wrap")
    def _omit_empty_subs(self, handler):
        data = handler(self)
        if not data.get("subs"):
            data.pop("subs", None)
        return data


class TimeFacet(BaseModel):
    """Counts per time range, from a.time"""

    start: str
    end: str
    gap: str
    counts: List[FacetValue]


class HeatmapFacet(BaseModel):
    """
    Heatmap grid from a.hm

    counts_ints2D is row-major from the top (maxY) down. It may be null, and
    any row may be null, when all of its counts would be 0.
    """

    gridLevel: int
    rows: int
    columns: int
    minX: float
    maxX: float
    minY: float
    maxY: float
    counts_ints2D: Optional[List[Optional[List[int]]]]
    projection: str


class SearchResponse(BaseModel):
    """Response from the search endpoint"""

    model_config = ConfigDict(populate_by_name=True)

    match_docs: int = Field(..., alias="a.matchDocs")
    docs: Optional[List[Dict[str, Any]]] = Field(default=None, alias="d.docs")
    time: Optional[TimeFacet] = Field(default=None, alias="a.time")
    hm: Optional[HeatmapFacet] = Field(default=None, alias="a.hm")
    hm_pos_sent: Optional[HeatmapFacet] = Field(default=None, alias="a.hm.posSent")
    user: Optional[List[FacetValue]] = Field(default=None, alias="a.user")
    text: Optional[List[FacetValue]] = Field(default=None, alias="a.text")
    timing: Timing
