"""
Request models for the search and export endpoints
"""
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from bopws.services.parsers import Rectangle


class DocSort(str, Enum):
    """How to order documents before returning the top d.docs.limit"""
    SCORE = "score"
    TIME = "time"
    DISTANCE = "distance"


class ConstraintSet(BaseModel):
    """The q.* constraints limiting the matching documents"""

    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = Field(default=None, alias="q.text")
    user: Optional[str] = Field(default=None, alias="q.user")
    time: Optional[str] = Field(default=None, alias="q.time")
    geo: Optional[str] = Field(default=None, alias="q.geo")

    @cached_property
    def geo_rect(self) -> Optional["Rectangle"]:
        """q.geo parsed once; later center/area lookups reuse it"""
        from bopws.services.parsers import parse_geo_box

        return parse_geo_box(self.geo) if self.geo is not None else None


class SearchParams(BaseModel):
    """The d.* and a.* params of the search endpoint"""

    model_config = ConfigDict(populate_by_name=True)

    docs_limit: int = Field(default=0, ge=0, le=100, alias="d.docs.limit")
    docs_sort: DocSort = Field(default=DocSort.TIME, alias="d.docs.sort")

    time_limit: int = Field(default=0, ge=0, le=1000, alias="a.time.limit")
    time_gap: Optional[str] = Field(default=None, alias="a.time.gap")
    time_filter: Optional[str] = Field(default=None, alias="a.time.filter")

    hm_limit: int = Field(default=0, ge=0, le=10000, alias="a.hm.limit")
    hm_grid_level: Optional[int] = Field(default=None, ge=1, le=100, alias="a.hm.gridLevel")
    hm_filter: Optional[str] = Field(default=None, alias="a.hm.filter")
    hm_pos_sent: bool = Field(default=False, alias="a.hm.posSent")

    text_limit: int = Field(default=0, ge=0, le=1000, alias="a.text.limit")
    user_limit: int = Field(default=0, ge=0, le=1000, alias="a.user.limit")
