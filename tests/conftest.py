"""
PyTest configuration and fixtures for the BOP web service tests

Provides a fake Solr client that records the params it was sent and answers
with a canned response, so nothing here needs a running Solr.
"""
from typing import Any, Dict, List, Optional

import pytest

from bopws.utils.diagnostics import Diagnostics
from bopws.utils.solr_client import SolrParams, SolrResult


class FakeSolrClient:
    """Stands in for SolrClient; one canned body (or error) for every call"""

    def __init__(self, body: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None,
                 elapsed_ms: int = 20):
        self.body = body if body is not None else solr_body()
        self.error = error
        self.elapsed_ms = elapsed_ms
        self.calls: List[Dict[str, Any]] = []

    async def query(self, handler: str, params: SolrParams) -> SolrResult:
        self.calls.append({"handler": handler, "params": list(params)})
        if self.error is not None:
            raise self.error
        return SolrResult(body=self.body, elapsed_ms=self.elapsed_ms)

    @property
    def last_params(self) -> SolrParams:
        return self.calls[-1]["params"]

    def param_values(self, name: str) -> List[str]:
        return [v for k, v in self.last_params if k == name]


def solr_body(docs: Optional[List[Dict[str, Any]]] = None, num_found: Optional[int] = None,
              facet_counts: Optional[Dict[str, Any]] = None, timing: Optional[Dict[str, Any]] = None,
              qtime: int = 12, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build a Solr JSON response as returned with json.nl=map"""
    docs = docs or []
    body: Dict[str, Any] = {
        "responseHeader": {"status": 0, "QTime": qtime, "params": params or {}},
        "response": {"numFound": num_found if num_found is not None else len(docs), "start": 0,
                     "docs": docs},
    }
    if facet_counts is not None:
        body["facet_counts"] = facet_counts
    if timing is not None:
        body["debug"] = {"timing": timing}
    return body


@pytest.fixture
def diagnostics():
    """Fresh diagnostics sink"""
    return Diagnostics()


@pytest.fixture
def fake_solr():
    """Fake Solr client answering with an empty result"""
    return FakeSolrClient()
