"""
Solr client wrapper for the BOP web service
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple
import time
import logging

import httpx

from bopws.config import settings
from bopws.errors import BackendQueryError

logger = logging.getLogger(__name__)

SolrParams = List[Tuple[str, str]]


@dataclass(frozen=True)
class SolrResult:
    """Decoded Solr response plus the wall-clock time the call took"""

    body: Dict[str, Any]
    elapsed_ms: int


class SolrClient:
    """
    Issues GET requests against one Solr collection

    Shared across requests and read-only; no timeout is applied here, that is
    left to the transport and to Solr itself.
    """

    def __init__(self, base_url: str, http: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._http = http or httpx.AsyncClient(timeout=None)

    async def query(self, handler: str, params: SolrParams) -> SolrResult:
        """
        Execute a request against a Solr request handler

        Args:
            handler: Request handler path, e.g. /select/bop/search
            params: Multi-valued request params, in order

        Returns:
            SolrResult with the decoded JSON body

        Raises:
            BackendQueryError: If Solr could not be reached or returned an error
        """
        url = f"{self.base_url}{handler}"
        wire_params = list(params) + [("wt", "json"), ("json.nl", "map")]
        start = time.perf_counter()
        try:
            response = await self._http.get(url, params=wire_params)
        except httpx.HTTPError as e:
            logger.error(f"Solr request to {url} failed: {e}")
            raise BackendQueryError(f"Search backend unavailable: {e}")
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        if response.status_code >= 400:
            raise solr_error_from_response(response)

        return SolrResult(body=response.json(), elapsed_ms=elapsed_ms)

    async def aclose(self) -> None:
        await self._http.aclose()


def solr_error_from_response(response: httpx.Response) -> BackendQueryError:
    """Translate a Solr error response, keeping its status and message"""
    msg = None
    code = None
    try:
        error = response.json().get("error") or {}
        msg = error.get("msg")
        code = error.get("code")
    except ValueError:
        pass

    detail = msg or f"Search backend error (HTTP {response.status_code})"
    logger.warning(f"Solr returned {response.status_code}: {detail}")
    return BackendQueryError(detail, status_code=response.status_code, code=code)


@lru_cache()
def get_solr_client() -> SolrClient:
    """
    Get Solr client instance (cached)

    Returns:
        SolrClient bound to settings.solr_url
    """
    client = SolrClient(settings.solr_url)
    logger.info(f"Solr client created for {settings.solr_url}")
    return client
