"""
Error taxonomy for the search gateway

Every error carries the HTTP status it should be rendered with; the FastAPI
exception handler in main.py turns them into JSON responses.
"""
from typing import Optional


class GatewayError(Exception):
    """Base class for client-facing failures"""

    status_code: int = 400

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class MalformedRangeError(GatewayError):
    """A range literal did not match the `[A TO B]` syntax"""


class InvalidRangeError(GatewayError):
    """A range's end is before its start"""


class GapTooSmallError(GatewayError):
    """The time gap would produce more bars than allowed"""


class DegenerateGeometryError(GatewayError):
    """A zero-area box was given where a heatmap resolution must be computed"""


class MissingGeoForDistanceSortError(GatewayError):
    """Distance sort requested without a q.geo box to measure from"""

    def __init__(self, detail: str = "Can't sort by distance without q.geo"):
        super().__init__(detail)


class ExportConfigurationError(GatewayError):
    """Solr did not echo the 'fl' param the export needs"""

    status_code = 500


class BackendQueryError(GatewayError):
    """Solr rejected or failed the request; keeps Solr's status when known"""

    status_code = 500

    def __init__(self, detail: str, status_code: Optional[int] = None, code: Optional[int] = None):
        super().__init__(detail, status_code)
        self.code = code
