"""
Utility modules for the BOP web service
"""
from .diagnostics import Diagnostics, DiagnosticEvent
from .solr_client import SolrClient, SolrResult, get_solr_client

__all__ = [
    "Diagnostics",
    "DiagnosticEvent",
    "SolrClient",
    "SolrResult",
    "get_solr_client",
]
