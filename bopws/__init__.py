"""
BOP Web Service - tweet search and analytics gateway over Solr
"""

__version__ = "1.0.0"
