"""
Solr field names of the tweet collection
"""

ID_FIELD = "id"
TIME_FILTER_FIELD = "created_at"
TIME_FILTER_DV_FIELD = "created_at_dv"
TIME_SORT_FIELD = "created_at_dv"
GEO_FILTER_FIELD = "coord"  # spatial fields assume units="kilometers"
GEO_HEATMAP_FIELD = "coord_hm"
GEO_POS_SENT_HEATMAP_FIELD = "coordSentimentPos_hm"
GEO_SORT_FIELD = "coord"
TEXT_FIELD = "text"
USER_FIELD = "user_name"

# Routing params; Solr is customized to pick shards by date from these
ROUTE_START_PARAM = "hcga.start"
ROUTE_END_PARAM = "hcga.end"

FACET_RANGE_METHOD = "facet.range.method"
