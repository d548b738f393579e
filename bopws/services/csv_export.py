"""
CSV Streamer

Writes export docs as CSV, one chunk per row so the response can be streamed.
Values are quoted only when they contain a comma, double quote or newline;
embedded double quotes are doubled. Multi-valued fields are joined with '|'.
"""
from typing import Any, Dict, Iterable, Iterator, List
import csv
import io

from bopws.services.response_shaper import doc_to_map

MULTI_VALUE_SEPARATOR = "|"


def csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return MULTI_VALUE_SEPARATOR.join(csv_value(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def iter_csv(field_list: List[str], docs: Iterable[Dict[str, Any]]) -> Iterator[str]:
    """
    Yield the header row and then one row per Solr doc

    Args:
        field_list: Column names, in order (Solr's 'fl')
        docs: Raw Solr docs; converted with doc_to_map as they are consumed
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(field_list)
    yield _drain(buffer)

    for doc in docs:
        row = doc_to_map(doc)
        values = [csv_value(row.get(field)) for field in field_list]
        if values == [""]:
            # csv quotes a lone empty field as ""
            buffer.write("\n")
        else:
            writer.writerow(values)
        yield _drain(buffer)


def _drain(buffer: io.StringIO) -> str:
    text = buffer.getvalue()
    buffer.seek(0)
    buffer.truncate()
    return text
