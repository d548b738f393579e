"""
Tests for the CSV export streamer
"""
import csv
import io

import pytest

from bopws.services.csv_export import csv_value, iter_csv

FIELDS = ["id", "created_at", "user_name", "text"]


def test_header_then_one_chunk_per_doc():
    docs = [
        {"id": 1, "created_at": "2017-01-02T00:00:00Z", "user_name": "bob", "text": "hello"},
        {"id": 2, "created_at": "2017-01-01T00:00:00Z", "user_name": "alice", "text": "bye"},
    ]

    chunks = list(iter_csv(FIELDS, docs))

    assert chunks == [
        "id,created_at,user_name,text\n",
        "1,2017-01-02T00:00:00Z,bob,hello\n",
        "2,2017-01-01T00:00:00Z,alice,bye\n",
    ]


def test_id_is_unsigned_and_internal_fields_dropped():
    chunks = list(iter_csv(["id", "_version_"], [{"id": -1, "_version_": 99}]))

    assert chunks[1] == "18446744073709551615,\n"


def test_quoting_of_special_characters():
    doc = {"id": 1, "text": 'foo"bar,baz'}

    row = list(iter_csv(["id", "text"], [doc]))[1]

    assert row == '1,"foo""bar,baz"\n'


def test_newline_is_quoted():
    row = list(iter_csv(["text"], [{"text": "line one\nline two"}]))[1]

    assert row == '"line one\nline two"\n'


def test_multi_valued_distinct_from_single_value():
    """The same raw tokens differ once pipe-joined"""
    single = list(iter_csv(["text"], [{"text": 'foo"bar,baz'}]))[1]
    multi = list(iter_csv(["text"], [{"text": ['foo"bar', "baz"]}]))[1]

    assert single == '"foo""bar,baz"\n'
    assert multi == '"foo""bar|baz"\n'
    assert single != multi


def test_quoted_values_round_trip():
    value = 'foo"bar,baz\nqux'
    text = "".join(iter_csv(["id", "text"], [{"id": 7, "text": value}]))

    rows = list(csv.reader(io.StringIO(text)))

    assert rows == [["id", "text"], ["7", value]]


def test_missing_fields_are_empty():
    row = list(iter_csv(FIELDS, [{"id": 3, "text": "only text"}]))[1]

    assert row == "3,,,only text\n"


def test_csv_value():
    assert csv_value(None) == ""
    assert csv_value(["a", "b"]) == "a|b"
    assert csv_value(True) == "true"
    assert csv_value(1.5) == "1.5"


def test_no_docs_still_has_header():
    assert list(iter_csv(["id"], [])) == ["id\n"]


def test_missing_value_in_single_column_is_an_empty_line():
    assert list(iter_csv(["text"], [{"id": 1}, {"text": "hi"}])) == ["text\n", "\n", "hi\n"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
