"""
Tests for translating q.* constraints into Solr params
"""
import logging

import pytest

from bopws.models.requests import ConstraintSet
from bopws.services.constraints import active_text_query, apply_constraints
from bopws.services.fragment import render


def test_no_constraints():
    assert render(apply_constraints(ConstraintSet())) == []


def test_text_query_is_selective():
    fragment = apply_constraints(ConstraintSet(text="  flood  "))

    assert fragment.get("q") == "flood"
    assert fragment.get("facet.range.method") == "dv"


@pytest.mark.parametrize("text", ["*", "*:*", "   "])
def test_match_all_text_is_ignored(text):
    constraints = ConstraintSet(text=text)

    assert active_text_query(constraints) is None
    assert render(apply_constraints(constraints)) == []


def test_user_filter_is_tagged():
    fragment = apply_constraints(ConstraintSet(user="bob"))

    assert fragment.get_all("fq") == ["{!field f=user_name tag=user_name}bob"]
    assert fragment.get("facet.range.method") == "dv"


def test_open_time_range_applies_no_filter():
    fragment = apply_constraints(ConstraintSet(time="[* TO *]"))

    assert render(fragment) == []


def test_time_filter_and_route_params():
    fragment = apply_constraints(ConstraintSet(time="[2017-01-01 TO 2017-04-01T00:00:00]"))

    assert fragment.get_all("fq") == [
        "{!field tag=created_at f=created_at}[2017-01-01T00:00:00Z TO 2017-04-01T00:00:00Z]"
    ]
    assert fragment.get("hcga.start") == "2017-01-01T00:00:00Z"
    assert fragment.get("hcga.end") == "2017-04-01T00:00:00Z"
    # time alone doesn't make the request selective
    assert fragment.get("facet.range.method") is None


def test_half_open_time_filter():
    fragment = apply_constraints(ConstraintSet(time="[2017-01-01 TO *]"))

    assert fragment.get_all("fq") == ["{!field tag=created_at f=created_at}[2017-01-01T00:00:00Z TO *]"]
    assert fragment.get("hcga.start") == "2017-01-01T00:00:00Z"
    assert fragment.get("hcga.end") is None


def test_world_geo_box_is_a_no_op(diagnostics):
    fragment = apply_constraints(ConstraintSet(geo="[-90,-180 TO 90,180]"), diagnostics)

    assert render(fragment) == []
    assert diagnostics.messages(logging.DEBUG)


def test_small_geo_box_is_selective():
    fragment = apply_constraints(ConstraintSet(geo="[40,-75 TO 41,-74]"))

    assert fragment.get_all("fq") == ["{!lucene tag=coord df=coord}[40,-75 TO 41,-74]"]
    assert fragment.get("facet.range.method") == "dv"


def test_large_geo_box_is_not_selective():
    fragment = apply_constraints(ConstraintSet(geo="[-60,-180 TO 60,180]"))

    assert len(fragment.get_all("fq")) == 1
    assert fragment.get("facet.range.method") is None


def test_all_constraints_together():
    fragment = apply_constraints(ConstraintSet(
        text="storm", user="alice", time="[2017-01-01 TO 2017-01-02]", geo="[40,-75 TO 41,-74]"
    ))

    assert fragment.get("q") == "storm"
    assert len(fragment.get_all("fq")) == 3
    assert fragment.get_all("facet.range.method") == ["dv"]


def test_geo_rect_is_parsed_once():
    constraints = ConstraintSet(geo="[10,20 TO 30,40]")

    assert constraints.geo_rect is constraints.geo_rect


def test_constraint_aliases():
    constraints = ConstraintSet.model_validate({"q.text": "rain", "q.user": "bob"})

    assert constraints.text == "rain"
    assert constraints.user == "bob"
    assert constraints.geo_rect is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
