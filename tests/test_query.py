import re
from datetime import datetime

from py_localmodel.document.query import (
    active_clauses, is_empty_predicate, match_predicate, matches, merge,
)


def test_regex_searches_string_form():
    assert match_predicate("Ann", re.compile("^A"))
    assert not match_predicate("Bo", re.compile("^A"))
    assert match_predicate(123, re.compile("23"))
    assert match_predicate(datetime(2024, 3, 1), re.compile("^2024-03"))


def test_scalar_equality_is_strict():
    assert match_predicate("x", "x")
    assert match_predicate(1, 1)
    assert match_predicate(1.0, 1)
    assert not match_predicate("1", 1)
    assert not match_predicate(1, "1")
    assert not match_predicate(True, 1)
    assert not match_predicate(1, True)
    assert match_predicate(False, False)


def test_range_boundaries():
    rng = {"$gte": 5, "$lt": 10}
    assert match_predicate(5, rng)
    assert match_predicate(9.5, rng)
    assert not match_predicate(10, rng)
    assert not match_predicate(4, rng)
    assert match_predicate(3, {"$gt": 2, "$lte": 3})
    assert not match_predicate(2, {"$gt": 2})


def test_range_zero_operand_counts():
    assert not match_predicate(-1, {"$gte": 0})
    assert match_predicate(0, {"$gte": 0})


def test_range_on_dates_parses_operands():
    joined = datetime(2024, 3, 1, 9, 0)
    assert match_predicate(joined, {"$gte": "2024-01-01", "$lt": "2025-01-01"})
    assert not match_predicate(joined, {"$gt": "2024-03-01T09:00:00"})
    assert match_predicate(joined, {"$lte": datetime(2024, 3, 1, 9, 0)})


def test_range_on_text_does_not_match():
    assert not match_predicate("10", {"$gte": 5})


def test_empty_predicates():
    assert is_empty_predicate("")
    assert is_empty_predicate({})
    assert is_empty_predicate(None)
    assert not is_empty_predicate(0)
    assert not is_empty_predicate(re.compile(""))
    assert active_clauses({"a": "", "b": 1, "c": {}}) == {"b": 1}


def test_matches_is_conjunctive():
    entry = {"a": 1, "b": "x"}
    assert matches(entry, {"a": 1, "b": "x"})
    assert not matches(entry, {"a": 1, "b": "y"})
    assert matches(entry, {"a": 1, "b": ""})


def test_missing_field_is_not_a_match():
    assert not matches({"a": 1}, {"b": "x"})
    assert not matches({"a": 1, "b": None}, {"b": {"$gte": 0}})


def test_matches_applies_conversion():
    entry = {"when": "2024-03-01T09:00:00"}
    convert = lambda field, value: datetime.fromisoformat(value)
    assert matches(entry, {"when": {"$gte": "2024-01-01"}}, convert)


def test_merge_prefers_second_mapping():
    a = {"x": 1, "y": 2}
    b = {"y": 3, "z": 4}
    assert merge(a, b) == {"x": 1, "y": 3, "z": 4}
    assert a == {"x": 1, "y": 2}
