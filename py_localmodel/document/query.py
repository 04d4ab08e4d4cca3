import re
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from .schema import parse_date

logger = logging.getLogger(__name__)

RANGE_OPS = ("$gte", "$gt", "$lte", "$lt")


def merge(a: dict, b: dict) -> dict:
    """Union of ``a`` and ``b``; ``b``'s values win on key collision."""
    merged = dict(a)
    for key in b:
        merged[key] = b[key]
    return merged


def is_empty_predicate(query: Any) -> bool:
    """``None``, ``""`` and ``{}`` put no constraint on a field."""
    if query is None:
        return True
    if isinstance(query, (str, dict)) and not query:
        return True
    return False


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _text(value) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _strict_equal(data, query) -> bool:
    if isinstance(query, bool) or isinstance(data, bool):
        return isinstance(query, bool) and isinstance(data, bool) and data == query
    if _is_number(query):
        return _is_number(data) and data == query
    return type(data) is type(query) and data == query


def _match_range(data, query: Dict[str, Any], is_date: bool) -> bool:
    for op in RANGE_OPS:
        if op not in query:
            continue
        operand = parse_date(query[op]) if is_date else query[op]
        if op == "$gte" and not operand <= data:
            return False
        if op == "$gt" and not operand < data:
            return False
        if op == "$lte" and not operand >= data:
            return False
        if op == "$lt" and not operand > data:
            return False
    return True


def match_predicate(data, query) -> bool:
    """Does one stored field value satisfy one query clause?"""
    if isinstance(query, re.Pattern):
        return query.search(_text(data)) is not None

    if isinstance(query, (str, int, float)):
        return _strict_equal(data, query)

    if isinstance(query, dict):
        unknown = set(query) - set(RANGE_OPS)
        if unknown:
            logger.warning("Ignoring unsupported query operators: %s", sorted(unknown))
        if _is_number(data):
            return _match_range(data, query, is_date=False)
        if isinstance(data, datetime):
            return _match_range(data, query, is_date=True)
        return False

    return False


def active_clauses(query: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not query:
        return {}
    return {k: v for k, v in query.items() if not is_empty_predicate(v)}


def matches(entry: Dict[str, Any], query: Dict[str, Any],
            convert: Optional[Callable[[str, Any], Any]] = None) -> bool:
    """Conjunction of every non-empty clause of ``query`` against ``entry``.

    A field missing from the entry never matches.
    """
    for field, predicate in active_clauses(query).items():
        value = entry.get(field)
        if value is None:
            return False
        if convert is not None:
            value = convert(field, value)
        if not match_predicate(value, predicate):
            return False
    return True
