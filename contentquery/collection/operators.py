"""Filter predicate evaluation for the in-memory collection.

Predicates are mappings in the familiar document-store style:

    {"category": "news"}                          # equality
    {"date": {"$gte": "2020-01-01"}}              # operator
    {"$or": [{"draft": True}, {"tags": {"$contains": "wip"}}]}
    {"$fts": {"query": {"type": "match", ...}}}   # full-text

Top-level keys are combined with AND logic.
"""

import re
from typing import Any, Callable, Dict, Mapping

from contentquery.collection.fulltext import matches_fts
from contentquery.query.exceptions import InvalidQueryError

_MISSING = object()


def get_field(document: Mapping[str, Any], field: str) -> Any:
    """Resolve a dotted field path, returning a sentinel when absent."""
    value: Any = document
    for part in field.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(value: Any, operand: Any) -> bool:
        if value is _MISSING or value is None or operand is None:
            return False
        try:
            return op(value, operand)
        except TypeError:
            return False
    return compare


def _as_list(value: Any) -> list:
    if value is _MISSING or value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _eq(value: Any, operand: Any) -> bool:
    if value is _MISSING:
        return operand is None
    return value == operand


def _in(value: Any, operand: Any) -> bool:
    if not isinstance(operand, (list, tuple, set)):
        raise InvalidQueryError("$in requires a list operand")
    if value is _MISSING:
        return False
    return value in operand


def _between(value: Any, operand: Any) -> bool:
    if not isinstance(operand, (list, tuple)) or len(operand) != 2:
        raise InvalidQueryError("$between requires a [low, high] operand")
    low, high = operand
    return _compare(lambda v, o: o[0] <= v <= o[1])(value, (low, high))


def _regex(value: Any, operand: Any) -> bool:
    if value is _MISSING or value is None:
        return False
    if isinstance(operand, (list, tuple)):
        pattern, flags = operand[0], operand[1] if len(operand) > 1 else ""
        compiled = re.compile(pattern, re.IGNORECASE if "i" in flags else 0)
    elif isinstance(operand, re.Pattern):
        compiled = operand
    else:
        compiled = re.compile(str(operand))
    return compiled.search(str(value)) is not None


def _contains(value: Any, operand: Any) -> bool:
    values = _as_list(value)
    if isinstance(value, str):
        return all(str(o) in value for o in _as_list(operand))
    return all(o in values for o in _as_list(operand))


def _contains_any(value: Any, operand: Any) -> bool:
    if isinstance(value, str):
        return any(str(o) in value for o in _as_list(operand))
    values = _as_list(value)
    return any(o in values for o in _as_list(operand))


def _exists(value: Any, operand: Any) -> bool:
    return (value is not _MISSING) == bool(operand)


def _size(value: Any, operand: Any) -> bool:
    if value is _MISSING or not hasattr(value, "__len__"):
        return False
    return len(value) == operand


TYPE_NAMES = {
    "string": str,
    "number": (int, float),
    "boolean": bool,
    "array": list,
    "object": dict,
}


def _type(value: Any, operand: Any) -> bool:
    if operand not in TYPE_NAMES:
        raise InvalidQueryError(f"Unknown $type operand: {operand!r}")
    if value is _MISSING:
        return False
    if operand == "number" and isinstance(value, bool):
        return False
    return isinstance(value, TYPE_NAMES[operand])


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "$eq": _eq,
    "$ne": lambda value, operand: not _eq(value, operand),
    "$gt": _compare(lambda v, o: v > o),
    "$gte": _compare(lambda v, o: v >= o),
    "$lt": _compare(lambda v, o: v < o),
    "$lte": _compare(lambda v, o: v <= o),
    "$in": _in,
    "$nin": lambda value, operand: not _in(value, operand),
    "$between": _between,
    "$regex": _regex,
    "$contains": _contains,
    "$containsAny": _contains_any,
    "$containsNone": lambda value, operand: not _contains_any(value, operand),
    "$exists": _exists,
    "$size": _size,
    "$type": _type,
}


def _matches_field(value: Any, condition: Any) -> bool:
    if isinstance(condition, Mapping) and condition and all(
        isinstance(key, str) and key.startswith("$") for key in condition
    ):
        for operator, operand in condition.items():
            if operator == "$not":
                if _matches_field(value, operand):
                    return False
                continue
            if operator not in OPERATORS:
                raise InvalidQueryError(f"Unknown operator: {operator}")
            if not OPERATORS[operator](value, operand):
                return False
        return True

    return _eq(value, condition)


def matches(document: Mapping[str, Any], predicate: Mapping[str, Any]) -> bool:
    """Check if a document satisfies a predicate."""
    if not isinstance(predicate, Mapping):
        raise InvalidQueryError(
            f"Predicate must be a mapping, got {type(predicate).__name__}"
        )

    for key, condition in predicate.items():
        if key == "$and":
            if not all(matches(document, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif key == "$not":
            if matches(document, condition):
                return False
        elif key == "$fts":
            if not matches_fts(document, condition):
                return False
        elif key.startswith("$"):
            raise InvalidQueryError(f"Unknown logical operator: {key}")
        elif not _matches_field(get_field(document, key), condition):
            return False

    return True
