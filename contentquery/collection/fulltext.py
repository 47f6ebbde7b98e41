"""Full-text predicate evaluation for the in-memory collection.

Supports two query types, expressed as plain mappings:

    {"type": "match", "field": "title", "value": "hello wrld",
     "fuzziness": 1, "prefix_length": 1, "extended": True,
     "operator": "and", "minimum_should_match": 1}

    {"type": "bool", "must": [...], "should": [...], "not": [...],
     "minimum_should_match": 1}
"""

import logging
import re
from typing import Any, Dict, List, Mapping

from contentquery.query.exceptions import InvalidQueryError

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\w+", re.UNICODE)


def tokenize(value: Any) -> List[str]:
    """Split a field value into lower-cased word tokens."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        value = " ".join(str(v) for v in value if v is not None)
    return TOKEN_PATTERN.findall(str(value).lower())


def edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance."""
    if len(s1) < len(s2):
        return edit_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def token_matches(
    query_token: str,
    field_token: str,
    fuzziness: int = 0,
    prefix_length: int = 0,
    extended: bool = False,
) -> bool:
    """Check whether a single query token matches a single field token."""
    if query_token == field_token:
        return True

    if extended and field_token.startswith(query_token):
        return True

    if fuzziness > 0:
        # The first prefix_length characters must match exactly
        if field_token[:prefix_length] != query_token[:prefix_length]:
            return False
        if abs(len(field_token) - len(query_token)) > fuzziness:
            return False
        return edit_distance(query_token, field_token) <= fuzziness

    return False


def _get_field(document: Mapping[str, Any], field: str) -> Any:
    value: Any = document
    for part in field.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return None
        value = value[part]
    return value


def _evaluate_match(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    field = query.get("field")
    if not field:
        raise InvalidQueryError("Full-text match query requires a 'field'")

    query_tokens = tokenize(query.get("value"))
    if not query_tokens:
        return False

    field_tokens = tokenize(_get_field(document, field))
    if not field_tokens:
        return False

    fuzziness = int(query.get("fuzziness", 0) or 0)
    prefix_length = int(query.get("prefix_length", 0) or 0)
    extended = bool(query.get("extended", False))

    matched = sum(
        1
        for query_token in query_tokens
        if any(
            token_matches(query_token, field_token, fuzziness, prefix_length, extended)
            for field_token in field_tokens
        )
    )

    operator = query.get("operator", "or")
    if operator == "and":
        return matched == len(query_tokens)
    if operator != "or":
        raise InvalidQueryError(f"Unsupported match operator: {operator!r}")

    minimum = int(query.get("minimum_should_match", 1) or 1)
    return matched >= min(minimum, len(query_tokens))


def _evaluate_bool(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    must = query.get("must", [])
    should = query.get("should", [])
    must_not = query.get("not", [])

    if not all(evaluate(document, clause) for clause in must):
        return False
    if any(evaluate(document, clause) for clause in must_not):
        return False

    if should:
        default_minimum = 0 if must else 1
        minimum = query.get("minimum_should_match", default_minimum)
        matched = sum(1 for clause in should if evaluate(document, clause))
        return matched >= minimum

    return bool(must) or bool(must_not)


def evaluate(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """Evaluate a single full-text query node against a document."""
    if not isinstance(query, Mapping):
        raise InvalidQueryError(f"Full-text query must be a mapping, got {type(query).__name__}")

    query_type = query.get("type")
    if query_type == "match":
        return _evaluate_match(document, query)
    if query_type == "bool":
        return _evaluate_bool(document, query)

    raise InvalidQueryError(f"Unsupported full-text query type: {query_type!r}")


def matches_fts(document: Mapping[str, Any], fts: Dict[str, Any]) -> bool:
    """Evaluate a ``$fts`` operand (``{"query": {...}}``) against a document."""
    if not isinstance(fts, Mapping) or "query" not in fts:
        raise InvalidQueryError("$fts operand must be a mapping with a 'query' key")
    return evaluate(document, fts["query"])
