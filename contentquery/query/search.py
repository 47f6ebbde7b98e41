"""Construction of full-text search predicates.

Every builder returns a ``$fts`` predicate that can be handed to
``ResultSet.find`` like any other filter.
"""

from typing import Any, Dict, List, Mapping, Sequence

from contentquery.query.exceptions import ConfigurationError

# Lenient matching: one typo allowed, first character must match
PREFIX_LENGTH = 1
FUZZINESS = 1
MINIMUM_SHOULD_MATCH = 1


def match_clause(field: str, value: Any, **extra: Any) -> Dict[str, Any]:
    """Build a single fuzzy match clause against a field."""
    clause = {
        "type": "match",
        "field": field,
        "value": value,
        "prefix_length": PREFIX_LENGTH,
        "fuzziness": FUZZINESS,
        "extended": True,
        "minimum_should_match": MINIMUM_SHOULD_MATCH,
    }
    clause.update(extra)
    return clause


def structured_predicate(query: Mapping[str, Any]) -> Dict[str, Any]:
    """Wrap a caller-supplied full-text query without changing it."""
    return {"$fts": query}


def field_predicate(field: str, value: Any) -> Dict[str, Any]:
    """Predicate matching value against a single field."""
    return {"$fts": {"query": match_clause(field, value)}}


def text_predicate(text: str, fields: Sequence[str]) -> Dict[str, Any]:
    """Predicate matching text against any of the given fields.

    Each field clause requires all tokens of text (operator "and"); the
    clauses are OR-ed together.

    Raises:
        ConfigurationError: If no search fields are given
    """
    if not fields:
        raise ConfigurationError(
            "Full-text search on a bare query string requires "
            "full_text_search_fields to be configured"
        )

    should: List[Dict[str, Any]] = [
        match_clause(field, text, operator="and") for field in fields
    ]
    return {
        "$fts": {
            "query": {
                "type": "bool",
                "should": should,
                "minimum_should_match": MINIMUM_SHOULD_MATCH,
            }
        }
    }
