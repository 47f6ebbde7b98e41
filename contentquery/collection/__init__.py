"""In-memory document collection backing the query builder."""

from contentquery.collection.collection import META_FIELDS, Collection, ResultSet
from contentquery.collection.fulltext import edit_distance, tokenize
from contentquery.collection.operators import matches

__all__ = [
    "Collection",
    "ResultSet",
    "META_FIELDS",
    "matches",
    "tokenize",
    "edit_distance",
]
