import copy
import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional

from contentquery.collection.operators import _MISSING, get_field, matches
from contentquery.query.exceptions import InvalidQueryError

logger = logging.getLogger(__name__)

# Internal bookkeeping fields stripped by ResultSet.data(remove_meta=True)
META_FIELDS = ("$loki", "meta")


class Collection:
    """In-memory document collection."""

    def __init__(self, name: str, documents: Optional[Iterable[Mapping[str, Any]]] = None):
        """Initialize collection.

        Args:
            name: Collection name (used in log messages)
            documents: Optional documents to insert immediately
        """
        self.name = name
        self._documents: List[Dict[str, Any]] = []
        self._next_id = 1

        if documents is not None:
            self.insert_many(documents)

    def insert(self, document: Mapping[str, Any]) -> Dict[str, Any]:
        """Insert a copy of a document, assigning internal metadata.

        Returns:
            The stored document including its metadata fields
        """
        if not isinstance(document, Mapping):
            raise InvalidQueryError(
                f"Documents must be mappings, got {type(document).__name__}"
            )

        stored = dict(document)
        stored["$loki"] = self._next_id
        stored["meta"] = {"created": int(time.time() * 1000), "revision": 0}
        self._next_id += 1
        self._documents.append(stored)
        return stored

    def insert_many(self, documents: Iterable[Mapping[str, Any]]) -> int:
        """Insert several documents. Returns number inserted."""
        count = 0
        for document in documents:
            self.insert(document)
            count += 1
        logger.debug(f"Inserted {count} documents into {self.name}")
        return count

    def chain(self) -> "ResultSet":
        """Start a new query over every document in insertion order."""
        return ResultSet(self)

    def count(self, predicate: Optional[Mapping[str, Any]] = None) -> int:
        """Count documents, optionally matching a predicate."""
        if predicate is None:
            return len(self._documents)
        return sum(1 for doc in self._documents if matches(doc, predicate))

    def __len__(self) -> int:
        return len(self._documents)

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, documents={len(self._documents)})"


def _sort_key(field: str):
    def key(document: Mapping[str, Any]):
        value = get_field(document, field)
        if value is _MISSING or value is None:
            return (0, "", 0)
        # Numbers compare with each other regardless of int/float
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return (1, "number", value)
        return (1, type(value).__name__, value)
    return key


class ResultSet:
    """Chainable query handle over a Collection.

    Every narrowing method mutates the result set and returns it, so calls
    can be chained. Documents are only copied when data() is called.
    """

    def __init__(self, collection: Collection):
        self.collection = collection
        self._documents: List[Dict[str, Any]] = list(collection._documents)

    def find(self, predicate: Optional[Mapping[str, Any]] = None) -> "ResultSet":
        """Keep only documents matching the predicate."""
        if not predicate:
            return self
        self._documents = [doc for doc in self._documents if matches(doc, predicate)]
        return self

    def simplesort(self, field: str, desc: bool = False) -> "ResultSet":
        """Sort by a single field. The sort is stable."""
        key = _sort_key(field)
        try:
            self._documents.sort(key=key, reverse=desc)
        except TypeError as e:
            raise InvalidQueryError(f"Cannot sort on field {field!r}: {e}") from e
        return self

    def limit(self, n: int) -> "ResultSet":
        """Keep at most n documents."""
        self._documents = self._documents[:n]
        return self

    def offset(self, n: int) -> "ResultSet":
        """Skip the first n documents."""
        self._documents = self._documents[n:]
        return self

    def count(self) -> int:
        return len(self._documents)

    def data(self, remove_meta: bool = False) -> List[Dict[str, Any]]:
        """Materialize the result set as detached copies.

        Args:
            remove_meta: Strip internal metadata fields from each document

        Returns:
            List of document dictionaries
        """
        results = copy.deepcopy(self._documents)
        if remove_meta:
            for document in results:
                for field in META_FIELDS:
                    document.pop(field, None)
        return results
