import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from contentquery.query.exceptions import InvalidQueryError, NotFoundError
from contentquery.query.models import QueryBuilderOptions
from contentquery.query.search import field_predicate, structured_predicate, text_predicate
from contentquery.query.steps import PostprocessStep, Project, StripFields, Surround

logger = logging.getLogger(__name__)

# Fields never returned by fetch
HIDDEN_FIELDS = ["text"]


def _to_count(n: Union[int, str], name: str) -> int:
    """Validate a limit/skip argument, parsing numeric strings."""
    if isinstance(n, bool):
        raise InvalidQueryError(f"{name} must be an integer, got {n!r}")
    if isinstance(n, str):
        try:
            n = int(n.strip())
        except ValueError:
            raise InvalidQueryError(f"{name} must be an integer, got {n!r}") from None
    if not isinstance(n, int):
        raise InvalidQueryError(f"{name} must be an integer, got {type(n).__name__}")
    if n < 0:
        raise InvalidQueryError(f"{name} must not be negative, got {n}")
    return n


class QueryBuilder:
    """Chainable query over a collection result set.

    Every method except fetch() narrows the query or queues a postprocess
    step and returns the builder itself:

        docs = await (
            builder.where({"category": "news"})
            .sort_by("date", "desc")
            .limit(5)
            .fetch()
        )

    A builder is meant for a single query; create a new one per fetch.
    """

    def __init__(
        self,
        query,
        path: str,
        postprocess: Optional[Iterable[PostprocessStep]] = None,
        options: Optional[Union[QueryBuilderOptions, Mapping[str, Any]]] = None,
    ):
        """Initialize QueryBuilder.

        Args:
            query: Result set handle supporting find/simplesort/limit/offset/data
            path: Identifier of the queried dataset, used in error messages
            postprocess: Optional steps to run on the fetched documents
            options: QueryBuilderOptions or mapping with full_text_search_fields
        """
        self.query = query
        self.path = path
        self.options = QueryBuilderOptions.from_value(options)
        self.keys: Optional[List[str]] = None

        # Text removal always runs first
        self.postprocess: List[PostprocessStep] = [StripFields(HIDDEN_FIELDS)]
        self.postprocess.extend(postprocess or [])

    def only(self, keys: Union[str, Iterable[str]]) -> "QueryBuilder":
        """Select a subset of fields.

        Args:
            keys: Field name or iterable of field names

        Returns:
            The builder, for chaining
        """
        if isinstance(keys, str):
            keys = [keys]
        # Ordered, without duplicates
        self.keys = list(dict.fromkeys(keys))
        logger.debug(f"{self.path}: only {self.keys}")
        return self

    def sort_by(self, field: str, direction: Optional[str] = None) -> "QueryBuilder":
        """Sort results on a field.

        Args:
            field: Field key to sort on
            direction: "desc" for descending, anything else for ascending

        Returns:
            The builder, for chaining
        """
        desc = direction == "desc"
        self.query = self.query.simplesort(field, desc=desc)
        logger.debug(f"{self.path}: sort by {field} {'desc' if desc else 'asc'}")
        return self

    def where(self, predicate: Mapping[str, Any]) -> "QueryBuilder":
        """Filter results. Successive calls are combined with AND logic."""
        self.query = self.query.find(predicate)
        logger.debug(f"{self.path}: where {predicate}")
        return self

    def search(self, query: Union[str, Mapping[str, Any]], value: Any = None) -> "QueryBuilder":
        """Full-text search.

        Args:
            query: Structured full-text query, field name, or search text
            value: Search value when query is a field name

        Returns:
            The builder, for chaining
        """
        if isinstance(query, Mapping):
            return self.search_query(query)
        if value is not None:
            return self.search_field(query, value)
        return self.search_text(query)

    def search_query(self, query: Mapping[str, Any]) -> "QueryBuilder":
        """Search with a structured full-text query, passed through as is."""
        return self.where(structured_predicate(query))

    def search_field(self, field: str, value: Any) -> "QueryBuilder":
        """Fuzzy search on a single field.

        Raises:
            InvalidQueryError: If value is empty
        """
        if isinstance(value, str) and not value.strip():
            raise InvalidQueryError(f"Search value for field {field!r} must not be empty")
        return self.where(field_predicate(field, value))

    def search_text(self, text: str) -> "QueryBuilder":
        """Fuzzy search across the configured full-text search fields.

        Raises:
            ConfigurationError: If no full_text_search_fields are configured
        """
        return self.where(text_predicate(text, self.options.full_text_search_fields))

    def surround(self, slug: str, before: int = 1, after: int = 1) -> "QueryBuilder":
        """Replace results with the neighbours of the document with slug.

        Args:
            slug: Slug of the document to surround
            before: Number of preceding documents
            after: Number of following documents

        Returns:
            The builder, for chaining
        """
        before = _to_count(before, "before")
        after = _to_count(after, "after")

        # Windowing looks documents up by slug
        if self.keys is not None and "slug" not in self.keys:
            self.keys.append("slug")

        self.postprocess.append(Surround(slug, before=before, after=after))
        logger.debug(f"{self.path}: surround {slug} ({before} before, {after} after)")
        return self

    def limit(self, n: Union[int, str]) -> "QueryBuilder":
        """Limit number of results. Accepts an int or numeric string."""
        self.query = self.query.limit(_to_count(n, "limit"))
        return self

    def skip(self, n: Union[int, str]) -> "QueryBuilder":
        """Skip a number of results. Accepts an int or numeric string."""
        self.query = self.query.offset(_to_count(n, "skip"))
        return self

    def pipeline(self) -> List[PostprocessStep]:
        """Return the postprocess steps fetch() will apply, in order."""
        steps = list(self.postprocess)
        if self.keys is not None:
            keys = list(self.keys)
            if "slug" not in keys and any(isinstance(s, Surround) for s in steps):
                keys.append("slug")
            # Projection runs right after text removal
            steps.insert(1, Project(keys))
        return steps

    async def fetch(self) -> Union[List[Optional[Dict[str, Any]]], Dict[str, Any]]:
        """Collect data and apply postprocess steps.

        Returns:
            Processed documents (or a single document for single-document queries)

        Raises:
            NotFoundError: If the query produced no result
        """
        data = self.query.data(remove_meta=True)
        if data is None:
            raise NotFoundError(self.path)
        logger.debug(f"{self.path}: fetched {len(data)} documents")

        for step in self.pipeline():
            data = step(data)
            logger.debug(f"{self.path}: applied {step!r}")
            # Later steps only ever see a result container
            if data is None:
                raise NotFoundError(self.path)

        return data
