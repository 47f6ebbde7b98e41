"""Chainable query builder over content collections."""

from contentquery.query.builder import QueryBuilder
from contentquery.query.models import DEFAULT_FULL_TEXT_SEARCH_FIELDS, QueryBuilderOptions
from contentquery.query.steps import (
    PostprocessStep,
    StripFields,
    Project,
    Surround,
    First,
)
from contentquery.query.exceptions import (
    QueryError,
    NotFoundError,
    InvalidQueryError,
    ConfigurationError,
)

__all__ = [
    "QueryBuilder",
    "QueryBuilderOptions",
    "DEFAULT_FULL_TEXT_SEARCH_FIELDS",
    "PostprocessStep",
    "StripFields",
    "Project",
    "Surround",
    "First",
    "QueryError",
    "NotFoundError",
    "InvalidQueryError",
    "ConfigurationError",
]
