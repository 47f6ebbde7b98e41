"""Chainable queries over in-memory content collections."""

__version__ = "0.1.0"

from contentquery.database import Database
from contentquery.query import QueryBuilder, QueryBuilderOptions

__all__ = ["Database", "QueryBuilder", "QueryBuilderOptions", "__version__"]
