class QueryError(Exception):
    """Raised for errors while building or executing a content query."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause


class NotFoundError(QueryError):
    """Raised when a query yields no result container."""

    def __init__(self, path: str):
        super().__init__(f"{path} not found")
        self.path = path


class InvalidQueryError(QueryError):
    """Raised for invalid builder arguments or malformed predicates."""

    def __init__(self, message: str):
        super().__init__(message)


class ConfigurationError(QueryError):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message, cause)
