"""Exception classes for indexing and search."""


class SpacetimeIndexError(Exception):
    """Base exception for all spacetime-index errors."""

    pass


class InvalidMessageError(SpacetimeIndexError, ValueError):
    """Raised when a raw message cannot be decoded."""

    def __init__(self, message: str):
        """Initialize with decoding problem."""
        self.details = message
        super().__init__(f"Invalid message: {message}")


class TranslationError(SpacetimeIndexError):
    """Raised when a single object message cannot become a bulk operation.

    Translation errors are local to one record: the pipeline skips the
    record and keeps going.
    """

    def __init__(self, object_id: str | None, message: str):
        """Initialize with object ID and reason."""
        self.object_id = object_id
        super().__init__(f"Cannot translate object {object_id}: {message}")


class MalformedGeometryError(TranslationError):
    """Raised when centroid or bounding box derivation fails."""

    def __init__(self, object_id: str | None, details: str = ""):
        """Initialize with object ID and details."""
        self.details = details
        message = "malformed geometry"
        if details:
            message += f" ({details})"
        super().__init__(object_id, message)


class DateResolutionError(TranslationError):
    """Raised when a fuzzy date expression cannot be resolved."""

    def __init__(self, object_id: str | None, expression: str, field: str = ""):
        """Initialize with object ID and the offending expression."""
        self.expression = expression
        self.field = field
        target = f"{field} " if field else ""
        super().__init__(object_id, f"cannot resolve {target}date {expression!r}")


class EngineError(SpacetimeIndexError):
    """Raised when the search engine rejects or fails a request."""

    def __init__(self, message: str, status: int | None = None):
        """Initialize with message and optional HTTP status."""
        self.status = status
        super().__init__(message)


class EngineUnavailableError(EngineError):
    """Raised when the search engine cannot be reached."""

    def __init__(self, details: str = ""):
        """Initialize with connection details."""
        message = "Search engine unavailable"
        if details:
            message += f": {details}"
        super().__init__(message)


class IndexAlreadyExistsError(EngineError):
    """Raised when creating an index that already exists."""

    def __init__(self, index: str):
        """Initialize with index name."""
        self.index = index
        super().__init__(f"Index already exists: {index}", status=400)


class IndexNotFoundError(EngineError):
    """Raised when an index does not exist."""

    def __init__(self, index: str):
        """Initialize with index name."""
        self.index = index
        super().__init__(f"Index not found: {index}", status=404)


class ConfigurationError(SpacetimeIndexError, ValueError):
    """Raised when required configuration is missing or invalid."""

    pass


class QueryError(SpacetimeIndexError, ValueError):
    """Raised when search parameters are invalid."""

    def __init__(self, field: str, message: str):
        """Initialize with field and message."""
        self.field = field
        super().__init__(f"Invalid search parameter {field}: {message}")
