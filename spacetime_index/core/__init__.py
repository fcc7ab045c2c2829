"""Core models, errors and external collaborators."""

from .dates import DateResolver, FuzzyDateResolver
from .exceptions import (
    ConfigurationError,
    DateResolutionError,
    EngineError,
    EngineUnavailableError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    InvalidMessageError,
    MalformedGeometryError,
    QueryError,
    SpacetimeIndexError,
    TranslationError,
)
from .geometry import GeometryDeriver, GeometryExtent, ShapelyGeometryDeriver
from .models import (
    Action,
    BulkOperation,
    Message,
    MessageType,
    ObjectBatch,
    OperationAction,
    PartialBatchFailure,
    PipelineResult,
    PipelineUnit,
    SearchParams,
)

__all__ = [
    # Models
    "Action",
    "BulkOperation",
    "Message",
    "MessageType",
    "ObjectBatch",
    "OperationAction",
    "PartialBatchFailure",
    "PipelineResult",
    "PipelineUnit",
    "SearchParams",
    # Collaborators
    "DateResolver",
    "FuzzyDateResolver",
    "GeometryDeriver",
    "GeometryExtent",
    "ShapelyGeometryDeriver",
    # Errors
    "SpacetimeIndexError",
    "InvalidMessageError",
    "TranslationError",
    "MalformedGeometryError",
    "DateResolutionError",
    "EngineError",
    "EngineUnavailableError",
    "IndexAlreadyExistsError",
    "IndexNotFoundError",
    "ConfigurationError",
    "QueryError",
]
