"""Keep a spatio-temporal search index in sync with an entity message stream."""

__version__ = "1.0.0"

from .core import (
    Message,
    MessageType,
    PipelineResult,
    SearchParams,
    SpacetimeIndexError,
)
from .indexing import IndexLifecycleManager, OperationTranslator, PipelineExecutor
from .search import QueryBuilder, ResultMapper, SearchService

__all__ = [
    "__version__",
    "Message",
    "MessageType",
    "PipelineResult",
    "SearchParams",
    "SpacetimeIndexError",
    "IndexLifecycleManager",
    "OperationTranslator",
    "PipelineExecutor",
    "QueryBuilder",
    "ResultMapper",
    "SearchService",
]
