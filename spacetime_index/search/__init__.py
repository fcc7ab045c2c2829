"""Structured search over indexed objects."""

from .query import EngineQuery, QueryBuilder
from .results import ResultMapper
from .service import SearchService

__all__ = [
    "EngineQuery",
    "QueryBuilder",
    "ResultMapper",
    "SearchService",
]
