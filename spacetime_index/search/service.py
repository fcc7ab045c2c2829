"""Search entry point combining query building, execution and mapping."""

import logging
from typing import Any

from ..core.models import SearchParams
from ..engine.base import SearchEngineClient
from .query import ALL_INDICES, QueryBuilder
from .results import ResultMapper

logger = logging.getLogger(__name__)


class SearchService:
    """Runs structured searches against the engine.

    Engine errors reach the caller unmodified.
    """

    def __init__(
        self,
        engine: SearchEngineClient,
        builder: QueryBuilder | None = None,
        mapper: ResultMapper | None = None,
    ):
        """Initialize search service.

        Args:
            engine: Search engine client
            builder: Query builder (default: 100 hits per page)
            mapper: Result mapper
        """
        self.engine = engine
        self.builder = builder or QueryBuilder()
        self.mapper = mapper or ResultMapper()

    def search(self, params: SearchParams | dict[str, Any]) -> list[dict[str, Any]]:
        """Search for objects matching the parameters.

        Returns:
            Stored documents in engine order, each with its ``dataset``
        """
        query = self.builder.build(params)
        logger.debug("Searching %s: %s", query.index, query.body)
        response = self.engine.search(query.index, query.body)
        return self.mapper.map_hits(response)

    def raw_query(
        self, body: dict[str, Any], index: str = ALL_INDICES
    ) -> dict[str, Any]:
        """Run a native engine query and return the raw response."""
        return self.engine.search(index, body)
