"""Compilation of structured search parameters into engine queries."""

from dataclasses import dataclass, field
from typing import Any

from ..core.dates import DateResolver
from ..core.exceptions import DateResolutionError, QueryError
from ..core.models import DEFAULT_PAGE_SIZE, BoundingBox, SearchParams

MAX_PAGE_SIZE = 1000
ALL_INDICES = "*"


@dataclass
class EngineQuery:
    """A compiled query: the index expression and the request body."""

    index: str
    body: dict[str, Any] = field(default_factory=dict)


class QueryBuilder:
    """Builds boolean/geospatial engine queries from SearchParams.

    Every present parameter adds one clause to a top-level ``bool.must``
    list, so all constraints must hold. Within the type clause and within
    each box clause alternatives are OR-ed.
    """

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        date_resolver: DateResolver | None = None,
    ):
        """Initialize query builder.

        Args:
            page_size: Default number of hits per page
            date_resolver: Resolves ``before``/``after`` expressions; values
                are passed through unchanged when omitted
        """
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = min(page_size, MAX_PAGE_SIZE)
        self.date_resolver = date_resolver

    def build(self, params: SearchParams | dict[str, Any]) -> EngineQuery:
        """Build the engine query for a search.

        Args:
            params: Search parameters or a plain mapping of them

        Returns:
            EngineQuery addressing the selected datasets

        Raises:
            QueryError: If the parameters are invalid
        """
        if not isinstance(params, SearchParams):
            params = SearchParams.from_dict(params)

        must: list[dict[str, Any]] = []

        if params.name:
            must.append(self.name_clause(params.name, params.exact))
        if params.type:
            must.append(self.type_clause(params.type))
        if params.geometry:
            must.append(self.box_clause(params.geometry))
        if params.contains:
            must.append(self.box_clause(params.contains))
        if params.before:
            before = self._resolve_date("before", params.before, latest=True)
            must.append({"range": {"validSince": {"lte": before}}})
        if params.after:
            after = self._resolve_date("after", params.after, latest=False)
            must.append({"range": {"validUntil": {"gte": after}}})

        query = {"bool": {"must": must}} if must else {"match_all": {}}

        size = self.page_size if params.size is None else params.size
        body: dict[str, Any] = {"query": query, "size": min(size, MAX_PAGE_SIZE)}
        if params.offset:
            body["from"] = params.offset

        index = ",".join(params.dataset) if params.dataset else ALL_INDICES
        return EngineQuery(index=index, body=body)

    @staticmethod
    def name_clause(name: str, exact: bool = False) -> dict[str, Any]:
        """Free-text match on the name, exact or analyzed."""
        target = "name.exact" if exact else "name.analyzed"
        return {"query_string": {"query": name, "fields": [target]}}

    @staticmethod
    def type_clause(types: list[str]) -> dict[str, Any]:
        """Match any of the given object types."""
        return {
            "bool": {
                "should": [{"term": {"type": value}} for value in types],
                "minimum_should_match": 1,
            }
        }

    @staticmethod
    def box_clause(box: BoundingBox) -> dict[str, Any]:
        """Match objects with either stored corner inside the box.

        The two input corners may describe either diagonal; they are
        normalized to a north-west/south-east pair.
        """
        (lon1, lat1), (lon2, lat2) = box
        bounds = {
            "top_left": [min(lon1, lon2), max(lat1, lat2)],
            "bottom_right": [max(lon1, lon2), min(lat1, lat2)],
        }
        return {
            "bool": {
                "should": [
                    {"geo_bounding_box": {"northWest": dict(bounds)}},
                    {"geo_bounding_box": {"southEast": dict(bounds)}},
                ],
                "minimum_should_match": 1,
            }
        }

    def _resolve_date(self, field_name: str, expression: str, latest: bool) -> str:
        if self.date_resolver is None:
            return expression
        try:
            earliest, last = self.date_resolver.resolve(expression)
        except DateResolutionError as e:
            raise QueryError(field_name, str(e)) from e
        return last if latest else earliest
