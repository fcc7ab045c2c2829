"""Mapping of raw engine search responses to result documents."""

from typing import Any


class ResultMapper:
    """Turns search hits into stored documents tagged with their dataset."""

    @staticmethod
    def map_hit(hit: dict[str, Any]) -> dict[str, Any]:
        """Map a single hit; its index name becomes the ``dataset`` field."""
        return {"dataset": hit.get("_index"), **(hit.get("_source") or {})}

    def map_hits(self, response: dict[str, Any]) -> list[dict[str, Any]]:
        """Map every hit of a search response, preserving engine order.

        Scores and raw engine identifiers are dropped.
        """
        hits = (response.get("hits") or {}).get("hits") or []
        return [self.map_hit(hit) for hit in hits]

    @staticmethod
    def total(response: dict[str, Any]) -> int:
        """Get the total hit count reported by the engine."""
        total = (response.get("hits") or {}).get("total", 0)
        if isinstance(total, dict):
            return int(total.get("value", 0))
        return int(total)
