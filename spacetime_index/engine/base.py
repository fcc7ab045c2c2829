"""Base search engine client interface."""

from abc import ABC, abstractmethod
from typing import Any

from ..core.models import BulkOperation


class SearchEngineClient(ABC):
    """Abstract interface to the document search engine.

    Calls are issued one at a time by the indexing pipeline, so a single
    client instance is shared by every component.
    """

    include_type_in_bulk: bool = False

    @abstractmethod
    def create_index(self, index: str, body: dict[str, Any]) -> None:
        """Create an index.

        Args:
            index: Index name
            body: Settings and mappings

        Raises:
            IndexAlreadyExistsError: If the index exists
            EngineError: If the engine rejects the request
        """
        pass

    @abstractmethod
    def delete_index(self, index: str) -> None:
        """Delete one index, a comma separated list, or ``*``.

        Raises:
            IndexNotFoundError: If the index does not exist
            EngineError: If the engine rejects the request
        """
        pass

    @abstractmethod
    def bulk_write(self, actions: list[dict[str, Any]]) -> dict[str, Any]:
        """Execute a bulk write.

        Args:
            actions: Flat list of action descriptors, each followed by its
                document unless it is a delete

        Returns:
            Engine response with ``took``, ``errors`` and ``items``

        Raises:
            EngineError: If the request as a whole fails
        """
        pass

    @abstractmethod
    def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        """Execute a search.

        Args:
            index: Index expression (name, comma separated list, or ``*``)
            body: Native query body

        Returns:
            Engine response with ``hits.hits``
        """
        pass

    @abstractmethod
    def update_aliases(self, actions: list[dict[str, Any]]) -> None:
        """Apply alias add/remove actions atomically."""
        pass

    @abstractmethod
    def put_alias(self, index: str, alias: str) -> None:
        """Point an alias at an index."""
        pass

    @abstractmethod
    def get_alias(self, alias: str) -> dict[str, Any]:
        """Get the indices behind an alias.

        Returns:
            Mapping of index name to alias metadata
        """
        pass

    def write_operations(self, operations: list[BulkOperation]) -> dict[str, Any]:
        """Render bulk operations and submit them as one bulk write."""
        actions: list[dict[str, Any]] = []
        for operation in operations:
            actions.extend(operation.to_actions(self.include_type_in_bulk))
        return self.bulk_write(actions)

    def close(self) -> None:
        """Release connections held by the client."""
        return None
