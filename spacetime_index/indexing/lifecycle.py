"""Dataset index lifecycle and alias management."""

import logging
from typing import Any

from ..core.exceptions import IndexAlreadyExistsError, TranslationError
from ..core.models import Action, Message, MessageType
from ..engine.base import SearchEngineClient
from .mapping import build_mapping

logger = logging.getLogger(__name__)


class IndexLifecycleManager:
    """Creates and deletes dataset indices and manages aliases."""

    def __init__(self, engine: SearchEngineClient):
        """Initialize lifecycle manager.

        Args:
            engine: Search engine client
        """
        self.engine = engine

    def create(self, dataset_id: str, mapping: dict[str, Any] | None = None) -> bool:
        """Create the index for a dataset.

        Creating an index that already exists is not an error.

        Args:
            dataset_id: Dataset identifier, used as index name
            mapping: Index mapping (default: base mapping)

        Returns:
            True if the index was created, False if it already existed
        """
        try:
            self.engine.create_index(dataset_id, mapping or build_mapping())
        except IndexAlreadyExistsError:
            logger.info("Index %s already exists", dataset_id)
            return False

        logger.info("Created index %s", dataset_id)
        return True

    def delete(self, dataset_id: str) -> None:
        """Delete the index for a dataset.

        Raises:
            IndexNotFoundError: If the index does not exist
        """
        self.engine.delete_index(dataset_id)
        logger.info("Deleted index %s", dataset_id)

    def delete_indices(self, dataset_ids: list[str] | None = None) -> None:
        """Delete several indices at once; every index when none are given."""
        index = ",".join(dataset_ids) if dataset_ids else "*"
        self.engine.delete_index(index)
        logger.info("Deleted indices %s", index)

    def build_mapping(self, jsonld_context: dict[str, Any] | None = None) -> dict:
        """Build the mapping for a dataset from its JSON-LD context."""
        return build_mapping(jsonld_context)

    def apply(self, message: Message) -> None:
        """Execute a dataset lifecycle message.

        Raises:
            TranslationError: If the message is not a usable dataset message
            EngineError: If the engine call fails (already-exists excepted)
        """
        dataset_id = message.dataset
        if message.type != MessageType.DATASET or not dataset_id:
            raise TranslationError(dataset_id, "not a dataset message with an id")

        match message.action:
            case Action.CREATE:
                mapping = self.build_mapping(message.payload.get("jsonldContext"))
                self.create(dataset_id, mapping)
            case Action.DELETE:
                self.delete(dataset_id)
            case Action.UPDATE | None:
                logger.debug("No index change for dataset %s", dataset_id)

    def swap_alias(self, old_index: str, new_index: str, alias: str) -> None:
        """Atomically move an alias from one index to another."""
        self.engine.update_aliases(
            [
                {"remove": {"index": old_index, "alias": alias}},
                {"add": {"index": new_index, "alias": alias}},
            ]
        )
        logger.info("Alias %s moved from %s to %s", alias, old_index, new_index)

    def put_alias(self, index: str, alias: str) -> None:
        """Point an alias at an index."""
        self.engine.put_alias(index, alias)
        logger.info("Alias %s points at %s", alias, index)

    def get_aliased_index(self, alias: str) -> str | None:
        """Get the index currently behind an alias."""
        response = self.engine.get_alias(alias)
        return next(iter(response), None)
