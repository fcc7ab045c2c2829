"""Translation of object messages into bulk write operations."""

import copy
import logging
from collections.abc import Iterable
from typing import Any

from ..core.dates import DateResolver, FuzzyDateResolver
from ..core.exceptions import (
    DateResolutionError,
    MalformedGeometryError,
    TranslationError,
)
from ..core.geometry import GeometryDeriver, ShapelyGeometryDeriver
from ..core.models import Action, BulkOperation, Message, MessageType, OperationAction

logger = logging.getLogger(__name__)


class OperationTranslator:
    """Converts object messages into bulk operations against dataset indices.

    Translation is a pure transform: the message payload is copied, never
    rewritten in place.
    """

    def __init__(
        self,
        geometry_deriver: GeometryDeriver | None = None,
        date_resolver: DateResolver | None = None,
    ):
        """Initialize translator.

        Args:
            geometry_deriver: Centroid/bounding box provider (default: shapely)
            date_resolver: Fuzzy date resolver (default: FuzzyDateResolver)
        """
        self.geometry_deriver = geometry_deriver or ShapelyGeometryDeriver()
        self.date_resolver = date_resolver or FuzzyDateResolver()

    def translate(self, message: Message) -> BulkOperation:
        """Convert one object message into a bulk operation.

        Args:
            message: Object message to translate

        Returns:
            Upsert for create/update, id-only delete for delete

        Raises:
            TranslationError: If the message cannot be translated; the
                subclasses MalformedGeometryError and DateResolutionError
                identify bad geometry and bad dates
        """
        object_id = message.object_id

        if message.type != MessageType.OBJECT:
            raise TranslationError(
                object_id, f"not an object message: {message.type.value}"
            )
        if object_id is None:
            raise TranslationError(None, "payload has no id")
        if not message.meta.get("dataset"):
            raise TranslationError(object_id, "meta has no dataset")

        match message.action:
            case Action.CREATE | Action.UPDATE:
                operation = OperationAction.INDEX
                document = self.build_document(message.payload, object_id)
            case Action.DELETE:
                operation = OperationAction.DELETE
                document = None
            case _:
                raise TranslationError(
                    object_id, f"unsupported action: {message.action}"
                )

        return BulkOperation(
            action=operation,
            index=str(message.meta["dataset"]),
            doc_id=object_id,
            doc_type=message.payload.get("type"),
            document=document,
        )

    def translate_batch(
        self, messages: Iterable[Message]
    ) -> tuple[list[BulkOperation], list[TranslationError]]:
        """Translate messages independently.

        A failing message is left out of the operations; its error is
        collected instead of aborting the batch.

        Returns:
            Tuple of (operations, errors)
        """
        operations = []
        errors = []

        for message in messages:
            try:
                operations.append(self.translate(message))
            except TranslationError as e:
                logger.warning("Skipping object: %s", e)
                errors.append(e)

        return operations, errors

    def build_document(
        self, payload: dict[str, Any], object_id: str
    ) -> dict[str, Any]:
        """Build the stored document for an object payload.

        Args:
            payload: Object payload from the message
            object_id: Identifier used in error reports

        Returns:
            New document with geometry corners and resolved dates
        """
        document = copy.deepcopy(payload)

        if payload.get("geometry") is not None:
            document.update(self._geometry_fields(payload["geometry"], object_id))

        if payload.get("validSince"):
            document["validSince"] = self._resolve(
                payload["validSince"], object_id, "validSince"
            )[0]

        if payload.get("validUntil"):
            document["validUntil"] = self._resolve(
                payload["validUntil"], object_id, "validUntil"
            )[1]

        return document

    def _geometry_fields(self, geometry: Any, object_id: str) -> dict[str, Any]:
        """Derive centroid and corner points ([lon, lat] order)."""
        try:
            extent = self.geometry_deriver.derive(geometry)
        except MalformedGeometryError as e:
            raise MalformedGeometryError(object_id, e.details) from e

        return {
            "centroid": list(extent.centroid),
            "northWest": extent.north_west,
            "southEast": extent.south_east,
        }

    def _resolve(
        self, expression: Any, object_id: str, field: str
    ) -> tuple[str, str]:
        try:
            return self.date_resolver.resolve(expression)
        except DateResolutionError as e:
            raise DateResolutionError(object_id, e.expression, field) from e

