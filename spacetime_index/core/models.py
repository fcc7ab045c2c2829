"""Core data models for messages, bulk operations and search parameters.

Messages arrive from an external stream, are consumed exactly once and are
never mutated. Everything derived from them (bulk operations, pipeline
units) is built fresh, so the models here are immutable msgspec Structs
or frozen dataclasses.

Key components:
- Message: One lifecycle event for a dataset or for an object inside it
- BulkOperation: One upsert/delete unit of a bulk write request
- ObjectBatch: A run of consecutive object messages flushed together
- SearchParams: Structured search request accepted by the query builder
- PipelineResult: Completion signal of a pipeline run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import msgspec

from .exceptions import InvalidMessageError, QueryError

DEFAULT_PAGE_SIZE = 100

Coordinate = tuple[float, float]
BoundingBox = tuple[Coordinate, Coordinate]


class MessageType(str, Enum):
    """Kinds of messages found in the input stream."""

    OBJECT = "object"
    DATASET = "dataset"
    OTHER = "other"


class Action(str, Enum):
    """Lifecycle action carried by a message."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OperationAction(str, Enum):
    """Bulk write action kinds understood by the engine."""

    INDEX = "index"
    DELETE = "delete"


class Message(msgspec.Struct, frozen=True, kw_only=True):
    """A single entity lifecycle event.

    ``meta["dataset"]`` names the index that owns the object; for dataset
    messages ``payload["id"]`` is the dataset (and index) identifier.
    """

    type: MessageType
    action: Action | None = None
    payload: dict[str, Any] = msgspec.field(default_factory=dict)
    meta: dict[str, Any] = msgspec.field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        """Decode a raw message mapping.

        Messages of unknown type decode to ``MessageType.OTHER`` so that they
        can be filtered out instead of aborting the stream.

        Raises:
            InvalidMessageError: If the mapping is not a valid message
        """
        if not isinstance(data, dict):
            raise InvalidMessageError(f"expected an object, got {type(data).__name__}")

        raw_type = data.get("type")
        if raw_type not in (MessageType.OBJECT.value, MessageType.DATASET.value):
            raw_action = data.get("action")
            action = None
            if isinstance(raw_action, str) and raw_action in {a.value for a in Action}:
                action = Action(raw_action)
            payload = data.get("payload")
            meta = data.get("meta")
            return cls(
                type=MessageType.OTHER,
                action=action,
                payload=payload if isinstance(payload, dict) else {},
                meta=meta if isinstance(meta, dict) else {},
            )

        try:
            return msgspec.convert(data, cls)
        except msgspec.ValidationError as e:
            raise InvalidMessageError(str(e)) from e

    @property
    def dataset(self) -> str | None:
        """Get the dataset (index) this message belongs to."""
        if self.type == MessageType.DATASET:
            return self.payload.get("id")
        return self.meta.get("dataset")

    @property
    def object_id(self) -> str | None:
        """Get the identifier of the payload."""
        value = self.payload.get("id")
        return str(value) if value is not None else None


class BulkOperation(msgspec.Struct, frozen=True, kw_only=True):
    """One action of a bulk write: a descriptor plus an optional document.

    The document is omitted for deletes.
    """

    action: OperationAction
    index: str
    doc_id: str
    doc_type: str | None = None
    document: dict[str, Any] | None = None

    def to_actions(self, include_type: bool = False) -> list[dict[str, Any]]:
        """Render the flat wire form used by bulk write requests.

        Args:
            include_type: Emit ``_type`` in the descriptor (engines with mapping types)

        Returns:
            ``[descriptor]`` for deletes, ``[descriptor, document]`` otherwise
        """
        descriptor: dict[str, Any] = {"_index": self.index, "_id": self.doc_id}
        if include_type and self.doc_type:
            descriptor["_type"] = self.doc_type

        actions: list[dict[str, Any]] = [{self.action.value: descriptor}]
        if self.action != OperationAction.DELETE:
            actions.append(self.document or {})
        return actions


@dataclass(frozen=True)
class ObjectBatch:
    """Consecutive object messages that are written with one bulk request."""

    messages: tuple[Message, ...]

    @property
    def type(self) -> str:
        return "objects"

    def __len__(self) -> int:
        return len(self.messages)


PipelineUnit = ObjectBatch | Message


class SearchParams(msgspec.Struct, frozen=True, kw_only=True):
    """Structured search request.

    All fields are optional; an absent field places no constraint on that
    axis. Boxes are two ``[lon, lat]`` corners.
    """

    name: str | None = None
    exact: bool = False
    type: list[str] | None = None
    geometry: BoundingBox | None = None
    contains: BoundingBox | None = None
    before: str | None = None
    after: str | None = None
    dataset: list[str] | None = None
    size: int | None = None
    offset: int = 0

    def __post_init__(self):
        """Validate ranges that the type system cannot express."""
        for field_name in ("geometry", "contains"):
            box = getattr(self, field_name)
            if box is None:
                continue
            for lon, lat in box:
                if not -180.0 <= lon <= 180.0:
                    raise QueryError(field_name, f"longitude {lon} out of range")
                if not -90.0 <= lat <= 90.0:
                    raise QueryError(field_name, f"latitude {lat} out of range")

        if self.size is not None and self.size < 0:
            raise QueryError("size", "must not be negative")
        if self.offset < 0:
            raise QueryError("offset", "must not be negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchParams:
        """Build search parameters from a plain mapping.

        Raises:
            QueryError: If a parameter has the wrong shape or value
        """
        try:
            return msgspec.convert(data, cls)
        except msgspec.ValidationError as e:
            raise QueryError("params", str(e)) from e


@dataclass(frozen=True)
class PartialBatchFailure:
    """Per-document failures reported inside an accepted bulk write."""

    failed: int
    total: int
    reasons: list[str] = field(default_factory=list)

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> PartialBatchFailure | None:
        """Extract item failures from a bulk response.

        Returns:
            None if every item succeeded
        """
        if not response.get("errors"):
            return None

        items = response.get("items") or []
        reasons = []
        for item in items:
            for outcome in item.values():
                error = outcome.get("error")
                if error:
                    if isinstance(error, dict):
                        reason = error.get("reason") or error.get("type", "unknown")
                    else:
                        reason = str(error)
                    reasons.append(f"{outcome.get('_id')}: {reason}")

        return cls(failed=len(reasons), total=len(items), reasons=reasons)


@dataclass
class PipelineResult:
    """Outcome of a pipeline run.

    ``error`` holds the first fatal error; everything applied before it
    stays applied.
    """

    error: Exception | None = None
    units: int = 0
    batches: int = 0
    indexed: int = 0
    skipped: int = 0
    failed_items: int = 0
    record_errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the run completed without a fatal error."""
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "success": self.success,
            "units": self.units,
            "batches": self.batches,
            "indexed": self.indexed,
            "skipped": self.skipped,
            "failed_items": self.failed_items,
        }
        if self.error is not None:
            result["error"] = str(self.error)
        if self.record_errors:
            result["record_errors"] = list(self.record_errors)
        return result
