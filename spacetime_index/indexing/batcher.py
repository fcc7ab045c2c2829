"""Grouping of object messages into bulk write batches."""

import logging
from collections.abc import Iterable, Iterator

from ..core.models import Message, MessageType, ObjectBatch, PipelineUnit

logger = logging.getLogger(__name__)


def relevant_messages(messages: Iterable[Message]) -> Iterator[Message]:
    """Drop messages that are neither object nor dataset messages."""
    for message in messages:
        if message.type in (MessageType.OBJECT, MessageType.DATASET):
            yield message
        else:
            logger.debug("Ignoring %s message", message.type.value)


def batch_messages(
    messages: Iterable[Message], max_batch_size: int | None = None
) -> Iterator[PipelineUnit]:
    """Group consecutive object messages, passing dataset messages through.

    Every run of object messages is flushed as one ObjectBatch before the
    next dataset message is yielded, so all writes that precede a lifecycle
    event are complete before the event is processed. Input is consumed
    lazily and order is preserved.

    Args:
        messages: Object and dataset messages in stream order
        max_batch_size: Optional upper bound on the size of one batch

    Yields:
        ObjectBatch for each run of object messages, and each dataset
        message unchanged
    """
    if max_batch_size is not None and max_batch_size < 1:
        raise ValueError("max_batch_size must be at least 1")

    pending: list[Message] = []

    for message in messages:
        if message.type == MessageType.OBJECT:
            pending.append(message)
            if max_batch_size is not None and len(pending) >= max_batch_size:
                yield ObjectBatch(tuple(pending))
                pending = []
            continue

        if pending:
            yield ObjectBatch(tuple(pending))
            pending = []
        yield message

    if pending:
        yield ObjectBatch(tuple(pending))
