"""Pipeline that keeps dataset indices in sync with a message stream."""

import logging
from collections.abc import Iterable

from ..core.exceptions import SpacetimeIndexError
from ..core.models import (
    Message,
    ObjectBatch,
    PartialBatchFailure,
    PipelineResult,
)
from ..engine.base import SearchEngineClient
from .batcher import batch_messages, relevant_messages
from .lifecycle import IndexLifecycleManager
from .translator import OperationTranslator

logger = logging.getLogger(__name__)


class PipelineExecutor:
    """Executes batched writes and lifecycle operations strictly in order.

    A unit only starts once the engine call of the previous unit has
    returned: documents for a dataset are never written before its index
    exists, and an index is never deleted while writes for it are pending.
    """

    def __init__(
        self,
        engine: SearchEngineClient,
        translator: OperationTranslator | None = None,
        lifecycle: IndexLifecycleManager | None = None,
        max_batch_size: int | None = None,
    ):
        """Initialize pipeline executor.

        Args:
            engine: Search engine client shared by all units
            translator: Object message translator
            lifecycle: Index lifecycle manager (default: one on ``engine``)
            max_batch_size: Optional upper bound on documents per bulk write
        """
        self.engine = engine
        self.translator = translator or OperationTranslator()
        self.lifecycle = lifecycle or IndexLifecycleManager(engine)
        self.max_batch_size = max_batch_size
        self.run_count = 0
        self.indexed_count = 0
        self.skipped_count = 0
        self.error_count = 0

    def run(self, messages: Iterable[Message]) -> PipelineResult:
        """Run the pipeline over a message stream.

        Execution stops at the first fatal error, which is returned rather
        than raised. Units applied before the error are not rolled back.

        Args:
            messages: Messages in stream order; consumed lazily

        Returns:
            PipelineResult with counters and the first fatal error, if any
        """
        result = PipelineResult()

        try:
            units = batch_messages(relevant_messages(messages), self.max_batch_size)
            for unit in units:
                result.units += 1
                if isinstance(unit, ObjectBatch):
                    self._write_batch(unit, result)
                else:
                    self.lifecycle.apply(unit)
        except SpacetimeIndexError as e:
            logger.error("Pipeline stopped after %d units: %s", result.units, e)
            result.error = e

        self.run_count += 1
        self.indexed_count += result.indexed
        self.skipped_count += result.skipped
        self.error_count += 0 if result.success else 1
        return result

    def run_or_raise(self, messages: Iterable[Message]) -> PipelineResult:
        """Run the pipeline and raise its first fatal error.

        Raises:
            SpacetimeIndexError: The first fatal error of the run
        """
        result = self.run(messages)
        if result.error is not None:
            raise result.error
        return result

    def _write_batch(self, batch: ObjectBatch, result: PipelineResult) -> None:
        """Translate a batch and submit it as one bulk write."""
        operations, errors = self.translator.translate_batch(batch.messages)
        result.skipped += len(errors)
        result.record_errors.extend(str(e) for e in errors)

        if not operations:
            return

        response = self.engine.write_operations(operations)
        result.batches += 1

        failure = PartialBatchFailure.from_response(response)
        logger.info(
            "%d indexed, took %dms, errors: %s",
            len(response.get("items") or []),
            response.get("took", 0),
            bool(response.get("errors")),
        )

        failed = 0
        if failure:
            failed = failure.failed
            result.failed_items += failed
            result.record_errors.extend(failure.reasons)
            logger.warning(
                "%d of %d documents rejected by the engine",
                failure.failed,
                failure.total,
            )
        result.indexed += len(operations) - failed

    def get_statistics(self) -> dict[str, int]:
        """Get processing statistics across runs.

        Returns:
            Dictionary with processing counts
        """
        return {
            "run_count": self.run_count,
            "indexed_count": self.indexed_count,
            "skipped_count": self.skipped_count,
            "error_count": self.error_count,
        }

    def reset_statistics(self) -> None:
        """Reset processing statistics."""
        self.run_count = 0
        self.indexed_count = 0
        self.skipped_count = 0
        self.error_count = 0
