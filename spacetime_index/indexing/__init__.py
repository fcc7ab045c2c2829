"""Indexing subsystem: batching, translation, index lifecycle and execution."""

from .batcher import batch_messages, relevant_messages
from .lifecycle import IndexLifecycleManager
from .mapping import base_mapping, build_mapping, context_properties
from .pipeline import PipelineExecutor
from .translator import OperationTranslator

__all__ = [
    "batch_messages",
    "relevant_messages",
    "OperationTranslator",
    "IndexLifecycleManager",
    "PipelineExecutor",
    "base_mapping",
    "build_mapping",
    "context_properties",
]
