"""Pytest configuration and fixtures."""

import os

import pytest

from spacetime_index.core.models import Action, Message, MessageType
from spacetime_index.engine.memory import MemoryEngine


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Isolate environment variables for each test.

    This prevents test pollution where one test's environment
    changes affect other tests.
    """
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def engine():
    """Create an empty in-memory engine."""
    return MemoryEngine()


@pytest.fixture
def square():
    """A 2x2 square polygon with its south-west corner at the origin."""
    return {
        "type": "Polygon",
        "coordinates": [[[0, 0], [2, 0], [2, 2], [0, 2], [0, 0]]],
    }


def make_object(
    object_id="obj-1",
    dataset="ds",
    action=Action.CREATE,
    **payload,
):
    """Build an object message."""
    return Message(
        type=MessageType.OBJECT,
        action=action,
        payload={"id": object_id, "type": "hg:Place", **payload},
        meta={"dataset": dataset},
    )


def make_dataset(dataset_id="ds", action=Action.CREATE, **payload):
    """Build a dataset message."""
    return Message(
        type=MessageType.DATASET,
        action=action,
        payload={"id": dataset_id, **payload},
    )
