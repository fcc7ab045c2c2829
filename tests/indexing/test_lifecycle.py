"""Tests for index lifecycle management."""

from unittest.mock import Mock

import pytest

from spacetime_index.core.exceptions import (
    EngineError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    TranslationError,
)
from spacetime_index.core.models import Action
from spacetime_index.indexing.lifecycle import IndexLifecycleManager
from tests.conftest import make_dataset, make_object


@pytest.fixture
def lifecycle(engine):
    """Create a lifecycle manager on the in-memory engine."""
    return IndexLifecycleManager(engine)


class TestCreateDelete:
    """Test index creation and deletion."""

    def test_create(self, lifecycle, engine):
        """Creating an index should apply the base mapping."""
        assert lifecycle.create("ds") is True

        assert "ds" in engine.indices
        assert engine.mappings["ds"]["settings"]["number_of_shards"] == 5

    def test_create_is_idempotent(self, lifecycle, engine):
        """Creating an existing index should succeed without changes."""
        lifecycle.create("ds")
        engine.indices["ds"]["a"] = {"id": "a"}

        assert lifecycle.create("ds") is False
        assert engine.indices["ds"] == {"a": {"id": "a"}}

    def test_create_propagates_other_errors(self):
        """Only already-exists errors are tolerated."""
        engine = Mock()
        engine.create_index.side_effect = EngineError("boom", status=500)

        with pytest.raises(EngineError, match="boom"):
            IndexLifecycleManager(engine).create("ds")

    def test_delete_missing_index(self, lifecycle):
        """Deleting an index that was never created should fail."""
        with pytest.raises(IndexNotFoundError):
            lifecycle.delete("never")

    def test_second_delete_fails(self, lifecycle):
        """Only the second of two deletes should fail."""
        lifecycle.create("ds")
        lifecycle.delete("ds")

        with pytest.raises(IndexNotFoundError):
            lifecycle.delete("ds")

    def test_delete_indices(self, lifecycle, engine):
        """Several indices should be deleted in one call."""
        for name in ("a", "b", "c"):
            lifecycle.create(name)

        lifecycle.delete_indices(["a", "b"])

        assert list(engine.indices) == ["c"]
        assert ("delete_index", "a,b") in engine.requests

    def test_delete_all_indices(self, lifecycle, engine):
        """Without ids every index should be deleted."""
        lifecycle.create("a")
        lifecycle.create("b")

        lifecycle.delete_indices()

        assert engine.indices == {}


class TestApply:
    """Test execution of dataset messages."""

    def test_create_with_context(self, lifecycle, engine):
        """A dataset context should extend the mapping."""
        message = make_dataset(
            "ds", jsonldContext={"population": {"@type": "xsd:integer"}}
        )

        lifecycle.apply(message)

        properties = engine.mappings["ds"]["mappings"]["properties"]
        assert properties["data"]["properties"] == {"population": {"type": "integer"}}

    def test_delete(self, lifecycle, engine):
        """Delete messages should drop the index."""
        lifecycle.apply(make_dataset("ds"))
        lifecycle.apply(make_dataset("ds", action=Action.DELETE))

        assert "ds" not in engine.indices

    def test_update_is_noop(self, lifecycle, engine):
        """Dataset updates should not touch the engine."""
        lifecycle.apply(make_dataset("ds", action=Action.UPDATE))

        assert engine.requests == []

    def test_rejects_object_messages(self, lifecycle):
        """Object messages are not lifecycle events."""
        with pytest.raises(TranslationError):
            lifecycle.apply(make_object())

    def test_already_exists_from_engine(self):
        """An already-exists error from the engine should be swallowed."""
        engine = Mock()
        engine.create_index.side_effect = IndexAlreadyExistsError("ds")

        IndexLifecycleManager(engine).apply(make_dataset("ds"))

        engine.create_index.assert_called_once()


class TestAliases:
    """Test alias management."""

    def test_put_and_get_alias(self, lifecycle):
        """An alias should resolve to the index it points at."""
        lifecycle.create("places-v1")

        lifecycle.put_alias("places-v1", "places")

        assert lifecycle.get_aliased_index("places") == "places-v1"

    def test_swap_alias(self, lifecycle, engine):
        """Swapping should move the alias in one request."""
        lifecycle.create("places-v1")
        lifecycle.create("places-v2")
        lifecycle.put_alias("places-v1", "places")

        lifecycle.swap_alias("places-v1", "places-v2", "places")

        assert lifecycle.get_aliased_index("places") == "places-v2"
        assert engine.requests[-2] == ("update_aliases", 2)

    def test_swap_alias_actions(self):
        """Swap should send a remove followed by an add."""
        engine = Mock()

        IndexLifecycleManager(engine).swap_alias("old", "new", "current")

        engine.update_aliases.assert_called_once_with(
            [
                {"remove": {"index": "old", "alias": "current"}},
                {"add": {"index": "new", "alias": "current"}},
            ]
        )

    def test_missing_alias(self, lifecycle):
        """Unknown aliases should raise an engine error."""
        with pytest.raises(EngineError):
            lifecycle.get_aliased_index("nothing")
