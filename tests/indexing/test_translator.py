"""Tests for object message translation."""

from unittest.mock import Mock

import pytest

from spacetime_index.core.exceptions import (
    DateResolutionError,
    MalformedGeometryError,
    TranslationError,
)
from spacetime_index.core.geometry import GeometryExtent
from spacetime_index.core.models import Action, Message, MessageType, OperationAction
from spacetime_index.indexing.translator import OperationTranslator
from tests.conftest import make_dataset, make_object


@pytest.fixture
def translator():
    """Create a translator with the default collaborators."""
    return OperationTranslator()


class TestTranslate:
    """Test translation of single messages."""

    def test_create_square(self, translator, square):
        """A square polygon should store its corners and centroid."""
        message = make_object("a", name="Amsterdam", geometry=square)

        operation = translator.translate(message)

        assert operation.action == OperationAction.INDEX
        assert operation.index == "ds"
        assert operation.doc_id == "a"
        assert operation.doc_type == "hg:Place"
        assert operation.document["northWest"] == [0.0, 2.0]
        assert operation.document["southEast"] == [2.0, 0.0]
        assert operation.document["centroid"] == [1.0, 1.0]
        assert operation.document["name"] == "Amsterdam"

    def test_point_has_equal_corners(self, translator):
        """A point should store identical corners."""
        message = make_object(geometry={"type": "Point", "coordinates": [5, 52]})

        document = translator.translate(message).document

        assert document["northWest"] == document["southEast"] == [5.0, 52.0]

    def test_update_is_upsert(self, translator):
        """Updates should translate exactly like creates."""
        message = make_object(action=Action.UPDATE, name="Haarlem")

        operation = translator.translate(message)

        assert operation.action == OperationAction.INDEX
        assert operation.document["name"] == "Haarlem"

    def test_delete_has_no_document(self, translator, square):
        """Deletes should carry only the id."""
        message = make_object("a", action=Action.DELETE, geometry=square)

        operation = translator.translate(message)

        assert operation.action == OperationAction.DELETE
        assert operation.document is None
        assert operation.doc_id == "a"

    def test_delete_skips_derivation(self):
        """Deletes should not touch geometry or dates."""
        deriver = Mock()
        resolver = Mock()
        translator = OperationTranslator(deriver, resolver)
        message = make_object(
            action=Action.DELETE, geometry={"type": "Blob"}, validSince="never"
        )

        translator.translate(message)

        deriver.derive.assert_not_called()
        resolver.resolve.assert_not_called()

    def test_dates_resolved(self, translator):
        """validSince takes the earliest and validUntil the latest date."""
        message = make_object(validSince="1890s", validUntil="1901")

        document = translator.translate(message).document

        assert document["validSince"] == "1890-01-01"
        assert document["validUntil"] == "1901-12-31"
        assert document["validSince"] <= document["validUntil"]

    def test_single_expression_range(self, translator):
        """A range in one field should not invert the stored interval."""
        message = make_object(validSince="1890s", validUntil="1890s")

        document = translator.translate(message).document

        assert document["validSince"] == "1890-01-01"
        assert document["validUntil"] == "1899-12-31"

    def test_payload_not_mutated(self, translator, square):
        """Translation should not rewrite the message payload."""
        message = make_object(geometry=square, validSince="1898")

        operation = translator.translate(message)

        assert "northWest" not in message.payload
        assert message.payload["validSince"] == "1898"
        assert operation.document["geometry"] == message.payload["geometry"]
        assert operation.document["geometry"] is not message.payload["geometry"]

    def test_injected_collaborators(self):
        """Custom derivers and resolvers should be used."""
        deriver = Mock()
        deriver.derive.return_value = GeometryExtent(
            centroid=(1.0, 1.0), bbox=(0.0, 0.0, 2.0, 2.0)
        )
        resolver = Mock()
        resolver.resolve.return_value = ("1900-01-01", "1900-12-31")
        translator = OperationTranslator(deriver, resolver)

        document = translator.translate(
            make_object(geometry={"type": "Point"}, validSince="x")
        ).document

        assert document["northWest"] == [0.0, 2.0]
        assert document["validSince"] == "1900-01-01"

    def test_malformed_geometry(self, translator):
        """Bad geometry should name the object."""
        message = make_object("bad", geometry={"type": "Polygon", "coordinates": 1})

        with pytest.raises(MalformedGeometryError) as exc_info:
            translator.translate(message)

        assert exc_info.value.object_id == "bad"

    @pytest.mark.parametrize("geometry", [{}, []])
    def test_empty_geometry(self, translator, geometry):
        """Present but empty geometry should be rejected."""
        message = make_object("bad", geometry=geometry)

        with pytest.raises(MalformedGeometryError) as exc_info:
            translator.translate(message)

        assert exc_info.value.object_id == "bad"

    def test_null_geometry_ignored(self, translator):
        """A null geometry should be stored without corners."""
        document = translator.translate(make_object(geometry=None)).document

        assert "northWest" not in document

    def test_unresolvable_date(self, translator):
        """Bad dates should name the object and the field."""
        message = make_object("bad", validUntil="sometime")

        with pytest.raises(DateResolutionError) as exc_info:
            translator.translate(message)

        assert exc_info.value.object_id == "bad"
        assert exc_info.value.field == "validUntil"

    def test_missing_dataset(self, translator):
        """Objects must name their dataset."""
        message = Message(
            type=MessageType.OBJECT, action=Action.CREATE, payload={"id": "a"}
        )

        with pytest.raises(TranslationError, match="dataset"):
            translator.translate(message)

    def test_missing_id(self, translator):
        """Objects must carry an id."""
        message = Message(
            type=MessageType.OBJECT, action=Action.CREATE, meta={"dataset": "ds"}
        )

        with pytest.raises(TranslationError, match="no id"):
            translator.translate(message)

    def test_dataset_message_rejected(self, translator):
        """Dataset messages are not translated to bulk operations."""
        with pytest.raises(TranslationError):
            translator.translate(make_dataset("ds"))

    def test_missing_action(self, translator):
        """Object messages without an action cannot be translated."""
        with pytest.raises(TranslationError, match="unsupported action"):
            translator.translate(make_object(action=None))


class TestTranslateBatch:
    """Test batch translation."""

    def test_bad_record_is_skipped(self, translator, square):
        """A bad record should not affect its neighbours."""
        messages = [
            make_object("a", geometry=square),
            make_object("b", geometry={"type": "Polygon", "coordinates": 1}),
            make_object("c"),
        ]

        operations, errors = translator.translate_batch(messages)

        assert [op.doc_id for op in operations] == ["a", "c"]
        assert len(errors) == 1
        assert errors[0].object_id == "b"
