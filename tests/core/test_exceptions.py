"""Tests for the exception hierarchy."""

from spacetime_index.core.exceptions import (
    ConfigurationError,
    DateResolutionError,
    EngineError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    MalformedGeometryError,
    QueryError,
    SpacetimeIndexError,
    TranslationError,
)


class TestExceptions:
    """Test exception attributes and hierarchy."""

    def test_record_errors_are_translation_errors(self):
        """Geometry and date failures should be record-local."""
        geometry_error = MalformedGeometryError("a", "no coordinates")
        date_error = DateResolutionError("a", "sometime", "validSince")

        assert isinstance(geometry_error, TranslationError)
        assert isinstance(date_error, TranslationError)
        assert geometry_error.object_id == "a"
        assert "no coordinates" in str(geometry_error)
        assert date_error.field == "validSince"
        assert "'sometime'" in str(date_error)

    def test_engine_errors_carry_status(self):
        """Index errors should carry the engine status."""
        assert IndexNotFoundError("ds").status == 404
        assert IndexAlreadyExistsError("ds").status == 400
        assert isinstance(IndexNotFoundError("ds"), EngineError)

    def test_value_errors(self):
        """Configuration and query errors should also be ValueErrors."""
        assert isinstance(ConfigurationError("x"), ValueError)
        assert isinstance(QueryError("size", "bad"), ValueError)
        assert isinstance(QueryError("size", "bad"), SpacetimeIndexError)
