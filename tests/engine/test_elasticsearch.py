"""Tests for the Elasticsearch engine adapter."""

from unittest.mock import Mock, patch

import elasticsearch
import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig

from spacetime_index.config import EngineSettings
from spacetime_index.core.exceptions import (
    EngineError,
    EngineUnavailableError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
)
from spacetime_index.core.models import BulkOperation, OperationAction
from spacetime_index.engine.elasticsearch import ElasticsearchEngine


def api_error(status, error_type, cls=elasticsearch.ApiError):
    """Build a client API error as raised by the Elasticsearch client."""
    meta = ApiResponseMeta(
        status=status,
        http_version="1.1",
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig("http", "localhost", 9200),
    )
    body = {"error": {"type": error_type, "reason": error_type}, "status": status}
    return cls(error_type, meta=meta, body=body)


@pytest.fixture
def client():
    """Create a mock Elasticsearch client."""
    return Mock()


@pytest.fixture
def es_engine(client):
    """Create an engine around the mock client."""
    return ElasticsearchEngine(client)


class TestRequests:
    """Test how requests are passed to the client."""

    def test_create_index(self, es_engine, client):
        """Settings and mappings should be passed separately."""
        es_engine.create_index("ds", {"settings": {"a": 1}, "mappings": {"b": 2}})

        client.indices.create.assert_called_once_with(
            index="ds", settings={"a": 1}, mappings={"b": 2}
        )

    def test_bulk_write(self, es_engine, client):
        """Bulk writes should return the plain response body."""
        client.bulk.return_value = Mock(body={"took": 3, "errors": False, "items": []})
        actions = [{"delete": {"_index": "ds", "_id": "a"}}]

        response = es_engine.bulk_write(actions)

        client.bulk.assert_called_once_with(operations=actions)
        assert response == {"took": 3, "errors": False, "items": []}

    def test_write_operations(self, es_engine, client):
        """Operations should be rendered into one flat bulk request."""
        client.bulk.return_value = {"took": 1, "errors": False, "items": []}
        operations = [
            BulkOperation(
                action=OperationAction.INDEX,
                index="ds",
                doc_id="a",
                doc_type="hg:Place",
                document={"id": "a"},
            ),
            BulkOperation(action=OperationAction.DELETE, index="ds", doc_id="b"),
        ]

        es_engine.write_operations(operations)

        client.bulk.assert_called_once_with(
            operations=[
                {"index": {"_index": "ds", "_id": "a"}},
                {"id": "a"},
                {"delete": {"_index": "ds", "_id": "b"}},
            ]
        )

    def test_search_renames_from(self, es_engine, client):
        """The from offset should be passed as from_."""
        client.search.return_value = {"hits": {"hits": []}}
        body = {"query": {"match_all": {}}, "size": 100, "from": 200}

        es_engine.search("a,b", body)

        client.search.assert_called_once_with(
            index="a,b", query={"match_all": {}}, size=100, from_=200
        )
        assert body["from"] == 200

    def test_aliases(self, es_engine, client):
        """Alias operations should map onto the indices API."""
        client.indices.get_alias.return_value = {"v2": {"aliases": {"cur": {}}}}

        es_engine.put_alias("v1", "cur")
        es_engine.update_aliases([{"add": {"index": "v2", "alias": "cur"}}])
        response = es_engine.get_alias("cur")

        client.indices.put_alias.assert_called_once_with(index="v1", name="cur")
        client.indices.update_aliases.assert_called_once_with(
            actions=[{"add": {"index": "v2", "alias": "cur"}}]
        )
        assert response == {"v2": {"aliases": {"cur": {}}}}


class TestErrorTranslation:
    """Test conversion of client exceptions."""

    def test_already_exists(self, es_engine, client):
        """Already-exists errors should become IndexAlreadyExistsError."""
        client.indices.create.side_effect = api_error(
            400, "resource_already_exists_exception", elasticsearch.BadRequestError
        )

        with pytest.raises(IndexAlreadyExistsError) as exc_info:
            es_engine.create_index("ds", {})

        assert exc_info.value.index == "ds"

    def test_legacy_already_exists(self, es_engine, client):
        """The legacy already-exists error type should be recognized."""
        client.indices.create.side_effect = api_error(
            400, "index_already_exists_exception"
        )

        with pytest.raises(IndexAlreadyExistsError):
            es_engine.create_index("ds", {})

    def test_index_not_found(self, es_engine, client):
        """Missing indices should become IndexNotFoundError."""
        client.indices.delete.side_effect = api_error(
            404, "index_not_found_exception", elasticsearch.NotFoundError
        )

        with pytest.raises(IndexNotFoundError):
            es_engine.delete_index("ds")

    def test_other_api_error(self, es_engine, client):
        """Other API errors should keep their status."""
        client.search.side_effect = api_error(400, "parsing_exception")

        with pytest.raises(EngineError) as exc_info:
            es_engine.search("*", {"query": {}})

        assert exc_info.value.status == 400
        assert not isinstance(exc_info.value, IndexNotFoundError)

    def test_connection_error(self, es_engine, client):
        """Connection failures should become EngineUnavailableError."""
        client.bulk.side_effect = elasticsearch.ConnectionError("refused")

        with pytest.raises(EngineUnavailableError, match="refused"):
            es_engine.bulk_write([])


class TestFromSettings:
    """Test engine construction from settings."""

    def test_from_settings(self):
        """The client should target the configured URL."""
        settings = EngineSettings(
            host="es.local", port=9201, request_timeout=5.0, include_type_in_bulk=True
        )

        with patch("spacetime_index.engine.elasticsearch.Elasticsearch") as mock_cls:
            engine = ElasticsearchEngine.from_settings(settings)

        mock_cls.assert_called_once_with(
            hosts=["http://es.local:9201"], request_timeout=5.0
        )
        assert engine.include_type_in_bulk is True

    def test_close(self, es_engine, client):
        """Closing should close the client."""
        es_engine.close()

        client.close.assert_called_once()
