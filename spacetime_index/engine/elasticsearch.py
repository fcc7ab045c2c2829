"""Elasticsearch engine adapter."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import elasticsearch
from elasticsearch import Elasticsearch

from ..config import EngineSettings
from ..core.exceptions import (
    EngineError,
    EngineUnavailableError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
)
from .base import SearchEngineClient

logger = logging.getLogger(__name__)

ALREADY_EXISTS_ERRORS = {
    "resource_already_exists_exception",
    "index_already_exists_exception",
}
INDEX_NOT_FOUND_ERRORS = {"index_not_found_exception"}


def _error_type(error: Exception) -> str:
    """Get the engine error type from an API error."""
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        detail = body.get("error")
        if isinstance(detail, dict):
            return str(detail.get("type", ""))
        if isinstance(detail, str):
            return detail
    return str(getattr(error, "message", ""))


def _status(error: Exception) -> int | None:
    meta = getattr(error, "meta", None)
    return getattr(meta, "status", None)


def _body(response: Any) -> dict[str, Any]:
    """Unwrap a client response into a plain dictionary."""
    body = getattr(response, "body", response)
    return dict(body) if body is not None else {}


@contextmanager
def translate_errors(index: str | None = None) -> Iterator[None]:
    """Convert client exceptions into engine errors.

    Args:
        index: Index the request targets, used in error messages
    """
    try:
        yield
    except (elasticsearch.ConnectionError, elasticsearch.ConnectionTimeout) as e:
        raise EngineUnavailableError(str(e)) from e
    except elasticsearch.ApiError as e:
        error_type = _error_type(e)
        if error_type in ALREADY_EXISTS_ERRORS:
            raise IndexAlreadyExistsError(index or "") from e
        if error_type in INDEX_NOT_FOUND_ERRORS:
            raise IndexNotFoundError(index or "") from e
        raise EngineError(str(e), status=_status(e)) from e
    except elasticsearch.TransportError as e:
        raise EngineError(str(e)) from e


class ElasticsearchEngine(SearchEngineClient):
    """Search engine client backed by the official Elasticsearch client."""

    def __init__(self, client: Elasticsearch, include_type_in_bulk: bool = False):
        """Initialize engine.

        Args:
            client: Configured Elasticsearch client
            include_type_in_bulk: Emit ``_type`` in bulk descriptors
        """
        self.client = client
        self.include_type_in_bulk = include_type_in_bulk

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "ElasticsearchEngine":
        """Create an engine from connection settings."""
        client = Elasticsearch(
            hosts=[settings.url],
            request_timeout=settings.request_timeout,
        )
        logger.debug("Connecting to %s", settings.url)
        return cls(client, include_type_in_bulk=settings.include_type_in_bulk)

    def create_index(self, index: str, body: dict[str, Any]) -> None:
        with translate_errors(index):
            self.client.indices.create(
                index=index,
                settings=body.get("settings"),
                mappings=body.get("mappings"),
            )

    def delete_index(self, index: str) -> None:
        with translate_errors(index):
            self.client.indices.delete(index=index)

    def bulk_write(self, actions: list[dict[str, Any]]) -> dict[str, Any]:
        with translate_errors():
            response = self.client.bulk(operations=actions)
        return _body(response)

    def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        params = dict(body)
        if "from" in params:
            params["from_"] = params.pop("from")

        with translate_errors(index):
            response = self.client.search(index=index, **params)
        return _body(response)

    def update_aliases(self, actions: list[dict[str, Any]]) -> None:
        with translate_errors():
            self.client.indices.update_aliases(actions=actions)

    def put_alias(self, index: str, alias: str) -> None:
        with translate_errors(index):
            self.client.indices.put_alias(index=index, name=alias)

    def get_alias(self, alias: str) -> dict[str, Any]:
        with translate_errors():
            response = self.client.indices.get_alias(name=alias)
        return _body(response)

    def close(self) -> None:
        self.client.close()
