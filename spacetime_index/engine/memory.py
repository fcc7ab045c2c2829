"""In-memory search engine for testing and lightweight scenarios.

Understands the subset of the query language produced by QueryBuilder:
``match_all``, ``bool`` (must/filter/should/must_not), ``term``, ``terms``,
``query_string``, ``range`` and ``geo_bounding_box``.
"""

import copy
import fnmatch
import re
import time
from typing import Any

from ..core.exceptions import EngineError, IndexAlreadyExistsError, IndexNotFoundError
from .base import SearchEngineClient


class MemoryEngine(SearchEngineClient):
    """In-memory search engine implementation."""

    def __init__(self, auto_create_index: bool = False):
        """Initialize engine.

        Args:
            auto_create_index: Create missing indices on write instead of
                reporting a per-item error
        """
        self.indices: dict[str, dict[str, dict[str, Any]]] = {}
        self.mappings: dict[str, dict[str, Any]] = {}
        self.aliases: dict[str, set[str]] = {}
        self.auto_create_index = auto_create_index
        self.requests: list[tuple[str, Any]] = []

    def create_index(self, index: str, body: dict[str, Any]) -> None:
        self.requests.append(("create_index", index))
        if index in self.indices:
            raise IndexAlreadyExistsError(index)
        self.indices[index] = {}
        self.mappings[index] = copy.deepcopy(body)

    def delete_index(self, index: str) -> None:
        self.requests.append(("delete_index", index))
        for name in self._resolve(index):
            del self.indices[name]
            self.mappings.pop(name, None)
            for members in self.aliases.values():
                members.discard(name)

    def bulk_write(self, actions: list[dict[str, Any]]) -> dict[str, Any]:
        self.requests.append(("bulk_write", len(actions)))
        start_time = time.time()
        items = []

        position = 0
        while position < len(actions):
            descriptor = actions[position]
            position += 1
            if len(descriptor) != 1:
                raise EngineError("Malformed bulk action descriptor", status=400)

            action, target = next(iter(descriptor.items()))
            document = None
            if action != "delete":
                if position >= len(actions):
                    raise EngineError("Bulk action is missing its document", status=400)
                document = actions[position]
                position += 1

            items.append({action: self._apply(action, target, document)})

        return {
            "took": int((time.time() - start_time) * 1000),
            "errors": any("error" in next(iter(i.values())) for i in items),
            "items": items,
        }

    def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(("search", index))
        start_time = time.time()

        hits = []
        for name in self._resolve(index):
            for doc_id, source in self.indices[name].items():
                if self._matches(source, body.get("query", {"match_all": {}})):
                    hits.append(
                        {
                            "_index": name,
                            "_id": doc_id,
                            "_score": 1.0,
                            "_source": copy.deepcopy(source),
                        }
                    )

        offset = body.get("from", 0)
        size = body.get("size", 10)
        page = hits[offset : offset + size]

        return {
            "took": int((time.time() - start_time) * 1000),
            "hits": {
                "total": {"value": len(hits), "relation": "eq"},
                "max_score": 1.0 if page else None,
                "hits": page,
            },
        }

    def update_aliases(self, actions: list[dict[str, Any]]) -> None:
        self.requests.append(("update_aliases", len(actions)))
        aliases = {name: set(members) for name, members in self.aliases.items()}

        for action in actions:
            kind, target = next(iter(action.items()))
            index, alias = target["index"], target["alias"]
            if index not in self.indices:
                raise IndexNotFoundError(index)

            if kind == "add":
                aliases.setdefault(alias, set()).add(index)
            elif kind == "remove":
                if index not in aliases.get(alias, set()):
                    raise EngineError(f"aliases [{alias}] missing", status=404)
                aliases[alias].discard(index)
            else:
                raise EngineError(f"Unknown alias action: {kind}", status=400)

        self.aliases = {name: members for name, members in aliases.items() if members}

    def put_alias(self, index: str, alias: str) -> None:
        self.update_aliases([{"add": {"index": index, "alias": alias}}])

    def get_alias(self, alias: str) -> dict[str, Any]:
        self.requests.append(("get_alias", alias))
        members = self.aliases.get(alias)
        if not members:
            raise EngineError(f"alias [{alias}] missing", status=404)
        return {name: {"aliases": {alias: {}}} for name in sorted(members)}

    def _resolve(self, expression: str) -> list[str]:
        """Resolve an index expression to concrete index names."""
        names: list[str] = []
        for part in expression.split(","):
            part = part.strip()
            if part in self.aliases:
                candidates = sorted(self.aliases[part])
            elif "*" in part:
                candidates = sorted(fnmatch.filter(self.indices, part))
            elif part in self.indices:
                candidates = [part]
            else:
                raise IndexNotFoundError(part)

            for name in candidates:
                if name not in names:
                    names.append(name)
        return names

    def _apply(
        self, action: str, target: dict[str, Any], document: dict[str, Any] | None
    ) -> dict[str, Any]:
        """Apply one bulk action and build its response item."""
        index = target.get("_index", "")
        doc_id = str(target.get("_id"))
        item: dict[str, Any] = {"_index": index, "_id": doc_id}

        if index not in self.indices:
            if not self.auto_create_index:
                item["status"] = 404
                item["error"] = {
                    "type": "index_not_found_exception",
                    "reason": f"no such index [{index}]",
                }
                return item
            self.indices[index] = {}

        docs = self.indices[index]
        if action in ("index", "create"):
            if action == "create" and doc_id in docs:
                item["status"] = 409
                item["error"] = {
                    "type": "version_conflict_engine_exception",
                    "reason": f"[{doc_id}]: document already exists",
                }
                return item
            item["result"] = "updated" if doc_id in docs else "created"
            item["status"] = 200 if doc_id in docs else 201
            docs[doc_id] = copy.deepcopy(document or {})
        elif action == "delete":
            if docs.pop(doc_id, None) is None:
                item["result"] = "not_found"
                item["status"] = 404
            else:
                item["result"] = "deleted"
                item["status"] = 200
        else:
            item["status"] = 400
            item["error"] = {
                "type": "illegal_argument_exception",
                "reason": f"unsupported action [{action}]",
            }
        return item

    def _matches(self, source: dict[str, Any], query: dict[str, Any]) -> bool:
        """Evaluate a query clause against a stored document."""
        kind, clause = next(iter(query.items()))

        match kind:
            case "match_all":
                return True
            case "bool":
                return self._matches_bool(source, clause)
            case "term":
                field, value = next(iter(clause.items()))
                if isinstance(value, dict):
                    value = value.get("value")
                return value in _as_list(_field_value(source, field))
            case "terms":
                field, values = next(iter(clause.items()))
                present = _as_list(_field_value(source, field))
                return any(value in present for value in values)
            case "query_string":
                return any(
                    _text_matches(_field_value(source, field), clause["query"], field)
                    for field in clause.get("fields", ["name"])
                )
            case "range":
                field, bounds = next(iter(clause.items()))
                return _in_range(_field_value(source, field), bounds)
            case "geo_bounding_box":
                field, box = next(iter(clause.items()))
                return _in_box(_field_value(source, field), box)
            case _:
                raise EngineError(f"Unsupported query clause: {kind}", status=400)

    def _matches_bool(self, source: dict[str, Any], clause: dict[str, Any]) -> bool:
        required = _as_list(clause.get("must")) + _as_list(clause.get("filter"))
        if not all(self._matches(source, q) for q in required):
            return False

        if any(self._matches(source, q) for q in _as_list(clause.get("must_not"))):
            return False

        should = _as_list(clause.get("should"))
        if should:
            minimum = clause.get("minimum_should_match", 0 if required else 1)
            matched = sum(1 for q in should if self._matches(source, q))
            return matched >= int(minimum)
        return True


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _field_value(source: dict[str, Any], field: str) -> Any:
    """Look up a possibly dotted field; multi-field suffixes fall back to the parent."""
    if field in source:
        return source[field]

    value: Any = source
    for part in field.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            parent, _, _ = field.rpartition(".")
            return _field_value(source, parent) if parent else None
    return value


def _text_matches(value: Any, query: str, field: str) -> bool:
    """Case-insensitive match: whole value for exact fields, all terms otherwise."""
    if value is None:
        return False

    text = str(value).lower()
    wanted = query.strip().strip('"').lower()
    if field.endswith(".exact"):
        return fnmatch.fnmatchcase(text, wanted)

    tokens = set(re.findall(r"\w+", text))
    terms = [t for t in re.findall(r"[\w*?]+", wanted) if t not in ("and", "or")]
    return bool(terms) and all(
        any(fnmatch.fnmatchcase(token, term) for token in tokens) for term in terms
    )


def _in_range(value: Any, bounds: dict[str, Any]) -> bool:
    if value is None:
        return False
    checks = {
        "gte": lambda v, b: v >= b,
        "gt": lambda v, b: v > b,
        "lte": lambda v, b: v <= b,
        "lt": lambda v, b: v < b,
    }
    for op, bound in bounds.items():
        if op in checks and not checks[op](str(value), str(bound)):
            return False
    return True


def _in_box(point: Any, box: dict[str, Any]) -> bool:
    """Check whether a ``[lon, lat]`` point lies inside a geo bounding box."""
    if not isinstance(point, (list, tuple)) or len(point) != 2:
        return False

    lon, lat = float(point[0]), float(point[1])
    west, north = _lon_lat(box["top_left"])
    east, south = _lon_lat(box["bottom_right"])
    return west <= lon <= east and south <= lat <= north


def _lon_lat(corner: Any) -> tuple[float, float]:
    """Read a corner given as ``[lon, lat]`` or ``{"lon": .., "lat": ..}``."""
    if isinstance(corner, dict):
        return float(corner["lon"]), float(corner["lat"])
    return float(corner[0]), float(corner[1])
