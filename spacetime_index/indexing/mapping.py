"""Index mapping for dataset indices.

Every dataset gets one index. Its mapping is the base schema shared by all
datasets plus the extension fields a dataset declares in its JSON-LD
context, stored under the nested ``data`` sub-document.
"""

import copy
from typing import Any

DATE_FORMAT = "date_optional_time"

XSD_PREFIXES = ("xsd:", "http://www.w3.org/2001/XMLSchema#")

# Scalar kinds a dataset may declare, mapped to engine field types
CONTEXT_TYPE_MAPPINGS: dict[str, dict[str, Any]] = {
    "string": {"type": "text"},
    "boolean": {"type": "boolean"},
    "date": {"type": "date", "format": DATE_FORMAT},
    "integer": {"type": "integer"},
    "double": {"type": "double"},
}

BASE_SETTINGS: dict[str, Any] = {
    "number_of_shards": 5,
    "number_of_replicas": 0,
    "analysis": {
        "analyzer": {
            "lowercase": {
                "type": "custom",
                "filter": ["lowercase"],
                "tokenizer": "keyword",
            }
        }
    },
}

BASE_PROPERTIES: dict[str, Any] = {
    "northWest": {"type": "geo_point"},
    "southEast": {"type": "geo_point"},
    "centroid": {"type": "geo_point"},
    "uri": {"type": "keyword"},
    "id": {"type": "keyword", "store": True},
    "type": {"type": "keyword"},
    "name": {
        "type": "text",
        "fields": {
            "analyzed": {"type": "text", "store": True},
            "exact": {"type": "text", "analyzer": "lowercase", "store": True},
        },
    },
    "dataset": {"type": "keyword"},
    "validSince": {"type": "date", "format": DATE_FORMAT},
    "validUntil": {"type": "date", "format": DATE_FORMAT},
}


def base_mapping() -> dict[str, Any]:
    """Get a fresh copy of the base index mapping.

    Returns:
        Index creation body with settings and mappings
    """
    return {
        "settings": copy.deepcopy(BASE_SETTINGS),
        "mappings": {
            "dynamic": False,
            "properties": copy.deepcopy(BASE_PROPERTIES),
        },
    }


def context_field_type(declared_type: Any) -> dict[str, Any] | None:
    """Map a JSON-LD ``@type`` to an engine field definition.

    Accepts ``xsd:integer``, the full XSD IRI, or the bare kind name.

    Returns:
        Field definition, or None for unrecognized types
    """
    if not isinstance(declared_type, str):
        return None

    kind = declared_type
    for prefix in XSD_PREFIXES:
        if kind.startswith(prefix):
            kind = kind[len(prefix) :]
            break

    field_type = CONTEXT_TYPE_MAPPINGS.get(kind)
    return dict(field_type) if field_type else None


def context_properties(jsonld_context: dict[str, Any] | None) -> dict[str, Any]:
    """Extract extension field definitions from a JSON-LD context.

    Only entries with a recognized scalar ``@type`` are kept; anything else
    is dropped silently.
    """
    if not jsonld_context or not isinstance(jsonld_context, dict):
        return {}

    properties = {}
    for key, definition in jsonld_context.items():
        if key.startswith("@") or not isinstance(definition, dict):
            continue

        field_type = context_field_type(definition.get("@type"))
        if field_type:
            properties[key] = field_type

    return properties


def build_mapping(jsonld_context: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the index mapping for one dataset.

    Args:
        jsonld_context: Optional JSON-LD context declared by the dataset

    Returns:
        Base mapping, extended with a nested ``data`` field when the
        context is present
    """
    mapping = base_mapping()

    if jsonld_context:
        mapping["mappings"]["properties"]["data"] = {
            "type": "nested",
            "include_in_parent": True,
            "properties": context_properties(jsonld_context),
        }

    return mapping
