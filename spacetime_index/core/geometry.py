"""Centroid and bounding box derivation for GeoJSON geometries."""

import math
from dataclasses import dataclass
from typing import Any, Protocol

from shapely.errors import ShapelyError
from shapely.geometry import shape

from .exceptions import MalformedGeometryError


@dataclass(frozen=True)
class GeometryExtent:
    """Centroid and axis-aligned bounding box of a geometry.

    ``centroid`` is ``(lon, lat)``; ``bbox`` is ``(west, south, east, north)``.
    """

    centroid: tuple[float, float]
    bbox: tuple[float, float, float, float]

    @property
    def north_west(self) -> list[float]:
        """Corner point ``[west, north]``."""
        west, _, _, north = self.bbox
        return [west, north]

    @property
    def south_east(self) -> list[float]:
        """Corner point ``[east, south]``."""
        _, south, east, _ = self.bbox
        return [east, south]


class GeometryDeriver(Protocol):
    """Protocol for geometry derivation."""

    def derive(self, geometry: dict[str, Any]) -> GeometryExtent:
        """Derive centroid and bounding box.

        Raises:
            MalformedGeometryError: If the geometry cannot be interpreted
        """
        ...


class ShapelyGeometryDeriver:
    """Derives extents from GeoJSON geometries or features using shapely."""

    def derive(self, geometry: dict[str, Any]) -> GeometryExtent:
        if not isinstance(geometry, dict):
            raise MalformedGeometryError(None, "geometry must be a GeoJSON object")

        if geometry.get("type") == "Feature":
            geometry = geometry.get("geometry") or {}

        try:
            geom = shape(geometry)
        except (
            ShapelyError,
            ValueError,
            TypeError,
            KeyError,
            IndexError,
            AttributeError,
        ) as e:
            raise MalformedGeometryError(None, str(e) or type(e).__name__) from e

        if geom.is_empty:
            raise MalformedGeometryError(None, "geometry is empty")

        bbox = tuple(float(v) for v in geom.bounds)
        if not all(math.isfinite(v) for v in bbox):
            raise MalformedGeometryError(None, "non-finite coordinates")

        point = geom.centroid
        return GeometryExtent(centroid=(point.x, point.y), bbox=bbox)
