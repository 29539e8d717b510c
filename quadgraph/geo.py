"""
Geo value encoding.

Dgraph accepts geometries as GeoJSON and this client keeps them in memory as
WKB (well-known binary), the same binary form the server stores.
"""

import json
from typing import Any, Dict, Union

from shapely import wkb
from shapely.errors import GEOSException, ShapelyError
from shapely.geometry import mapping, shape
from shapely.geometry.base import BaseGeometry

from .errors import GeoError

GEO_TYPES = (
    "Point",
    "LineString",
    "Polygon",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
)


def is_geojson(obj: Any) -> bool:
    """Return True if obj looks like a decoded GeoJSON geometry."""
    return (
        isinstance(obj, dict)
        and obj.get("type") in GEO_TYPES
        and "coordinates" in obj
    )


def geojson_to_geometry(geojson: Union[str, Dict[str, Any]]) -> BaseGeometry:
    if isinstance(geojson, str):
        try:
            geojson = json.loads(geojson)
        except ValueError as e:
            raise GeoError(f"Invalid GeoJSON: {e}")
    if not is_geojson(geojson):
        raise GeoError(f"Unsupported GeoJSON geometry: {geojson!r}")
    try:
        return shape(geojson)
    except (ShapelyError, GEOSException, ValueError, TypeError, IndexError) as e:
        raise GeoError(f"Invalid GeoJSON coordinates: {e}")


def geojson_to_wkb(geojson: Union[str, Dict[str, Any]]) -> bytes:
    """Encode a GeoJSON geometry (text or dict) as WKB bytes."""
    return wkb.dumps(geojson_to_geometry(geojson))


def wkb_to_geometry(data: bytes) -> BaseGeometry:
    """Decode WKB bytes back into a shapely geometry."""
    if not data:
        raise GeoError("Empty geo value")
    try:
        return wkb.loads(bytes(data))
    except (ShapelyError, GEOSException, ValueError, TypeError) as e:
        raise GeoError(f"Invalid WKB: {e}")


def geometry_to_geojson(geom: BaseGeometry) -> str:
    # Coordinates come back as tuples, json writes them as arrays.
    return json.dumps(mapping(geom), separators=(",", ":"))
