from .client import DgraphClient
from .errors import (
    FacetError,
    GeoError,
    QuadGraphError,
    RequestError,
    ResponseParseError,
    ServerError,
    TransportError,
    ValueConversionError,
)
from .nquads import (
    STAR,
    Facet,
    NQuad,
    Value,
    ValueKind,
    add_facet,
    blank,
    bool_value,
    date_value,
    datetime_value,
    default_value,
    float_value,
    geojson_value,
    int_value,
    str_value,
    uid,
    uid_var,
)
from .request import DEL, SET, Op, Req
from .response import Node, Property, Response, parse_time

__all__ = [
    "DgraphClient",
    "Req",
    "Op",
    "SET",
    "DEL",
    "NQuad",
    "Value",
    "ValueKind",
    "Facet",
    "STAR",
    "uid",
    "uid_var",
    "blank",
    "add_facet",
    "default_value",
    "str_value",
    "int_value",
    "float_value",
    "bool_value",
    "date_value",
    "datetime_value",
    "geojson_value",
    "Response",
    "Node",
    "Property",
    "parse_time",
    "QuadGraphError",
    "TransportError",
    "ServerError",
    "ResponseParseError",
    "GeoError",
    "ValueConversionError",
    "FacetError",
    "RequestError",
]
