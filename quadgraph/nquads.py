"""
N-Quad building blocks: typed values, facets and quads.

Example:
    from quadgraph import NQuad, str_value, add_facet

    nq = NQuad(subject="_:alice", predicate="name")
    str_value("Alice", nq)
    add_facet("alias", '"Al"', nq)
    print(nq.render())
    # _:alice <name> "Alice" (alias="Al") .
"""

import datetime as dt
import json
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union

from .errors import FacetError, GeoError, ValueConversionError
from .geo import geojson_to_wkb, geometry_to_geojson, wkb_to_geometry

BLANK_PREFIX = "_:"
STAR = "*"

_FACET_KEY = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")
_PREDICATE = re.compile(r"^[^\s<>\"{}|^`\\]+$")
_UID = re.compile(r"^0x[0-9a-fA-F]+$")
_UID_VAR = re.compile(r"^uid\([A-Za-z_][A-Za-z0-9_]*\)$")


class ValueKind(str, Enum):
    DEFAULT = "default"
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DATE = "date"
    DATETIME = "datetime"
    GEO = "geo"


# RDF type annotations understood by the server.
XS_TYPES = {
    ValueKind.STRING: "xs:string",
    ValueKind.INT: "xs:int",
    ValueKind.FLOAT: "xs:float",
    ValueKind.BOOL: "xs:boolean",
    ValueKind.DATE: "xs:date",
    ValueKind.DATETIME: "xs:dateTime",
    ValueKind.GEO: "geo:geojson",
}


def escape(text: str) -> str:
    """Escape a string for use inside a double-quoted RDF literal."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def uid(value: Union[int, str]) -> str:
    """Format a server uid as a hex string, e.g. uid(26) == "0x1a"."""
    if isinstance(value, bool):
        raise ValueConversionError(f"Invalid uid: {value!r}")
    if isinstance(value, int):
        if value <= 0:
            raise ValueConversionError(f"Invalid uid: {value}")
        return hex(value)
    if isinstance(value, str) and _UID.match(value) and int(value, 16) > 0:
        return hex(int(value, 16))
    raise ValueConversionError(f"Invalid uid: {value!r}")


def blank(label: str) -> str:
    """Format a blank node label, e.g. blank("person1") == "_:person1"."""
    if label.startswith(BLANK_PREFIX):
        label = label[len(BLANK_PREFIX):]
    if not label or not _PREDICATE.match(label):
        raise ValueConversionError(f"Invalid blank node label: {label!r}")
    return BLANK_PREFIX + label


def uid_var(name: str) -> str:
    """Reference an upsert query variable as a node, e.g. uid_var("v") == "uid(v)"."""
    node = f"uid({name})"
    if not _UID_VAR.match(node):
        raise ValueConversionError(f"Invalid query variable: {name!r}")
    return node


def _render_node(node: str) -> str:
    if node.startswith(BLANK_PREFIX) or node == STAR or _UID_VAR.match(node):
        return node
    if _UID.match(node):
        return f"<{node}>"
    raise ValueConversionError(f"Invalid node identifier: {node!r}")


@dataclass
class Value:
    """A typed scalar value. Geo values hold WKB bytes."""

    kind: ValueKind
    data: Any

    def render(self) -> str:
        if self.kind in (ValueKind.DEFAULT, ValueKind.STRING):
            literal = self.data
        elif self.kind == ValueKind.BOOL:
            literal = "true" if self.data else "false"
        elif self.kind == ValueKind.FLOAT:
            literal = repr(self.data)
        elif self.kind in (ValueKind.DATE, ValueKind.DATETIME):
            literal = self.data.isoformat()
        elif self.kind == ValueKind.GEO:
            literal = geometry_to_geojson(wkb_to_geometry(self.data))
        else:
            literal = str(self.data)

        rendered = f'"{escape(literal)}"'
        if self.kind == ValueKind.DEFAULT:
            return rendered
        return f"{rendered}^^<{XS_TYPES[self.kind]}>"

    # Accessors return the zero value when the kind does not match.

    def get_str_val(self) -> str:
        if self.kind in (ValueKind.DEFAULT, ValueKind.STRING):
            return self.data
        return ""

    def get_int_val(self) -> int:
        return self.data if self.kind == ValueKind.INT else 0

    def get_double_val(self) -> float:
        return self.data if self.kind == ValueKind.FLOAT else 0.0

    def get_bool_val(self) -> bool:
        return self.data if self.kind == ValueKind.BOOL else False

    def get_geo_val(self) -> bytes:
        return self.data if self.kind == ValueKind.GEO else b""

    def to_python(self) -> Any:
        if self.kind == ValueKind.GEO:
            return wkb_to_geometry(self.data)
        return self.data


@dataclass
class Facet:
    key: str
    value: Any

    def render(self) -> str:
        v = self.value
        if isinstance(v, str):
            literal = f'"{escape(v)}"'
        elif isinstance(v, bool):
            literal = "true" if v else "false"
        elif isinstance(v, float):
            literal = repr(v)
        elif isinstance(v, dt.datetime):
            literal = v.isoformat()
        else:
            literal = str(v)
        return f"{self.key}={literal}"


@dataclass
class NQuad:
    """A single subject-predicate-object fact with optional facets."""

    subject: str
    predicate: str
    object_id: Optional[str] = None
    object_value: Optional[Value] = None
    facets: List[Facet] = field(default_factory=list)

    def validate(self) -> None:
        if not self.subject:
            raise ValueConversionError("NQuad has no subject")
        if not self.predicate or not _PREDICATE.match(self.predicate):
            raise ValueConversionError(f"Invalid predicate: {self.predicate!r}")
        if (self.object_id is None) == (self.object_value is None):
            raise ValueConversionError(
                f"NQuad {self.subject} <{self.predicate}> needs exactly one of object_id or object_value"
            )
        _render_node(self.subject)
        if self.subject == STAR:
            raise ValueConversionError("Subject cannot be *")
        if self.object_id is not None:
            _render_node(self.object_id)

    def render(self) -> str:
        """Render the quad as one RDF line."""
        self.validate()
        if self.object_id is not None:
            obj = _render_node(self.object_id)
        else:
            obj = self.object_value.render()
        # "*" as predicate means every predicate of the subject.
        predicate = STAR if self.predicate == STAR else f"<{self.predicate}>"
        line = f"{_render_node(self.subject)} {predicate} {obj}"
        if self.facets:
            line += " (" + ", ".join(f.render() for f in self.facets) + ")"
        return line + " ."


def _set_value(nq: NQuad, value: Value) -> None:
    nq.object_id = None
    nq.object_value = value


def default_value(v: str, nq: NQuad) -> None:
    """Attach an untyped literal; the server stores it per the schema."""
    _set_value(nq, Value(ValueKind.DEFAULT, str(v)))


def str_value(v: str, nq: NQuad) -> None:
    if not isinstance(v, str):
        raise ValueConversionError(f"Expected str, got {type(v).__name__}")
    _set_value(nq, Value(ValueKind.STRING, v))


def int_value(v: int, nq: NQuad) -> None:
    if isinstance(v, bool):
        raise ValueConversionError("Expected int, got bool")
    if isinstance(v, float):
        if not v.is_integer():
            raise ValueConversionError(f"Cannot store {v} as int")
        v = int(v)
    if not isinstance(v, int):
        raise ValueConversionError(f"Expected int, got {type(v).__name__}")
    if not -(2 ** 63) <= v < 2 ** 63:
        raise ValueConversionError(f"{v} overflows a 64-bit int")
    _set_value(nq, Value(ValueKind.INT, v))


def float_value(v: float, nq: NQuad) -> None:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueConversionError(f"Expected float, got {type(v).__name__}")
    v = float(v)
    if math.isnan(v) or math.isinf(v):
        raise ValueConversionError(f"Cannot store {v} as float")
    _set_value(nq, Value(ValueKind.FLOAT, v))


def bool_value(v: bool, nq: NQuad) -> None:
    if not isinstance(v, bool):
        raise ValueConversionError(f"Expected bool, got {type(v).__name__}")
    _set_value(nq, Value(ValueKind.BOOL, v))


def date_value(v: Union[dt.date, dt.datetime], nq: NQuad) -> None:
    if isinstance(v, dt.datetime):
        v = v.date()
    if not isinstance(v, dt.date):
        raise ValueConversionError(f"Expected date, got {type(v).__name__}")
    _set_value(nq, Value(ValueKind.DATE, v))


def datetime_value(v: dt.datetime, nq: NQuad) -> None:
    if not isinstance(v, dt.datetime):
        raise ValueConversionError(f"Expected datetime, got {type(v).__name__}")
    if v.tzinfo is None:
        raise ValueConversionError("datetime values must be timezone-aware")
    _set_value(nq, Value(ValueKind.DATETIME, v))


def geojson_value(geojson: str, nq: NQuad) -> None:
    try:
        data = geojson_to_wkb(geojson)
    except GeoError as e:
        raise ValueConversionError(str(e))
    _set_value(nq, Value(ValueKind.GEO, data))


def parse_facet_value(raw: str) -> Any:
    """
    Parse a facet value from its text form.

    Strings must be wrapped in double quotes: '"Steve"'. Unquoted text is
    tried as int, float, bool and ISO-8601 date-time, in that order.
    """
    if not isinstance(raw, str):
        raise FacetError(f"Facet value must be text, got {type(raw).__name__}")
    if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"':
        try:
            return json.loads(raw)
        except ValueError:
            return raw[1:-1].replace('\\"', '"')
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        v = float(raw)
        if not (math.isnan(v) or math.isinf(v)):
            return v
    except ValueError:
        pass
    if raw in ("true", "false"):
        return raw == "true"
    try:
        return dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        pass
    raise FacetError(
        f'Could not parse facet value {raw!r}; string facets need double quotes, e.g. \'"{raw}"\''
    )


def add_facet(key: str, raw: str, nq: NQuad) -> None:
    if not isinstance(key, str) or not _FACET_KEY.match(key):
        raise FacetError(f"Invalid facet key: {key!r}")
    value = parse_facet_value(raw)
    nq.facets = [f for f in nq.facets if f.key != key]
    nq.facets.append(Facet(key, value))
