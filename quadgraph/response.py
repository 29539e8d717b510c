"""
Typed view over Dgraph JSON responses.

A query response is turned into a tree of Nodes. Response.nodes holds one
root Node per query block; its children are the nodes the block matched,
and their children are the nodes reached through uid edges:

    resp.nodes[0]                 # block "me"
    resp.nodes[0].children[0]     # first matched node
    .properties[0].value          # first scalar predicate, in query order
"""

import datetime as dt
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from .errors import GeoError, ResponseParseError
from .geo import geojson_to_wkb, is_geojson
from .nquads import Value, ValueKind

log = logging.getLogger(__name__)

FACET_SEPARATOR = "|"

RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)

# Keys a mutation response puts next to its results.
MUTATION_KEYS = ("code", "message", "uids", "queries")


@dataclass
class Property:
    name: str
    value: Value
    facets: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Node:
    attribute: str
    uid: Optional[str] = None
    properties: List[Property] = field(default_factory=list)
    facets: Dict[str, Any] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)

    def get(self, name: str) -> Optional[Property]:
        """Return the first property with the given name."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def edges(self, attribute: str) -> List["Node"]:
        return [c for c in self.children if c.attribute == attribute]

    def to_dict(self) -> Dict[str, Any]:
        """Flatten scalar properties into a dict, for tabular output."""
        row: Dict[str, Any] = {}
        if self.uid is not None:
            row["uid"] = self.uid
        for prop in self.properties:
            value = prop.value.data
            if prop.value.kind == ValueKind.GEO:
                value = prop.value.to_python().wkt
            if prop.name in row:
                existing = row[prop.name]
                row[prop.name] = (existing if isinstance(existing, list) else [existing]) + [value]
            else:
                row[prop.name] = value
        return row


def to_value(obj: Any) -> Value:
    """Map a decoded JSON scalar to a typed Value."""
    if isinstance(obj, bool):
        return Value(ValueKind.BOOL, obj)
    if isinstance(obj, int):
        return Value(ValueKind.INT, obj)
    if isinstance(obj, float):
        return Value(ValueKind.FLOAT, obj)
    if isinstance(obj, str):
        return Value(ValueKind.STRING, obj)
    if is_geojson(obj):
        try:
            return Value(ValueKind.GEO, geojson_to_wkb(obj))
        except GeoError as e:
            raise ResponseParseError(f"Bad geo value in response: {e}")
    raise ResponseParseError(f"Unsupported value in response: {obj!r}")


def _is_node(obj: Any) -> bool:
    return isinstance(obj, dict) and not is_geojson(obj)


def _at_index(items: List[Any], idx: str, key: str) -> Any:
    try:
        i = int(idx)
    except (TypeError, ValueError):
        raise ResponseParseError(f"Bad facet index {idx!r} in {key!r}")
    if not 0 <= i < len(items):
        raise ResponseParseError(f"Facet index {i} in {key!r} has no matching value")
    return items[i]


def parse_node(attribute: str, obj: Dict[str, Any]) -> Node:
    node = Node(attribute=attribute)
    facet_keys = []

    for key, raw in obj.items():
        if FACET_SEPARATOR in key:
            facet_keys.append(key)
            continue
        if key == "uid":
            node.uid = raw
            continue

        items = raw if isinstance(raw, list) else [raw]
        for item in items:
            if _is_node(item):
                node.children.append(parse_node(key, item))
            else:
                node.properties.append(Property(key, to_value(item)))

    for key in facet_keys:
        pred, facet = key.split(FACET_SEPARATOR, 1)
        raw = obj[key]
        if pred == attribute and node.get(pred) is None:
            # Facet on the edge that led to this node.
            node.facets[facet] = raw
            continue
        props = [p for p in node.properties if p.name == pred]
        if not props:
            # Edge facets may also be reported on the parent, keyed by index.
            children = node.edges(pred)
            if isinstance(raw, dict):
                for idx, val in raw.items():
                    _at_index(children, idx, key).facets[facet] = val
            elif children:
                children[0].facets[facet] = raw
            continue
        if isinstance(raw, dict):
            # List predicates report facets per element index.
            for idx, val in raw.items():
                _at_index(props, idx, key).facets[facet] = val
        else:
            props[0].facets[facet] = raw

    return node


def parse_time(text: str) -> dt.datetime:
    """Parse an RFC3339 timestamp returned by the server."""
    if not isinstance(text, str) or not RFC3339.match(text):
        raise ResponseParseError(f"Error in parsing time {text!r}: not a timestamp")
    try:
        ts = pd.Timestamp(text)
    except (ValueError, TypeError) as e:
        raise ResponseParseError(f"Error in parsing time {text!r}: {e}")
    if ts is pd.NaT:
        raise ResponseParseError(f"Error in parsing time {text!r}: not a timestamp")
    return ts.to_pydatetime()


class Response:
    """Decoded server response: assigned uids plus the query result tree."""

    def __init__(
        self,
        assigned_uids: Optional[Dict[str, str]] = None,
        nodes: Optional[List[Node]] = None,
        raw: Optional[Dict[str, Any]] = None,
    ):
        self.assigned_uids = assigned_uids or {}
        self.nodes = nodes or []
        self.raw = raw or {}

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Response":
        if not isinstance(payload, dict):
            raise ResponseParseError(f"Expected a JSON object, got {type(payload).__name__}")
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise ResponseParseError("Response 'data' is not an object")

        uids = dict(data.get("uids") or {})
        if "code" in data or "uids" in data:
            # Mutation response; upserts nest their query results.
            blocks = data.get("queries") or {
                k: v for k, v in data.items() if k not in MUTATION_KEYS
            }
        else:
            # Plain query response: every key is a query block.
            blocks = data

        nodes = []
        for name, results in blocks.items():
            if not isinstance(results, list):
                raise ResponseParseError(f"Query block {name!r} is not a list")
            root = Node(attribute=name)
            for item in results:
                if not isinstance(item, dict):
                    raise ResponseParseError(f"Unexpected result in block {name!r}: {item!r}")
                root.children.append(parse_node(name, item))
            nodes.append(root)

        if uids:
            log.debug(f"Assigned uids: {uids}")
        return cls(assigned_uids=uids, nodes=nodes, raw=payload)

    def block(self, name: str) -> Node:
        for node in self.nodes:
            if node.attribute == name:
                return node
        raise KeyError(name)

    def to_frame(self, block: Optional[str] = None) -> pd.DataFrame:
        """Flatten the matched nodes of a query block into a DataFrame."""
        if not self.nodes:
            return pd.DataFrame()
        root = self.block(block) if block else self.nodes[0]
        return pd.DataFrame([child.to_dict() for child in root.children])

    def __repr__(self):
        return f"Response(assigned_uids={self.assigned_uids!r}, nodes={len(self.nodes)})"
