"""
Tests for typed values, facets and N-Quad rendering.
"""

import datetime as dt

import pytest

from quadgraph.errors import FacetError, ValueConversionError
from quadgraph.nquads import (
    STAR,
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
    parse_facet_value,
    str_value,
    uid,
    uid_var,
)


class TestNodeIdentifiers:
    """Tests for uid and blank node helpers."""

    def test_uid_from_int(self):
        assert uid(26) == "0x1a"

    def test_uid_normalizes_hex_string(self):
        assert uid("0x1A") == "0x1a"

    @pytest.mark.parametrize("bad", [0, -1, True, "0x0", "1a", "person1", None])
    def test_uid_rejects_invalid(self, bad):
        with pytest.raises(ValueConversionError):
            uid(bad)

    def test_blank_adds_prefix(self):
        assert blank("person1") == "_:person1"
        assert blank("_:person1") == "_:person1"

    def test_blank_rejects_empty_label(self):
        with pytest.raises(ValueConversionError):
            blank("")


class TestScalarValues:
    """Tests for typed value constructors."""

    def setup_method(self):
        self.nq = NQuad(subject="_:person1", predicate="p")

    def test_str_value(self):
        str_value("Steven Spielberg", self.nq)
        assert self.nq.object_value.render() == '"Steven Spielberg"^^<xs:string>'

    def test_str_value_is_escaped(self):
        str_value('say "hi"\n', self.nq)
        assert self.nq.object_value.render() == '"say \\"hi\\"\\n"^^<xs:string>'

    def test_default_value_has_no_type(self):
        default_value("plain", self.nq)
        assert self.nq.object_value.render() == '"plain"'

    def test_int_value(self):
        int_value(25, self.nq)
        assert self.nq.object_value.render() == '"25"^^<xs:int>'

    def test_int_value_accepts_integral_float(self):
        int_value(3.0, self.nq)
        assert self.nq.object_value.data == 3

    @pytest.mark.parametrize("bad", [True, 2.5, "25", 2 ** 63])
    def test_int_value_rejects(self, bad):
        with pytest.raises(ValueConversionError):
            int_value(bad, self.nq)

    def test_float_value_keeps_precision(self):
        float_value(13333.6161, self.nq)
        assert self.nq.object_value.render() == '"13333.6161"^^<xs:float>'

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), "1.0", False])
    def test_float_value_rejects(self, bad):
        with pytest.raises(ValueConversionError):
            float_value(bad, self.nq)

    def test_bool_value(self):
        bool_value(False, self.nq)
        assert self.nq.object_value.render() == '"false"^^<xs:boolean>'

    def test_bool_value_rejects_int(self):
        with pytest.raises(ValueConversionError):
            bool_value(0, self.nq)

    def test_date_value(self):
        date_value(dt.date(1991, 2, 1), self.nq)
        assert self.nq.object_value.render() == '"1991-02-01"^^<xs:date>'

    def test_date_value_truncates_datetime(self):
        date_value(dt.datetime(1991, 2, 1, 13, 30), self.nq)
        assert self.nq.object_value.data == dt.date(1991, 2, 1)

    def test_datetime_value(self):
        datetime_value(dt.datetime(2020, 1, 2, 3, 4, 5, tzinfo=dt.timezone.utc), self.nq)
        assert self.nq.object_value.render() == '"2020-01-02T03:04:05+00:00"^^<xs:dateTime>'

    def test_datetime_value_requires_timezone(self):
        with pytest.raises(ValueConversionError):
            datetime_value(dt.datetime(2020, 1, 2), self.nq)

    def test_geojson_value(self):
        geojson_value('{"type":"Point","coordinates":[-122.2207184,37.72129059]}', self.nq)
        value = self.nq.object_value
        assert value.kind == ValueKind.GEO
        assert isinstance(value.get_geo_val(), bytes)
        rendered = value.render()
        assert rendered.endswith("^^<geo:geojson>")
        assert "-122.2207184,37.72129059" in rendered

    def test_geojson_value_rejects_garbage(self):
        with pytest.raises(ValueConversionError):
            geojson_value('{"type":"Circle"}', self.nq)

    def test_value_replaces_object_id(self):
        self.nq.object_id = "_:other"
        int_value(1, self.nq)
        assert self.nq.object_id is None
        assert self.nq.object_value.data == 1


class TestValueAccessors:
    """Accessors return zero values on kind mismatch."""

    def test_matching_kind(self):
        assert Value(ValueKind.INT, 25).get_int_val() == 25
        assert Value(ValueKind.FLOAT, 1.5).get_double_val() == 1.5
        assert Value(ValueKind.BOOL, True).get_bool_val() is True
        assert Value(ValueKind.STRING, "x").get_str_val() == "x"

    def test_mismatched_kind(self):
        value = Value(ValueKind.STRING, "x")
        assert value.get_int_val() == 0
        assert value.get_double_val() == 0.0
        assert value.get_bool_val() is False
        assert value.get_geo_val() == b""
        assert Value(ValueKind.INT, 1).get_str_val() == ""


class TestFacets:
    """Tests for facet parsing and rendering."""

    def test_quoted_string(self):
        assert parse_facet_value('"Steve"') == "Steve"

    def test_quoted_string_with_escaped_quote(self):
        assert parse_facet_value('"say \\"hi\\""') == 'say "hi"'

    def test_int(self):
        assert parse_facet_value("25") == 25

    def test_float(self):
        assert parse_facet_value("1.5") == 1.5

    def test_bool(self):
        assert parse_facet_value("true") is True
        assert parse_facet_value("false") is False

    def test_datetime(self):
        assert parse_facet_value("2006-01-02T15:04:05") == dt.datetime(2006, 1, 2, 15, 4, 5)

    def test_unquoted_text_is_rejected(self):
        with pytest.raises(FacetError, match="double quotes"):
            parse_facet_value("Steve")

    @pytest.mark.parametrize("key", ["", "has space", "1abc", "a=b"])
    def test_invalid_key(self, key):
        nq = NQuad(subject="_:a", predicate="name")
        with pytest.raises(FacetError):
            add_facet(key, "true", nq)

    def test_repeated_key_replaces(self):
        nq = NQuad(subject="_:a", predicate="name")
        add_facet("close", "true", nq)
        add_facet("close", "false", nq)
        assert [(f.key, f.value) for f in nq.facets] == [("close", False)]

    def test_facet_error_is_value_error(self):
        nq = NQuad(subject="_:a", predicate="name")
        with pytest.raises(ValueError):
            add_facet("alias", "Steve", nq)


class TestNQuadRender:
    """Tests for rendering whole quads."""

    def test_value_with_facets(self):
        nq = NQuad(subject="_:person1", predicate="name")
        str_value("Steven Spielberg", nq)
        add_facet("since", "2006-01-02T15:04:05", nq)
        add_facet("alias", '"Steve"', nq)

        assert nq.render() == (
            '_:person1 <name> "Steven Spielberg"^^<xs:string> '
            '(since=2006-01-02T15:04:05, alias="Steve") .'
        )

    def test_edge_between_blank_nodes(self):
        nq = NQuad(subject="_:person1", predicate="friend", object_id="_:person2")
        add_facet("close", "true", nq)
        assert nq.render() == "_:person1 <friend> _:person2 (close=true) ."

    def test_edge_between_uids(self):
        nq = NQuad(subject="0x1", predicate="friend", object_id="0x2")
        assert nq.render() == "<0x1> <friend> <0x2> ."

    def test_star_object(self):
        nq = NQuad(subject="0x1", predicate="friend", object_id=STAR)
        assert nq.render() == "<0x1> <friend> * ."

    def test_star_predicate_is_bare(self):
        nq = NQuad(subject="0x1", predicate=STAR, object_id=STAR)
        assert nq.render() == "<0x1> * * ."

    def test_query_variable_nodes(self):
        nq = NQuad(subject=uid_var("v"), predicate="friend", object_id="uid(w)")
        assert nq.render() == "uid(v) <friend> uid(w) ."

    @pytest.mark.parametrize("bad", ["", "1v", "v w", "v)"])
    def test_invalid_query_variable(self, bad):
        with pytest.raises(ValueConversionError):
            uid_var(bad)

    def test_missing_object(self):
        with pytest.raises(ValueConversionError, match="exactly one"):
            NQuad(subject="_:a", predicate="name").validate()

    def test_invalid_subject(self):
        nq = NQuad(subject="person1", predicate="name")
        str_value("x", nq)
        with pytest.raises(ValueConversionError):
            nq.validate()

    def test_invalid_predicate(self):
        nq = NQuad(subject="_:a", predicate="bad name")
        str_value("x", nq)
        with pytest.raises(ValueConversionError):
            nq.validate()
