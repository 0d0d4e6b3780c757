"""Tests for schema path resolution, union narrowing and resource lookup."""

from __future__ import annotations

import unittest

from livesync.core.find import find_resource
from livesync.core.resolve import narrow_union, resolve_path
from livesync.core.schemas import (
    IMPLICIT_FLOW,
    OAUTH2_SCHEME,
    OAUTH_FLOW,
    PASSWORD_FLOW,
    REQUEST,
    SECURITY_SCHEME,
    SERVER,
)
from livesync.core.shapes import (
    ANY,
    STRING,
    AnyShape,
    EnumShape,
    ObjectShape,
    array,
    default,
    obj,
    optional,
    record,
)


class TestResolvePath(unittest.TestCase):
    def test_object_field(self):
        self.assertIs(resolve_path(REQUEST, ("summary",)), STRING)

    def test_empty_path_returns_unwrapped_shape(self):
        self.assertIs(resolve_path(optional(REQUEST), ()), REQUEST)

    def test_array_index_then_field(self):
        self.assertIs(resolve_path(REQUEST, ("parameters", 0, "name")), STRING)
        self.assertIsInstance(resolve_path(REQUEST, ("parameters", 0, "in")), EnumShape)

    def test_string_key_into_array_of_objects(self):
        self.assertIs(resolve_path(REQUEST, ("parameters", "name")), STRING)
        self.assertIsNone(resolve_path(REQUEST, ("parameters", "missing")))

    def test_string_key_into_array_of_primitives_fails(self):
        self.assertIsNone(resolve_path(REQUEST, ("tags", "name")))

    def test_record_accepts_any_key(self):
        self.assertIs(resolve_path(SERVER, ("variables", "region", "default")), STRING)

    def test_any_accepts_every_remaining_path(self):
        result = resolve_path(REQUEST, ("responses", "200", "content", "application/json"))
        self.assertIsInstance(result, AnyShape)

    def test_unknown_field(self):
        self.assertIsNone(resolve_path(REQUEST, ("nope",)))

    def test_path_past_a_primitive(self):
        self.assertIsNone(resolve_path(REQUEST, ("summary", "x")))

    def test_wrappers_stripped_at_every_step(self):
        shape = obj("outer", {"a": default(optional(obj("inner", {"b": optional(ANY)})), {})})
        self.assertIs(resolve_path(shape, ("a", "b")), ANY)

    def test_bool_is_not_an_index(self):
        self.assertIsNone(resolve_path(array(STRING), (True,)))
        self.assertIs(resolve_path(array(STRING), (0,)), STRING)

    def test_resolution_is_deterministic(self):
        shape = record(obj("item", {"x": STRING}))
        self.assertIs(resolve_path(shape, ("k", "x")), resolve_path(shape, ("k", "x")))


class TestNarrowUnion(unittest.TestCase):
    def test_picks_matching_variant(self):
        self.assertIs(narrow_union(SECURITY_SCHEME, "type", "oauth2"), OAUTH2_SCHEME)
        self.assertIs(narrow_union(OAUTH_FLOW, "type", "implicit"), IMPLICIT_FLOW)
        self.assertIs(narrow_union(OAUTH_FLOW, "type", "password"), PASSWORD_FLOW)

    def test_no_matching_variant(self):
        self.assertIsNone(narrow_union(SECURITY_SCHEME, "type", "mutualTLS"))
        self.assertIsNone(narrow_union(SECURITY_SCHEME, "type", None))

    def test_not_a_union(self):
        self.assertIsNone(narrow_union(SERVER, "type", "server"))

    def test_result_is_an_object_shape(self):
        self.assertIsInstance(narrow_union(SECURITY_SCHEME, "type", "http"), ObjectShape)


class TestFindResource(unittest.TestCase):
    def setUp(self):
        self.table = {
            "a": {"uid": "a", "path": "/pets", "method": "get"},
            "b": {"uid": "b", "path": "/pets", "method": "post"},
            "c": {"uid": "c", "path": "/users", "method": "get"},
        }

    def test_returns_first_match_in_key_order(self):
        found = find_resource(["c", "b", "a"], self.table, lambda r: r["path"] == "/pets")
        self.assertEqual(found["uid"], "b")

    def test_empty_keys(self):
        self.assertIsNone(find_resource([], self.table, lambda r: True))

    def test_no_match(self):
        self.assertIsNone(find_resource(["a", "b"], self.table, lambda r: r["method"] == "put"))

    def test_missing_keys_are_skipped(self):
        found = find_resource(["missing", "c"], self.table, lambda r: True)
        self.assertEqual(found["uid"], "c")


if __name__ == "__main__":
    unittest.main()
