"""Tests for key stringification and local reference resolution."""

from __future__ import annotations

import copy
import unittest

import yaml

from livesync.core.document import dereference, prepare_document, stringify_keys


class TestStringifyKeys(unittest.TestCase):
    def test_yaml_response_codes(self):
        document = yaml.safe_load(
            "responses:\n"
            "  200:\n"
            "    description: OK\n"
            "  default:\n"
            "    description: Error\n"
        )
        self.assertIn(200, document["responses"])
        self.assertEqual(
            stringify_keys(document),
            {"responses": {"200": {"description": "OK"}, "default": {"description": "Error"}}},
        )

    def test_nested_in_lists(self):
        self.assertEqual(
            stringify_keys([{1: [{2: "x"}]}, "y"]), [{"1": [{"2": "x"}]}, "y"]
        )

    def test_bool_and_null_keys(self):
        self.assertEqual(
            stringify_keys({True: 1, False: 2, None: 3}),
            {"true": 1, "false": 2, "null": 3},
        )

    def test_values_are_untouched(self):
        self.assertEqual(stringify_keys({"a": 1, "b": [2, None]}), {"a": 1, "b": [2, None]})


def _document() -> dict:
    return {
        "paths": {
            "/pets": {
                "get": {
                    "parameters": [{"$ref": "#/components/parameters/Limit"}],
                    "responses": {
                        "200": {
                            "$ref": "#/components/responses/Pets",
                            "description": "Overridden",
                        }
                    },
                }
            }
        },
        "components": {
            "parameters": {"Limit": {"in": "query", "name": "limit"}},
            "responses": {"Pets": {"description": "Pets", "content": {}}},
            "schemas": {
                "Node": {
                    "type": "object",
                    "properties": {"next": {"$ref": "#/components/schemas/Node"}},
                },
                "a/b": {"type": "string"},
            },
        },
    }


class TestDereference(unittest.TestCase):
    def test_parameter_reference(self):
        resolved = dereference(_document())
        self.assertEqual(
            resolved["paths"]["/pets"]["get"]["parameters"],
            [{"in": "query", "name": "limit"}],
        )

    def test_sibling_keys_override(self):
        resolved = dereference(_document())
        self.assertEqual(
            resolved["paths"]["/pets"]["get"]["responses"]["200"],
            {"description": "Overridden", "content": {}},
        )

    def test_escaped_pointer(self):
        document = _document()
        document["x-alias"] = {"$ref": "#/components/schemas/a~1b"}
        self.assertEqual(dereference(document)["x-alias"], {"type": "string"})

    def test_recursive_reference_is_kept(self):
        node = dereference(_document())["components"]["schemas"]["Node"]
        inner = node["properties"]["next"]
        self.assertEqual(inner["type"], "object")
        self.assertEqual(
            inner["properties"]["next"], {"$ref": "#/components/schemas/Node"}
        )

    def test_unresolvable_references_are_kept(self):
        document = {
            "a": {"$ref": "#/components/missing"},
            "b": {"$ref": "other.yaml#/components/x"},
            "c": {"$ref": "#/list/5"},
            "list": [1],
        }
        self.assertEqual(dereference(document), document)

    def test_input_is_not_modified(self):
        document = _document()
        before = copy.deepcopy(document)
        dereference(document)
        self.assertEqual(document, before)

    def test_prepare_document(self):
        document = yaml.safe_load(
            "paths:\n"
            "  /pets:\n"
            "    get:\n"
            "      responses:\n"
            "        200:\n"
            "          $ref: '#/components/responses/200'\n"
            "components:\n"
            "  responses:\n"
            "    200:\n"
            "      description: OK\n"
        )
        prepared = prepare_document(document)
        self.assertEqual(
            prepared["paths"]["/pets"]["get"]["responses"], {"200": {"description": "OK"}}
        )


if __name__ == "__main__":
    unittest.main()
