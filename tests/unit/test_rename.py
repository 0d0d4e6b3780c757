"""Tests for combining remove/create pairs under ``paths`` into renames."""

from __future__ import annotations

import unittest

from livesync.core.json_diff import json_diff
from livesync.core.rename import combine_rename_diffs
from livesync.core.types import DiffEntry, DiffType


def _doc(paths: dict) -> dict:
    return {"paths": paths}


class TestMethodRename(unittest.TestCase):
    def test_equal_bodies_yield_only_the_method_change(self):
        body = {"summary": "List pets", "parameters": [{"in": "query", "name": "limit"}]}
        diff = json_diff(_doc({"/pets": {"get": body}}), _doc({"/pets": {"post": dict(body)}}))
        self.assertEqual(
            diff,
            [
                DiffEntry.remove(("paths", "/pets", "get"), body),
                DiffEntry.create(("paths", "/pets", "post"), body),
            ],
        )

        combined = combine_rename_diffs(diff)
        self.assertEqual(
            combined, [DiffEntry.change(("paths", "/pets", "method"), "get", "post")]
        )

    def test_body_changes_are_prefixed_with_new_method(self):
        diff = json_diff(
            _doc({"/pets": {"get": {"summary": "a"}}}),
            _doc({"/pets": {"post": {"summary": "a", "description": "d"}}}),
        )
        combined = combine_rename_diffs(diff)
        self.assertEqual(
            combined,
            [
                DiffEntry.change(("paths", "/pets", "method"), "get", "post"),
                DiffEntry.change(("paths", "/pets", "post", "description"), None, "d"),
            ],
        )

    def test_operations_in_different_path_items_are_not_paired(self):
        diff = [
            DiffEntry.remove(("paths", "/a", "get"), {}),
            DiffEntry.create(("paths", "/b", "post"), {}),
        ]
        self.assertEqual(combine_rename_diffs(diff), diff)


class TestPathRename(unittest.TestCase):
    def test_equal_bodies_yield_only_the_path_change(self):
        item = {"get": {"summary": "List"}, "post": {"summary": "Create"}}
        diff = json_diff(_doc({"/pets": item}), _doc({"/animals": item}))
        self.assertEqual(
            combine_rename_diffs(diff),
            [DiffEntry.change(("paths", "path"), "/pets", "/animals")],
        )

    def test_body_changes_are_prefixed_with_new_path(self):
        diff = json_diff(
            _doc({"/pets": {"get": {"summary": "a"}}}),
            _doc({"/animals": {"get": {"summary": "b"}}}),
        )
        self.assertEqual(
            combine_rename_diffs(diff),
            [
                DiffEntry.change(("paths", "path"), "/pets", "/animals"),
                DiffEntry.change(("paths", "/animals", "get", "summary"), "a", "b"),
            ],
        )

    def test_method_rename_inside_renamed_path(self):
        diff = json_diff(
            _doc({"/pets": {"get": {"summary": "a"}}}),
            _doc({"/animals": {"put": {"summary": "a"}}}),
        )
        self.assertEqual(
            combine_rename_diffs(diff),
            [
                DiffEntry.change(("paths", "path"), "/pets", "/animals"),
                DiffEntry.change(("paths", "/animals", "method"), "get", "put"),
            ],
        )

    def test_depth_mismatch_is_not_a_pair(self):
        diff = [
            DiffEntry.remove(("paths", "/a"), {"get": {}}),
            DiffEntry.create(("paths", "/b", "get"), {}),
        ]
        self.assertEqual(combine_rename_diffs(diff), diff)


class TestSimplifications(unittest.TestCase):
    def test_deep_create_becomes_change(self):
        entry = DiffEntry.create(("paths", "/pets", "get", "summary"), "List")
        self.assertEqual(
            combine_rename_diffs([entry]),
            [DiffEntry.change(("paths", "/pets", "get", "summary"), None, "List")],
        )

    def test_deep_remove_becomes_change(self):
        entry = DiffEntry.remove(("paths", "/pets", "get", "summary"), "List")
        combined = combine_rename_diffs([entry])
        self.assertEqual(combined[0].type, DiffType.CHANGE)
        self.assertEqual(combined[0].old_value, "List")
        self.assertIsNone(combined[0].value)

    def test_array_tail_entries_pass_through(self):
        entry = DiffEntry.create(("paths", "/pets", "get", "parameters", 0), {"name": "q"})
        self.assertEqual(combine_rename_diffs([entry]), [entry])

    def test_entries_outside_paths_pass_through(self):
        diff = [
            DiffEntry.remove(("components", "schemas", "Pet", "title"), "Pet"),
            DiffEntry.create(("components", "schemas", "Pet", "description"), "A pet"),
            DiffEntry.change(("info", "title"), "A", "B"),
        ]
        self.assertEqual(combine_rename_diffs(diff), diff)

    def test_trailing_remove_is_kept(self):
        entry = DiffEntry.remove(("paths", "/pets"), {"get": {}})
        self.assertEqual(combine_rename_diffs([entry]), [entry])

    def test_detect_renames_disabled(self):
        diff = [
            DiffEntry.remove(("paths", "/pets", "get"), {}),
            DiffEntry.create(("paths", "/pets", "post"), {}),
        ]
        self.assertEqual(combine_rename_diffs(diff, detect_renames=False), diff)

    def test_input_is_not_modified(self):
        diff = [
            DiffEntry.remove(("paths", "/pets", "get"), {}),
            DiffEntry.create(("paths", "/pets", "post"), {}),
        ]
        snapshot = list(diff)
        combine_rename_diffs(diff)
        self.assertEqual(diff, snapshot)


if __name__ == "__main__":
    unittest.main()
