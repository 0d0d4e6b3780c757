"""Tests for the ``livesync diff`` command."""

from __future__ import annotations

import contextlib
import io
import json
import os
import shutil
import tempfile
import unittest

import yaml

from livesync.cli import main

OLD = {
    "openapi": "3.1.0",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "paths": {"/pets": {"get": {"summary": "List pets"}}},
}


class TestCliDiff(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.old_path = self._write("old.json", json.dumps(OLD))

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _write(self, name: str, text: str) -> str:
        path = os.path.join(self.tmpdir, name)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)
        return path

    def _run(self, *argv: str):
        out = io.StringIO()
        code = 0
        with contextlib.redirect_stdout(out):
            try:
                main(list(argv))
            except SystemExit as exc:
                code = exc.code
        return code, out.getvalue()

    def _renamed(self) -> str:
        new = json.loads(json.dumps(OLD))
        new["paths"]["/pets"] = {"post": {"summary": "List pets"}}
        return self._write("new.yaml", yaml.safe_dump(new))

    def test_identical_documents(self):
        code, out = self._run("diff", self.old_path, self.old_path)
        self.assertEqual(code, 0)
        self.assertIn("No changes", out)

    def test_changes_exit_with_one(self):
        code, out = self._run("diff", self.old_path, self._renamed())
        self.assertEqual(code, 1)
        self.assertIn("Commands: 1", out)
        self.assertIn("edit request", out)
        self.assertIn('method: "post"', out)

    def test_json_output(self):
        code, out = self._run("diff", self.old_path, self._renamed(), "--format", "json")
        self.assertEqual(code, 1)
        commands = json.loads(out)
        self.assertEqual(len(commands), 1)
        self.assertEqual(commands[0]["method"], "edit")
        self.assertEqual(commands[0]["kind"], "request")
        self.assertEqual(commands[0]["path"], "method")
        self.assertEqual(commands[0]["value"], "post")

    def test_entries_output(self):
        code, out = self._run(
            "diff", self.old_path, self._renamed(), "--entries", "--format", "json"
        )
        self.assertEqual(code, 1)
        self.assertEqual(
            json.loads(out),
            [
                {
                    "type": "CHANGE",
                    "path": ["paths", "/pets", "method"],
                    "oldValue": "get",
                    "value": "post",
                }
            ],
        )

    def test_yaml_with_numeric_response_codes(self):
        old = self._write(
            "codes-old.yaml",
            "openapi: 3.1.0\n"
            "info: {title: Petstore, version: 1.0.0}\n"
            "paths:\n"
            "  /pets:\n"
            "    get:\n"
            "      responses:\n"
            "        200: {description: OK}\n"
            "        default: {description: Error}\n",
        )
        new = self._write(
            "codes-new.yaml",
            "openapi: 3.1.0\n"
            "info: {title: Petstore, version: 1.0.0}\n"
            "paths:\n"
            "  /pets:\n"
            "    get:\n"
            "      responses:\n"
            "        200: {description: OK}\n"
            "        404: {description: Missing}\n"
            "        default: {description: Error}\n",
        )
        code, out = self._run("diff", old, new, "--format", "json")
        self.assertEqual(code, 1)
        commands = json.loads(out)
        self.assertEqual(len(commands), 1)
        self.assertEqual(commands[0]["method"], "edit")
        self.assertEqual(commands[0]["path"], "responses.404")
        self.assertEqual(commands[0]["value"], {"description": "Missing"})

    def test_missing_file(self):
        code, _ = self._run("diff", self.old_path, os.path.join(self.tmpdir, "nope.yaml"))
        self.assertEqual(code, 2)

    def test_old_document_not_a_mapping(self):
        bad = self._write("bad.yaml", "- just\n- a list\n")
        code, _ = self._run("diff", bad, self.old_path)
        self.assertEqual(code, 2)

    def test_no_subcommand(self):
        code, _ = self._run()
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
