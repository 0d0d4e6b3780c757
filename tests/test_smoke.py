import importlib
import pkgutil
import unittest

import livesync.core
from livesync import (
    EditCommand,
    EntityKind,
    WorkspaceStore,
    import_document,
    json_diff,
    reconcile,
)


class SmokeTest(unittest.TestCase):
    def test_import_and_reconcile(self) -> None:
        old = {
            "openapi": "3.1.0",
            "info": {"title": "Petstore", "version": "1.0.0"},
            "servers": [{"url": "https://api.example.com"}],
            "paths": {"/pets": {"get": {"summary": "List pets"}}},
        }
        new = {
            "openapi": "3.1.0",
            "info": {"title": "Petstore", "version": "1.1.0"},
            "servers": [{"url": "https://api.example.com"}],
            "paths": {"/pets": {"post": {"summary": "List pets"}}},
        }

        store = WorkspaceStore()
        collection_uid = import_document(old, store)
        commands = reconcile(json_diff(old, new), store, collection_uid, apply=store.apply)

        self.assertEqual(2, len(commands))
        self.assertTrue(all(isinstance(c, EditCommand) for c in commands))
        request = store.children(collection_uid, EntityKind.REQUEST)[0]
        self.assertEqual("post", request["method"])
        self.assertEqual("1.1.0", store.collections[collection_uid]["info"]["version"])

    def test_core_modules_are_documented(self) -> None:
        for info in pkgutil.iter_modules(livesync.core.__path__):
            module = importlib.import_module(f"livesync.core.{info.name}")
            with self.subTest(module=info.name):
                self.assertTrue(module.__doc__)


if __name__ == "__main__":
    unittest.main()
