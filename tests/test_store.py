import json
import os
import tempfile
import unittest
from pathlib import Path


class TestStateStore(unittest.TestCase):
    def _with_home(self):
        old_home = os.environ.get("EDITPROMPT_HOME")
        td = tempfile.TemporaryDirectory()
        os.environ["EDITPROMPT_HOME"] = td.name

        def cleanup() -> None:
            td.cleanup()
            if old_home is None:
                os.environ.pop("EDITPROMPT_HOME", None)
            else:
                os.environ["EDITPROMPT_HOME"] = old_home

        self.addCleanup(cleanup)
        return Path(td.name)

    def test_set_get_delete_by_path(self) -> None:
        from editprompt.kernel.store import open_store, pane_key

        home = self._with_home()
        store = open_store()
        path = pane_key("wezterm", "targetPane", "3") + ["editorPaneId"]

        self.assertIsNone(store.get(path))
        store.set(path, "7")
        self.assertEqual(store.get(path), "7")

        doc = json.loads((home / "state.json").read_text(encoding="utf-8"))
        self.assertEqual(doc["wezterm"]["targetPane"]["pane_3"]["editorPaneId"], "7")
        self.assertEqual(doc["v"], 1)

        self.assertTrue(store.delete(path))
        self.assertFalse(store.delete(path))
        self.assertIsNone(store.get(path))
        doc = json.loads((home / "state.json").read_text(encoding="utf-8"))
        self.assertNotIn("wezterm", doc)

    def test_delete_keeps_sibling_fields(self) -> None:
        from editprompt.kernel.store import open_store, pane_key

        self._with_home()
        store = open_store()
        base = pane_key("wezterm", "targetPane", "3")
        store.set(base + ["editorPaneId"], "7")
        store.set(base + ["stash"], {"2025-01-01T00:00:00.000Z": "x"})

        store.delete(base + ["editorPaneId"])
        self.assertEqual(store.get(base + ["stash"]), {"2025-01-01T00:00:00.000Z": "x"})

    def test_corrupt_file_reads_as_empty(self) -> None:
        from editprompt.kernel.store import open_store

        home = self._with_home()
        (home / "state.json").write_text("{not json", encoding="utf-8")
        store = open_store()
        self.assertEqual(store.snapshot().data, {})
        store.set(["a", "b"], "c")
        self.assertEqual(store.get(["a", "b"]), "c")

    def test_transaction_without_changes_does_not_write(self) -> None:
        from editprompt.kernel.store import open_store

        home = self._with_home()
        store = open_store()
        with store.transaction() as doc:
            doc.get(["missing"])
        self.assertFalse((home / "state.json").exists())

    def test_unusable_home_is_a_registry_error(self) -> None:
        from editprompt.errors import RegistryError
        from editprompt.kernel.store import open_store

        home = self._with_home()
        blocker = home / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        os.environ["EDITPROMPT_HOME"] = str(blocker / "nested")
        with self.assertRaises(RegistryError):
            open_store()

    def test_dotted_key(self) -> None:
        from editprompt.kernel.store import dotted, pane_key

        self.assertEqual(dotted(pane_key("tmux", "editorPane", "%1")), "tmux.editorPane.pane_%1")


if __name__ == "__main__":
    unittest.main()
