import json
import os
import subprocess
import tempfile
import unittest
from pathlib import Path
from typing import List
from unittest.mock import patch


class TestWeztermMultiplexer(unittest.TestCase):
    def setUp(self) -> None:
        from editprompt.kernel.store import StateStore

        self._td = tempfile.TemporaryDirectory()
        self.addCleanup(self._td.cleanup)
        self.state = Path(self._td.name) / "state.json"
        self.store = StateStore(path=self.state)
        self.calls: List[List[str]] = []
        self.panes = [{"pane_id": 1, "is_active": False}, {"pane_id": 2, "is_active": True}]

    def _run(self, argv, **kwargs) -> subprocess.CompletedProcess:
        argv = list(argv)
        self.calls.append(argv)
        if argv[2] == "list":
            return subprocess.CompletedProcess(argv, 0, stdout=json.dumps(self.panes), stderr="")
        return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")

    def _mux(self):
        from editprompt.mux.wezterm import WeztermMultiplexer

        return WeztermMultiplexer(store=self.store, sleep=lambda s: None)

    def test_attributes_live_in_state_file(self) -> None:
        mux = self._mux()
        mux.set_attr("5", "is_editor", "1")
        mux.set_attr("5", "target_panes", "1,2")
        mux.set_attr("1", "editor_pane", "5")

        doc = json.loads(self.state.read_text(encoding="utf-8"))
        self.assertEqual(doc["wezterm"]["editorPane"]["pane_5"], {"isEditor": "1", "targetPaneIds": "1,2"})
        self.assertEqual(doc["wezterm"]["targetPane"]["pane_1"], {"editorPaneId": "5"})
        self.assertEqual(mux.get_attr("5", "target_panes"), "1,2")
        self.assertIsNone(mux.get_attr("9", "editor_pane"))

    def test_clearing_back_reference_keeps_stash(self) -> None:
        from editprompt.kernel.stash import StashStore

        mux = self._mux()
        mux.set_attr("1", "editor_pane", "5")
        StashStore(self.store, "wezterm", "1").push("keep me")
        mux.unset_attr("1", "editor_pane")

        self.assertIsNone(mux.get_attr("1", "editor_pane"))
        self.assertEqual(StashStore(self.store, "wezterm", "1").get(), "keep me")

    def test_quote_append_and_take(self) -> None:
        mux = self._mux()
        mux.append_attr("1", "quote", "> a\n\n")
        mux.append_attr("1", "quote", "> b\n\n")
        self.assertEqual(mux.take_attr("1", "quote"), "> a\n\n> b\n\n")
        self.assertEqual(mux.take_attr("1", "quote"), "")

    def test_unknown_attribute(self) -> None:
        with self.assertRaises(ValueError):
            self._mux().get_attr("1", "colour")

    def test_cli_calls(self) -> None:
        with patch("editprompt.mux.base.subprocess.run", side_effect=self._run):
            mux = self._mux()
            mux.send_text("1", "hello")
            mux.send_key("1", "\\r")
            mux.focus("1")
            self.assertTrue(mux.pane_exists("2"))
            self.assertFalse(mux.pane_exists("3"))

        self.assertEqual(self.calls[0], ["wezterm", "cli", "send-text", "--no-paste", "--pane-id", "1", "--", "hello"])
        self.assertEqual(self.calls[1], ["wezterm", "cli", "send-text", "--no-paste", "--pane-id", "1", "--", "\r"])
        self.assertEqual(self.calls[2], ["wezterm", "cli", "activate-pane", "--pane-id", "1"])

    def test_current_pane(self) -> None:
        with patch("editprompt.mux.base.subprocess.run", side_effect=self._run):
            with patch.dict(os.environ, {"WEZTERM_PANE": "7"}):
                self.assertEqual(self._mux().current_pane_id(), "7")
            with patch.dict(os.environ, {"WEZTERM_PANE": ""}):
                self.assertEqual(self._mux().current_pane_id(), "2")

    def test_decode_key(self) -> None:
        from editprompt.mux.wezterm import decode_key

        self.assertEqual(decode_key("\\r"), "\r")
        self.assertEqual(decode_key("\\e\\n"), "\x1b\n")
        self.assertEqual(decode_key("a\\\\b"), "a\\b")
        self.assertEqual(decode_key("\\x"), "\\x")


class TestGetMultiplexer(unittest.TestCase):
    def test_selects_backend(self) -> None:
        from editprompt.kernel.store import StateStore
        from editprompt.mux import TmuxMultiplexer, WeztermMultiplexer, get_multiplexer

        with tempfile.TemporaryDirectory() as td:
            store = StateStore(path=Path(td) / "state.json")
            self.assertIsInstance(get_multiplexer("tmux"), TmuxMultiplexer)
            self.assertIsInstance(get_multiplexer("wezterm", store=store), WeztermMultiplexer)

    def test_rejects_unknown_backend(self) -> None:
        from editprompt.errors import ValidationError
        from editprompt.mux import get_multiplexer

        with self.assertRaises(ValidationError):
            get_multiplexer("screen")


if __name__ == "__main__":
    unittest.main()
