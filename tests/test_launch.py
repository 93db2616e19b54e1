import unittest
from typing import Dict, List, Optional, Sequence

from editprompt.errors import ExternalCommandError
from editprompt.mux.tmux import TmuxMultiplexer


class FakeTmuxLauncher(TmuxMultiplexer):
    def __init__(
        self, panes: Sequence[str] = (), *, fail_remember: bool = False, fail_focus: bool = False
    ) -> None:
        super().__init__(sleep=lambda s: None)
        self.panes = set(panes)
        self.options: Dict[str, str] = {}
        self.focused: List[str] = []
        self.splits: List[List[str]] = []
        self.fail_remember = fail_remember
        self.fail_focus = fail_focus

    def pane_exists(self, pane_id: str) -> bool:
        return pane_id in self.panes

    def focus(self, pane_id: str) -> None:
        if self.fail_focus:
            raise ExternalCommandError("cannot select pane")
        self.focused.append(pane_id)

    def get_global_option(self, name: str) -> Optional[str]:
        return self.options.get(name)

    def set_global_option(self, name: str, value: str) -> None:
        if self.fail_remember:
            raise ExternalCommandError("server exited")
        self.options[name] = value

    def unset_global_option(self, name: str) -> None:
        self.options.pop(name, None)

    def split_window(self, command, *, split_options: str = "", cwd: str = "") -> str:
        self.splits.append(list(command))
        pane = f"%{10 + len(self.splits)}"
        self.panes.add(pane)
        return pane


class TestLaunch(unittest.TestCase):
    def test_new_pane_is_remembered_then_reused(self) -> None:
        from editprompt.kernel.launch import launch
        from editprompt.mux.tmux import reuse_option_name

        mux = FakeTmuxLauncher(panes=["%1"])
        pane = launch(mux, "%1", open_args=["--editor", "nvim"])
        self.assertEqual(pane, "%11")
        self.assertEqual(mux.options[reuse_option_name("%1")], "%11")
        cmd = mux.splits[0]
        self.assertEqual(cmd[-4:], ["--target-pane", "%1", "--editor", "nvim"])
        self.assertIn("open", cmd)

        again = launch(mux, "%1")
        self.assertEqual(again, "%11")
        self.assertEqual(len(mux.splits), 1)
        self.assertEqual(mux.focused, ["%11"])

    def test_dead_remembered_pane_is_replaced(self) -> None:
        from editprompt.kernel.launch import launch
        from editprompt.mux.tmux import reuse_option_name

        mux = FakeTmuxLauncher(panes=["%1"])
        mux.options[reuse_option_name("%1")] = "%5"
        pane = launch(mux, "%1")
        self.assertEqual(pane, "%11")
        self.assertEqual(mux.options[reuse_option_name("%1")], "%11")
        self.assertEqual(mux.focused, [])

    def test_unfocusable_remembered_pane_gets_a_new_split(self) -> None:
        from editprompt.kernel.launch import launch
        from editprompt.mux.tmux import reuse_option_name

        mux = FakeTmuxLauncher(panes=["%1", "%5"], fail_focus=True)
        mux.options[reuse_option_name("%1")] = "%5"
        with self.assertLogs("editprompt.kernel.launch", level="WARNING"):
            pane = launch(mux, "%1")
        self.assertEqual(pane, "%11")
        self.assertEqual(len(mux.splits), 1)
        self.assertEqual(mux.options[reuse_option_name("%1")], "%11")

    def test_remember_failure_still_returns_pane(self) -> None:
        from editprompt.kernel.launch import launch

        mux = FakeTmuxLauncher(panes=["%1"], fail_remember=True)
        self.assertEqual(launch(mux, "%1"), "%11")

    def test_target_required(self) -> None:
        from editprompt.errors import ValidationError
        from editprompt.kernel.launch import launch

        with self.assertRaises(ValidationError):
            launch(FakeTmuxLauncher(), " ")


if __name__ == "__main__":
    unittest.main()
