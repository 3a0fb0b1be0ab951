"""Tests for the editor and shell launchers."""

from __future__ import annotations

import io
import subprocess
import unittest
from pathlib import Path
from unittest import mock

from xrayview.editor import launch_editor, launch_shell


class LauncherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.calls: list[str] = []

    def off(self) -> None:
        self.calls.append("off")

    def on(self) -> None:
        self.calls.append("on")

    def test_editor_requires_environment_variable(self) -> None:
        with mock.patch.dict("os.environ", {"EDITOR": ""}):
            error = launch_editor(Path("manifest.json"), self.off, self.on)

        self.assertEqual(error, "Cannot edit: $EDITOR is not set.")
        self.assertEqual(self.calls, [])

    def test_editor_runs_with_target_and_restores_tui(self) -> None:
        done = subprocess.CompletedProcess(["vim"], 0)
        with mock.patch.dict("os.environ", {"EDITOR": "vim -n"}), mock.patch(
            "xrayview.editor.subprocess.run", return_value=done
        ) as run:
            error = launch_editor(Path("manifest.json"), self.off, self.on)

        self.assertIsNone(error)
        run.assert_called_once_with(["vim", "-n", "manifest.json"], check=False)
        self.assertEqual(self.calls, ["off", "on"])

    def test_editor_failure_status_is_reported(self) -> None:
        done = subprocess.CompletedProcess(["false"], 1)
        with mock.patch.dict("os.environ", {"EDITOR": "false"}), mock.patch(
            "xrayview.editor.subprocess.run", return_value=done
        ):
            error = launch_editor(Path("manifest.json"), self.off, self.on)

        self.assertEqual(error, "Editor exited with status 1")

    def test_shell_exports_pod_and_container(self) -> None:
        with mock.patch.dict("os.environ", {"SHELL": "/bin/bash"}), mock.patch(
            "xrayview.editor.subprocess.run"
        ) as run, mock.patch("sys.stdout", io.StringIO()):
            error = launch_shell("default/web-7d9-abc", "nginx", self.off, self.on)

        self.assertIsNone(error)
        env = run.call_args.kwargs["env"]
        self.assertEqual(env["XRAY_POD"], "default/web-7d9-abc")
        self.assertEqual(env["XRAY_CONTAINER"], "nginx")
        self.assertEqual(run.call_args.args[0], ["/bin/bash"])
        self.assertEqual(self.calls, ["off", "on"])


if __name__ == "__main__":
    unittest.main()
