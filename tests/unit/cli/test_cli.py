"""CLI argument handling and one-shot render tests.

Verifies how ``xrayview.cli.main`` merges flags over config defaults and
what ``--render`` prints for a snapshot file.
"""

from __future__ import annotations

import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from tests.support import write_snapshot
from xrayview import cli
from xrayview.ui_theme import PLAIN_THEME


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.snapshot = write_snapshot(root / "tree.json")
        config_patch = mock.patch("xrayview.config.CONFIG_PATH", root / "missing-config.json")
        config_patch.start()
        self.addCleanup(config_patch.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def render(self, *args: str) -> list[str]:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout):
            cli.main([str(self.snapshot), "--render", "--no-color", "--no-icons", "--max-cols", "80", *args])
        return stdout.getvalue().splitlines()


class RenderModeTests(CliTestCase):
    def test_render_prints_title_and_full_tree(self) -> None:
        lines = self.render()

        self.assertEqual(lines[0], " Xray-Pods(all)[2] ")
        self.assertEqual(lines[1], "▾ [cluster] cluster")
        self.assertEqual(len(lines), 10)
        self.assertTrue(any("[containers] sidecar (CrashLoopBackOff)" in line for line in lines))

    def test_render_applies_regex_filter(self) -> None:
        lines = self.render("--filter", "coredns")

        self.assertEqual(lines[0], " Xray-Pods(all)[2] </coredns> ")
        body = "\n".join(lines[1:])
        self.assertIn("[pods] coredns-55", body)
        self.assertNotIn("web", body)

    def test_render_scopes_namespace(self) -> None:
        lines = self.render("-n", "default")

        self.assertEqual(lines[0], " Xray-Pods(default)[1] ")
        self.assertNotIn("coredns", "\n".join(lines))

    def test_render_collapse_shows_root_children_only(self) -> None:
        lines = self.render("--collapse")

        self.assertEqual(len(lines), 5)
        self.assertIn("▸ [deployments] web", lines[2])

    def test_render_clips_rows_to_max_cols(self) -> None:
        lines = self.render("--max-cols", "12")

        self.assertTrue(all(len(line) <= 12 for line in lines))


class InteractiveModeTests(CliTestCase):
    def test_main_builds_terminal_app_with_merged_options(self) -> None:
        with mock.patch("xrayview.cli.TerminalApp") as app_cls:
            cli.main([str(self.snapshot), "--kind", "deployments", "--collapse", "--no-color", "--filter", "-l app=web"])

        app_cls.assert_called_once()
        options = app_cls.call_args.args[3]
        self.assertEqual(options.kind, "deployments")
        self.assertTrue(options.no_color)
        self.assertFalse(options.settings.expand_nodes)
        self.assertIs(options.settings.theme, PLAIN_THEME)
        app = app_cls.return_value
        app.view.buffer.set_text.assert_called_once_with("-l app=web")
        app.run.assert_called_once_with()

    def test_missing_snapshot_exits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            cli.main([str(Path(self._tmp.name) / "nope.json")])

        self.assertIn("Snapshot not found", str(ctx.exception))

    def test_refresh_must_be_positive(self) -> None:
        with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit):
            cli.main([str(self.snapshot), "--refresh", "0"])


if __name__ == "__main__":
    unittest.main()
