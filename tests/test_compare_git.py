"""Tests for benchdiff.compare.git."""

from __future__ import annotations

import subprocess
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from benchdiff.compare.git import RevisionState, checkout
from benchdiff.errors import BenchdiffError, CheckoutFailed


def _ok() -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")


class TestCheckout(unittest.TestCase):
    @patch("benchdiff.compare.git.subprocess.run")
    def test_command(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _ok()
        checkout(Path("/repo"), "main")
        args, kwargs = mock_run.call_args
        self.assertEqual(args[0], ["git", "checkout", "main"])
        self.assertEqual(kwargs["cwd"], "/repo")
        self.assertTrue(kwargs["check"])

    @patch("benchdiff.compare.git.subprocess.run")
    def test_failure_carries_git_stderr(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(
            1,
            ["git", "checkout", "main"],
            stderr="error: Your local changes to the following files would be overwritten",
        )
        with self.assertRaises(CheckoutFailed) as ctx:
            checkout(Path("/repo"), "main")
        self.assertEqual(ctx.exception.ref, "main")
        self.assertEqual(ctx.exception.command, ["git", "checkout", "main"])
        self.assertEqual(ctx.exception.returncode, 1)
        self.assertIn("would be overwritten", ctx.exception.output)
        self.assertIsInstance(ctx.exception, BenchdiffError)

    @patch("benchdiff.compare.git.subprocess.run")
    def test_git_missing(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError("git")
        with self.assertRaises(CheckoutFailed) as ctx:
            checkout(Path("/repo"), "-")
        self.assertIsNone(ctx.exception.returncode)


class TestRevisionState(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch("benchdiff.compare.git.subprocess.run", return_value=_ok())
        self.mock_run = patcher.start()
        self.addCleanup(patcher.stop)
        self.state = RevisionState(repo_dir=Path("/repo"), base_ref="main")

    def _refs(self) -> list[str]:
        return [c[0][0][2] for c in self.mock_run.call_args_list]

    def test_starts_on_changes(self) -> None:
        self.assertEqual(self.state.current, "changes")
        self.assertEqual(self.state.switches, 0)

    def test_ensure_base_is_idempotent(self) -> None:
        self.state.ensure_base()
        self.state.ensure_base()
        self.assertEqual(self._refs(), ["main"])
        self.assertEqual(self.state.current, "base")
        self.assertEqual(self.state.switches, 1)

    def test_ensure_changes_uses_previous_ref(self) -> None:
        self.state.ensure_base()
        self.state.ensure_changes()
        self.assertEqual(self._refs(), ["main", "-"])
        self.assertEqual(self.state.current, "changes")
        self.assertEqual(self.state.switches, 2)

    def test_ensure_changes_noop_on_changes(self) -> None:
        self.state.ensure_changes()
        self.mock_run.assert_not_called()

    def test_ensure_by_name(self) -> None:
        self.state.ensure("base")
        self.state.ensure("base")
        self.state.ensure("changes")
        self.assertEqual(self._refs(), ["main", "-"])

    def test_failed_checkout_keeps_state(self) -> None:
        self.mock_run.side_effect = subprocess.CalledProcessError(1, ["git"])
        with self.assertRaises(CheckoutFailed):
            self.state.ensure_base()
        self.assertFalse(self.state.on_base)
        self.assertEqual(self.state.switches, 0)
