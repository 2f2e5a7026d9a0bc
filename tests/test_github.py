"""Tests for benchdiff.github."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from benchdiff.errors import ReportDeliveryError, ReportDeliveryUnauthorized
from benchdiff.github import post_comment, write_outputs


def _mock_response(status_code: int = 201, json_data: object = None) -> MagicMock:
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.json.return_value = json_data
    return resp


class TestPostComment(unittest.TestCase):
    @patch("benchdiff.github.requests.post")
    def test_created(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _mock_response(201, {"id": 1234})
        comment_id = post_comment("owner/repo", 7, "## body", "secret")
        self.assertEqual(comment_id, 1234)
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "https://api.github.com/repos/owner/repo/issues/7/comments")
        self.assertEqual(kwargs["json"], {"body": "## body"})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer secret")
        self.assertTrue(kwargs["headers"]["User-Agent"].startswith("benchdiff/"))

    @patch("benchdiff.github.requests.post")
    def test_custom_api_url(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _mock_response(201, {"id": 1})
        post_comment("o/r", 1, "b", "t", api_url="https://ghe.example.com/api/v3/")
        self.assertEqual(
            mock_post.call_args[0][0],
            "https://ghe.example.com/api/v3/repos/o/r/issues/1/comments",
        )

    @patch("benchdiff.github.requests.post")
    def test_forbidden(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _mock_response(403, {"message": "Resource not accessible"})
        with self.assertRaises(ReportDeliveryUnauthorized) as ctx:
            post_comment("o/r", 1, "b", "t")
        self.assertEqual(ctx.exception.status_code, 403)

    @patch("benchdiff.github.requests.post")
    def test_unauthorized(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _mock_response(401)
        with self.assertRaises(ReportDeliveryUnauthorized):
            post_comment("o/r", 1, "b", "t")

    @patch("benchdiff.github.requests.post")
    def test_server_error(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _mock_response(500)
        with self.assertRaises(ReportDeliveryError) as ctx:
            post_comment("o/r", 1, "b", "t")
        self.assertNotIsInstance(ctx.exception, ReportDeliveryUnauthorized)
        self.assertEqual(ctx.exception.status_code, 500)

    @patch("benchdiff.github.requests.post")
    def test_connection_error(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(ReportDeliveryError):
            post_comment("o/r", 1, "b", "t")

    @patch("benchdiff.github.requests.post")
    def test_timeout(self, mock_post: MagicMock) -> None:
        mock_post.side_effect = requests.Timeout()
        with self.assertRaises(ReportDeliveryError) as ctx:
            post_comment("o/r", 1, "b", "t")
        self.assertIn("Timeout", str(ctx.exception))

    @patch("benchdiff.github.requests.post")
    def test_bad_payload(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _mock_response(201, {"no_id": True})
        with self.assertRaises(ReportDeliveryError):
            post_comment("o/r", 1, "b", "t")


class TestWriteOutputs(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "output"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_single_line(self) -> None:
        write_outputs(self.path, {"comment-id": "42"})
        self.assertEqual(self.path.read_text(), "comment-id=42\n")

    def test_multi_line_uses_heredoc(self) -> None:
        write_outputs(self.path, {"report": "## t\n\n| a |"})
        lines = self.path.read_text().split("\n")
        self.assertTrue(lines[0].startswith("report<<"))
        delimiter = lines[0].split("<<", 1)[1]
        self.assertEqual(lines[1:4], ["## t", "", "| a |"])
        self.assertEqual(lines[4], delimiter)

    def test_appends(self) -> None:
        self.path.write_text("existing=1\n")
        write_outputs(self.path, {"x": "y"})
        self.assertEqual(self.path.read_text(), "existing=1\nx=y\n")
