"""Tests for file_saver.telegram_client."""

from __future__ import annotations

import io
import json
import urllib.error
from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest

from file_saver.telegram_client import TelegramAPIError, TelegramClient


# ---------------------------------------------------------------------------
# _request helper
# ---------------------------------------------------------------------------


def _make_response(data: dict) -> MagicMock:
    """Create a mock urllib response."""
    body = json.dumps(data).encode("utf-8")
    mock = MagicMock()
    mock.read.return_value = body
    mock.__enter__ = MagicMock(return_value=mock)
    mock.__exit__ = MagicMock(return_value=False)
    return mock


class TestRequest:
    def test_successful_request_returns_result(self):
        client = TelegramClient(bot_token="123:abc")
        resp = {"ok": True, "result": {"message_id": 5}}

        with patch("urllib.request.urlopen", return_value=_make_response(resp)) as mock:
            result = client._request("sendMessage", params={"chat_id": 1})

        assert result == {"message_id": 5}
        req = mock.call_args[0][0]
        assert req.full_url == "https://api.telegram.org/bot123:abc/sendMessage"

    def test_api_error(self):
        client = TelegramClient(bot_token="123:abc")
        resp = {"ok": False, "error_code": 400, "description": "chat not found"}

        with patch("urllib.request.urlopen", return_value=_make_response(resp)):
            with pytest.raises(TelegramAPIError, match="chat not found") as excinfo:
                client._request("sendMessage")
        assert excinfo.value.error_code == 400

    def test_http_error(self):
        client = TelegramClient(bot_token="123:abc")
        exc = urllib.error.HTTPError(
            "https://api.telegram.org/bot123:abc/getMe",
            401,
            "Unauthorized",
            {},
            BytesIO(b'{"ok":false}'),
        )

        with patch("urllib.request.urlopen", side_effect=exc):
            with pytest.raises(TelegramAPIError, match="HTTP 401"):
                client._request("getMe")

    def test_url_error(self):
        client = TelegramClient(bot_token="123:abc")
        exc = urllib.error.URLError("Connection refused")

        with patch("urllib.request.urlopen", side_effect=exc):
            with pytest.raises(TelegramAPIError, match="Connection failed"):
                client._request("getMe")


# ---------------------------------------------------------------------------
# API methods
# ---------------------------------------------------------------------------


class TestMethods:
    def test_get_updates_sends_offset_and_long_timeout(self):
        client = TelegramClient(bot_token="t")
        resp = {"ok": True, "result": [{"update_id": 10}]}

        with patch("urllib.request.urlopen", return_value=_make_response(resp)) as mock:
            updates = client.get_updates(offset=10, timeout=30)

        assert updates == [{"update_id": 10}]
        body = json.loads(mock.call_args[0][0].data)
        assert body["offset"] == 10
        assert body["timeout"] == 30
        assert mock.call_args[1]["timeout"] == 40

    def test_get_updates_omits_zero_offset(self):
        client = TelegramClient(bot_token="t")
        resp = {"ok": True, "result": []}

        with patch("urllib.request.urlopen", return_value=_make_response(resp)) as mock:
            client.get_updates()

        body = json.loads(mock.call_args[0][0].data)
        assert "offset" not in body

    def test_send_message(self):
        client = TelegramClient(bot_token="t")
        resp = {"ok": True, "result": {"message_id": 77}}

        with patch("urllib.request.urlopen", return_value=_make_response(resp)) as mock:
            sent = client.send_message(555, "hello")

        assert sent["message_id"] == 77
        body = json.loads(mock.call_args[0][0].data)
        assert body == {"chat_id": 555, "text": "hello"}
    def test_edit_message_text(self):
        client = TelegramClient(bot_token="t")
        resp = {"ok": True, "result": True}

        with patch("urllib.request.urlopen", return_value=_make_response(resp)) as mock:
            client.edit_message_text(555, 77, "done")

        req = mock.call_args[0][0]
        assert req.full_url.endswith("/editMessageText")
        assert json.loads(req.data) == {"chat_id": 555, "message_id": 77, "text": "done"}

    def test_file_url(self):
        client = TelegramClient(bot_token="t")
        resp = {"ok": True, "result": {"file_id": "F", "file_path": "documents/my file.pdf"}}

        with patch("urllib.request.urlopen", return_value=_make_response(resp)):
            url = client.file_url("F")

        assert url == "https://api.telegram.org/file/bott/documents/my%20file.pdf"

    def test_file_url_without_path_raises(self):
        client = TelegramClient(bot_token="t")
        resp = {"ok": True, "result": {"file_id": "F"}}

        with patch("urllib.request.urlopen", return_value=_make_response(resp)):
            with pytest.raises(TelegramAPIError, match="no file_path"):
                client.file_url("F")


# ---------------------------------------------------------------------------
# download
# ---------------------------------------------------------------------------


class TestDownload:
    def test_streams_body(self):
        client = TelegramClient(bot_token="t")
        body = BytesIO(b"x" * 100_000)
        resp = MagicMock()
        resp.read = body.read
        resp.__enter__ = MagicMock(return_value=resp)
        resp.__exit__ = MagicMock(return_value=False)
        out = io.BytesIO()

        with patch("urllib.request.urlopen", return_value=resp):
            written = client.download("https://example/file", out)

        assert written == 100_000
        assert out.getvalue() == b"x" * 100_000

    def test_http_error(self):
        client = TelegramClient(bot_token="t")
        exc = urllib.error.HTTPError("https://example/file", 404, "Not Found", {}, None)

        with patch("urllib.request.urlopen", side_effect=exc):
            with pytest.raises(TelegramAPIError, match="HTTP 404"):
                client.download("https://example/file", io.BytesIO())

    def test_connection_error(self):
        client = TelegramClient(bot_token="t")

        with patch(
            "urllib.request.urlopen", side_effect=urllib.error.URLError("timed out")
        ):
            with pytest.raises(TelegramAPIError, match="Connection failed"):
                client.download("https://example/file", io.BytesIO())
