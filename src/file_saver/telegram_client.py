"""Telegram Bot API client for the file saver bot.

Handles long polling, sending and editing messages, and fetching file
bytes via the Bot API. Stdlib-only (urllib) -- no third-party dependencies.

Built by BotConfig in bot.main(), which owns token lookup.
"""

from __future__ import annotations

import json
import logging
import shutil
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any, BinaryIO

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"

# Extra seconds on top of the long-poll timeout before the socket gives up
_POLL_SOCKET_MARGIN_S = 10


class TelegramAPIError(Exception):
    """Error communicating with the Telegram Bot API."""

    def __init__(self, message: str, error_code: int | None = None):
        super().__init__(message)
        self.error_code = error_code


@dataclass
class TelegramClient:
    """Client for the Telegram Bot API.

    Args:
        bot_token: Token issued by @BotFather.
        api_base: API root, overridable for a local Bot API server.
        timeout_s: Socket timeout for regular calls and file downloads.
    """

    bot_token: str
    api_base: str = TELEGRAM_API_BASE
    timeout_s: float = 60.0

    def _request(
        self,
        method: str,
        *,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Make an HTTP POST request to the Bot API.

        Args:
            method: Bot API method (e.g. 'sendMessage').
            params: JSON body parameters.
            timeout: Socket timeout override (long polling needs more).

        Returns:
            The ``result`` field of the response.

        Raises:
            TelegramAPIError: On HTTP errors or API errors (ok=false).
        """
        url = f"{self.api_base}/bot{self.bot_token}/{method}"
        headers = {"Content-Type": "application/json; charset=utf-8"}
        body = json.dumps(params or {}).encode("utf-8")

        req = urllib.request.Request(url, data=body, headers=headers, method="POST")

        try:
            with urllib.request.urlopen(req, timeout=timeout or self.timeout_s) as resp:
                data = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            raw = exc.read().decode("utf-8", errors="replace")
            raise TelegramAPIError(
                f"{method} -> HTTP {exc.code}: {raw}", error_code=exc.code
            ) from exc
        except urllib.error.URLError as exc:
            raise TelegramAPIError(f"{method} -> Connection failed: {exc.reason}") from exc

        if not data.get("ok"):
            description = data.get("description", "unknown_error")
            raise TelegramAPIError(
                f"{method} -> Telegram error: {description}",
                error_code=data.get("error_code"),
            )

        return data.get("result")

    def get_me(self) -> dict[str, Any]:
        """Return the bot's own User object."""
        return self._request("getMe")

    def get_updates(self, offset: int = 0, timeout: int = 60) -> list[dict[str, Any]]:
        """Long-poll for new updates.

        Args:
            offset: Identifier of the first update to return; confirms
                every update below it.
            timeout: Long-poll duration in seconds.

        Returns:
            List of Update dicts, oldest first.
        """
        params: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset:
            params["offset"] = offset
        result = self._request(
            "getUpdates", params=params, timeout=timeout + _POLL_SOCKET_MARGIN_S
        )
        return result if isinstance(result, list) else []

    def send_message(self, chat_id: int, text: str) -> dict[str, Any]:
        """Send a plain text message.

        Returns:
            The sent Message dict (includes 'message_id').
        """
        return self._request("sendMessage", params={"chat_id": chat_id, "text": text})

    def edit_message_text(self, chat_id: int, message_id: int, text: str) -> Any:
        """Replace the text of a message the bot sent earlier."""
        return self._request(
            "editMessageText",
            params={"chat_id": chat_id, "message_id": message_id, "text": text},
        )

    def get_file(self, file_id: str) -> dict[str, Any]:
        """Return the File object for *file_id* (includes 'file_path')."""
        return self._request("getFile", params={"file_id": file_id})

    def file_url(self, file_id: str) -> str:
        """Resolve a direct download URL for *file_id*.

        Raises:
            TelegramAPIError: If the API call fails or returns no file_path.
        """
        info = self.get_file(file_id)
        file_path = info.get("file_path") if isinstance(info, dict) else None
        if not file_path:
            raise TelegramAPIError(f"getFile -> no file_path for {file_id}")
        quoted = urllib.parse.quote(file_path)
        return f"{self.api_base}/file/bot{self.bot_token}/{quoted}"

    def download(self, url: str, out: BinaryIO) -> int:
        """Stream the body at *url* into *out*.

        Returns:
            Number of bytes written.

        Raises:
            TelegramAPIError: On HTTP or connection errors.
        """
        try:
            with urllib.request.urlopen(url, timeout=self.timeout_s) as resp:
                start = out.tell()
                shutil.copyfileobj(resp, out)
                return out.tell() - start
        except urllib.error.HTTPError as exc:
            raise TelegramAPIError(
                f"download -> HTTP {exc.code}", error_code=exc.code
            ) from exc
        except urllib.error.URLError as exc:
            raise TelegramAPIError(f"download -> Connection failed: {exc.reason}") from exc
