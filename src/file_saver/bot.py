"""Telegram file saver bot.

Long-polls the Bot API and handles one update at a time, in delivery
order: commands are answered directly, file messages go through the
intake pipeline, other text gets a usage hint.

Per-update errors are logged and answered with an apology; the loop
keeps running. Only a missing bot token stops the process.
"""

from __future__ import annotations

import contextlib
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any

from file_saver.attachments import has_attachment
from file_saver.bot_config import BotConfig, CredentialError
from file_saver.categories import CategoryRegistry
from file_saver.intake import IntakeOrchestrator
from file_saver.preferences import NoDefaultSet, UnknownCategory, UserPreferenceStore
from file_saver.reply_formatter import (
    DEFAULT_REMOVED,
    GENERIC_ERROR,
    HELP_TEXT,
    NO_DEFAULT_SET,
    SETDEFAULT_USAGE,
    UNKNOWN_COMMAND,
    USAGE_HINT,
    format_categories,
    format_category_selected,
    format_default_set,
    format_start,
    format_unknown_category,
)
from file_saver.telegram_client import TelegramAPIError, TelegramClient

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Message helpers
# ---------------------------------------------------------------------------


def parse_command(message: dict[str, Any]) -> tuple[str, str] | None:
    """Return (command, args) when *message* starts with a bot command.

    Telegram marks commands with a ``bot_command`` entity at offset 0.
    A ``@botname`` suffix is dropped; args are the trimmed remainder.
    """
    text = message.get("text") or ""
    for entity in message.get("entities") or []:
        if entity.get("type") == "bot_command" and entity.get("offset") == 0:
            length = entity.get("length", 0)
            command = text[1:length].split("@", 1)[0]
            return command, text[length:].strip()
    return None


def _user_id(message: dict[str, Any]) -> int:
    return (message.get("from") or {}).get("id", 0)


def _chat_id(message: dict[str, Any]) -> int:
    return (message.get("chat") or {}).get("id", 0)


# ---------------------------------------------------------------------------
# FileSaverBot
# ---------------------------------------------------------------------------


@dataclass
class FileSaverBot:
    """Sequential Telegram bot that files uploads into category folders.

    Args:
        config: Bot configuration.
        client: Optional pre-built TelegramClient (for testing).
        registry: Optional pre-built CategoryRegistry (for testing).
    """

    config: BotConfig
    client: Any = field(default=None, repr=False)
    registry: CategoryRegistry | None = field(default=None, repr=False)
    preferences: UserPreferenceStore = field(init=False, repr=False)
    orchestrator: IntakeOrchestrator = field(init=False, repr=False)
    _offset: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = TelegramClient(
                bot_token=self.config.bot_token,
                api_base=self.config.api_base,
                timeout_s=self.config.download_timeout_s,
            )
        if self.registry is None:
            self.registry = CategoryRegistry.from_config(self.config.config_path)

        self.preferences = UserPreferenceStore(self.registry)
        self.orchestrator = IntakeOrchestrator(
            self.registry, self.preferences, self.client
        )

    def start(self) -> None:
        """Start the bot (blocking). Polls until the process is stopped."""
        try:
            me = self.client.get_me()
            logger.info("Authorized on account %s", me.get("username", ""))
        except TelegramAPIError:
            logger.warning("Could not resolve bot identity via getMe")

        self.registry.ensure_directories()

        logger.info("Starting long polling...")
        while True:
            self.poll_once()

    def poll_once(self) -> int:
        """Fetch one batch of updates and handle them in order.

        Returns:
            Number of updates handled.
        """
        try:
            updates = self.client.get_updates(
                offset=self._offset, timeout=self.config.poll_timeout_s
            )
        except TelegramAPIError:
            logger.exception("getUpdates failed")
            time.sleep(self.config.poll_error_delay_s)
            return 0

        for update in updates:
            self._offset = max(self._offset, update.get("update_id", 0) + 1)
            self.handle_update(update)
        return len(updates)

    # -- Update handling ----------------------------------------------------

    def handle_update(self, update: dict[str, Any]) -> None:
        """Dispatch a single update. Never raises."""
        message = update.get("message")
        if not message:
            return

        try:
            command = parse_command(message)
            if command is not None:
                self._handle_command(message, *command)
            elif has_attachment(message):
                self._handle_file(message)
            elif message.get("text"):
                self._reply(message, USAGE_HINT)
        except Exception:
            logger.exception("Error handling update %s", update.get("update_id"))
            with contextlib.suppress(Exception):
                self._reply(message, GENERIC_ERROR)

    def _handle_command(self, message: dict[str, Any], command: str, args: str) -> None:
        logger.info("Command /%s from user=%s", command, _user_id(message))

        if command == "start":
            first_name = (message.get("from") or {}).get("first_name", "")
            self._reply(message, format_start(first_name))
        elif command == "help":
            self._reply(message, HELP_TEXT)
        elif command == "categories":
            self._reply(message, format_categories(list(self.registry)))
        elif command == "setdefault":
            self._handle_set_default(message, args)
        elif command == "unsetdefault":
            self._handle_unset_default(message)
        else:
            category = self.registry.get(command)
            if category is not None:
                self._reply(message, format_category_selected(category))
            else:
                self._reply(message, UNKNOWN_COMMAND)

    def _handle_set_default(self, message: dict[str, Any], args: str) -> None:
        if not args:
            self._reply(message, SETDEFAULT_USAGE)
            return
        try:
            self.preferences.set_default(_user_id(message), args)
        except UnknownCategory as exc:
            self._reply(message, format_unknown_category(exc.name, exc.available))
            return
        self._reply(message, format_default_set(args))

    def _handle_unset_default(self, message: dict[str, Any]) -> None:
        try:
            self.preferences.clear_default(_user_id(message))
        except NoDefaultSet:
            self._reply(message, NO_DEFAULT_SET)
            return
        self._reply(message, DEFAULT_REMOVED)

    def _handle_file(self, message: dict[str, Any]) -> None:
        """Run the intake pipeline, keeping the user posted via one status message."""
        chat_id = _chat_id(message)
        status: dict[str, int] = {}

        def _on_progress(text: str) -> None:
            try:
                sent = self.client.send_message(chat_id, text)
            except TelegramAPIError:
                logger.warning("Could not send status message to chat %s", chat_id)
                return
            if isinstance(sent, dict) and sent.get("message_id"):
                status["message_id"] = sent["message_id"]

        report = self.orchestrator.handle(message, on_progress=_on_progress)

        if "message_id" in status:
            self.client.edit_message_text(chat_id, status["message_id"], report.text)
        else:
            self.client.send_message(chat_id, report.text)

    def _reply(self, message: dict[str, Any], text: str) -> None:
        self.client.send_message(_chat_id(message), text)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    """CLI entrypoint for the file saver bot."""
    logging.basicConfig(
        level=os.environ.get("FILE_SAVER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        config = BotConfig.from_env()
    except CredentialError as exc:
        logger.critical("%s", exc)
        raise SystemExit(1) from exc

    bot = FileSaverBot(config=config)
    try:
        bot.start()
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    main()
