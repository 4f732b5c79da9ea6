"""Process settings and credential loading for the file saver bot.

The bot token comes from a local .env file first and the process
environment second. Everything else has a default and can be overridden
through environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from file_saver.categories import DEFAULT_CONFIG_PATH
from file_saver.telegram_client import TELEGRAM_API_BASE

logger = logging.getLogger(__name__)

TOKEN_VAR = "TELEGRAM_BOT_TOKEN"
DEFAULT_ENV_FILE = Path(".env")


class CredentialError(Exception):
    """The bot token could not be found."""


def _token_from_env_file(env_file: Path) -> str:
    if not env_file.is_file():
        return ""
    try:
        values = dotenv_values(env_file)
    except OSError:
        logger.warning("Error reading %s", env_file, exc_info=True)
        return ""
    return values.get(TOKEN_VAR) or ""


def load_bot_token(env_file: Path = DEFAULT_ENV_FILE) -> str:
    """Return the bot token from *env_file*, else from the environment.

    The file is parsed with python-dotenv without touching os.environ.

    Raises:
        CredentialError: If neither source provides a token.
    """
    token = _token_from_env_file(env_file)
    if token:
        return token
    token = os.environ.get(TOKEN_VAR, "")
    if token:
        return token
    raise CredentialError(f"{TOKEN_VAR} not found in .env file or environment variables")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


@dataclass(frozen=True)
class BotConfig:
    """Configuration for the bot process.

    Attributes:
        bot_token: Telegram bot token.
        config_path: YAML file listing the categories.
        api_base: Telegram Bot API root.
        poll_timeout_s: Long-poll duration for getUpdates.
        poll_error_delay_s: Pause after a failed getUpdates call.
        download_timeout_s: Socket timeout for API calls and downloads.
    """

    bot_token: str
    config_path: Path = DEFAULT_CONFIG_PATH
    api_base: str = TELEGRAM_API_BASE
    poll_timeout_s: int = 60
    poll_error_delay_s: int = 5
    download_timeout_s: int = 60

    @classmethod
    def from_env(cls) -> BotConfig:
        """Create config from the .env file and environment variables.

        Optional env vars: FILE_SAVER_CONFIG, FILE_SAVER_ENV_FILE,
        TELEGRAM_API_BASE, TELEGRAM_POLL_TIMEOUT, TELEGRAM_DOWNLOAD_TIMEOUT.

        Raises:
            CredentialError: If no bot token is available.
        """
        env_file = Path(os.environ.get("FILE_SAVER_ENV_FILE", "") or DEFAULT_ENV_FILE)
        return cls(
            bot_token=load_bot_token(env_file),
            config_path=Path(
                os.environ.get("FILE_SAVER_CONFIG", "") or DEFAULT_CONFIG_PATH
            ),
            api_base=(
                os.environ.get("TELEGRAM_API_BASE", "") or TELEGRAM_API_BASE
            ).rstrip("/"),
            poll_timeout_s=_env_int("TELEGRAM_POLL_TIMEOUT", 60),
            download_timeout_s=_env_int("TELEGRAM_DOWNLOAD_TIMEOUT", 60),
        )
