"""File intake pipeline.

Takes one inbound Telegram message carrying a file, decides where the
file goes and under which name, fetches the bytes through the transport
and writes them to disk. Never raises for per-file problems -- every
outcome comes back as a StatusReport for the bot to relay.

Bytes land in a temporary file inside the target directory and are moved
onto the final name only once the transfer is complete.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Protocol

from file_saver.attachments import extract_attachment
from file_saver.categories import CategoryRegistry
from file_saver.filenames import apply_original_extension, sanitize_filename, unique_path
from file_saver.preferences import UserPreferenceStore
from file_saver.reply_formatter import (
    UNPROCESSABLE_FILE,
    format_save_error,
    format_saved,
    format_saving,
)
from file_saver.resolver import parse_caption, resolve_category

logger = logging.getLogger(__name__)

_TEMP_PREFIX = ".incoming-"
_TEMP_SUFFIX = ".part"


class TransferError(Exception):
    """Fetching or writing a file failed. The message is shown to the user."""


class FileTransport(Protocol):
    """What the orchestrator needs from the chat platform."""

    def file_url(self, file_id: str) -> str: ...

    def download(self, url: str, out: BinaryIO) -> int: ...


@dataclass(frozen=True)
class StatusReport:
    """Outcome of one intake.

    Attributes:
        ok: True when the file was written.
        text: Message to show the user.
        category: Resolved category name ("" when rejected early).
        path: Final path of the stored file, on success.
        filename: Desired filename before sanitizing.
        error: Underlying cause, on failure.
    """

    ok: bool
    text: str
    category: str = ""
    path: Path | None = None
    filename: str = ""
    error: str = ""


class IntakeOrchestrator:
    """Resolve, name, fetch and store files from inbound messages.

    Args:
        registry: Category registry.
        preferences: Per-user default categories.
        transport: Source of file bytes (TelegramClient in production).
        clock: Unix time source for generated filenames.
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        preferences: UserPreferenceStore,
        transport: FileTransport,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.registry = registry
        self.preferences = preferences
        self.transport = transport
        self._clock = clock

    def handle(
        self,
        message: dict[str, Any],
        on_progress: Callable[[str], Any] | None = None,
    ) -> StatusReport:
        """Save the file attached to *message*.

        Args:
            message: Telegram ``Message`` dict.
            on_progress: Called once with the in-progress status text
                before the download starts.

        Returns:
            StatusReport describing success or the failure cause.
        """
        attachment = extract_attachment(message, self._clock)
        if attachment is None:
            return StatusReport(ok=False, text=UNPROCESSABLE_FILE, error="no attachment")

        caption = message.get("caption")
        user_id = (message.get("from") or {}).get("id", 0)

        category = resolve_category(
            caption, user_id, attachment.kind, self.registry, self.preferences
        )
        filename = attachment.file_name
        desired = parse_caption(caption, self.registry).filename
        if desired:
            filename = apply_original_extension(desired, attachment.file_name)

        storage_path = self.registry.storage_path_for(category)

        if on_progress is not None:
            on_progress(format_saving(filename, category, storage_path))

        try:
            path = self._save(attachment.file_id, storage_path, sanitize_filename(filename))
        except TransferError as exc:
            logger.warning("Failed to save %s (%s): %s", filename, category, exc)
            return StatusReport(
                ok=False,
                text=format_save_error(str(exc)),
                category=category,
                filename=filename,
                error=str(exc),
            )

        logger.info("Saved %s to category %s at %s", filename, category, path)
        return StatusReport(
            ok=True,
            text=format_saved(category, path),
            category=category,
            path=path,
            filename=filename,
        )

    def _save(self, file_id: str, directory: Path, safe_name: str) -> Path:
        """Fetch *file_id* into a fresh path under *directory*.

        Raises:
            TransferError: On URL resolution, directory, network or write failure.
        """
        try:
            url = self.transport.file_url(file_id)
        except Exception as exc:
            raise TransferError(f"error getting file URL: {exc}") from exc

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TransferError(f"error creating directory: {exc}") from exc

        final_path = unique_path(directory, safe_name)

        try:
            tmp = tempfile.NamedTemporaryFile(
                dir=directory, prefix=_TEMP_PREFIX, suffix=_TEMP_SUFFIX, delete=False
            )
        except OSError as exc:
            raise TransferError(f"error creating file: {exc}") from exc

        tmp_path = Path(tmp.name)
        try:
            with tmp:
                size = self.transport.download(url, tmp)
            # NamedTemporaryFile creates 0600; give the file a regular mode
            os.chmod(tmp_path, _new_file_mode())
            os.replace(tmp_path, final_path)
        except OSError as exc:
            _discard(tmp_path)
            raise TransferError(f"error writing file: {exc}") from exc
        except Exception as exc:
            _discard(tmp_path)
            raise TransferError(f"error downloading file: {exc}") from exc

        logger.debug("Wrote %s bytes to %s", size, final_path)
        return final_path


def _new_file_mode() -> int:
    """Mode a plain ``open(path, "w")`` would give under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _discard(path: Path) -> None:
    """Remove a leftover temporary file, logging if that fails too."""
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove temporary file %s", path, exc_info=True)
