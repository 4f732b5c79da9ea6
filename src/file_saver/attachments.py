"""Attachment extraction from Telegram message payloads.

Turns the raw ``message`` dict of a Telegram update into a single
Attachment with an explicit kind, a file ID and a suggested filename.
Kinds are checked in a fixed order; the first one present wins.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class AttachmentKind(str, Enum):
    """File kinds the bot knows how to save."""

    DOCUMENT = "document"
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"
    VOICE = "voice"
    VIDEO_NOTE = "video_note"


# Message field order matters: a GIF arrives with both "animation" and
# "document", and is saved as a document.
_KIND_ORDER: tuple[AttachmentKind, ...] = (
    AttachmentKind.DOCUMENT,
    AttachmentKind.PHOTO,
    AttachmentKind.VIDEO,
    AttachmentKind.AUDIO,
    AttachmentKind.VOICE,
    AttachmentKind.VIDEO_NOTE,
)

# Prefix and extension for generated names
_GENERATED_NAMES: dict[AttachmentKind, tuple[str, str]] = {
    AttachmentKind.DOCUMENT: ("document", ""),
    AttachmentKind.PHOTO: ("photo", ".jpg"),
    AttachmentKind.VIDEO: ("video", ".mp4"),
    AttachmentKind.AUDIO: ("audio", ".mp3"),
    AttachmentKind.VOICE: ("voice", ".ogg"),
    AttachmentKind.VIDEO_NOTE: ("video_note", ".mp4"),
}

# Kinds whose declared file_name is honoured
_NAMED_KINDS = frozenset(
    {AttachmentKind.DOCUMENT, AttachmentKind.VIDEO, AttachmentKind.AUDIO}
)


@dataclass(frozen=True)
class Attachment:
    """A file attached to an inbound message.

    Attributes:
        kind: Which attachment field the file came from.
        file_id: Opaque Telegram token used to fetch the bytes.
        file_name: Declared name, or a generated time-stamped one.
    """

    kind: AttachmentKind
    file_id: str
    file_name: str


def detect_kind(message: dict[str, Any]) -> AttachmentKind | None:
    """Return the first attachment kind present on *message*, or None."""
    for kind in _KIND_ORDER:
        if message.get(kind.value):
            return kind
    return None


def has_attachment(message: dict[str, Any]) -> bool:
    return detect_kind(message) is not None


def generated_name(kind: AttachmentKind, now: float) -> str:
    """Time-stamped fallback name, e.g. ``photo_1700000000.jpg``."""
    prefix, ext = _GENERATED_NAMES[kind]
    return f"{prefix}_{int(now)}{ext}"


def extract_attachment(
    message: dict[str, Any],
    clock: Callable[[], float] = time.time,
) -> Attachment | None:
    """Extract the attachment of *message*.

    Photos arrive as a list of sizes; the last (largest) one is used.

    Args:
        message: Telegram ``Message`` object as a dict.
        clock: Source of the Unix time embedded in generated names.

    Returns:
        The Attachment, or None if there is none or it lacks a file ID.
    """
    kind = detect_kind(message)
    if kind is None:
        return None

    payload = message[kind.value]
    if kind is AttachmentKind.PHOTO:
        payload = payload[-1] if isinstance(payload, list) else payload
    if not isinstance(payload, dict):
        return None

    file_id = payload.get("file_id", "")
    if not file_id:
        return None

    file_name = ""
    if kind in _NAMED_KINDS:
        file_name = payload.get("file_name") or ""
    if not file_name:
        file_name = generated_name(kind, clock())

    return Attachment(kind=kind, file_id=file_id, file_name=file_name)
