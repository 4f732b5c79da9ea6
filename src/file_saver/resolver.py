"""Category resolution for incoming files.

Priority, strictly in this order:
    1. Caption override (``/<category> [filename...]``)
    2. The user's stored default
    3. Inference from the attachment kind
"""

from __future__ import annotations

from typing import NamedTuple

from file_saver.attachments import AttachmentKind
from file_saver.categories import FALLBACK_CATEGORY, CategoryRegistry
from file_saver.preferences import UserPreferenceStore

KIND_CATEGORIES: dict[AttachmentKind, str] = {
    AttachmentKind.DOCUMENT: "document",
    AttachmentKind.PHOTO: "image",
    AttachmentKind.VIDEO: "video",
    AttachmentKind.VIDEO_NOTE: "video",
    AttachmentKind.AUDIO: "audio",
    AttachmentKind.VOICE: "audio",
}


class CaptionOverride(NamedTuple):
    """What a file caption asks for. Empty strings mean 'not given'."""

    category: str
    filename: str


def parse_caption(caption: str | None, registry: CategoryRegistry) -> CaptionOverride:
    """Parse the caption micro-syntax ``/<category> [desired filename]``.

    The category is taken only when it is registered. Any tokens after a
    leading ``/``-token become the desired filename, even when the
    category itself was not recognised.
    """
    if not caption:
        return CaptionOverride("", "")
    tokens = caption.split()
    if not tokens or not tokens[0].startswith("/"):
        return CaptionOverride("", "")

    requested = tokens[0][1:]
    category = requested if requested in registry else ""
    filename = " ".join(tokens[1:])
    return CaptionOverride(category, filename)


def infer_category(kind: AttachmentKind | None) -> str:
    """Map an attachment kind to its natural category."""
    if kind is None:
        return FALLBACK_CATEGORY
    return KIND_CATEGORIES.get(kind, FALLBACK_CATEGORY)


def resolve_category(
    caption: str | None,
    user_id: int,
    kind: AttachmentKind | None,
    registry: CategoryRegistry,
    preferences: UserPreferenceStore,
) -> str:
    """Return the effective category name for an incoming file."""
    override = parse_caption(caption, registry).category
    if override:
        return override

    default = preferences.get_default(user_id)
    if default:
        return default

    return infer_category(kind)
