"""Filesystem-safe, collision-free filenames.

Pure helpers: no I/O except the existence probes in unique_path().
"""

from __future__ import annotations

import os
from pathlib import Path

MAX_FILENAME_LENGTH = 240

_INVALID_CHARS = ("\\", "/", ":", "*", "?", '"', "<", ">", "|")
_REPLACEMENT = "_"


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut *text* to at most *max_bytes* UTF-8 bytes on a character boundary."""
    return text.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")


def sanitize_filename(name: str) -> str:
    """Replace path-hostile characters and cap the length.

    Each of ``\\ / : * ? " < > |`` becomes ``_``. The length cap is
    MAX_FILENAME_LENGTH bytes of UTF-8, since filesystems limit names in
    bytes. Longer names lose the tail of their base, cut on a character
    boundary, so that the extension survives. Applying the function twice
    gives the same result as applying it once.

    Args:
        name: Caption-supplied or platform-supplied filename.

    Returns:
        The sanitized filename.
    """
    result = name
    for char in _INVALID_CHARS:
        result = result.replace(char, _REPLACEMENT)

    if _utf8_len(result) > MAX_FILENAME_LENGTH:
        base, ext = os.path.splitext(result)
        ext_len = _utf8_len(ext)
        if ext_len >= MAX_FILENAME_LENGTH:
            return _truncate_utf8(result, MAX_FILENAME_LENGTH)
        result = _truncate_utf8(base, MAX_FILENAME_LENGTH - ext_len) + ext
    return result


def apply_original_extension(desired: str, original: str) -> str:
    """Append the extension of *original* when *desired* has none."""
    _, desired_ext = os.path.splitext(desired)
    _, original_ext = os.path.splitext(original)
    if not desired_ext and original_ext:
        return desired + original_ext
    return desired


def unique_path(directory: Path, safe_name: str) -> Path:
    """Return a path in *directory* that no existing entry occupies.

    ``directory/safe_name`` is returned unchanged when free. Otherwise
    ``<base>_1<ext>``, ``<base>_2<ext>``, ... are probed in order and the
    first free one wins.
    """
    candidate = directory / safe_name
    if not os.path.lexists(candidate):
        return candidate

    base, ext = os.path.splitext(safe_name)
    counter = 1
    while True:
        candidate = directory / f"{base}_{counter}{ext}"
        if not os.path.lexists(candidate):
            return candidate
        counter += 1
