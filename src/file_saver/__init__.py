"""file_saver: Telegram bot that files uploads into category folders."""

__version__ = "0.1.0"

from file_saver.categories import (
    DEFAULT_CATEGORIES,
    Category,
    CategoryRegistry,
    ConfigError,
    load_categories,
)
from file_saver.filenames import sanitize_filename, unique_path
from file_saver.intake import IntakeOrchestrator, StatusReport, TransferError
from file_saver.preferences import NoDefaultSet, UnknownCategory, UserPreferenceStore
from file_saver.resolver import resolve_category

__all__ = [
    # categories
    "DEFAULT_CATEGORIES",
    "Category",
    "CategoryRegistry",
    "ConfigError",
    "load_categories",
    # filenames
    "sanitize_filename",
    "unique_path",
    # intake
    "IntakeOrchestrator",
    "StatusReport",
    "TransferError",
    # preferences
    "NoDefaultSet",
    "UnknownCategory",
    "UserPreferenceStore",
    # resolver
    "resolve_category",
]
