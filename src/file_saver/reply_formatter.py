"""User-facing reply texts for the file saver bot.

Pure functions returning plain text. Telegram messages are sent without
parse_mode, so nothing here needs escaping.
"""

from __future__ import annotations

from pathlib import Path

from file_saver.categories import Category

USAGE_HINT = (
    "Please send a file with an optional category in caption. "
    "Example: /image vacation.jpg"
)
UNKNOWN_COMMAND = "Unknown command. Type /help for available commands."
UNPROCESSABLE_FILE = "Could not process this file."
GENERIC_ERROR = "Sorry, I encountered an error processing your message."
SETDEFAULT_USAGE = "Please specify a category. Usage: /setdefault [category]"
NO_DEFAULT_SET = "You don't have a default category set."
DEFAULT_REMOVED = (
    "Default category removed. Files will be categorized automatically "
    "based on type."
)

HELP_TEXT = """Available commands:
/start - Start the bot
/help - Show this help message
/categories - List available file categories
/setdefault [category] - Set default category for saving files
/unsetdefault - Remove default category setting

To save a file with a specific category, send the file with a caption in the format:
/category filename

Example: /image vacation.jpg

If no category is specified, I'll use your default category (if set) or determine it automatically based on file type."""


def format_start(first_name: str) -> str:
    name = first_name or "there"
    return (
        f"Welcome, {name}! I'm a file saving bot. Send me files and I'll save "
        "them for you.\n\nUse /help to see available commands."
    )


def format_categories(categories: list[Category]) -> str:
    """List every category as a /command with its folder."""
    lines = ["Available categories for file organization:"]
    for category in categories:
        lines.append(f"/{category.name} - Save file to {category.storage_path} folder")
    return "\n".join(lines)


def format_category_selected(category: Category) -> str:
    return (
        f"Selected category: {category.name} (path: {category.storage_path})\n"
        "Now send me a file to save it in this category."
    )


def format_unknown_category(name: str, available: list[str]) -> str:
    return (
        f"Category '{name}' does not exist. "
        f"Available categories: {', '.join(available)}"
    )


def format_default_set(name: str) -> str:
    return (
        f"Default category set to '{name}'. All your files will be saved to "
        "this category unless specified otherwise."
    )


def format_saving(filename: str, category: str, storage_path: Path) -> str:
    """In-progress status shown while the download runs."""
    return f"Saving file '{filename}' to category '{category}' (path: {storage_path})..."


def format_saved(category: str, path: Path) -> str:
    return f"File saved successfully!\nCategory: {category}\nLocation: {path}"


def format_save_error(cause: str) -> str:
    return f"Error saving file: {cause}"
