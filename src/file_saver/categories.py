"""Category registry for the file saver bot.

Reads config.yml to map category names to storage directories. Falls back
to a built-in set of five categories when the file is missing or broken,
so the bot always has somewhere to put an upload.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("./config.yml")
FALLBACK_CATEGORY = "other"
FALLBACK_STORAGE_PATH = Path("./files/misc")


class ConfigError(Exception):
    """Error loading the category configuration."""


@dataclass(frozen=True)
class Category:
    """A named bucket for files, mapped to one storage directory.

    Attributes:
        name: Category identifier, also usable as a /command.
        storage_path: Directory that receives files of this category.
    """

    name: str
    storage_path: Path


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category("document", Path("./files/documents")),
    Category("image", Path("./files/images")),
    Category("video", Path("./files/videos")),
    Category("audio", Path("./files/audio")),
    Category("other", FALLBACK_STORAGE_PATH),
)


def _parse_category_entry(entry: object) -> Category | None:
    """Parse a single ``{name, path}`` entry.

    Returns None and logs a warning if the entry is malformed.
    """
    if not isinstance(entry, dict):
        logger.warning("Skipping non-dict category entry: %s", entry)
        return None
    name = entry.get("name")
    path = entry.get("path")
    if not name or not path:
        logger.warning("Skipping category entry missing name or path: %s", entry)
        return None
    return Category(name=str(name).strip(), storage_path=Path(str(path)))


def load_categories(config_path: Path) -> dict[str, Category]:
    """Load categories from a YAML configuration file.

    Expected shape::

        categories:
          - name: document
            path: ./files/documents

    Args:
        config_path: Path to the YAML file.

    Returns:
        Mapping of category name to Category, in file order. A name listed
        twice takes the path of its last entry.

    Raises:
        ConfigError: If the file is missing, unreadable, malformed, or
            defines no usable category.
    """
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a mapping")
    entries = raw.get("categories")
    if not isinstance(entries, list):
        raise ConfigError(f"{config_path} has no 'categories' list")

    categories: dict[str, Category] = {}
    for entry in entries:
        category = _parse_category_entry(entry)
        if category is None:
            continue
        if category.name in categories:
            logger.warning(
                "Duplicate category '%s': %s replaces %s",
                category.name,
                category.storage_path,
                categories[category.name].storage_path,
            )
        categories[category.name] = category
        logger.info("Loaded category: %s -> %s", category.name, category.storage_path)

    if not categories:
        raise ConfigError(f"{config_path} defines no valid categories")
    return categories


class CategoryRegistry:
    """Read-only view over the loaded categories.

    Built once at startup and never mutated afterwards.
    """

    def __init__(self, categories: Mapping[str, Category]) -> None:
        self._categories = MappingProxyType(dict(categories))

    @classmethod
    def defaults(cls) -> CategoryRegistry:
        """Registry built from DEFAULT_CATEGORIES."""
        for category in DEFAULT_CATEGORIES:
            logger.info(
                "Using default category: %s -> %s",
                category.name,
                category.storage_path,
            )
        return cls({c.name: c for c in DEFAULT_CATEGORIES})

    @classmethod
    def from_config(cls, config_path: Path = DEFAULT_CONFIG_PATH) -> CategoryRegistry:
        """Load from *config_path*, falling back to the defaults on ConfigError."""
        try:
            return cls(load_categories(config_path))
        except ConfigError as exc:
            logger.warning("Error loading config: %s. Using default categories.", exc)
            return cls.defaults()

    def __contains__(self, name: object) -> bool:
        return name in self._categories

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    def names(self) -> list[str]:
        """Category names in registration order."""
        return list(self._categories)

    def get(self, name: str) -> Category | None:
        return self._categories.get(name)

    def resolve_path(self, name: str) -> Path | None:
        """Return the storage directory for *name*, or None if unknown."""
        category = self._categories.get(name)
        return category.storage_path if category else None

    def storage_path_for(self, name: str) -> Path:
        """Storage directory for *name*, falling back to 'other', then ./files/misc."""
        path = self.resolve_path(name)
        if path is None:
            path = self.resolve_path(FALLBACK_CATEGORY) or FALLBACK_STORAGE_PATH
        return path

    def ensure_directories(self) -> None:
        """Create every category directory. Errors are logged, never raised."""
        for category in self:
            try:
                category.storage_path.mkdir(parents=True, exist_ok=True)
            except OSError:
                logger.error(
                    "Error creating directory %s",
                    category.storage_path,
                    exc_info=True,
                )
