"""Per-user default category, held in memory.

Defaults are lost on restart. The store takes the registry at
construction so it can validate names when a default is set.
"""

from __future__ import annotations

import threading

from file_saver.categories import CategoryRegistry


class UnknownCategory(Exception):
    """A user asked for a category that is not registered."""

    def __init__(self, name: str, available: list[str]):
        super().__init__(f"Category '{name}' does not exist")
        self.name = name
        self.available = available


class NoDefaultSet(Exception):
    """The user has no default category to clear."""


class UserPreferenceStore:
    """Thread-safe mapping of user ID to default category name."""

    def __init__(self, registry: CategoryRegistry) -> None:
        self._registry = registry
        self._defaults: dict[int, str] = {}
        self._lock = threading.Lock()

    def set_default(self, user_id: int, category_name: str) -> None:
        """Set *category_name* as the user's default.

        Raises:
            UnknownCategory: If the name is not in the registry.
        """
        if category_name not in self._registry:
            raise UnknownCategory(category_name, self._registry.names())
        with self._lock:
            self._defaults[user_id] = category_name

    def get_default(self, user_id: int) -> str | None:
        with self._lock:
            return self._defaults.get(user_id)

    def clear_default(self, user_id: int) -> None:
        """Remove the user's default.

        Raises:
            NoDefaultSet: If the user has none.
        """
        with self._lock:
            if user_id not in self._defaults:
                raise NoDefaultSet(f"User {user_id} has no default category")
            del self._defaults[user_id]
