"""
Shared Enumerations.

Defines enums used across the package for type safety and consistency.
"""

from enum import Enum


class Category(str, Enum):
    """Relationship category of an account relative to the authenticated user."""
    WATCHING = "watching"  # followed by me, does not follow back
    WATCHER = "watcher"    # follows me, not followed back
    MUTUAL = "mutual"

    @property
    def heading(self) -> str:
        return _CATEGORY_HEADINGS[self]


_CATEGORY_HEADINGS = {
    Category.WATCHING: "Watching users",
    Category.WATCHER: "One-sided followers",
    Category.MUTUAL: "Mutual follows",
}
