"""
List category and catalog source helpers.

Categories are stored in canonical lower-case hyphenated form. Older rows may
carry the human-readable label ("Will Watch"), so reads and deletes match
either spelling.
"""
import re
from enum import Enum
from typing import Dict, List, Optional

from app.services.exceptions import InvalidRequest


class Category(str, Enum):
    """The three lists every user has"""
    WATCHING = "watching"
    WILL_WATCH = "will-watch"
    ALREADY_WATCHED = "already-watched"


class Source(str, Enum):
    """Catalog a list entry was added from"""
    TMDB = "tmdb"
    YOUTUBE = "youtube"


DEFAULT_SOURCE = Source.TMDB

# Human-readable label shown in the UI for each category
CATEGORY_LABELS: Dict[Category, str] = {
    Category.WATCHING: "Watching",
    Category.WILL_WATCH: "Will Watch",
    Category.ALREADY_WATCHED: "Already Watched",
}

# Keyed by the label with case, spaces, hyphens and underscores removed
_CATEGORY_LOOKUP: Dict[str, Category] = {
    "watching": Category.WATCHING,
    "willwatch": Category.WILL_WATCH,
    "alreadywatched": Category.ALREADY_WATCHED,
}

_SEPARATORS = re.compile(r"[\s\-_]+")


def _lookup_key(label: str) -> str:
    return _SEPARATORS.sub("", label.strip().lower())


def normalize_category(label: Optional[str]) -> str:
    """
    Map a category label to its canonical value.

    >>> normalize_category("Will Watch")
    'will-watch'

    Raises InvalidRequest for blank or unknown labels.
    """
    if not label or not label.strip():
        raise InvalidRequest("Category is required")

    category = _CATEGORY_LOOKUP.get(_lookup_key(label))
    if category is None:
        raise InvalidRequest(
            "Invalid category",
            details={"category": label, "allowed": [c.value for c in Category]},
        )
    return category.value


def category_variants(canonical: str) -> List[str]:
    """Lower-cased stored spellings that belong to a canonical category"""
    label = CATEGORY_LABELS[Category(canonical)].lower()
    return sorted({canonical, label})


def bucket_for(stored: Optional[str]) -> Optional[str]:
    """Canonical category for a stored value, or None if it matches no list"""
    if not stored:
        return None
    value = stored.lower()
    for category in Category:
        if value in category_variants(category.value):
            return category.value
    return None
