"""Article categories."""

from enum import Enum


class Category(str, Enum):
    """Coarse topic of an article.

    - SCIENCE: physics, chemistry, biology, astronomy
    - HISTORY: wars, empires, dynasties, dated events
    - NATURE: animals, plants, oceans, forests
    - TECHNOLOGY: computing, software, engineering
    - CULTURE: art, music, film, literature (the fallback)
    - PEOPLE: biographies of athletes, actors, scientists, politicians
    """

    SCIENCE = "science"
    HISTORY = "history"
    NATURE = "nature"
    TECHNOLOGY = "technology"
    CULTURE = "culture"
    PEOPLE = "people"

    @classmethod
    def coerce(cls, value: object) -> "Category":
        """Map a stored or legacy category name to a Category.

        Unknown names fall back to CULTURE.
        """
        if isinstance(value, Category):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            name = LEGACY_CATEGORY_ALIASES.get(name, name)
            try:
                return cls(name)
            except ValueError:
                pass
        return cls.CULTURE


# Category names written by the original Turkish-only release.
LEGACY_CATEGORY_ALIASES: dict[str, str] = {
    "bilim": "science",
    "tarih": "history",
    "doga": "nature",
    "teknoloji": "technology",
    "kultur": "culture",
    "insan": "people",
}

CATEGORY_EMOJI: dict[Category, str] = {
    Category.SCIENCE: "🔬",
    Category.HISTORY: "📜",
    Category.NATURE: "🌿",
    Category.TECHNOLOGY: "💻",
    Category.CULTURE: "🎭",
    Category.PEOPLE: "👤",
}

DEFAULT_EMOJI = "💡"


def category_emoji(category: Category) -> str:
    """Get the display emoji for a category."""
    return CATEGORY_EMOJI.get(category, DEFAULT_EMOJI)
