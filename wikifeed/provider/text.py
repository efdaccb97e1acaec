"""Text helpers for turning Wikipedia summaries into feed hooks."""

import re

from wikifeed.articles import Category


MIN_INTERESTING_LENGTH = 50
ALWAYS_INTERESTING_LENGTH = 500
MAX_TAGS = 3
MIN_TAG_LENGTH = 5
ELLIPSIS = "..."

# Stub phrasing for villages, municipalities and other place stubs.
BORING_PATTERNS: dict[str, list[re.Pattern[str]]] = {
    "tr": [
        re.compile(p, re.IGNORECASE)
        for p in (
            r"ilçesine bağlı",
            r"bir mahalledir",
            r"bir köydür",
            r"bir belediyedir",
            r"nüfusu \d+ kişidir",
            r"\d+ yılında kurulmuştur",
            r"bir yerleşim yeridir",
            r"idari birim",
        )
    ],
    "en": [
        re.compile(p, re.IGNORECASE)
        for p in (
            r"is a village",
            r"is a town",
            r"is a municipality",
            r"is a commune",
            r"census-designated place",
            r"unincorporated community",
            r"administrative unit",
        )
    ],
}

# Checked in order; the first match wins.
CATEGORY_PATTERNS: list[tuple[Category, re.Pattern[str]]] = [
    (
        Category.SCIENCE,
        re.compile(
            r"fizik|kimya|biyoloji|bilim|atom|molekül|enerji|uzay|gezegen|yıldız"
            r"|science|physics|chemistry|biology|planet|star|quantum"
        ),
    ),
    (
        Category.HISTORY,
        re.compile(
            r"savaş|tarih|imparator|kral|antik|osmanlı"
            r"|war|history|emperor|king|ancient|battle|dynasty|empire"
        ),
    ),
    (
        Category.NATURE,
        re.compile(
            r"hayvan|bitki|deniz|orman|kuş|balık|tür"
            r"|species|animal|plant|forest|ocean|bird|fish|mammal"
        ),
    ),
    (
        Category.TECHNOLOGY,
        re.compile(
            r"bilgisayar|yazılım|internet|teknoloji|mühendis"
            r"|computer|software|technology|digital|engineer|algorithm"
        ),
    ),
    (
        Category.CULTURE,
        re.compile(
            r"sanat|müzik|film|yazar|edebiyat|roman|şarkı"
            r"|art|music|author|literature|novel|song|album"
        ),
    ),
    (
        Category.PEOPLE,
        re.compile(
            r"futbolcu|oyuncu|aktör|şarkıcı|bilim insanı"
            r"|footballer|actor|singer|scientist|politician|athlete"
        ),
    ),
]

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_NON_WORD_RE = re.compile(r"[^\w\s]")


def is_interesting(text: str | None, lang: str = "tr") -> bool:
    """Check whether a hook is worth showing.

    Short text is rejected and long text accepted outright; anything in
    between is rejected if it matches a stub pattern of the language
    (Turkish patterns for unknown languages).

    Args:
        text: Candidate hook.
        lang: Language code.

    Returns:
        True if the text should be shown.
    """
    if not text or len(text) < MIN_INTERESTING_LENGTH:
        return False
    if len(text) > ALWAYS_INTERESTING_LENGTH:
        return True

    patterns = BORING_PATTERNS.get(lang, BORING_PATTERNS["tr"])
    return not any(pattern.search(text) for pattern in patterns)


def first_sentences(text: str, count: int = 2) -> str:
    """Keep the first ``count`` sentences of a text.

    Text without sentence punctuation is returned whole.
    """
    text = text.strip()
    sentences = _SENTENCE_RE.findall(text) or [text]
    return " ".join(sentence.strip() for sentence in sentences[:count]).strip()


def truncate_hook(text: str, max_length: int) -> str:
    """Cut text to ``max_length`` characters, ending in an ellipsis if cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


def detect_category(title: str, description: str | None = None) -> Category:
    """Detect a coarse category from a page title and description.

    Args:
        title: Page title.
        description: Short page description.

    Returns:
        The first matching category, CULTURE if none matches.
    """
    text = f"{title} {description or ''}".lower()
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(text):
            return category
    return Category.CULTURE


def extract_tags(title: str, description: str | None = None) -> list[str]:
    """Take up to three long words from a title and description as tags.

    Args:
        title: Page title.
        description: Short page description.

    Returns:
        Lower-cased words longer than four characters, in order.
    """
    text = _NON_WORD_RE.sub("", f"{title} {description or ''}".lower())
    words = [word for word in text.split() if len(word) >= MIN_TAG_LENGTH]
    return words[:MAX_TAGS]


def wiki_categories(description: str | None) -> list[str]:
    """Split a page description into classifier labels.

    Args:
        description: Short page description, e.g. "American actor, singer".

    Returns:
        Non-empty comma-separated parts, lower-cased.
    """
    if not description:
        return []
    return [part.strip().lower() for part in description.split(",") if part.strip()]
