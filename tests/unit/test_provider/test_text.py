"""Unit tests for hook and category text helpers."""

import pytest

from wikifeed.articles import Category
from wikifeed.provider import (
    detect_category,
    extract_tags,
    first_sentences,
    is_interesting,
    truncate_hook,
    wiki_categories,
)


LONG_FILLER = " It has a long and interesting history worth reading about."


class TestIsInteresting:
    """Tests for is_interesting."""

    @pytest.mark.parametrize("text", [None, "", "Too short to show."])
    def test_short_text_rejected(self, text: str | None) -> None:
        """Test empty and short text is rejected."""
        assert not is_interesting(text, "en")

    def test_plain_text_accepted(self) -> None:
        """Test ordinary text of reasonable length is accepted."""
        text = "The red fox is the largest of the true foxes." + LONG_FILLER

        assert is_interesting(text, "en")

    def test_english_stub_rejected(self) -> None:
        """Test English place stubs are rejected."""
        text = "Smallville Is A Village in Example County, in the state of Nowhere."

        assert not is_interesting(text, "en")

    def test_turkish_stub_rejected(self) -> None:
        """Test Turkish place stubs are rejected."""
        text = (
            "Örnekköy, Türkiye'nin Ankara ilçesine bağlı bir mahalledir. "
            "Nüfusu azdır."
        )

        assert not is_interesting(text, "tr")

    def test_unknown_language_uses_turkish_patterns(self) -> None:
        """Test languages without patterns fall back to the Turkish list."""
        text = "Örnekköy, Bolu iline bağlı bir köydür ve dağlık bir bölgededir."

        assert not is_interesting(text, "de")

    def test_long_text_always_accepted(self) -> None:
        """Test very long text is accepted even when it matches a pattern."""
        text = "Smallville is a village." + LONG_FILLER * 10

        assert len(text) > 500
        assert is_interesting(text, "en")


class TestFirstSentences:
    """Tests for first_sentences."""

    def test_keeps_first_two(self) -> None:
        """Test only the first two sentences are kept."""
        assert first_sentences("One. Two! Three? Four.") == "One. Two!"

    def test_custom_count(self) -> None:
        """Test the sentence count is configurable."""
        assert first_sentences("One. Two. Three.", 1) == "One."

    def test_no_punctuation(self) -> None:
        """Test text without sentence punctuation is returned whole."""
        assert first_sentences("  no punctuation here  ") == "no punctuation here"


class TestTruncateHook:
    """Tests for truncate_hook."""

    def test_short_text_unchanged(self) -> None:
        """Test text within the limit is unchanged."""
        assert truncate_hook("short", 280) == "short"

    def test_long_text_cut(self) -> None:
        """Test long text is cut to the limit with an ellipsis."""
        hook = truncate_hook("a" * 300, 280)

        assert len(hook) == 280
        assert hook.endswith("...")


class TestDetectCategory:
    """Tests for detect_category."""

    @pytest.mark.parametrize(
        ("title", "description", "expected"),
        [
            ("Mars", "fourth planet from the Sun", Category.SCIENCE),
            ("Battle of Hastings", "1066 battle in England", Category.HISTORY),
            ("Red fox", "species of mammal", Category.NATURE),
            ("Algorithm", "sequence of instructions", Category.TECHNOLOGY),
            ("Abbey Road", "1969 studio album by the Beatles", Category.CULTURE),
            ("Cristiano Ronaldo", "Portuguese footballer", Category.PEOPLE),
            ("Fotosentez", "bitki biyolojisi süreci", Category.SCIENCE),
            ("Xyz", None, Category.CULTURE),
        ],
    )
    def test_categories(
        self, title: str, description: str | None, expected: Category
    ) -> None:
        """Test each category is detected from title and description."""
        assert detect_category(title, description) == expected

    def test_first_match_wins(self) -> None:
        """Test earlier categories take precedence."""
        assert detect_category("Quantum history", None) == Category.SCIENCE


class TestExtractTags:
    """Tests for extract_tags."""

    def test_long_words_only(self) -> None:
        """Test words of five or more characters are kept, up to three."""
        tags = extract_tags("Albert Einstein", "German-born theoretical physicist")

        assert tags == ["albert", "einstein", "germanborn"]

    def test_no_long_words(self) -> None:
        """Test short titles give no tags."""
        assert extract_tags("Mars", None) == []


class TestWikiCategories:
    """Tests for wiki_categories."""

    def test_comma_split(self) -> None:
        """Test descriptions are split on commas and lower-cased."""
        assert wiki_categories("American Actor, singer") == ["american actor", "singer"]

    @pytest.mark.parametrize("description", [None, "", " , "])
    def test_empty(self, description: str | None) -> None:
        """Test empty descriptions give no labels."""
        assert wiki_categories(description) == []
