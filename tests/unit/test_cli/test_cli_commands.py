"""Unit tests for the wikifeed CLI."""

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner, Result

from wikifeed import __version__
from wikifeed.articles import Article, ArticleSource, Category
from wikifeed.cache import ArticleCache
from wikifeed.cli.main import cli
from wikifeed.ledger import InteractionLedger
from wikifeed.store import KeyValueStore


def _make_article(article_id: str) -> Article:
    """Create a test Article."""
    return Article(
        id=article_id,
        hook=f"Hook for {article_id}.",
        category=Category.SCIENCE,
        source=ArticleSource(title=article_id, lang="tr"),
    )


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """Path of a fresh state database."""
    return tmp_path / "state.sqlite"


def _invoke(
    runner: CliRunner, state_path: Path, *args: str, **kwargs: Any
) -> Result:
    """Invoke the CLI against a given state database."""
    return runner.invoke(cli, ["--state", str(state_path), *args], **kwargs)


class TestVersion:
    """Tests for --version."""

    def test_version(self, runner: CliRunner) -> None:
        """Test the version is printed."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestConfigCheck:
    """Tests for config-check."""

    def test_valid(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test a valid file is summarized."""
        path = tmp_path / "feed.yaml"
        path.write_text("ledger:\n  decay:\n    half_life_days: 14\n")

        result = runner.invoke(cli, ["config-check", str(path)])

        assert result.exit_code == 0
        assert "Configuration is valid!" in result.output
        assert "Languages: en, tr" in result.output
        assert "Half-life: 14.0 days" in result.output

    def test_invalid(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test validation errors are listed."""
        path = tmp_path / "feed.yaml"
        path.write_text("scoring:\n  randomness: -1\n")

        result = runner.invoke(cli, ["config-check", str(path)])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output
        assert "scoring.randomness" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test a missing file is reported."""
        result = runner.invoke(cli, ["config-check", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "file_not_found" in result.output


class TestStats:
    """Tests for stats."""

    def test_empty_state(self, runner: CliRunner, state_path: Path) -> None:
        """Test stats on a fresh database."""
        result = _invoke(runner, state_path, "stats")

        assert result.exit_code == 0
        assert "Likes: 0" in result.output
        assert "(none)" in result.output

    def test_json(self, runner: CliRunner, state_path: Path) -> None:
        """Test JSON stats reflect recorded interactions and cached articles."""
        with KeyValueStore(state_path) as store:
            InteractionLedger(store).record_like(_make_article("a"))
            ArticleCache(store).merge("tr", [_make_article("b")])

        result = _invoke(runner, state_path, "stats", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["likes"] == 1
        assert data["weights"]["science"] == pytest.approx(10.0, rel=1e-3)
        assert data["cache"] == {"en": 0, "tr": 1}
        assert data["store_bytes"] > 0
        assert "cache_hits_total" in data["metrics"]


class TestSaved:
    """Tests for saved."""

    def test_empty(self, runner: CliRunner, state_path: Path) -> None:
        """Test an empty saved list."""
        result = _invoke(runner, state_path, "saved")

        assert result.exit_code == 0
        assert "No saved articles." in result.output

    def test_list_and_remove(self, runner: CliRunner, state_path: Path) -> None:
        """Test saved articles are listed and can be removed."""
        with KeyValueStore(state_path) as store:
            InteractionLedger(store).record_save(_make_article("a"))

        listed = _invoke(runner, state_path, "saved")
        removed = _invoke(runner, state_path, "saved", "--remove", "a")
        after = _invoke(runner, state_path, "saved")

        assert "Hook for a." in listed.output
        assert "id=a" in listed.output
        assert removed.exit_code == 0
        assert "Removed a" in removed.output
        assert "No saved articles." in after.output

    def test_remove_unknown(self, runner: CliRunner, state_path: Path) -> None:
        """Test removing an id that is not saved fails."""
        result = _invoke(runner, state_path, "saved", "--remove", "zzz")

        assert result.exit_code == 1
        assert "Not saved: zzz" in result.output


class TestMaintenance:
    """Tests for dedupe and reset."""

    def test_dedupe(self, runner: CliRunner, state_path: Path) -> None:
        """Test dedupe reports the removed count."""
        result = _invoke(runner, state_path, "dedupe")

        assert result.exit_code == 0
        assert "Removed 0 duplicate cached articles." in result.output

    def test_reset_with_yes(self, runner: CliRunner, state_path: Path) -> None:
        """Test reset clears persisted state."""
        with KeyValueStore(state_path) as store:
            InteractionLedger(store).record_like(_make_article("a"))

        result = _invoke(runner, state_path, "reset", "--yes")

        assert result.exit_code == 0
        assert "Reset complete. Cleared" in result.output
        with KeyValueStore(state_path) as store:
            assert InteractionLedger(store).get_likes() == []

    def test_reset_declined(self, runner: CliRunner, state_path: Path) -> None:
        """Test reset asks for confirmation."""
        with KeyValueStore(state_path) as store:
            InteractionLedger(store).record_like(_make_article("a"))

        result = _invoke(runner, state_path, "reset", input="n\n")

        assert result.exit_code == 1
        with KeyValueStore(state_path) as store:
            assert InteractionLedger(store).get_likes() == ["a"]


class TestFeed:
    """Tests for feed argument handling."""

    def test_unsupported_language(self, runner: CliRunner, state_path: Path) -> None:
        """Test an unknown language is rejected before any request."""
        result = _invoke(runner, state_path, "feed", "--lang", "xx")

        assert result.exit_code == 1
        assert "Unsupported language: xx" in result.output

    def test_count_range(self, runner: CliRunner, state_path: Path) -> None:
        """Test the count option is bounded."""
        result = _invoke(runner, state_path, "feed", "--count", "0")

        assert result.exit_code == 2
