"""CLI commands for the wikifeed reader."""

import asyncio
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import click
import structlog

from wikifeed import __version__
from wikifeed.articles import Article
from wikifeed.cache import ArticleCache, CacheMetrics
from wikifeed.config import ConfigValidationError, WikifeedConfig, load_config
from wikifeed.feed import FeedController, build_controller
from wikifeed.ledger import InteractionLedger
from wikifeed.observability import configure_logging
from wikifeed.ranker import RankerMetrics
from wikifeed.settings import AppSettings, get_settings
from wikifeed.store import KeyValueStore, StorageKeys, StoreMetrics


logger = structlog.get_logger()


@dataclass
class CliContext:
    """Options shared by every command."""

    settings: AppSettings
    verbose: bool = False


def _load_config_or_exit(settings: AppSettings) -> WikifeedConfig:
    """Load the configured YAML file, exiting with details on failure.

    Args:
        settings: Environment settings naming the config path.

    Returns:
        Validated configuration (defaults without a path).
    """
    try:
        return load_config(settings.config_path)
    except ConfigValidationError as e:
        _echo_config_errors(e)
        sys.exit(1)


def _echo_config_errors(error: ConfigValidationError) -> None:
    click.echo(f"Configuration validation failed: {error.file_path}", err=True)
    for detail in error.errors:
        click.echo(f"  - {detail['loc']}: {detail['msg']} ({detail['type']})", err=True)


@contextmanager
def _open_store(
    settings: AppSettings, config: WikifeedConfig
) -> Iterator[KeyValueStore]:
    with KeyValueStore(
        settings.db_path,
        namespace=config.store.namespace,
        max_bytes=config.store.max_bytes,
    ) as store:
        yield store


def _log_level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.WARNING)


def _format_article(position: int, article: Article) -> str:
    source = f" ({article.source.title})" if article.source else ""
    return (
        f"{position:>2}. {article.emoji} [{article.category.value}] "
        f"{article.hook}{source}"
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--state",
    "state_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the SQLite state database (overrides WIKIFEED_DB_PATH).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to a YAML configuration file (overrides WIKIFEED_CONFIG_PATH).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    state_path: Path | None,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Personalized Wikipedia feed."""
    settings = get_settings()
    updates: dict[str, object] = {}
    if state_path is not None:
        updates["db_path"] = state_path
    if config_path is not None:
        updates["config_path"] = config_path
    if updates:
        settings = settings.model_copy(update=updates)

    level = logging.DEBUG if verbose else _log_level(settings.log_level)
    configure_logging(level=level, json_format=settings.log_json)
    ctx.obj = CliContext(settings=settings, verbose=verbose)


@cli.command()
@click.option("--lang", default=None, help="Feed language (e.g. tr, en).")
@click.option(
    "--count",
    type=click.IntRange(1, 100),
    default=None,
    help="Number of articles to load (default: configured initial count).",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_obj
def feed(
    obj: CliContext, lang: str | None, count: int | None, json_output: bool
) -> None:
    """Load and print the next articles of the feed."""
    config = _load_config_or_exit(obj.settings)
    controller = build_controller(obj.settings, config)

    try:
        articles = asyncio.run(_run_feed(controller, lang, count))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if json_output:
        click.echo(
            json.dumps(
                [article.model_dump(mode="json") for article in articles],
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    if not articles:
        click.echo("No articles available.")
        return
    for position, article in enumerate(articles, start=1):
        click.echo(_format_article(position, article))


async def _run_feed(
    controller: FeedController, lang: str | None, count: int | None
) -> list[Article]:
    try:
        if lang is not None and lang != controller.language:
            await controller.switch_language(lang)
        else:
            await controller.start(count)
        if count is not None and len(controller.articles) < count:
            await controller.load_articles(count - len(controller.articles))
        articles = controller.articles
        return articles[:count] if count is not None else articles
    finally:
        await controller.aclose()


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_obj
def stats(obj: CliContext, json_output: bool) -> None:
    """Show interaction counts, preference weights, and cache sizes."""
    config = _load_config_or_exit(obj.settings)

    with _open_store(obj.settings, config) as store:
        ledger = InteractionLedger(store, config.ledger)
        cache = ArticleCache(store, config.cache)
        summary = ledger.stats()
        cache_sizes = {
            lang: len(cache.get_all(lang))
            for lang in sorted(config.provider.endpoints)
        }
        total_bytes = store.total_bytes()

    if json_output:
        output = {
            **summary,
            "cache": cache_sizes,
            "store_bytes": total_bytes,
            "metrics": {
                **StoreMetrics.get_instance().to_dict(),
                **CacheMetrics.get_instance().to_dict(),
                **RankerMetrics.get_instance().to_dict(),
            },
        }
        click.echo(json.dumps(output, indent=2, ensure_ascii=False))
        return

    click.echo("Feed Statistics")
    click.echo("=" * 40)
    click.echo(f"  Likes: {summary['likes']}")
    click.echo(f"  Seen: {summary['seen']}")
    click.echo(f"  Saved: {summary['saved']}")
    click.echo(f"  Store size: {total_bytes} bytes")
    click.echo("")
    click.echo("Cached Articles:")
    for lang, size in cache_sizes.items():
        click.echo(f"  {lang}: {size}")
    click.echo("")
    click.echo("Preference Weights:")
    weights = summary["weights"]
    if isinstance(weights, dict) and weights:
        for key, weight in sorted(weights.items(), key=lambda kv: -kv[1]):
            click.echo(f"  {key}: {weight:.2f}")
    else:
        click.echo("  (none)")


@cli.command()
@click.option("--remove", "remove_id", default=None, help="Remove a saved article.")
@click.pass_obj
def saved(obj: CliContext, remove_id: str | None) -> None:
    """List saved articles, most recent first."""
    config = _load_config_or_exit(obj.settings)

    with _open_store(obj.settings, config) as store:
        ledger = InteractionLedger(store, config.ledger)
        if remove_id is not None:
            if not ledger.is_saved(remove_id):
                click.echo(f"Not saved: {remove_id}", err=True)
                sys.exit(1)
            ledger.saved.remove(remove_id)
            click.echo(f"Removed {remove_id}")
            return
        items = ledger.get_saved()

    if not items:
        click.echo("No saved articles.")
        return
    for item in items:
        source = f" ({item.source.title})" if item.source else ""
        click.echo(f"{item.emoji} {item.hook}{source}")
        click.echo(f"    id={item.id} saved_at={item.saved_at.isoformat()}")


@cli.command()
@click.pass_obj
def dedupe(obj: CliContext) -> None:
    """Remove duplicate articles from the cache."""
    config = _load_config_or_exit(obj.settings)

    with _open_store(obj.settings, config) as store:
        removed = ArticleCache(store, config.cache).remove_duplicate_ids()

    click.echo(f"Removed {removed} duplicate cached articles.")


@cli.command()
@click.confirmation_option(prompt="Reset all preferences, likes, and cached articles?")
@click.pass_obj
def reset(obj: CliContext) -> None:
    """Clear every persisted key."""
    config = _load_config_or_exit(obj.settings)

    with _open_store(obj.settings, config) as store:
        cleared = store.clear_all(key.value for key in StorageKeys)

    logger.info("cli_reset", component="cli", keys_cleared=cleared)
    click.echo(f"Reset complete. Cleared {cleared} keys.")


@cli.command("config-check")
@click.argument("path", type=click.Path(path_type=Path))
def config_check(path: Path) -> None:
    """Validate a YAML configuration file."""
    try:
        config = load_config(path)
    except ConfigValidationError as e:
        _echo_config_errors(e)
        sys.exit(1)

    click.echo("Configuration is valid!")
    click.echo(f"  Languages: {', '.join(sorted(config.provider.endpoints))}")
    click.echo(f"  Half-life: {config.ledger.decay.half_life_days} days")
    click.echo(f"  Cache duration: {config.cache.duration_minutes} minutes")


if __name__ == "__main__":
    cli()
