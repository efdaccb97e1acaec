"""Greedy reordering that limits same-category runs."""

from collections import Counter
from collections.abc import Callable

from wikifeed.articles import Article, Category


def diversify(
    ranked: list[Article],
    max_consecutive: int = 2,
    on_fallback: Callable[[], None] | None = None,
) -> list[Article]:
    """Reorder a ranked list so no category runs longer than allowed.

    At each position the highest-ranked remaining article is taken whose
    category would neither extend a run past ``max_consecutive`` nor leave
    the remaining articles impossible to arrange. When no candidate
    qualifies, the head of the remaining pool is taken. The output is
    always a permutation of the input.

    Args:
        ranked: Articles in ranked order.
        max_consecutive: Longest allowed same-category run.
        on_fallback: Called whenever the head of the pool is taken because
            no candidate qualified.

    Returns:
        Reordered articles.
    """
    pool = list(ranked)
    remaining = Counter(article.category for article in pool)
    result: list[Article] = []
    tail: Category | None = None
    run = 0

    while pool:
        pick = _pick(pool, remaining, tail, run, max_consecutive)
        if pick is None:
            pick = 0
            if on_fallback is not None:
                on_fallback()

        article = pool.pop(pick)
        remaining[article.category] -= 1
        if article.category == tail:
            run += 1
        else:
            tail = article.category
            run = 1
        result.append(article)

    return result


def _pick(
    pool: list[Article],
    remaining: Counter[Category],
    tail: Category | None,
    run: int,
    max_consecutive: int,
) -> int | None:
    """Index of the next article to place.

    Prefers the first candidate that keeps the rest arrangeable; returns the
    first allowed candidate when no feasible one exists, and None when every
    candidate is blocked by the run limit.
    """
    first_allowed: int | None = None

    for index, article in enumerate(pool):
        category = article.category
        if category == tail and run >= max_consecutive:
            continue
        if first_allowed is None:
            first_allowed = index

        new_run = run + 1 if category == tail else 1
        remaining[category] -= 1
        feasible = _arrangeable(remaining, category, new_run, max_consecutive)
        remaining[category] += 1
        if feasible:
            return index

    return first_allowed


def _arrangeable(
    remaining: Counter[Category],
    tail: Category,
    run: int,
    max_consecutive: int,
) -> bool:
    """Check whether the remaining articles can still avoid long runs.

    A category with ``count`` members among ``total`` needs
    ``count <= k * (others + 1)`` slots, minus the current run if the list
    already ends with it.
    """
    total = sum(remaining.values())
    for category, count in remaining.items():
        if count <= 0:
            continue
        limit = max_consecutive * (total - count + 1)
        if category == tail:
            limit -= run
        if count > limit:
            return False
    return True
