"""Feed controller and its wiring."""

from wikifeed.feed.controller import ArticleProvider, FeedController
from wikifeed.feed.factory import build_controller


__all__ = [
    "ArticleProvider",
    "FeedController",
    "build_controller",
]
