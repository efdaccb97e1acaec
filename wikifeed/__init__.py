"""Personalized Wikipedia article feed.

Pulls summary articles from Wikipedia, ranks them per user from locally
persisted interaction history, and keeps a bounded per-language cache of
previously fetched articles.
"""

__version__ = "0.1.0"
