"""
Score history monitor package.

This package contains modules for scraping a public listing page,
reconciling the scraped scores with a persisted JSON history and
coordinating a single scheduled run.  See README.md for details.
"""

__all__ = [
    "config",
    "main",
    "reconciler",
    "scraper",
    "store",
    "utils",
]
