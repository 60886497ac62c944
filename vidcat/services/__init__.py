"""
Services applicatifs de VidCat.

- feeds : generation des flux RSS et des sitemaps XML
- scraper : import d'une page video tierce dans le catalogue
"""

from vidcat.services.feeds import FeedService, SitemapPageNotFoundError
from vidcat.services.scraper import ScrapeResult, ScraperService, ScrapeStatus

__all__ = [
    "FeedService",
    "SitemapPageNotFoundError",
    "ScraperService",
    "ScrapeResult",
    "ScrapeStatus",
]
