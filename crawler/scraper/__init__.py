"""Scraper package — page fetch & link extraction."""

from crawler.scraper.extractor import extract_links, normalise_url
from crawler.scraper.fetcher import PageFetcher
from crawler.scraper.models import FetchResult

__all__ = ["PageFetcher", "extract_links", "normalise_url", "FetchResult"]
