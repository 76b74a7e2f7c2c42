"""Data models for the scraper layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class FetchResult:
    """The outcome of one HTTP GET that reached the server.

    ``body`` is empty for any non-HTML response.  ``final_url`` is the URL
    after redirects and is the base for link resolution.
    """

    status_code: int
    body: str
    duration_ms: int
    final_url: str
