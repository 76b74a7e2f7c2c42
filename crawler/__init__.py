"""URL crawler backend: breadth-first crawl engine, storage and HTTP API."""

__version__ = "1.0.0"
