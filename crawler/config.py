"""Centralised settings for the URL crawler.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

The crawl engine never reads these settings directly; the outer layers (API
lifespan, CLI) turn them into an explicit
:class:`~crawler.engine.models.CrawlerConfig` at construction time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("CRAWLER_WORKSPACE", Path.home() / ".crawler_data")
        )
    )
    database_path_override: str | None = field(
        default_factory=lambda: os.environ.get("DATABASE_PATH")
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        if self.database_path_override:
            return Path(self.database_path_override)
        return self.workspace_dir / "crawler.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Crawl engine
    # ------------------------------------------------------------------
    crawler_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("CRAWLER_CONCURRENCY", "50"))
    )
    crawler_max_depth: int = field(
        default_factory=lambda: int(os.environ.get("CRAWLER_MAX_DEPTH", "5"))
    )
    crawler_max_pages: int = field(
        default_factory=lambda: int(os.environ.get("CRAWLER_MAX_PAGES", "1000"))
    )

    # ------------------------------------------------------------------
    # HTTP fetcher
    # ------------------------------------------------------------------
    http_timeout: float = field(
        default_factory=lambda: float(os.environ.get("HTTP_TIMEOUT", "10.0"))
    )
    http_max_redirects: int = field(
        default_factory=lambda: int(os.environ.get("HTTP_MAX_REDIRECTS", "4"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "CRAWLER_USER_AGENT", "Mozilla/5.0 (compatible; url-crawler/1.0)"
        )
    )

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "8080"))
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


# Module-level singleton; import this in the outer layers:
#   from crawler.config import settings
settings = Settings()
