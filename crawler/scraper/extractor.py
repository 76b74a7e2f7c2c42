"""Link extraction: turns an HTML body into absolute, crawlable URLs."""

from __future__ import annotations

from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup

_ALLOWED_SCHEMES = {"http", "https"}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalise_url(href: str, base_url: str = "") -> str | None:
    """Resolve *href* against *base_url* and normalise it.

    Seeds and discovered links both go through here, so the same page
    always compares equal however it was written (``https://H.example``,
    ``https://h.example/#top`` and ``https://h.example/`` are one URL).

    Returns ``None`` for non-HTTP(S) schemes and for hrefs that cannot be
    parsed (e.g. an invalid IPv6 host or port).
    """
    try:
        parts = urlsplit(urljoin(base_url, href.strip()))
        # Accessing .port validates it; a bad port raises ValueError.
        parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if scheme not in _ALLOWED_SCHEMES or not parts.netloc:
        return None

    # Only the host is case-insensitive; userinfo is kept as written.
    userinfo, at, hostport = parts.netloc.rpartition("@")
    netloc = userinfo + at + hostport.lower()

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def extract_links(html: str | None, base_url: str) -> list[str]:
    """Return the deduplicated absolute HTTP(S) links found in *html*.

    Every ``<a href>`` is resolved against *base_url* (the post-redirect URL
    of the page).  Fragments are dropped before deduplication, so
    ``/a#x`` and ``/a#y`` collapse into one entry.  ``mailto:``,
    ``javascript:`` and malformed hrefs are skipped silently.  The order of
    the returned list carries no meaning.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href")
        if not isinstance(href, str) or not href.strip():
            continue
        url = normalise_url(href, base_url)
        if url and url not in seen:
            seen.add(url)
            links.append(url)
    return links
