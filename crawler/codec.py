"""Content codec: compress / decompress page bodies and fingerprint them.

Bodies are stored zlib-deflated.  The fingerprint is a SHA-256 hex digest of
the *original* UTF-8 text; it identifies content but is not used for dedup.
"""

from __future__ import annotations

import hashlib
import zlib

from crawler.errors import CodecError


def compress(text: str) -> bytes:
    """Deflate *text* (UTF-8 encoded) into a compressed byte payload.

    Raises:
        CodecError: If the text cannot be encoded or compressed.
    """
    try:
        return zlib.compress(text.encode("utf-8"))
    except (zlib.error, UnicodeEncodeError) as exc:
        raise CodecError("Failed to compress content") from exc


def decompress(payload: bytes) -> str:
    """Inverse of :func:`compress`.

    Raises:
        CodecError: If *payload* was not produced by :func:`compress` (bad
            zlib stream or non-UTF-8 content).
    """
    try:
        return zlib.decompress(payload).decode("utf-8")
    except (zlib.error, UnicodeDecodeError, TypeError) as exc:
        raise CodecError("Failed to decompress content") from exc


def fingerprint(text: str) -> str:
    """Return the SHA-256 hex digest of *text*."""
    try:
        return hashlib.sha256(text.encode("utf-8")).hexdigest()
    except UnicodeEncodeError as exc:
        raise CodecError("Failed to fingerprint content") from exc
