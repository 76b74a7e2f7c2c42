"""Tests for the content codec (compress / decompress / fingerprint)."""

from __future__ import annotations

import hashlib
import zlib

import pytest

from crawler.codec import compress, decompress, fingerprint
from crawler.errors import CodecError, CrawlerError


class TestCompression:
    def test_round_trip(self) -> None:
        html = "<html><body><p>Hello, crawler</p></body></html>"
        assert decompress(compress(html)) == html

    def test_round_trip_empty_string(self) -> None:
        assert decompress(compress("")) == ""

    def test_round_trip_non_ascii(self) -> None:
        text = "naïve café — 東京 🚀"
        assert decompress(compress(text)) == text

    def test_compresses_repetitive_content(self) -> None:
        text = "<p>repeat</p>" * 1000
        assert len(compress(text)) < len(text.encode("utf-8"))

    def test_output_is_a_zlib_stream(self) -> None:
        assert zlib.decompress(compress("abc")) == b"abc"

    def test_decompress_garbage_raises_codec_error(self) -> None:
        with pytest.raises(CodecError):
            decompress(b"definitely not deflate")

    def test_codec_error_is_chained_and_a_crawler_error(self) -> None:
        with pytest.raises(CrawlerError) as info:
            decompress(b"\x00\x01\x02")
        assert isinstance(info.value.__cause__, zlib.error)

    def test_compress_unencodable_text_raises_codec_error(self) -> None:
        # A lone surrogate cannot be encoded as UTF-8.
        with pytest.raises(CodecError):
            compress("\ud800")


class TestFingerprint:
    def test_is_sha256_of_utf8_text(self) -> None:
        text = "<html>hash me</html>"
        assert fingerprint(text) == hashlib.sha256(text.encode("utf-8")).hexdigest()

    def test_is_deterministic(self) -> None:
        assert fingerprint("same") == fingerprint("same")

    def test_differs_for_different_content(self) -> None:
        assert fingerprint("a") != fingerprint("b")

    def test_hex_length(self) -> None:
        assert len(fingerprint("")) == 64
