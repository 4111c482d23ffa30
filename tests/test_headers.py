"""Tests for crumbjar.http.headers — immutable, case-insensitive Headers."""

import pytest

from crumbjar.http.headers import Headers


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        h = Headers.from_pairs([("Cookie", "a=1")])
        assert h["cookie"] == "a=1"
        assert h["COOKIE"] == "a=1"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            Headers()["cookie"]

    def test_contains(self) -> None:
        h = Headers.from_pairs([("Accept", "*/*")])
        assert "accept" in h
        assert "x-missing" not in h
        assert 42 not in h  # type: ignore[operator]

    def test_iter_and_len_deduplicate(self) -> None:
        h = Headers.from_pairs([("Accept", "*/*"), ("Cookie", "a=1"), ("accept", "text/xml")])
        assert list(h) == ["accept", "cookie"]
        assert len(h) == 2

    def test_get_and_get_list(self) -> None:
        h = Headers.from_pairs([("X-A", "1"), ("x-a", "2")])
        assert h.get("x-a") == "1"
        assert h.get("x-missing", "fallback") == "fallback"
        assert h.get_list("X-A") == ["1", "2"]

    def test_raw(self) -> None:
        raw = ((b"cookie", b"a=1"),)
        assert Headers(raw).raw is raw
