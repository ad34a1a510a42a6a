"""Tests for Accept header negotiation."""

import pytest

from modview.core.negotiation import parse_accept, preferred_media_type, wants_html


class TestParseAccept:
    """Tests for parse_accept()."""

    def test__quality_and_params__are_parsed(self) -> None:
        ranges = parse_accept("text/html;level=1;q=0.5, */*")

        assert [(r.type, r.subtype, r.quality) for r in ranges] == [
            ("text", "html", 0.5),
            ("*", "*", 1.0),
        ]
        assert ranges[0].params == {"level": "1"}

    def test__malformed_entries__are_skipped(self) -> None:
        ranges = parse_accept("garbage, text/, application/json")

        assert [(r.type, r.subtype) for r in ranges] == [("application", "json")]

    def test__bad_quality__counts_as_zero(self) -> None:
        ranges = parse_accept("text/html;q=high")

        assert ranges[0].quality == 0.0


class TestPreferredMediaType:
    """Tests for preferred_media_type()."""

    def test__missing_header__picks_first_offered(self) -> None:
        assert preferred_media_type(None, ["application/*", "text/html"]) == "application/*"

    def test__blank_header__picks_first_offered(self) -> None:
        assert preferred_media_type("  ", ["application/*", "text/html"]) == "application/*"

    def test__nothing_acceptable__returns_none(self) -> None:
        assert preferred_media_type("image/png", ["application/*", "text/html"]) is None

    def test__zero_quality__excludes_type(self) -> None:
        assert preferred_media_type("text/html;q=0, */*", ["text/html"]) is None

    def test__specific_range__overrides_wildcard(self) -> None:
        accept = "*/*;q=0.1, application/*;q=0.9"

        assert preferred_media_type(accept, ["text/html", "application/*"]) == "application/*"


class TestWantsHtml:
    """Tests for wants_html()."""

    @pytest.mark.parametrize(
        "accept",
        [
            "text/html",
            "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "text/html;q=0.9, application/*;q=0.5",
        ],
    )
    def test__browser_accept__renders_page(self, accept: str) -> None:
        assert wants_html(accept) is True

    @pytest.mark.parametrize(
        "accept",
        [
            None,
            "*/*",
            "application/javascript",
            "application/octet-stream",
            "text/html;q=0.5, application/*",
            "image/png",
        ],
    )
    def test__tool_accept__serves_raw(self, accept: str | None) -> None:
        assert wants_html(accept) is False
