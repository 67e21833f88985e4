"""Unit tests for directory-listing link extraction and beverage type derivation."""

import pytest

from festival_proxy.services.beverage_types import (
    beverage_types_from_links,
    extract_json_links,
)
from tests.conftest import make_directory_html


class TestExtractJsonLinks:
    """Test anchor extraction from directory index HTML."""

    def test_extracts_json_hrefs_in_document_order(self):
        """Test only .json anchors are returned, in the order they appear."""
        html = make_directory_html(["beer.json", "cider.json", "readme.txt"])

        assert extract_json_links(html) == ["beer.json", "cider.json"]

    def test_ignores_parent_directory_link(self):
        """Test the '/' parent link is not mistaken for a data file."""
        html = make_directory_html([])

        assert extract_json_links(html) == []

    def test_tag_matching_is_case_insensitive(self):
        """Test upper-case tags and attributes are matched."""
        html = '<A HREF="beer.json">beer.json</A>'

        assert extract_json_links(html) == ["beer.json"]

    def test_attribute_order_and_extra_attributes(self):
        """Test href is found regardless of surrounding attributes."""
        html = (
            '<a class="file" title="Cider" href="cider.json" data-size="12k">cider</a>'
            '<a\n   target="_blank"\n   href="mead.json">mead</a>'
        )

        assert extract_json_links(html) == ["cider.json", "mead.json"]

    def test_single_quoted_href(self):
        """Test single-quoted attribute values are extracted."""
        html = "<a href='perry.json'>perry</a>"

        assert extract_json_links(html) == ["perry.json"]

    def test_does_not_match_other_tags(self):
        """Test <abbr>, <link> and similar tags are ignored."""
        html = (
            '<abbr href="nope.json">x</abbr>'
            '<link rel="alternate" href="feed.json">'
            '<area href="map.json">'
        )

        assert extract_json_links(html) == []

    def test_json_must_be_suffix(self):
        """Test hrefs merely containing .json are ignored."""
        html = '<a href="beer.json.bak">old</a><a href="beer.jsonl">lines</a>'

        assert extract_json_links(html) == []

    def test_duplicates_are_kept(self):
        """Test the extractor performs no deduplication."""
        html = '<a href="beer.json">a</a><a href="beer.json">b</a>'

        assert extract_json_links(html) == ["beer.json", "beer.json"]


class TestBeverageTypesFromLinks:
    """Test suffix stripping, self-reference filtering and ordering."""

    def test_parse_excludes_listing_file(self):
        """Test beer, cider and the listing itself yields exactly beer and cider."""
        links = ["beer.json", "cider.json", "available_beverage_types.json"]

        assert beverage_types_from_links(links) == ["beer", "cider"]

    def test_sorted_hyphenated_types(self):
        """Test hyphenated names sort by character."""
        links = ["international-beer.json", "low-no.json", "apple-juice.json"]

        assert beverage_types_from_links(links) == [
            "apple-juice",
            "international-beer",
            "low-no",
        ]

    def test_sort_is_codepoint_order(self):
        """Test ordering is plain string comparison, not locale or component based."""
        links = ["beer.json", "Beer.json", "beer-festival.json", "beer2.json"]

        assert beverage_types_from_links(links) == ["Beer", "beer", "beer-festival", "beer2"]

    def test_empty_listing(self):
        """Test no links yields an empty list."""
        assert beverage_types_from_links([]) == []

    @pytest.mark.parametrize("files,expected", [
        (["beer.json", "cider.json", "perry.json", "mead.json"], ["beer", "cider", "mead", "perry"]),
        (["wine.json", "beer.json", "apple-juice.json"], ["apple-juice", "beer", "wine"]),
        (["available_beverage_types.json"], []),
    ])
    def test_directory_listing_end_to_end(self, files, expected):
        """Test extraction and derivation together over realistic listings."""
        html = make_directory_html(files)

        assert beverage_types_from_links(extract_json_links(html)) == expected
