# tests/test_source_specs.py

"""Tests for the source registry and search URL building."""

import unittest

from src.config.source_specs import (
    AMAZON,
    JIOMART,
    MEESHO,
    SNAPDEAL,
    SOURCE_SPECS,
    get_source_spec,
    select_source_specs,
)


class TestRegistry(unittest.TestCase):
    """Registration order and lookup."""

    def test_six_sources_in_order(self) -> None:
        self.assertEqual(
            [spec.id for spec in SOURCE_SPECS],
            ["amazon", "flipkart", "meesho", "snapdeal", "jiomart", "paytm"],
        )

    def test_every_source_has_title_and_link_chains(self) -> None:
        for spec in SOURCE_SPECS:
            with self.subTest(source=spec.id):
                self.assertTrue(spec.item_selectors)
                self.assertTrue(spec.fields.title)
                self.assertTrue(spec.fields.link)
                self.assertEqual(spec.max_items, 10)

    def test_only_jiomart_has_secondary_fetch(self) -> None:
        with_secondary = [s.id for s in SOURCE_SPECS if s.secondary]
        self.assertEqual(with_secondary, ["jiomart"])
        assert JIOMART.secondary is not None
        self.assertEqual(JIOMART.secondary.domain, "jiomart.com")

    def test_get_source_spec(self) -> None:
        self.assertIs(get_source_spec("snapdeal"), SNAPDEAL)
        with self.assertRaises(KeyError):
            get_source_spec("ebay")

    def test_select_keeps_registration_order(self) -> None:
        specs = select_source_specs(["jiomart", "amazon"])
        self.assertEqual([s.id for s in specs], ["amazon", "jiomart"])

    def test_select_unknown_raises(self) -> None:
        with self.assertRaises(KeyError):
            select_source_specs(["amazon", "nope"])


class TestSearchUrls(unittest.TestCase):
    """Term encoding and page substitution."""

    def test_term_uri_encoded(self) -> None:
        self.assertEqual(
            AMAZON.build_search_url("men's shoes & socks"),
            "https://www.amazon.in/s?k=men's%20shoes%20%26%20socks",
        )

    def test_page_used_by_paginating_sources(self) -> None:
        self.assertEqual(
            MEESHO.build_search_url("kurta", 2),
            "https://www.meesho.com/search?q=kurta&page=2",
        )

    def test_page_ignored_where_template_lacks_it(self) -> None:
        self.assertEqual(
            JIOMART.build_search_url("rice", 4),
            "https://www.jiomart.com/search/rice",
        )


if __name__ == "__main__":
    unittest.main()
