# tests/test_scrape_request.py

"""Tests for inbound request validation."""

import unittest

from src.models.errors import RequestValidationError
from src.models.scrape_request import ScrapeRequest


class TestScrapeRequest(unittest.TestCase):

    def test_term_trimmed(self) -> None:
        request = ScrapeRequest.create("  wireless mouse ")
        self.assertEqual(request.term, "wireless mouse")
        self.assertEqual(request.page, 1)

    def test_blank_terms_rejected(self) -> None:
        for term in (None, "", "   ", "\t\n"):
            with self.subTest(term=term):
                with self.assertRaises(RequestValidationError):
                    ScrapeRequest.create(term)

    def test_page_string_parsed(self) -> None:
        self.assertEqual(ScrapeRequest.create("mouse", "3").page, 3)

    def test_missing_page_defaults_to_one(self) -> None:
        self.assertEqual(ScrapeRequest.create("mouse", None).page, 1)
        self.assertEqual(ScrapeRequest.create("mouse", "").page, 1)

    def test_bad_pages_rejected(self) -> None:
        for page in (0, -2, "two", "1.5"):
            with self.subTest(page=page):
                with self.assertRaises(RequestValidationError):
                    ScrapeRequest.create("mouse", page)

    def test_validation_error_is_value_error(self) -> None:
        with self.assertRaises(ValueError):
            ScrapeRequest.create("")


if __name__ == "__main__":
    unittest.main()
