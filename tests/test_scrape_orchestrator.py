# tests/test_scrape_orchestrator.py

"""Tests for fan-out, failure isolation, and merging."""

import unittest
from unittest.mock import patch

from fakes import FakeLauncher, load_fixture, snapdeal_page, timeout_error
from src.config.source_specs import AMAZON, FLIPKART, SOURCE_SPECS
from src.models.errors import RequestValidationError, ScrapeFailedError
from src.models.source_outcome import AggregateResult, SourceOutcome
from src.scrapers.browser_session import BrowserSessionManager
from src.services.scrape_orchestrator import ScrapeOrchestrator

ALL_IDS = [spec.id for spec in SOURCE_SPECS]


def _orchestrator(
    pages: dict[str, object], specs=None,
) -> tuple[ScrapeOrchestrator, FakeLauncher]:
    """Orchestrator over fake sessions serving *pages*."""
    launcher = FakeLauncher(pages)
    orch = ScrapeOrchestrator(
        specs, session_manager=BrowserSessionManager(launcher)
    )
    return orch, launcher


class TestRequestOutcomes(unittest.IsolatedAsyncioTestCase):
    """End-to-end outcomes of whole scrape requests."""

    async def test_all_sources_time_out(self) -> None:
        """Every source times out: empty but successful aggregate."""
        orch, launcher = _orchestrator({"https://": timeout_error()})
        result = await orch.scrape("phone")

        self.assertIsInstance(result, AggregateResult)
        self.assertEqual(result.listings, [])
        self.assertEqual(result.total, 0)
        self.assertEqual(result.total_pages, 1)
        self.assertEqual(result.counts, {sid: 0 for sid in ALL_IDS})
        self.assertEqual(set(result.errors), set(ALL_IDS))
        self.assertTrue(all(s.closed for s in launcher.sessions))

    async def test_partial_results_merge(self) -> None:
        """Snapdeal returns 10, Amazon 3, the other four nothing."""
        orch, _ = _orchestrator(
            {
                "amazon.in": load_fixture("amazon_search.html"),
                "snapdeal.com": snapdeal_page(14),
                "https://": timeout_error(),
            }
        )
        result = await orch.scrape("shoes")

        self.assertEqual(len(result.listings), 13)
        self.assertEqual(
            result.counts,
            {
                "amazon": 3,
                "flipkart": 0,
                "meesho": 0,
                "snapdeal": 10,
                "jiomart": 0,
                "paytm": 0,
            },
        )
        self.assertEqual(result.total, 13)
        self.assertEqual(result.total_pages, 1)

    async def test_blank_term_rejected_before_dispatch(self) -> None:
        """Whitespace-only terms never reach a browser."""
        orch, launcher = _orchestrator({"https://": "<html></html>"})
        for term in ("", "   ", None):
            with self.subTest(term=term):
                with self.assertRaises(RequestValidationError):
                    await orch.scrape(term)
        self.assertEqual(launcher.sessions, [])
        self.assertEqual(launcher.navigations, [])

    async def test_invalid_page_rejected_before_dispatch(self) -> None:
        orch, launcher = _orchestrator({})
        with self.assertRaises(RequestValidationError):
            await orch.scrape("phone", 0)
        self.assertEqual(launcher.sessions, [])


class TestMerging(unittest.IsolatedAsyncioTestCase):
    """Ordering, counts, and metadata of the merged result."""

    async def test_registration_order_preserved(self) -> None:
        orch, _ = _orchestrator(
            {
                "amazon.in": load_fixture("amazon_search.html"),
                "flipkart.com": load_fixture("flipkart_search.html"),
                "paytmmall.com": load_fixture("paytm_search.html"),
            }
        )
        result = await orch.scrape("phone")
        platforms = [item.platform for item in result.listings]
        self.assertEqual(
            platforms,
            ["Amazon.in"] * 3 + ["Flipkart"] * 2 + ["PayTM Mall"] * 2,
        )

    async def test_merged_length_equals_sum_of_counts(self) -> None:
        orch, _ = _orchestrator(
            {
                "amazon.in": load_fixture("amazon_search.html"),
                "meesho.com": load_fixture("meesho_search.html"),
                "snapdeal.com": load_fixture("snapdeal_search.html"),
            }
        )
        result = await orch.scrape("shoes")
        self.assertEqual(len(result.listings), sum(result.counts.values()))
        for item in result.listings:
            self.assertTrue(item.title)
            self.assertTrue(item.link)

    async def test_each_source_contributes_at_most_ten(self) -> None:
        orch, _ = _orchestrator({"snapdeal.com": snapdeal_page(40)})
        result = await orch.scrape("shoes")
        self.assertEqual(result.counts["snapdeal"], 10)

    async def test_one_session_per_source(self) -> None:
        orch, launcher = _orchestrator({"https://": "<html></html>"})
        await orch.scrape("phone")
        self.assertEqual(len(launcher.sessions), len(SOURCE_SPECS))
        self.assertTrue(all(s.closed for s in launcher.sessions))

    async def test_term_is_trimmed_and_page_echoed(self) -> None:
        orch, _ = _orchestrator({}, specs=[AMAZON])
        result = await orch.scrape("  phone  ", "2")
        self.assertEqual(result.term, "phone")
        self.assertEqual(result.page, 2)
        self.assertGreaterEqual(result.duration_ms, 0)

    async def test_same_product_on_two_sources_not_deduplicated(self) -> None:
        same = (
            '<div data-id="1"><a class="wjcEIp" href="/p/x">Kettle</a></div>'
        )
        orch, _ = _orchestrator(
            {"flipkart.com": same}, specs=[FLIPKART, FLIPKART]
        )
        result = await orch.scrape("kettle")
        self.assertEqual(len(result.listings), 2)

    async def test_total_pages_rounds_up(self) -> None:
        orch, _ = _orchestrator({"snapdeal.com": snapdeal_page(10)})
        orch.page_size = 4
        result = await orch.scrape("shoes")
        self.assertEqual(result.total_pages, 3)


class TestFailureIsolation(unittest.IsolatedAsyncioTestCase):
    """Faults are absorbed per source; only defects escape."""

    async def test_adapter_raising_is_absorbed(self) -> None:
        orch, _ = _orchestrator(
            {"amazon.in": load_fixture("amazon_search.html")},
            specs=[AMAZON, FLIPKART],
        )

        async def explode(request):
            raise RuntimeError("adapter bug")

        orch.adapters[1].run = explode  # type: ignore[method-assign]
        with self.assertLogs("multiscrape.orchestrator", level="ERROR"):
            result = await orch.scrape("phone")

        self.assertEqual(result.counts, {"amazon": 3, "flipkart": 0})
        self.assertIn("adapter bug", result.errors["flipkart"])

    async def test_fault_outside_isolation_is_internal_error(self) -> None:
        orch, _ = _orchestrator({}, specs=[AMAZON])
        with patch.object(
            ScrapeOrchestrator, "_merge", side_effect=KeyError("meta")
        ):
            with self.assertRaises(ScrapeFailedError):
                await orch.scrape("phone")

    async def test_failed_outcomes_logged_per_source(self) -> None:
        orch, _ = _orchestrator({}, specs=[AMAZON])
        with self.assertLogs("multiscrape.orchestrator", level="WARNING") as logs:
            await orch.scrape("phone")
        self.assertTrue(any("amazon" in line for line in logs.output))


class TestAggregateSerialisation(unittest.IsolatedAsyncioTestCase):
    """to_dict() mirrors the results/meta response body."""

    async def test_meta_fields(self) -> None:
        orch, _ = _orchestrator(
            {"amazon.in": load_fixture("amazon_search.html")}
        )
        body = (await orch.scrape("phone")).to_dict()

        meta = body["meta"]
        assert isinstance(meta, dict)
        self.assertEqual(meta["searchTerm"], "phone")
        self.assertEqual(meta["page"], 1)
        self.assertEqual(meta["amazonCount"], 3)
        self.assertEqual(meta["paytmCount"], 0)
        self.assertEqual(meta["total"], 3)
        self.assertEqual(meta["totalPages"], 1)
        results = body["results"]
        assert isinstance(results, list)
        self.assertEqual(results[0]["productName"], "Apple iPhone 15 (128 GB) - Black")
        self.assertEqual(results[0]["platformLogo"], "🛒")

    def test_outcome_constructors(self) -> None:
        failed = SourceOutcome.failure("x", "X", "timeout")
        self.assertFalse(failed.ok)
        self.assertEqual(failed.count, 0)
        ok = SourceOutcome.success("x", "X", [])
        self.assertTrue(ok.ok)


if __name__ == "__main__":
    unittest.main()
