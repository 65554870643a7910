from __future__ import annotations

import threading
import unittest
from unittest.mock import patch

from pipeline.errors import AggregateFailure, ContentTypeError, TransportError
from pipeline.page_analyzer import (
    MAX_PAGE_CHARS,
    analyze_pages,
    analyze_pages_or_fail,
    build_page_prompt,
)
from schemas.page_analysis import PageAnalysis
from schemas.page_record import PageRecord

URLS = [
    "https://acme.com/",
    "https://acme.com/pricing",
    "https://acme.com/about",
]


class FakeFetcher:
    """Serves canned HTML; listed URLs fail with the given error."""

    def __init__(self, failing: dict[str, Exception] | None = None):
        self.failing = failing or {}

    def fetch(self, url: str) -> str:
        if url in self.failing:
            raise self.failing[url]
        return f"<html><head><title>{url}</title></head><body><h1>Page {url}</h1></body></html>"


class FakeAIClient:
    def __init__(self):
        self.prompts: list[str] = []
        self._lock = threading.Lock()

    def analyze_json(self, system_context, user_prompt, response_model, **options):
        with self._lock:
            self.prompts.append(user_prompt)
        return response_model(company_name="Acme", page_type="homepage")


class AnalyzePagesTests(unittest.TestCase):
    def test_all_pages_succeed_in_input_order(self):
        ai = FakeAIClient()
        result = analyze_pages(URLS, FakeFetcher(), ai, batch_timeout=10)

        self.assertEqual([a.source_url for a in result.successes], URLS)
        self.assertEqual(result.failures, [])
        self.assertEqual(len(ai.prompts), 3)

    def test_one_404_page_is_a_failure_not_an_abort(self):
        missing = TransportError("HTTP 404", url=URLS[2], status=404)
        result = analyze_pages(URLS, FakeFetcher({URLS[2]: missing}), FakeAIClient(), batch_timeout=10)

        self.assertEqual([a.source_url for a in result.successes], URLS[:2])
        self.assertEqual(len(result.failures), 1)
        self.assertEqual(result.failures[0].url, URLS[2])
        self.assertIs(result.failures[0].error, missing)

    def test_empty_url_list(self):
        result = analyze_pages([], FakeFetcher(), FakeAIClient())
        self.assertEqual(result.successes, [])
        self.assertEqual(result.failures, [])

    def test_stragglers_past_batch_timeout_are_failures(self):
        release = threading.Event()

        def fake_single(url, fetcher, ai_client):
            if url == URLS[1]:
                release.wait(5)
            return PageAnalysis(source_url=url)

        try:
            with patch("pipeline.page_analyzer.analyze_single_page", side_effect=fake_single):
                result = analyze_pages(URLS, FakeFetcher(), FakeAIClient(), batch_timeout=0.2)
        finally:
            release.set()

        self.assertEqual([a.source_url for a in result.successes], [URLS[0], URLS[2]])
        self.assertEqual([f.url for f in result.failures], [URLS[1]])
        self.assertIsInstance(result.failures[0].error, TimeoutError)


class AnalyzePagesOrFailTests(unittest.TestCase):
    def test_returns_successes_only(self):
        fetcher = FakeFetcher({URLS[0]: ContentTypeError("Content is PDF", url=URLS[0])})
        analyses = analyze_pages_or_fail(URLS, fetcher, FakeAIClient(), batch_timeout=10)
        self.assertEqual([a.source_url for a in analyses], URLS[1:])

    def test_all_failed_raises_aggregate_with_every_page(self):
        fetcher = FakeFetcher({url: TransportError("HTTP 500", url=url, status=500) for url in URLS})
        with self.assertRaises(AggregateFailure) as ctx:
            analyze_pages_or_fail(URLS, fetcher, FakeAIClient(), batch_timeout=10)

        self.assertEqual(str(ctx.exception), "All pages failed to analyze")
        self.assertEqual([url for url, _ in ctx.exception.failures], URLS)
        self.assertTrue(all(isinstance(err, TransportError) for _, err in ctx.exception.failures))


class PagePromptTests(unittest.TestCase):
    def test_content_truncated(self):
        record = PageRecord(url="https://acme.com/", title="Acme", main_content="x" * (MAX_PAGE_CHARS + 500))
        prompt = build_page_prompt(record)
        self.assertIn("URL: https://acme.com/", prompt)
        self.assertIn("TITLE: Acme", prompt)
        self.assertEqual(prompt.count("x"), MAX_PAGE_CHARS)


if __name__ == "__main__":
    unittest.main()
