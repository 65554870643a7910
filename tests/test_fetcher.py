from __future__ import annotations

import unittest

import httpx

from config import FetcherSettings
from pipeline.errors import ContentTypeError, TransportError
from pipeline.fetcher import ACCEPT_HEADER, PageFetcher, is_pdf

SEED = "https://example.com/"


def make_fetcher(handler, **overrides) -> PageFetcher:
    settings = FetcherSettings(retry_backoff=0, **overrides)
    return PageFetcher(settings, transport=httpx.MockTransport(handler))


class PageFetcherTests(unittest.TestCase):
    def test_returns_body_on_200(self):
        fetcher = make_fetcher(lambda request: httpx.Response(200, text="<html>ok</html>"))
        with fetcher:
            self.assertEqual(fetcher.fetch(SEED), "<html>ok</html>")

    def test_sends_fixed_user_agent_and_accept(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["ua"] = request.headers.get("user-agent")
            seen["accept"] = request.headers.get("accept")
            return httpx.Response(200, text="ok")

        with make_fetcher(handler, user_agent="BriefBot/9.9") as fetcher:
            fetcher.fetch(SEED)

        self.assertEqual(seen["ua"], "BriefBot/9.9")
        self.assertEqual(seen["accept"], ACCEPT_HEADER)

    def test_http_error_status_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request.url)
            return httpx.Response(404, text="missing")

        with make_fetcher(handler) as fetcher:
            with self.assertRaises(TransportError) as ctx:
                fetcher.fetch("https://example.com/gone")

        self.assertEqual(ctx.exception.status, 404)
        self.assertIsNone(ctx.exception.cause)
        self.assertEqual(len(calls), 1)

    def test_transient_failure_retried_until_success(self):
        calls = []

        def handler(request):
            calls.append(1)
            if len(calls) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, text="finally")

        with make_fetcher(handler) as fetcher:
            self.assertEqual(fetcher.fetch(SEED), "finally")
        self.assertEqual(len(calls), 3)

    def test_exhausted_retries_surface_cause(self):
        calls = []

        def handler(request):
            calls.append(1)
            raise httpx.ReadTimeout("timed out", request=request)

        with make_fetcher(handler, max_retries=3) as fetcher:
            with self.assertRaises(TransportError) as ctx:
                fetcher.fetch(SEED)

        self.assertIsNone(ctx.exception.status)
        self.assertIsInstance(ctx.exception.cause, httpx.ReadTimeout)
        # one attempt plus three retries
        self.assertEqual(len(calls), 4)

    def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "https://example.com/new"})
            return httpx.Response(200, text="moved here")

        with make_fetcher(handler) as fetcher:
            self.assertEqual(fetcher.fetch("https://example.com/old"), "moved here")

    def test_redirect_loop_is_transport_error(self):
        def handler(request):
            return httpx.Response(302, headers={"Location": "https://example.com/loop"})

        with make_fetcher(handler, max_redirects=5) as fetcher:
            with self.assertRaises(TransportError) as ctx:
                fetcher.fetch("https://example.com/loop")
        self.assertIsInstance(ctx.exception.cause, httpx.TooManyRedirects)

    def test_pdf_rejected_before_parsing(self):
        pdf = b"  \n%PDF-1.7\n1 0 obj\n"
        with make_fetcher(lambda request: httpx.Response(200, content=pdf)) as fetcher:
            with self.assertRaises(ContentTypeError):
                fetcher.fetch("https://example.com/whitepaper")

    def test_malformed_url_is_transport_error(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(200, text="unreachable")

        with make_fetcher(handler) as fetcher:
            with self.assertRaises(TransportError) as ctx:
                fetcher.fetch("https://example.com:notaport/")

        self.assertIsInstance(ctx.exception.cause, httpx.InvalidURL)
        self.assertEqual(calls, [])

    def test_is_pdf(self):
        self.assertTrue(is_pdf(b"%PDF-1.4"))
        self.assertFalse(is_pdf(b"<html>%PDF-</html>"))


if __name__ == "__main__":
    unittest.main()
