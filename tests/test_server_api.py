from __future__ import annotations

import asyncio
import json
import unittest
from unittest.mock import patch

import server
from pipeline.errors import AggregateFailure, ContentTypeError, RateLimited, TransportError
from schemas.brief import Brief

URL = "https://acme.com/"


def body_of(response) -> dict:
    return json.loads(response.body)


class AnalyzeApiTests(unittest.TestCase):
    def test_rejects_non_http_url(self):
        resp = asyncio.run(server.api_analyze(server.AnalyzeRequest(url="ftp://acme.com")))
        self.assertEqual(resp.status_code, 400)

    def test_rejects_zero_pages(self):
        resp = asyncio.run(server.api_analyze(server.AnalyzeRequest(url=URL, max_pages=0)))
        self.assertEqual(resp.status_code, 400)

    def test_returns_brief_json(self):
        brief = Brief.model_validate({"brand_summary": {"company_name": "Acme"}})
        with patch("server.analyze_and_record", return_value=brief) as run:
            resp = asyncio.run(server.api_analyze(server.AnalyzeRequest(url=URL, max_pages=2, save=False)))

        run.assert_called_once_with(URL, 2, False)
        self.assertEqual(resp["brand_summary"]["company_name"], "Acme")
        self.assertFalse(resp["ready_for_generation"])

    def test_aggregate_failure_lists_failed_pages(self):
        err = AggregateFailure(
            "All pages failed to analyze",
            failures=[(URL, TransportError("HTTP 404", status=404))],
        )
        with patch("server.analyze_and_record", side_effect=err):
            resp = asyncio.run(server.api_analyze(server.AnalyzeRequest(url=URL)))

        self.assertEqual(resp.status_code, 502)
        payload = body_of(resp)
        self.assertEqual(payload["error_type"], "AggregateFailure")
        self.assertEqual(payload["failed_pages"], [URL])

    def test_error_status_mapping(self):
        self.assertEqual(server._error_status(ContentTypeError("Content is PDF")), 422)
        self.assertEqual(server._error_status(RateLimited("slow down")), 429)
        self.assertEqual(server._error_status(TransportError("HTTP 500", status=500)), 502)


class BriefApiTests(unittest.TestCase):
    def test_get_missing_brief_is_404(self):
        with patch("server.storage.get_brief", return_value=None):
            resp = asyncio.run(server.api_get_brief(URL))
        self.assertEqual(resp.status_code, 404)

    def test_update_recomputes_ready_flag(self):
        edited = {
            "brand_summary": {"company_name": "Acme"},
            "messaging_pillars": [],
            "ready_for_generation": True,
        }
        with patch("server.storage.update_brief", return_value=True) as update:
            resp = asyncio.run(server.api_update_brief(server.BriefUpdate(url=URL, brief=edited)))

        self.assertEqual(resp, {"ok": True, "url": URL})
        saved = update.call_args.args[1]
        self.assertFalse(saved["ready_for_generation"])

    def test_update_invalid_brief_is_422(self):
        bad = {"messaging_pillars": {"not": "a list"}}
        with patch("server.storage.update_brief") as update:
            resp = asyncio.run(server.api_update_brief(server.BriefUpdate(url=URL, brief=bad)))
        self.assertEqual(resp.status_code, 422)
        update.assert_not_called()

    def test_delete_missing_is_404(self):
        with patch("server.storage.delete_brief", return_value=False):
            resp = asyncio.run(server.api_delete_brief(URL))
        self.assertEqual(resp.status_code, 404)

    def test_health_reports_missing_key(self):
        with patch("server.config.OPENAI_API_KEY", ""):
            resp = asyncio.run(server.api_health())
        self.assertFalse(resp["ok"])
        self.assertEqual(len(resp["warnings"]), 1)


if __name__ == "__main__":
    unittest.main()
