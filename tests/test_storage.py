from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pipeline import storage
from schemas.brief import Brief

URL = "https://acme.com/"


def make_brief(company="Acme", ready=True) -> Brief:
    return Brief.model_validate({
        "brand_summary": {"company_name": company},
        "messaging_pillars": [{"pillar": "Speed"}],
        "ready_for_generation": ready,
    })


class StorageTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self._patch = patch.object(storage, "DB_PATH", Path(self._tmp.name) / "briefs.db")
        self._patch.start()
        storage.close_db()
        storage.init_db()

    def tearDown(self):
        storage.close_db()
        self._patch.stop()
        self._tmp.cleanup()

    def test_create_and_get_brief(self):
        self.assertTrue(storage.create_brief(URL, make_brief()))
        stored = storage.get_brief(URL)
        self.assertEqual(stored["brand_summary"]["company_name"], "Acme")
        self.assertTrue(stored["ready_for_generation"])

    def test_create_twice_is_rejected(self):
        self.assertTrue(storage.create_brief(URL, make_brief()))
        self.assertFalse(storage.create_brief(URL, make_brief("Other")))
        self.assertEqual(storage.get_brief(URL)["brand_summary"]["company_name"], "Acme")

    def test_get_missing_is_none(self):
        self.assertIsNone(storage.get_brief("https://nowhere.test/"))

    def test_upsert_replaces(self):
        storage.upsert_brief(URL, make_brief("Acme", ready=False))
        storage.upsert_brief(URL, make_brief("Acme Corp", ready=True))

        rows = storage.list_briefs()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["company_name"], "Acme Corp")
        self.assertTrue(rows[0]["ready_for_generation"])

    def test_update_missing_returns_false(self):
        self.assertFalse(storage.update_brief(URL, {"brand_summary": {}}))

    def test_delete(self):
        storage.create_brief(URL, make_brief())
        self.assertTrue(storage.delete_brief(URL))
        self.assertFalse(storage.delete_brief(URL))
        self.assertIsNone(storage.get_brief(URL))

    def test_run_lifecycle(self):
        ok_id = storage.create_run(URL, 8)
        storage.complete_run(ok_id, 5, 12.34)
        bad_id = storage.create_run("https://other.test/", 3)
        storage.fail_run(bad_id, "TransportError: HTTP 404", 0.5)

        runs = storage.list_runs()
        self.assertEqual([r["id"] for r in runs], [bad_id, ok_id])
        self.assertEqual(runs[0]["status"], "failed")
        self.assertEqual(runs[0]["error_message"], "TransportError: HTTP 404")
        self.assertEqual(runs[1]["status"], "completed")
        self.assertEqual(runs[1]["pages_analyzed"], 5)
        self.assertEqual(runs[1]["elapsed_seconds"], 12.3)

        only_acme = storage.list_runs(website_url=URL)
        self.assertEqual([r["id"] for r in only_acme], [ok_id])


if __name__ == "__main__":
    unittest.main()
