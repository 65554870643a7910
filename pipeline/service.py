"""Caller-side glue: run the pipeline and record the outcome in storage.

Shared by the CLI and the web server so both keep the same run history.
"""

from __future__ import annotations

import logging
import time

import config
from pipeline import storage
from pipeline.orchestrator import analyze_website
from schemas.brief import Brief

logger = logging.getLogger(__name__)


def analyze_and_record(
    website_url: str,
    max_pages: int = config.MAX_PAGES,
    save: bool = True,
) -> Brief:
    """Run analyze_website, log the run, and optionally upsert the brief.

    Pipeline errors are recorded on the run row and re-raised.
    """
    run_id = storage.create_run(website_url, max_pages)
    start = time.time()
    try:
        brief = analyze_website(website_url, max_pages=max_pages)
    except Exception as exc:
        storage.fail_run(run_id, f"{type(exc).__name__}: {exc}", time.time() - start)
        raise

    storage.complete_run(run_id, brief.metadata.pages_analyzed, time.time() - start)
    if save:
        storage.upsert_brief(website_url, brief)
        logger.info("Saved brief for %s", website_url)
    return brief
