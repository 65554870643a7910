"""Concurrent page analysis — fetch, extract and analyze every discovered page.

One thread per URL, all started at once. Each unit produces either a
PageAnalysis or the error that stopped it; units share nothing mutable, so
there is no locking. The batch waits for every unit or the batch deadline,
whichever comes first. Stragglers are recorded as failures and abandoned
(their in-flight HTTP calls are not interrupted).
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import dataclass, field

import config
from pipeline.errors import AggregateFailure
from pipeline.extractor import extract_page
from pipeline.fetcher import PageFetcher
from pipeline.llm import AIAnalysisClient
from prompts.page_analyzer_system import SYSTEM_PROMPT as PAGE_ANALYZER_PROMPT
from schemas.page_analysis import PageAnalysis
from schemas.page_record import PageRecord

logger = logging.getLogger(__name__)

# Maximum characters of page text sent to the model
MAX_PAGE_CHARS = 15_000


@dataclass
class PageFailure:
    url: str
    error: Exception


@dataclass
class PageBatchResult:
    successes: list[PageAnalysis] = field(default_factory=list)
    failures: list[PageFailure] = field(default_factory=list)


def build_page_prompt(record: PageRecord) -> str:
    content = record.main_content[:MAX_PAGE_CHARS]
    headings = "\n".join(record.headings)
    ctas = ", ".join(record.ctas)
    return (
        "Analyze this webpage for Google Ads asset generation:\n\n"
        f"URL: {record.url}\n"
        f"TITLE: {record.title or ''}\n"
        f"META DESCRIPTION: {record.meta_description or ''}\n\n"
        f"HEADINGS:\n{headings}\n\n"
        f"CALLS TO ACTION FOUND:\n{ctas}\n\n"
        f"PAGE CONTENT:\n{content}\n"
    )


def analyze_single_page(
    url: str,
    fetcher: PageFetcher,
    ai_client: AIAnalysisClient,
) -> PageAnalysis:
    """fetch → extract → prompt → AI → parse, tagged with ``url``."""
    html = fetcher.fetch(url)
    record = extract_page(html, url)
    llm_conf = config.get_stage_llm_config("page_analyzer")
    analysis = ai_client.analyze_json(
        PAGE_ANALYZER_PROMPT,
        build_page_prompt(record),
        PageAnalysis,
        model=llm_conf["model"],
        temperature=llm_conf["temperature"],
        max_tokens=llm_conf["max_tokens"],
    )
    analysis.source_url = url
    return analysis


def analyze_pages(
    urls: list[str],
    fetcher: PageFetcher,
    ai_client: AIAnalysisClient,
    batch_timeout: float = config.PAGE_BATCH_TIMEOUT,
) -> PageBatchResult:
    """Run analyze_single_page for every URL concurrently.

    Successes keep the order of ``urls``. Never raises for a page-level
    failure; see analyze_pages_or_fail for the all-failed case.
    """
    result = PageBatchResult()
    if not urls:
        return result

    logger.info("Analyzing %d pages in parallel (batch timeout %.0fs)", len(urls), batch_timeout)
    start = time.time()

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=len(urls), thread_name_prefix="page-analyzer",
    )
    try:
        futures = {
            executor.submit(analyze_single_page, url, fetcher, ai_client): url
            for url in urls
        }
        done, not_done = concurrent.futures.wait(futures, timeout=batch_timeout)
    finally:
        # Don't block on stragglers; queued-but-unstarted units are dropped
        executor.shutdown(wait=False, cancel_futures=True)

    outcomes: dict[str, PageAnalysis | Exception] = {}
    for future in done:
        url = futures[future]
        try:
            outcomes[url] = future.result()
        except Exception as exc:
            logger.error("Failed to analyze %s: %s", url, exc)
            outcomes[url] = exc
    for future in not_done:
        url = futures[future]
        logger.error("Timed out analyzing %s after %.0fs", url, batch_timeout)
        outcomes[url] = TimeoutError(f"Page analysis exceeded {batch_timeout:.0f}s batch timeout")

    for url in urls:
        outcome = outcomes[url]
        if isinstance(outcome, Exception):
            result.failures.append(PageFailure(url=url, error=outcome))
        else:
            result.successes.append(outcome)

    logger.info(
        "Page analysis finished in %.1fs: %d ok, %d failed",
        time.time() - start, len(result.successes), len(result.failures),
    )
    return result


def analyze_pages_or_fail(
    urls: list[str],
    fetcher: PageFetcher,
    ai_client: AIAnalysisClient,
    batch_timeout: float = config.PAGE_BATCH_TIMEOUT,
) -> list[PageAnalysis]:
    """Successful analyses only; AggregateFailure if there are none."""
    batch = analyze_pages(urls, fetcher, ai_client, batch_timeout=batch_timeout)
    if batch.failures:
        logger.warning("Failed to analyze %d pages", len(batch.failures))
    if not batch.successes:
        raise AggregateFailure(
            "All pages failed to analyze",
            failures=[(f.url, f.error) for f in batch.failures],
        )
    return batch.successes
