"""Pipeline orchestrator — discovery → concurrent page analysis → synthesis.

Stages run strictly in order and none is retried here. The first error from
any stage stops the run and is re-raised unchanged, so callers get either a
complete Brief or exactly one exception.
"""

from __future__ import annotations

import logging
import time
from enum import Enum

from rich.console import Console
from rich.table import Table

import config
from pipeline.discovery import discover_pages
from pipeline.fetcher import PageFetcher
from pipeline.llm import AIAnalysisClient
from pipeline.page_analyzer import analyze_pages_or_fail
from pipeline.synthesizer import synthesize_brief
from schemas.brief import Brief

logger = logging.getLogger(__name__)
console = Console()


class PipelineState(str, Enum):
    PENDING = "pending"
    DISCOVERING = "discovering"
    ANALYZING_PAGES = "analyzing_pages"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    FAILED = "failed"


_STAGE_ORDER = [
    PipelineState.PENDING,
    PipelineState.DISCOVERING,
    PipelineState.ANALYZING_PAGES,
    PipelineState.SYNTHESIZING,
    PipelineState.DONE,
]


class WebsiteAnalysisPipeline:
    """One run of the brief pipeline for one seed URL."""

    def __init__(
        self,
        fetcher: PageFetcher,
        ai_client: AIAnalysisClient,
        max_pages: int = config.MAX_PAGES,
        batch_timeout: float = config.PAGE_BATCH_TIMEOUT,
    ):
        self.fetcher = fetcher
        self.ai_client = ai_client
        self.max_pages = max_pages
        self.batch_timeout = batch_timeout
        self.state = PipelineState.PENDING
        self.timings: dict[str, float] = {}
        self.error: Exception | None = None
        self.failed_stage: str | None = None
        self.discovered_urls: list[str] = []

    def _advance(self, state: PipelineState):
        if self.state == PipelineState.FAILED or (
            state != PipelineState.FAILED
            and _STAGE_ORDER.index(state) <= _STAGE_ORDER.index(self.state)
        ):
            raise RuntimeError(f"Illegal pipeline transition {self.state.value} -> {state.value}")
        logger.info("Pipeline state: %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self, seed_url: str) -> Brief:
        if self.state != PipelineState.PENDING:
            raise RuntimeError("A pipeline instance runs once; create a new one")

        logger.info("Starting website analysis for ads generation: %s", seed_url)
        start = time.time()
        stage_start = start
        try:
            self._advance(PipelineState.DISCOVERING)
            self.discovered_urls = discover_pages(seed_url, self.max_pages, self.fetcher)
            self.timings["discovering"] = time.time() - stage_start

            self._advance(PipelineState.ANALYZING_PAGES)
            stage_start = time.time()
            analyses = analyze_pages_or_fail(
                self.discovered_urls, self.fetcher, self.ai_client,
                batch_timeout=self.batch_timeout,
            )
            self.timings["analyzing_pages"] = time.time() - stage_start

            self._advance(PipelineState.SYNTHESIZING)
            stage_start = time.time()
            brief = synthesize_brief(analyses, seed_url, self.ai_client)
            self.timings["synthesizing"] = time.time() - stage_start
        except Exception as exc:
            self.failed_stage = self.state.value
            self.timings[self.failed_stage] = time.time() - stage_start
            self.error = exc
            self.state = PipelineState.FAILED
            logger.error("Website analysis failed for %s: %s", seed_url, exc)
            raise

        self._advance(PipelineState.DONE)
        logger.info(
            "Successfully completed analysis for %s in %.1fs", seed_url, time.time() - start,
        )
        return brief

    def print_summary(self):
        """Pretty-print stage timings and outcome."""
        table = Table(title="Pipeline Results")
        table.add_column("Stage", style="cyan")
        table.add_column("Time", style="green")
        table.add_column("Status", style="bold")

        for stage in _STAGE_ORDER[1:-1]:
            elapsed = self.timings.get(stage.value)
            if elapsed is None:
                table.add_row(stage.value, "-", "[dim]skipped[/dim]")
            elif stage.value == self.failed_stage:
                table.add_row(stage.value, f"{elapsed:.1f}s", f"[red]FAILED: {str(self.error)[:50]}[/red]")
            else:
                table.add_row(stage.value, f"{elapsed:.1f}s", "[green]OK[/green]")

        console.print(table)


def analyze_website(seed_url: str, max_pages: int = config.MAX_PAGES) -> Brief:
    """Main entry point: analyze a website and return its brief.

    Builds the fetcher and AI client from config once, then runs the
    pipeline. Raises the first BriefPipelineError encountered.
    """
    ai_client = AIAnalysisClient(config.get_ai_client_settings())
    with PageFetcher(config.get_fetcher_settings()) as fetcher:
        pipeline = WebsiteAnalysisPipeline(fetcher, ai_client, max_pages=max_pages)
        return pipeline.run(seed_url)
