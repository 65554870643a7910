"""Brief synthesizer — many page analyses in, one Brief out.

The model writes the brief; the run facts (which site, when, how many pages
actually fed it) are stamped on afterwards so they can't be hallucinated.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import config
from pipeline.llm import AIAnalysisClient
from prompts.synthesizer_system import SYSTEM_PROMPT as SYNTHESIZER_PROMPT
from schemas.brief import Brief
from schemas.page_analysis import PageAnalysis

logger = logging.getLogger(__name__)


def build_synthesis_prompt(analyses: list[PageAnalysis]) -> str:
    payload = [a.model_dump(mode="json") for a in analyses]
    return (
        "Synthesize these page analyses into a comprehensive Google Ads brief.\n"
        "Focus on extracting actionable insights for headline, description, "
        "image, and video generation.\n\n"
        f"PAGE ANALYSES:\n{json.dumps(payload, indent=2, ensure_ascii=False)}\n"
    )


def compute_ready_for_generation(brief: Brief) -> bool:
    """Enough to generate assets: a company name and at least one pillar."""
    has_company = brief.brand_summary.company_name is not None
    has_pillars = len(brief.messaging_pillars) > 0
    return has_company and has_pillars


def apply_run_metadata(
    brief: Brief,
    seed_url: str,
    analyses: list[PageAnalysis],
    now: datetime | None = None,
) -> Brief:
    """Overwrite run facts on ``brief.metadata`` and set the ready flag."""
    now = now or datetime.now(timezone.utc)
    meta = brief.metadata
    meta.website_url = seed_url
    meta.analyzed_at = now.isoformat()
    meta.pipeline_version = config.PIPELINE_VERSION
    meta.pages_analyzed = len(analyses)
    meta.analyzed_urls = [a.source_url for a in analyses if a.source_url]
    brief.ready_for_generation = compute_ready_for_generation(brief)
    return brief


def synthesize_brief(
    analyses: list[PageAnalysis],
    seed_url: str,
    ai_client: AIAnalysisClient,
    now: datetime | None = None,
) -> Brief:
    """Second-stage AI call. Any AI or parse error propagates."""
    logger.info("Synthesizing %d pages into ads brief...", len(analyses))
    llm_conf = config.get_stage_llm_config("synthesizer")
    brief = ai_client.analyze_json(
        SYNTHESIZER_PROMPT,
        build_synthesis_prompt(analyses),
        Brief,
        model=llm_conf["model"],
        temperature=llm_conf["temperature"],
        max_tokens=llm_conf["max_tokens"],
    )
    brief = apply_run_metadata(brief, seed_url, analyses, now=now)
    logger.info(
        "Brief synthesized: company=%r, %d pillars, ready=%s",
        brief.brand_summary.company_name,
        len(brief.messaging_pillars),
        brief.ready_for_generation,
    )
    return brief
