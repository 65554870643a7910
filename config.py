"""Pipeline configuration — AI endpoint, fetch policy, per-stage model settings."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
ROOT_DIR = Path(__file__).parent
DB_PATH = Path(os.getenv("DB_PATH", str(ROOT_DIR / "briefs.db")))

# ---------------------------------------------------------------------------
# Text-generation service
# ---------------------------------------------------------------------------
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
AI_REQUEST_TIMEOUT = float(os.getenv("AI_REQUEST_TIMEOUT", "120"))

DEFAULT_MODEL = os.getenv("BRIEF_MODEL", "gpt-4o")
DEFAULT_TEMPERATURE = float(os.getenv("BRIEF_TEMPERATURE", "0.5"))
DEFAULT_MAX_TOKENS = int(os.getenv("BRIEF_MAX_TOKENS", "4096"))

# ---------------------------------------------------------------------------
# Page fetching
# ---------------------------------------------------------------------------
FETCH_USER_AGENT = os.getenv(
    "FETCH_USER_AGENT",
    "Mozilla/5.0 (compatible; BriefPipeline/1.0; +https://example.com/bot)",
)
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "30"))
FETCH_MAX_REDIRECTS = int(os.getenv("FETCH_MAX_REDIRECTS", "5"))
FETCH_MAX_RETRIES = int(os.getenv("FETCH_MAX_RETRIES", "3"))

# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------
MAX_PAGES = int(os.getenv("MAX_PAGES", "8"))
PAGE_BATCH_TIMEOUT = float(os.getenv("PAGE_BATCH_TIMEOUT", "180"))
PIPELINE_VERSION = "1.0.0-brief"

# ---------------------------------------------------------------------------
# Per-stage model assignments
#
# Override any stage via env: PAGE_ANALYZER_MODEL=gpt-4o-mini
#                             SYNTHESIZER_MAX_TOKENS=8000
# ---------------------------------------------------------------------------
STAGE_LLM_CONFIG: dict[str, dict] = {
    # Per-page extraction: many calls, keep it factual
    "page_analyzer": {
        "model": os.getenv("PAGE_ANALYZER_MODEL", DEFAULT_MODEL),
        "temperature": float(os.getenv("PAGE_ANALYZER_TEMPERATURE", "0.3")),
        "max_tokens": int(os.getenv("PAGE_ANALYZER_MAX_TOKENS", str(DEFAULT_MAX_TOKENS))),
    },
    # Final brief: one call, needs the full schema worth of output
    "synthesizer": {
        "model": os.getenv("SYNTHESIZER_MODEL", DEFAULT_MODEL),
        "temperature": float(os.getenv("SYNTHESIZER_TEMPERATURE", str(DEFAULT_TEMPERATURE))),
        "max_tokens": int(os.getenv("SYNTHESIZER_MAX_TOKENS", str(DEFAULT_MAX_TOKENS))),
    },
}


def get_stage_llm_config(stage: str) -> dict:
    """Return the LLM config for a pipeline stage, with defaults."""
    defaults = {
        "model": DEFAULT_MODEL,
        "temperature": DEFAULT_TEMPERATURE,
        "max_tokens": DEFAULT_MAX_TOKENS,
    }
    stage_conf = STAGE_LLM_CONFIG.get(stage, {})
    return {**defaults, **stage_conf}


# ---------------------------------------------------------------------------
# Explicit settings objects
#
# Built once and handed to PageFetcher / AIAnalysisClient so neither reads
# the environment while a run is in flight.
# ---------------------------------------------------------------------------

class FetcherSettings(BaseModel):
    user_agent: str = FETCH_USER_AGENT
    timeout: float = FETCH_TIMEOUT
    max_redirects: int = FETCH_MAX_REDIRECTS
    max_retries: int = FETCH_MAX_RETRIES
    # Multiplier for the exponential wait between transient-failure retries
    retry_backoff: float = 1.0


class AIClientSettings(BaseModel):
    api_key: str = ""
    base_url: str = OPENAI_BASE_URL
    timeout: float = AI_REQUEST_TIMEOUT
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    # Connection/timeout retries only; 429s are never retried
    max_retries: int = 2
    retry_backoff: float = 1.0


def get_fetcher_settings() -> FetcherSettings:
    return FetcherSettings(
        user_agent=FETCH_USER_AGENT,
        timeout=FETCH_TIMEOUT,
        max_redirects=FETCH_MAX_REDIRECTS,
        max_retries=FETCH_MAX_RETRIES,
    )


def get_ai_client_settings() -> AIClientSettings:
    return AIClientSettings(
        api_key=OPENAI_API_KEY,
        base_url=OPENAI_BASE_URL,
        timeout=AI_REQUEST_TIMEOUT,
        model=DEFAULT_MODEL,
        temperature=DEFAULT_TEMPERATURE,
        max_tokens=DEFAULT_MAX_TOKENS,
    )


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
