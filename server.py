"""Website Brief Pipeline — Web Server.

FastAPI backend exposing the pipeline and the brief store:
run an analysis, then read, edit or delete the stored brief by website URL.

Usage:
    python server.py
    # Then POST {"url": "https://example.com"} to http://localhost:8000/api/analyze
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

import config
from pipeline import storage
from pipeline.errors import (
    AggregateFailure,
    BriefPipelineError,
    ContentTypeError,
    MissingCredential,
    RateLimited,
)
from pipeline.service import analyze_and_record
from pipeline.synthesizer import compute_ready_for_generation
from schemas.brief import Brief

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def _check_api_keys() -> list[str]:
    """Return configuration warnings (empty when the pipeline can run)."""
    warnings = []
    if not config.OPENAI_API_KEY:
        warnings.append("OPENAI_API_KEY is not set — every analysis will fail!")
    return warnings


@asynccontextmanager
async def lifespan(app: FastAPI):
    storage.init_db()
    for w in _check_api_keys():
        logger.warning("  • %s", w)
    yield


app = FastAPI(title="Website Brief Pipeline", lifespan=lifespan)


def _error_status(exc: BriefPipelineError) -> int:
    """Map a pipeline error to the HTTP status returned to the caller."""
    if isinstance(exc, ContentTypeError):
        return 422
    if isinstance(exc, RateLimited):
        return 429
    if isinstance(exc, MissingCredential):
        return 503
    # Upstream site or AI service misbehaved
    return 502


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    url: str
    max_pages: int = config.MAX_PAGES
    save: bool = True


@app.post("/api/analyze")
async def api_analyze(body: AnalyzeRequest):
    """Run the full pipeline for one site and return the brief."""
    if not _is_http_url(body.url):
        return JSONResponse({"error": f"Not an http(s) URL: {body.url!r}"}, status_code=400)
    if body.max_pages < 1:
        return JSONResponse({"error": "max_pages must be at least 1"}, status_code=400)

    loop = asyncio.get_running_loop()
    try:
        brief: Brief = await loop.run_in_executor(
            None, analyze_and_record, body.url, body.max_pages, body.save,
        )
    except BriefPipelineError as exc:
        logger.warning("Analysis of %s failed: %s", body.url, exc)
        payload = {"error": str(exc), "error_type": type(exc).__name__}
        if isinstance(exc, AggregateFailure):
            payload["failed_pages"] = [url for url, _ in exc.failures]
        return JSONResponse(payload, status_code=_error_status(exc))

    return brief.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Brief store
# ---------------------------------------------------------------------------

class BriefUpdate(BaseModel):
    url: str
    brief: dict


@app.get("/api/briefs")
async def api_list_briefs(limit: int = 50):
    """List stored briefs, most recently updated first."""
    return storage.list_briefs(limit=limit)


@app.get("/api/brief")
async def api_get_brief(url: str):
    """Get the stored brief for a website."""
    brief = storage.get_brief(url)
    if brief is None:
        return JSONResponse({"error": f"No brief for {url}"}, status_code=404)
    return brief


@app.put("/api/brief")
async def api_update_brief(body: BriefUpdate):
    """Replace a stored brief (e.g. after manual edits)."""
    # Validate the shape, but store what the caller sent
    try:
        brief = Brief.model_validate(body.brief)
    except ValidationError as exc:
        return JSONResponse({"error": f"Invalid brief: {exc.error_count()} validation error(s)"}, status_code=422)
    payload = {**body.brief, "ready_for_generation": compute_ready_for_generation(brief)}
    if not storage.update_brief(body.url, payload):
        return JSONResponse({"error": f"No brief for {body.url}"}, status_code=404)
    return {"ok": True, "url": body.url}


@app.delete("/api/brief")
async def api_delete_brief(url: str):
    """Delete the stored brief for a website."""
    if not storage.delete_brief(url):
        return JSONResponse({"error": f"No brief for {url}"}, status_code=404)
    return {"ok": True, "deleted": url}


@app.get("/api/runs")
async def api_list_runs(url: Optional[str] = None, limit: int = 50):
    """List past analysis runs, newest first."""
    return storage.list_runs(website_url=url, limit=limit)


@app.get("/api/health")
async def api_health():
    warnings = _check_api_keys()
    return {
        "ok": not warnings,
        "warnings": warnings,
        "pipeline_version": config.PIPELINE_VERSION,
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn
    print("\n  Website Brief Pipeline API")
    print("  http://localhost:8000\n")
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
