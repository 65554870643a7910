"""AI analysis client — chat-completion calls plus response cleanup.

Wraps an OpenAI-compatible chat-completion endpoint. Every call sends two
messages (a fixed system context and a page- or run-specific prompt) and
returns the completion text.

Includes built-in usage tracking: every call records token counts. Use
reset_usage(), get_usage_log() and get_usage_summary() to read them.

Error handling:
  - Missing API key fails before any network traffic (MissingCredential).
  - 429 surfaces as RateLimited and is NOT retried here; callers decide.
  - Any other non-200 surfaces as ApiError(status).
  - Connection / timeout errors ARE retried with exponential backoff.
  - Model output is cleaned of Markdown fences before JSON decoding; decode
    failures keep only a short prefix of the raw text.
"""

from __future__ import annotations

import json
import logging
import re
import threading
import time as _time
from typing import Any, TypeVar

import openai
from pydantic import BaseModel, ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import AIClientSettings, get_ai_client_settings
from pipeline.errors import (
    SNIPPET_CHARS,
    ApiError,
    EmptyResponse,
    MissingCredential,
    ParseError,
    RateLimited,
)

logger = logging.getLogger(__name__)

PROVIDER = "openai"

T = TypeVar("T", bound=BaseModel)


# ---------------------------------------------------------------------------
# Usage tracking
# ---------------------------------------------------------------------------

_usage_lock = threading.Lock()
_usage_log: list[dict[str, Any]] = []


def _record_usage(model: str, input_tokens: int, output_tokens: int, duration_ms: int):
    entry = {
        "provider": PROVIDER,
        "model": model,
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "duration_ms": duration_ms,
        "timestamp": _time.time(),
    }
    with _usage_lock:
        _usage_log.append(entry)
    logger.info(
        "Token usage: %s/%s — in=%d out=%d %dms",
        PROVIDER, model, input_tokens, output_tokens, duration_ms,
    )


def reset_usage():
    """Clear all accumulated usage data (call at pipeline start)."""
    with _usage_lock:
        _usage_log.clear()


def get_usage_log() -> list[dict[str, Any]]:
    """Return a copy of the full usage log."""
    with _usage_lock:
        return list(_usage_log)


def get_usage_summary() -> dict[str, Any]:
    """Return aggregated token totals."""
    with _usage_lock:
        entries = list(_usage_log)
    total_input = sum(e["input_tokens"] for e in entries)
    total_output = sum(e["output_tokens"] for e in entries)
    return {
        "total_input_tokens": total_input,
        "total_output_tokens": total_output,
        "total_tokens": total_input + total_output,
        "calls": len(entries),
    }


# ---------------------------------------------------------------------------
# Response cleanup
# ---------------------------------------------------------------------------

_LEADING_JSON_FENCE = re.compile(r"^```json\n?")
_LEADING_FENCE = re.compile(r"^```\n?")
_TRAILING_FENCE = re.compile(r"\n?```$")


def clean_json_response(text: str) -> str:
    """Strip surrounding Markdown code fences. Fence-free input is returned as-is."""
    cleaned = text.strip()
    cleaned = _LEADING_JSON_FENCE.sub("", cleaned)
    cleaned = _LEADING_FENCE.sub("", cleaned)
    cleaned = _TRAILING_FENCE.sub("", cleaned)
    return cleaned.strip()


def parse_json_response(text: str) -> Any:
    """Clean and decode a model response. Raises ParseError on bad JSON."""
    cleaned = clean_json_response(text or "")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        snippet = cleaned[:SNIPPET_CHARS]
        logger.error("JSON parse failed: %s", exc)
        logger.error("First %d chars: %s", SNIPPET_CHARS, snippet)
        raise ParseError("Invalid JSON from AI", snippet=snippet, cause=exc) from exc


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

# Reasoning models reject the legacy max_tokens parameter.
_NEW_TOKEN_PARAM_PREFIXES = ("gpt-5", "o1", "o3", "o4")


class AIAnalysisClient:
    """Thin, thread-safe wrapper around one OpenAI-compatible endpoint."""

    def __init__(self, settings: AIClientSettings | None = None, client: Any = None):
        self.settings = settings or get_ai_client_settings()
        self._client = client

    def _get_client(self):
        if self._client is None:
            # SDK retries are off: 429 must surface, and transient retries are ours.
            self._client = openai.OpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
                max_retries=0,
            )
        return self._client

    def _build_request(
        self,
        system_context: str,
        user_prompt: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_context},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if model.startswith(_NEW_TOKEN_PARAM_PREFIXES):
            kwargs["max_completion_tokens"] = max_tokens
        else:
            kwargs["max_tokens"] = max_tokens
        return kwargs

    def _create(self, kwargs: dict[str, Any]):
        retryer = Retrying(
            retry=retry_if_exception_type(openai.APIConnectionError),
            stop=stop_after_attempt(self.settings.max_retries + 1),
            wait=wait_exponential(multiplier=self.settings.retry_backoff, max=30),
            reraise=True,
        )
        return retryer(self._get_client().chat.completions.create, **kwargs)

    def analyze(
        self,
        system_context: str,
        user_prompt: str,
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send one system+user exchange and return the completion text."""
        model = model or self.settings.model
        temperature = self.settings.temperature if temperature is None else temperature
        max_tokens = max_tokens or self.settings.max_tokens

        if not self.settings.api_key:
            logger.error("Missing OPENAI_API_KEY")
            raise MissingCredential(
                "OPENAI_API_KEY is not set. Add it to your .env file.",
                provider=PROVIDER,
                model=model,
            )

        kwargs = self._build_request(system_context, user_prompt, model, temperature, max_tokens)
        logger.info("LLM call: model=%s, temp=%.1f, prompt=%d chars", model, temperature, len(user_prompt))

        start = _time.time()
        try:
            completion = self._create(kwargs)
        except openai.RateLimitError as exc:
            logger.warning("Rate limited by %s [%s]: %s", PROVIDER, model, exc)
            raise RateLimited(
                f"[{PROVIDER}/{model}] Rate limited", provider=PROVIDER, model=model, cause=exc,
            ) from exc
        except openai.APIStatusError as exc:
            logger.error("%s error (%d): %s", PROVIDER, exc.status_code, exc)
            raise ApiError(
                f"[{PROVIDER}/{model}] API error: {exc.status_code}",
                status=exc.status_code, provider=PROVIDER, model=model, cause=exc,
            ) from exc
        except openai.APIConnectionError as exc:
            logger.error("%s request failed: %s", PROVIDER, exc)
            raise ApiError(
                f"[{PROVIDER}/{model}] Request failed: {exc}",
                provider=PROVIDER, model=model, cause=exc,
            ) from exc
        duration_ms = int((_time.time() - start) * 1000)

        choices = getattr(completion, "choices", None) or []
        if not choices:
            logger.warning("%s returned empty choices [%s]", PROVIDER, model)
            raise EmptyResponse(f"[{PROVIDER}/{model}] Empty response", provider=PROVIDER, model=model)

        content = choices[0].message.content
        if not content or not content.strip():
            logger.warning("%s returned an empty completion [%s]", PROVIDER, model)
            raise EmptyResponse(f"[{PROVIDER}/{model}] Empty completion", provider=PROVIDER, model=model)

        usage = getattr(completion, "usage", None)
        _record_usage(
            model,
            getattr(usage, "prompt_tokens", 0) or 0,
            getattr(usage, "completion_tokens", 0) or 0,
            duration_ms,
        )
        return content

    def analyze_json(
        self,
        system_context: str,
        user_prompt: str,
        response_model: type[T],
        **options: Any,
    ) -> T:
        """analyze() + parse_json_response() + schema validation."""
        raw = self.analyze(system_context, user_prompt, **options)
        data = parse_json_response(raw)
        try:
            return response_model.model_validate(data)
        except ValidationError as exc:
            n_errors = exc.error_count()
            for err in exc.errors():
                logger.error(
                    "Schema validation error: field=%s type=%s msg=%s",
                    " → ".join(str(loc) for loc in err["loc"]),
                    err["type"],
                    err["msg"],
                )
            raise ParseError(
                f"Response JSON didn't match {response_model.__name__} "
                f"({n_errors} validation error{'s' if n_errors != 1 else ''})",
                snippet=clean_json_response(raw),
                cause=exc,
            ) from exc
