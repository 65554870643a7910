"""Page fetcher — raw HTML over HTTP with redirect, timeout and retry policy.

Only transient transport failures (connection errors, timeouts) are retried.
An HTTP error status is an answer, not a glitch, so it surfaces immediately
as TransportError(status=...).
"""

from __future__ import annotations

import logging

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from config import FetcherSettings, get_fetcher_settings
from pipeline.errors import ContentTypeError, TransportError

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
PDF_SIGNATURE = b"%PDF-"


def _is_transient(exc: BaseException) -> bool:
    """Connection resets, DNS hiccups, timeouts. Not bad schemes."""
    return isinstance(exc, httpx.TransportError) and not isinstance(exc, httpx.UnsupportedProtocol)


def is_pdf(body: bytes) -> bool:
    return body.lstrip()[: len(PDF_SIGNATURE)] == PDF_SIGNATURE


class PageFetcher:
    """Fetches page bodies with a shared, pooled httpx client.

    Safe to share across threads: httpx.Client is thread-safe and the
    fetcher keeps no per-request state.
    """

    def __init__(
        self,
        settings: FetcherSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings or get_fetcher_settings()
        self._client = httpx.Client(
            headers={
                "User-Agent": self.settings.user_agent,
                "Accept": ACCEPT_HEADER,
            },
            follow_redirects=True,
            max_redirects=self.settings.max_redirects,
            timeout=self.settings.timeout,
            transport=transport,
        )

    def __enter__(self) -> PageFetcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _log_retry(self, state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "Transient fetch failure (attempt %d/%d): %s",
            state.attempt_number, self.settings.max_retries + 1, exc,
        )

    def _get(self, url: str) -> httpx.Response:
        return self._client.get(url)

    def fetch(self, url: str) -> str:
        """Return the body of ``url`` as text.

        Raises TransportError for non-200 responses, malformed URLs and
        exhausted retries,
        ContentTypeError when the body is a PDF.
        """
        logger.info("Fetching: %s", url)
        retryer = Retrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self.settings.max_retries + 1),
            wait=wait_exponential(multiplier=self.settings.retry_backoff, max=10),
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            response = retryer(self._get, url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Fetch failed for %s: %s", url, exc)
            raise TransportError(f"Request failed: {exc}", url=url, cause=exc) from exc

        if response.status_code != 200:
            logger.warning("HTTP %d fetching %s", response.status_code, url)
            raise TransportError(f"HTTP {response.status_code}", url=url, status=response.status_code)

        if is_pdf(response.content):
            logger.warning("Skipping PDF content at %s", url)
            raise ContentTypeError("Content is PDF", url=url)

        logger.info("Fetched %d bytes from %s", len(response.content), url)
        return response.text


def fetch_page(url: str, settings: FetcherSettings | None = None) -> str:
    """One-shot fetch with a throwaway client."""
    with PageFetcher(settings) as fetcher:
        return fetcher.fetch(url)
