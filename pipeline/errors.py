"""Error taxonomy for the website brief pipeline.

Every failure the pipeline can surface derives from BriefPipelineError, so
callers of analyze_website() can catch one type and still branch on the
concrete class.
"""

from __future__ import annotations

# Raw text kept on parse failures; the full response never goes to the logs.
SNIPPET_CHARS = 200


class BriefPipelineError(Exception):
    """Base class for every error raised by the pipeline."""


# ---------------------------------------------------------------------------
# Fetching / extraction
# ---------------------------------------------------------------------------

class TransportError(BriefPipelineError):
    """A page could not be fetched.

    ``status`` is set for non-200 HTTP responses; ``cause`` is set when the
    transport itself failed (after retries were exhausted).
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status: int | None = None,
        cause: Exception | None = None,
    ):
        self.url = url
        self.status = status
        self.cause = cause
        super().__init__(message)


class ContentTypeError(BriefPipelineError):
    """The fetched body is not HTML (e.g. a PDF)."""

    def __init__(self, message: str, url: str = ""):
        self.url = url
        super().__init__(message)


class ParseError(BriefPipelineError):
    """HTML or JSON could not be parsed."""

    def __init__(self, message: str, snippet: str = "", cause: Exception | None = None):
        self.snippet = (snippet or "")[:SNIPPET_CHARS]
        self.cause = cause
        super().__init__(message)


# ---------------------------------------------------------------------------
# Text-generation service
# ---------------------------------------------------------------------------

class LLMError(BriefPipelineError):
    """Clean error from a text-generation call with a human-readable message."""

    def __init__(self, message: str, provider: str = "", model: str = "", cause: Exception | None = None):
        self.provider = provider
        self.model = model
        self.cause = cause
        super().__init__(message)


class MissingCredential(LLMError):
    """No API key configured; raised before any network call."""


class RateLimited(LLMError):
    """HTTP 429 from the service. Not retried at the client layer."""


class EmptyResponse(LLMError):
    """HTTP 200 but no usable completion choice."""


class ApiError(LLMError):
    """Any other non-200 response, or a transport failure talking to the service."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        provider: str = "",
        model: str = "",
        cause: Exception | None = None,
    ):
        self.status = status
        super().__init__(message, provider=provider, model=model, cause=cause)


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------

class AggregateFailure(BriefPipelineError):
    """Every page in the analysis batch failed."""

    def __init__(self, message: str, failures: list | None = None):
        self.failures = list(failures or [])
        super().__init__(message)
