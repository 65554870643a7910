"""PageRecord — structured extraction of one fetched page.

Produced by pipeline.extractor from raw HTML, consumed by page discovery
(links / nav_links) and by the per-page analysis prompt. Never persisted.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

MAX_HEADINGS = 20
MAX_CTAS = 10
MAX_IMAGES = 20
MAX_COLORS = 5


class PageLink(BaseModel):
    href: str
    text: str


class PageImage(BaseModel):
    src: str
    alt: str = ""


class PageRecord(BaseModel):
    """Everything the pipeline needs from a single page."""

    url: str
    title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    main_content: str = ""
    headings: list[str] = Field(
        default_factory=list,
        max_length=MAX_HEADINGS,
        description="h1-h3 text in document order.",
    )
    ctas: list[str] = Field(
        default_factory=list,
        max_length=MAX_CTAS,
        description="Button-like element text and CTA-keyword anchor text, deduped.",
    )
    links: list[PageLink] = Field(default_factory=list)
    nav_links: list[PageLink] = Field(default_factory=list)
    images: list[PageImage] = Field(default_factory=list, max_length=MAX_IMAGES)
    colors: list[str] = Field(
        default_factory=list,
        max_length=MAX_COLORS,
        description="Hex colour literals found in inline style attributes.",
    )
