"""Content extractor — raw HTML into a PageRecord.

Pure and deterministic: the same HTML always yields the same record.
BeautifulSoup does the parsing; the CSS selectors below run through
soupsieve, which ships with it.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from pipeline.errors import ParseError
from schemas.page_record import (
    MAX_COLORS,
    MAX_CTAS,
    MAX_HEADINGS,
    MAX_IMAGES,
    PageImage,
    PageLink,
    PageRecord,
)

# Elements that never carry the page's own message
NON_CONTENT_TAGS = ["nav", "header", "footer", "aside", "script", "style", "noscript"]

BUTTON_SELECTOR = "button, a.btn, a.button, [class*='cta'], [class*='btn']"

CTA_PATTERN = re.compile(
    r"get started|sign up|try|demo|contact|buy|order|subscribe|download|learn more|start|join",
    re.IGNORECASE,
)

HEX_COLOR_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}|#[0-9A-Fa-f]{3}")


def _squash(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return " ".join(text.split())


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def parse_html(html: str) -> BeautifulSoup:
    if not isinstance(html, str):
        raise ParseError(f"Parse failed: expected str, got {type(html).__name__}")
    try:
        return BeautifulSoup(html, "html.parser")
    except (ParserRejectedMarkup, AssertionError, ValueError) as exc:
        raise ParseError(f"Parse failed: {exc}", snippet=html, cause=exc) from exc


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------

def extract_title(soup: BeautifulSoup) -> str | None:
    tag = soup.find("title")
    if tag is None:
        return None
    title = tag.get_text().strip()
    return title or None


def extract_meta(soup: BeautifulSoup, name: str) -> str | None:
    for tag in soup.find_all("meta"):
        if (tag.get("name") or "").strip().lower() != name:
            continue
        content = tag.get("content")
        if content is not None:
            return content.strip()
    return None


def extract_headings(soup: BeautifulSoup) -> list[str]:
    headings = [_squash(tag.get_text(" ")) for tag in soup.find_all(["h1", "h2", "h3"])]
    return [h for h in headings if h][:MAX_HEADINGS]


def extract_ctas(soup: BeautifulSoup) -> list[str]:
    buttons = [_squash(el.get_text(" ")) for el in soup.select(BUTTON_SELECTOR)]
    anchors = [_squash(a.get_text(" ")) for a in soup.find_all("a")]
    keyword_links = [text for text in anchors if CTA_PATTERN.search(text)]
    ctas = [text for text in buttons + keyword_links if text]
    return _dedupe(ctas)[:MAX_CTAS]


def _link_pairs(anchors) -> list[PageLink]:
    links: list[PageLink] = []
    for a in anchors:
        href = (a.get("href") or "").strip()
        text = _squash(a.get_text(" "))
        # Fragment-only anchors point back into the same page
        if not href or href.startswith("#") or not text:
            continue
        links.append(PageLink(href=href, text=text))
    return links


def extract_links(soup: BeautifulSoup) -> list[PageLink]:
    return _link_pairs(soup.select("a[href]"))


def extract_nav_links(soup: BeautifulSoup) -> list[PageLink]:
    return _link_pairs(soup.select("nav a[href]"))


def extract_images(soup: BeautifulSoup) -> list[PageImage]:
    images = [
        PageImage(src=img["src"], alt=img.get("alt") or "")
        for img in soup.select("img[src]")
    ]
    return images[:MAX_IMAGES]


def extract_colors(soup: BeautifulSoup) -> list[str]:
    colors: list[str] = []
    for el in soup.select("[style]"):
        colors.extend(HEX_COLOR_PATTERN.findall(el.get("style") or ""))
    return _dedupe(colors)[:MAX_COLORS]


def extract_main_content(soup: BeautifulSoup) -> str:
    """Visible body text minus chrome. Mutates ``soup``: call it last."""
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()
    return _squash(soup.get_text(" "))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_page(html: str, url: str) -> PageRecord:
    """Parse ``html`` fetched from ``url`` into a PageRecord."""
    soup = parse_html(html)
    return PageRecord(
        url=url,
        title=extract_title(soup),
        meta_description=extract_meta(soup, "description"),
        meta_keywords=extract_meta(soup, "keywords"),
        headings=extract_headings(soup),
        ctas=extract_ctas(soup),
        links=extract_links(soup),
        nav_links=extract_nav_links(soup),
        images=extract_images(soup),
        colors=extract_colors(soup),
        main_content=extract_main_content(soup),
    )
