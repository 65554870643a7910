"""Page discovery — picks the seed page's most brief-worthy same-site links.

Two independent passes decide which pages get analyzed:
  1. Inclusion: the link's anchor TEXT must mention a priority keyword
     ("Pricing", "About us", "Customer stories", ...).
  2. Ranking: the normalized URL STRING is scored against weighted regex
     tiers, so /pricing outranks /about outranks /contact.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urldefrag, urljoin, urlparse

import tldextract

from pipeline.extractor import extract_page
from pipeline.fetcher import PageFetcher
from schemas.page_record import PageLink, PageRecord

logger = logging.getLogger(__name__)

PRIORITY_KEYWORDS = [
    # Highest priority - understand the offering
    "pricing",
    "plans",
    "features",
    "product",
    "service",
    # Social proof and trust
    "testimonial",
    "case study",
    "customer",
    "success",
    "review",
    # Brand voice
    "about",
    "why",
    "how it works",
    "solution",
    # Lower priority but useful
    "faq",
    "contact",
    "demo",
]

URL_PRIORITY_TIERS: list[tuple[re.Pattern, int]] = [
    (re.compile(r"pricing|plans|cost", re.IGNORECASE), 100),
    (re.compile(r"features?|product|service", re.IGNORECASE), 90),
    (re.compile(r"testimonial|review|case.?study|success", re.IGNORECASE), 85),
    (re.compile(r"customer|client", re.IGNORECASE), 80),
    (re.compile(r"about|why|how.?it.?works", re.IGNORECASE), 70),
    (re.compile(r"solution|benefit", re.IGNORECASE), 60),
    (re.compile(r"faq|demo|contact", re.IGNORECASE), 50),
]

WEB_SCHEMES = {"http", "https"}

# Bundled public-suffix snapshot only: discovery never goes to the network for it.
# Private suffixes (github.io, herokuapp.com, ...) count, so tenants stay separate sites.
_extract = tldextract.TLDExtract(suffix_list_urls=(), include_psl_private_domains=True)


def host_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def registrable_domain(host: str) -> str:
    """example.co.uk for shop.example.co.uk; IPs and bare hosts come back as-is."""
    ext = _extract(host)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    return host


def is_internal(href: str, base_host: str) -> bool:
    """True for relative links and links on the same registrable domain as
    ``base_host`` (www., blog., shop. ... all count as the same site).
    """
    if not href or not base_host:
        return False
    parsed = urlparse(href)
    if parsed.scheme and parsed.scheme.lower() not in WEB_SCHEMES:
        # mailto:, tel:, javascript:, ...
        return False
    host = (parsed.hostname or "").lower()
    if not host:
        return True
    if host == base_host or host.endswith("." + base_host):
        return True
    return registrable_domain(host) == registrable_domain(base_host)


def matches_keywords(text: str) -> bool:
    text_lower = (text or "").lower()
    return any(keyword in text_lower for keyword in PRIORITY_KEYWORDS)


def normalize_url(href: str, base_url: str) -> str:
    """Resolve relative hrefs against ``base_url`` and drop any #fragment."""
    absolute = urljoin(base_url, href)
    return urldefrag(absolute)[0]


def page_key(url: str) -> str:
    """Comparison form of a URL: lowercase scheme and host, empty path as /, no fragment."""
    parsed = urlparse(urldefrag(url)[0])
    path = parsed.path or "/"
    return parsed._replace(
        scheme=parsed.scheme.lower(), netloc=parsed.netloc.lower(), path=path,
    ).geturl()


def score_url(url: str) -> int:
    """Highest tier weight whose pattern matches the URL, else 0."""
    score = 0
    for pattern, weight in URL_PRIORITY_TIERS:
        if pattern.search(url):
            score = max(score, weight)
    return score


def rank_candidates(base_url: str, record: PageRecord) -> list[str]:
    """Filtered, normalized, deduplicated candidate URLs, best first."""
    base_host = host_of(base_url)
    candidates: list[PageLink] = list(record.nav_links) + list(record.links)

    urls: list[str] = []
    seen: set[str] = set()
    for link in candidates:
        if not (is_internal(link.href, base_host) and matches_keywords(link.text)):
            continue
        url = normalize_url(link.href, base_url)
        key = page_key(url)
        # Relative hrefs like //cdn.other.com/x only reveal their host once resolved
        if not is_internal(url, base_host) or key in seen:
            continue
        seen.add(key)
        urls.append(url)

    # sorted() is stable, so equal scores keep first-seen (nav first) order
    return sorted(urls, key=score_url, reverse=True)


def select_pages(seed_url: str, record: PageRecord, max_pages: int) -> list[str]:
    """[seed] + the top (max_pages - 1) ranked candidates, without duplicates."""
    slots = max(max_pages, 1) - 1
    seed_key = page_key(seed_url)
    related = [url for url in rank_candidates(seed_url, record) if page_key(url) != seed_key]
    return [seed_url] + related[:slots]


def discover_pages(seed_url: str, max_pages: int, fetcher: PageFetcher) -> list[str]:
    """Fetch the seed page and return the URLs to analyze, seed first.

    Seed fetch / parse failures propagate: without the seed there is no run.
    """
    logger.info("Discovering pages from %s...", seed_url)
    html = fetcher.fetch(seed_url)
    record = extract_page(html, seed_url)
    urls = select_pages(seed_url, record, max_pages)
    logger.info(
        "Found %d pages to analyze (%d candidate links on seed)",
        len(urls), len(record.links) + len(record.nav_links),
    )
    return urls
