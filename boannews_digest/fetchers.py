"""Listing sources that enumerate the most recent boannews articles."""

from __future__ import annotations

import html
import logging
import re
from typing import Any, Iterable, List, Optional, Set, Tuple

import feedparser
from bs4 import BeautifulSoup

from .config import Config
from .models import Candidate
from .transport import HttpFetcher, decode, parse_document, text_of
from .urls import normalize_url

LOGGER = logging.getLogger(__name__)

ANCHOR_RE = re.compile(
    r"<a\s[^>]*?href\s*=\s*[\"'](?P<href>[^\"']+)[\"'][^>]*>(?P<inner>.*?)</a>",
    re.IGNORECASE,
)
CLASS_RE = re.compile(r"class\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
ARTICLE_HREF_RE = re.compile(r"view\.asp\?idx=\d+", re.IGNORECASE)
TITLE_CLASSES = {"news_main_title", "news_txt", "news_title"}


class CandidateCollector:
    """Normalize, de-duplicate and bound candidates within one listing pass."""

    def __init__(self, base_url: str, max_count: int) -> None:
        self.base_url = base_url
        self.max_count = max_count
        self.candidates: List[Candidate] = []
        self._seen: Set[str] = set()

    @property
    def full(self) -> bool:
        return len(self.candidates) >= self.max_count

    def add(self, title: Optional[str], href: Optional[str]) -> bool:
        title = " ".join((title or "").split())
        url = normalize_url(href or "", self.base_url)
        if not title or not url:
            return False
        if url in self._seen:
            LOGGER.debug("Skipping duplicate candidate: %s", url)
            return False
        if self.full:
            return False
        self._seen.add(url)
        self.candidates.append(Candidate(title=title, url=url))
        return True

    def extend(self, pairs: Iterable[Tuple[Optional[str], Optional[str]]]) -> List[Candidate]:
        for title, href in pairs:
            if self.full:
                break
            self.add(title, href)
        return self.candidates


def _structural_pairs(soup: BeautifulSoup) -> Iterable[Tuple[str, Optional[str]]]:
    # Featured zone first, then the regular list; each keeps document order.
    for zone in soup.select(".news_main"):
        anchor = zone.select_one(".news_main_title a")
        if anchor is None:
            continue
        yield text_of(anchor), anchor.get("href")
    for zone in soup.select(".news_list"):
        anchor = zone.select_one("a")
        if anchor is None:
            continue
        yield text_of(zone.select_one("a .news_txt")), anchor.get("href")


def extract_structural(soup: BeautifulSoup, base_url: str, max_count: int) -> List[Candidate]:
    """Return candidates from the featured and list zones of a listing page."""

    return CandidateCollector(base_url, max_count).extend(_structural_pairs(soup))


def extract_feed(feed: Any, base_url: str, max_count: int) -> List[Candidate]:
    """Return the first ``max_count`` usable entries of a parsed feed, in feed order."""

    pairs = ((entry.get("title"), entry.get("link")) for entry in feed.entries)
    return CandidateCollector(base_url, max_count).extend(pairs)


def _rendered_pairs(markup: str) -> Iterable[Tuple[str, str]]:
    for line in markup.splitlines():
        for match in ANCHOR_RE.finditer(line):
            href = html.unescape(match.group("href"))
            if not ARTICLE_HREF_RE.search(href):
                continue
            classes = set(" ".join(CLASS_RE.findall(match.group(0))).split())
            if classes and not classes & TITLE_CLASSES:
                continue
            title = html.unescape(TAG_RE.sub(" ", match.group("inner")))
            yield title, href


def extract_rendered(markup: str, base_url: str, max_count: int) -> List[Candidate]:
    """Scan a rendered HTML dump line by line for article anchors."""

    return CandidateCollector(base_url, max_count).extend(_rendered_pairs(markup or ""))


def extract_search(payload: Any, base_url: str, max_count: int) -> List[Candidate]:
    """Truncate an already structured search result to ``max_count`` candidates."""

    results = payload.get("results", []) if isinstance(payload, dict) else []
    pairs = (
        (item.get("title"), item.get("url") or item.get("link"))
        for item in results
        if isinstance(item, dict)
    )
    return CandidateCollector(base_url, max_count).extend(pairs)


class ListingSource:
    """Base class for the configured listing strategy."""

    name: str = "base"

    def list_candidates(self, config: Config, fetcher: HttpFetcher) -> List[Candidate]:
        raise NotImplementedError


class StructuralHtmlSource(ListingSource):
    name = "html"

    def list_candidates(self, config: Config, fetcher: HttpFetcher) -> List[Candidate]:
        url = config.listing_url
        soup = parse_document(decode(fetcher.fetch(url), config.site_encoding))
        candidates = extract_structural(soup, url, config.max_candidates)
        LOGGER.info("Extracted %d candidates from listing page", len(candidates))
        return candidates


class FeedSource(ListingSource):
    name = "feed"

    def list_candidates(self, config: Config, fetcher: HttpFetcher) -> List[Candidate]:
        # feedparser reads the encoding from the XML declaration of the raw bytes.
        feed = feedparser.parse(fetcher.fetch(config.feed_url))
        if feed.bozo and not feed.entries:
            LOGGER.warning("Feed at %s could not be parsed: %s", config.feed_url, feed.get("bozo_exception"))
        candidates = extract_feed(feed, config.base_url, config.max_candidates)
        LOGGER.info("Extracted %d candidates from feed", len(candidates))
        return candidates


class RenderedDomSource(ListingSource):
    name = "rendered"

    def list_candidates(self, config: Config, fetcher: HttpFetcher) -> List[Candidate]:
        params = {"api_key": config.render_proxy_key or "", "url": config.listing_url, "render": "true"}
        markup = decode(fetcher.fetch(config.render_proxy_url or "", params=params), config.rendered_encoding)
        candidates = extract_rendered(markup, config.listing_url, config.max_candidates)
        LOGGER.info("Extracted %d candidates from rendered listing", len(candidates))
        return candidates


class SearchApiSource(ListingSource):
    name = "search"

    def list_candidates(self, config: Config, fetcher: HttpFetcher) -> List[Candidate]:
        headers = {"Authorization": f"Bearer {config.search_api_key}"} if config.search_api_key else None
        payload = fetcher.post_json(
            config.search_api_url or "",
            {"query": config.search_query, "num_results": config.max_candidates},
            headers=headers,
        )
        candidates = extract_search(payload, config.base_url, config.max_candidates)
        LOGGER.info("Extracted %d candidates from search results", len(candidates))
        return candidates


SOURCES = {source.name: source for source in (StructuralHtmlSource, FeedSource, RenderedDomSource, SearchApiSource)}


def make_listing_source(config: Config) -> ListingSource:
    """Return the listing source selected by ``config.listing_strategy``."""

    if config.listing_strategy == "rendered" and not config.render_proxy_url:
        raise ValueError("RENDER_PROXY_URL is required for the rendered listing strategy")
    if config.listing_strategy == "search" and not config.search_api_url:
        raise ValueError("SEARCH_API_URL is required for the search listing strategy")
    try:
        return SOURCES[config.listing_strategy]()
    except KeyError as exc:
        raise ValueError(f"Unknown listing strategy: {config.listing_strategy}") from exc


__all__ = [
    "CandidateCollector",
    "FeedSource",
    "ListingSource",
    "RenderedDomSource",
    "SearchApiSource",
    "StructuralHtmlSource",
    "extract_feed",
    "extract_rendered",
    "extract_search",
    "extract_structural",
    "make_listing_source",
]
