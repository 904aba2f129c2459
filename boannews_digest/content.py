"""Utilities for extracting article bodies from boannews article pages."""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from bs4 import BeautifulSoup

from .models import MIN_BODY_LENGTH, NO_BODY, Candidate, ExtractedArticle
from .transport import HttpFetcher, decode, parse_document, text_of

LOGGER = logging.getLogger(__name__)

PRIMARY_SELECTOR = "#news_content"
ARTICLE_BODY_SELECTOR = 'div[itemprop="articleBody"]'

CHUNK_SPLIT_RE = re.compile(r"(?<=[.!?。])\s+|\n+")
MIN_CHUNK_LENGTH = 20
MAX_HEURISTIC_CHUNKS = 15
NOISE_RE = re.compile(
    r"로그인|회원가입|검색|구독신청|\b(?:log ?in|sign ?up|sign ?in|search|subscribe)\b",
    re.IGNORECASE,
)
STRIP_TAGS = ["script", "style", "noscript", "nav", "header", "footer", "form", "iframe"]


@dataclass(frozen=True)
class ExtractionStrategy:
    name: str
    func: Callable[[BeautifulSoup], Optional[str]]


def select_text(selector: str) -> Callable[[BeautifulSoup], Optional[str]]:
    """Build a strategy that returns the trimmed text of the first ``selector`` match."""

    def _strategy(soup: BeautifulSoup) -> Optional[str]:
        node = soup.select_one(selector)
        return text_of(node) if node is not None else None

    return _strategy


def heuristic_text(soup: BeautifulSoup) -> Optional[str]:
    """Scan the whole page for sentence-like chunks, skipping navigation noise."""

    page = copy.copy(soup)
    for tag in page.find_all(STRIP_TAGS):
        tag.decompose()
    chunks: List[str] = []
    for raw in CHUNK_SPLIT_RE.split(page.get_text("\n")):
        chunk = " ".join(raw.split())
        if len(chunk) < MIN_CHUNK_LENGTH:
            continue
        if NOISE_RE.search(chunk):
            continue
        chunks.append(chunk)
        if len(chunks) >= MAX_HEURISTIC_CHUNKS:
            break
    return " ".join(chunks) or None


def default_strategies(selectors: Iterable[str] = ()) -> List[ExtractionStrategy]:
    strategies = [
        ExtractionStrategy("primary", select_text(PRIMARY_SELECTOR)),
        ExtractionStrategy("article_body", select_text(ARTICLE_BODY_SELECTOR)),
    ]
    strategies.extend(ExtractionStrategy(f"selector:{css}", select_text(css)) for css in selectors)
    strategies.append(ExtractionStrategy("heuristic", heuristic_text))
    return strategies


class ContentExtractor:
    """Run extraction strategies in order until one yields a long enough body."""

    def __init__(
        self,
        selectors: Iterable[str] = (),
        min_length: int = MIN_BODY_LENGTH,
        strategies: Optional[List[ExtractionStrategy]] = None,
    ) -> None:
        self.min_length = min_length
        self.strategies = strategies if strategies is not None else default_strategies(selectors)

    def extract(self, soup: BeautifulSoup) -> str:
        """Return the article body, or ``NO_BODY`` when every strategy falls short."""

        for strategy in self.strategies:
            try:
                text = strategy.func(soup)
            except Exception as exc:  # pragma: no cover - guard clause
                LOGGER.debug("Strategy %s raised %s", strategy.name, exc)
                continue
            if text and len(text) > self.min_length:
                LOGGER.debug("Body extracted with %s strategy (%d chars)", strategy.name, len(text))
                return text
        return NO_BODY

    def extract_article(self, candidate: Candidate, fetcher: HttpFetcher, encoding: str) -> ExtractedArticle:
        """Fetch, decode and parse the candidate's page and extract its body.

        Transport failures propagate to the caller.
        """

        soup = parse_document(decode(fetcher.fetch(candidate.url), encoding))
        return ExtractedArticle(
            title=candidate.title,
            url=candidate.url,
            body=self.extract(soup),
            min_length=self.min_length,
        )


__all__ = ["ContentExtractor", "ExtractionStrategy", "default_strategies", "heuristic_text", "select_text"]
