"""Configuration utilities for the boannews security digest."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

from dateutil import parser as date_parser
from dotenv import load_dotenv

LISTING_STRATEGIES = ("html", "feed", "rendered", "search")

DEFAULT_BASE_URL = "https://www.boannews.com"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/121.0.0.0 Safari/537.36"
)
DEFAULT_CONTENT_SELECTORS = (
    "div#news_content_area",
    "div.news_view",
    "div#articleBody",
    "article",
    "div#content",
)


@dataclass(frozen=True)
class Config:
    """Runtime configuration values for a digest run."""

    openai_api_key: Optional[str] = None
    notion_api_key: Optional[str] = None
    notion_database_id: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"
    max_output_tokens: int = 1000
    base_url: str = DEFAULT_BASE_URL
    site_encoding: str = "euc-kr"
    user_agent: str = DEFAULT_USER_AGENT
    listing_strategy: str = "html"
    listing_date: date = field(default_factory=date.today)
    max_candidates: int = 5
    item_delay: float = 1.0
    request_timeout: float = 10.0
    relevance_filter: bool = True
    content_selectors: Tuple[str, ...] = DEFAULT_CONTENT_SELECTORS
    render_proxy_url: Optional[str] = None
    render_proxy_key: Optional[str] = None
    rendered_encoding: str = "utf-8"
    search_api_url: Optional[str] = None
    search_api_key: Optional[str] = None
    search_query: str = "site:boannews.com 보안"

    def __post_init__(self) -> None:
        if self.listing_strategy not in LISTING_STRATEGIES:
            raise ValueError(
                f"Unknown listing strategy {self.listing_strategy!r}; "
                f"expected one of {', '.join(LISTING_STRATEGIES)}"
            )
        if self.max_candidates < 1:
            raise ValueError("max_candidates must be at least 1")
        if self.item_delay < 0:
            raise ValueError("item_delay cannot be negative")

    @property
    def listing_url(self) -> str:
        """Return the listing page URL restricted to ``listing_date``."""
        day = self.listing_date
        query = (
            f"kind=2&s_y={day.year}&s_m={day.month:02d}&s_d={day.day:02d}"
            f"&e_y={day.year}&e_m={day.month:02d}&e_d={day.day:02d}"
        )
        return f"{self.base_url}/media/t_list.asp?{query}"

    @property
    def feed_url(self) -> str:
        return f"{self.base_url}/media/news_rss.xml?mkind=1"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_date(name: str) -> Optional[date]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return date_parser.parse(raw).date()
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"{name} is not a valid date: {raw!r}") from exc


def load_config() -> Config:
    """Load configuration from environment variables and defaults."""

    load_dotenv()

    overrides = {}
    listing_date = _env_date("BOANNEWS_LISTING_DATE")
    if listing_date:
        overrides["listing_date"] = listing_date
    selectors = os.getenv("BOANNEWS_CONTENT_SELECTORS")
    if selectors:
        overrides["content_selectors"] = tuple(s.strip() for s in selectors.split(",") if s.strip())

    return Config(
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        notion_api_key=os.getenv("NOTION_API_KEY"),
        notion_database_id=os.getenv("NOTION_DATABASE_ID"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo"),
        max_output_tokens=int(os.getenv("OPENAI_MAX_OUTPUT_TOKENS", "1000")),
        base_url=os.getenv("BOANNEWS_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        listing_strategy=os.getenv("BOANNEWS_LISTING_STRATEGY", "html").strip().lower(),
        max_candidates=int(os.getenv("BOANNEWS_MAX_CANDIDATES", "5")),
        item_delay=float(os.getenv("BOANNEWS_ITEM_DELAY", "1.0")),
        request_timeout=float(os.getenv("BOANNEWS_REQUEST_TIMEOUT", "10")),
        relevance_filter=_env_flag("BOANNEWS_RELEVANCE_FILTER", True),
        render_proxy_url=os.getenv("RENDER_PROXY_URL"),
        render_proxy_key=os.getenv("RENDER_PROXY_KEY"),
        search_api_url=os.getenv("SEARCH_API_URL"),
        search_api_key=os.getenv("SEARCH_API_KEY"),
        search_query=os.getenv("SEARCH_QUERY", "site:boannews.com 보안"),
        **overrides,
    )
