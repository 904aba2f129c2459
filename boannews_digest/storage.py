"""Notion database persistence for finished reports."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import PersistenceError
from .models import PersistedRecord

LOGGER = logging.getLogger(__name__)

NOTION_PAGES_URL = "https://api.notion.com/v1/pages"
NOTION_VERSION = "2022-06-28"
RICH_TEXT_LIMIT = 2000


def _rich_text(content: str) -> List[Dict[str, Any]]:
    # Notion rejects text objects longer than RICH_TEXT_LIMIT characters.
    chunks = [content[i : i + RICH_TEXT_LIMIT] for i in range(0, len(content), RICH_TEXT_LIMIT)] or [""]
    return [{"type": "text", "text": {"content": chunk}} for chunk in chunks]


def build_page(database_id: str, record: PersistedRecord) -> Dict[str, Any]:
    """Return the create-page payload for ``record``."""

    return {
        "parent": {"database_id": database_id},
        "properties": {
            "제목": {"title": _rich_text(record.title)},
            "날짜": {"date": {"start": record.created_iso()}},
            "URL": {"url": record.url},
            "내용": {"rich_text": _rich_text(record.summary_text)},
        },
    }


class NotionStore:
    """Create-only writer into a fixed Notion database."""

    def __init__(
        self,
        api_key: Optional[str],
        database_id: Optional[str],
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.database_id = database_id
        self.timeout = timeout
        self.session = session or requests.Session()

    def create(self, record: PersistedRecord) -> str:
        """Create one page and return its id."""

        if not self.api_key or not self.database_id:
            raise PersistenceError("NOTION_API_KEY and NOTION_DATABASE_ID must be configured")
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Notion-Version": NOTION_VERSION,
            "Content-Type": "application/json",
        }
        try:
            response = self.session.post(
                NOTION_PAGES_URL,
                json=build_page(self.database_id, record),
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise PersistenceError(f"Notion rejected {record.url}: {exc}") from exc
        page_id = ""
        try:
            page_id = response.json().get("id", "")
        except ValueError:
            LOGGER.debug("Notion response for %s had no JSON body", record.url)
        LOGGER.debug("Created Notion page %s for %s", page_id, record.url)
        return page_id


__all__ = ["NotionStore", "build_page"]
