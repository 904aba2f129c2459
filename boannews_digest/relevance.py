"""Title-based relevance filter backed by a yes/no model question."""

from __future__ import annotations

import logging
import re

from .errors import CompletionError
from .llm import CompletionClient

LOGGER = logging.getLogger(__name__)

PROMPT = "다음 기사 제목이 보안 관련 기사인지 '예' 또는 '아니오'로만 답해줘.\n\n기사 제목: {title}"

YES_TOKENS = ("예", "yes")
NO_RE = re.compile(r"아니오|아니요|아니예|아닙니다|아님|\bno\b", re.IGNORECASE)
TOKEN_SPLIT_RE = re.compile(r"[\s,.!?\"']+")


def parse_answer(answer: str) -> bool:
    """Return True only when the reply opens with a bare affirmative token."""

    cleaned = (answer or "").strip().strip(".!?,\"' ")
    if not cleaned or NO_RE.search(cleaned):
        return False
    first = TOKEN_SPLIT_RE.split(cleaned, maxsplit=1)[0].lower()
    return first in YES_TOKENS


class RelevanceFilter:
    """Keep security-related titles; any failure excludes the title."""

    def __init__(self, client: CompletionClient, max_output_tokens: int = 5) -> None:
        self.client = client
        self.max_output_tokens = max_output_tokens

    def is_relevant(self, title: str) -> bool:
        try:
            answer = self.client.complete(PROMPT.format(title=title), max_output_tokens=self.max_output_tokens)
        except CompletionError as exc:
            LOGGER.warning("Relevance check failed for %r, excluding: %s", title, exc)
            return False
        except Exception as exc:
            LOGGER.exception("Unexpected relevance check failure for %r: %s", title, exc)
            return False
        verdict = parse_answer(answer)
        LOGGER.info("Relevance for %r -> %r (%s)", title, answer, "keep" if verdict else "drop")
        return verdict


__all__ = ["RelevanceFilter", "parse_answer"]
