"""Shared dataclasses and sentinel values for the digest pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

MIN_BODY_LENGTH = 100

NO_BODY = "❗본문 없음"
SUMMARY_FAILED = "보고서 생성 실패"


@dataclass(frozen=True)
class Candidate:
    """A discovered article awaiting processing. Identity is the normalized URL."""

    title: str
    url: str


@dataclass(frozen=True)
class ExtractedArticle:
    title: str
    url: str
    body: str
    min_length: int = MIN_BODY_LENGTH

    @property
    def body_length(self) -> int:
        return len(self.body)

    @property
    def usable(self) -> bool:
        """Return True when the body cleared the minimum length gate."""

        return self.body != NO_BODY and self.body_length > self.min_length


@dataclass(frozen=True)
class Report:
    title: str
    url: str
    summary_text: str

    @property
    def failed(self) -> bool:
        return self.summary_text == SUMMARY_FAILED


@dataclass(frozen=True)
class PersistedRecord:
    """The four fields written to the external store."""

    title: str
    url: str
    summary_text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_report(cls, report: Report) -> "PersistedRecord":
        return cls(title=report.title, url=report.url, summary_text=report.summary_text)

    def created_iso(self) -> str:
        return self.created_at.isoformat()
