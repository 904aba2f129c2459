"""Report generation for extracted security articles."""

from __future__ import annotations

import logging

from .errors import CompletionError
from .llm import CompletionClient
from .models import SUMMARY_FAILED

LOGGER = logging.getLogger(__name__)

INCIDENT_KEYWORDS = (
    "사고",
    "침해",
    "공격",
    "유출",
    "해킹",
    "랜섬웨어",
    "incident",
    "breach",
    "attack",
    "leak",
)

INCIDENT_PROMPT = """다음 기사 내용을 바탕으로 '보안 사고 보고서'를 작성해줘. 보고서는 아래 세 항목을 포함해야 하고, 각 항목은 제목과 함께 간결한 문장으로 정리해줘.

- 상황: 어떤 사고나 공격이 발생했는지, 피해 대상과 규모는 어떠한지.
- 원인: 공격 수법이나 취약점 등 사고가 일어난 원인.
- 대응 방안: 정부와 기업의 대응, 사용자가 주의해야 할 점.

기사 제목: {title}

기사 내용:
{body}"""

GENERAL_PROMPT = """다음 보안 기사를 3~4문장으로 간결하게 요약해줘. 기사에 없는 내용은 추가하지 마.

기사 제목: {title}

기사 내용:
{body}"""


def is_incident(title: str, body: str) -> bool:
    text = f"{title} {body}".lower()
    return any(keyword in text for keyword in INCIDENT_KEYWORDS)


def build_prompt(title: str, body: str) -> str:
    """Pick the incident-style or general prompt for the article."""

    template = INCIDENT_PROMPT if is_incident(title, body) else GENERAL_PROMPT
    return template.format(title=title, body=body)


class ReportGenerator:
    """Summarize an article body into a report, never returning empty text."""

    def __init__(self, client: CompletionClient, max_body_chars: int = 6000) -> None:
        self.client = client
        self.max_body_chars = max_body_chars

    def summarize(self, title: str, body: str) -> str:
        if not body or not body.strip():
            LOGGER.warning("No body to summarize for %r", title)
            return SUMMARY_FAILED
        prompt = build_prompt(title, body[: self.max_body_chars])
        try:
            report = self.client.complete(prompt)
        except CompletionError as exc:
            LOGGER.error("Report generation failed for %r: %s", title, exc)
            return SUMMARY_FAILED
        if not report:
            LOGGER.error("Model returned an empty report for %r", title)
            return SUMMARY_FAILED
        return report


__all__ = ["INCIDENT_KEYWORDS", "ReportGenerator", "build_prompt", "is_incident"]
