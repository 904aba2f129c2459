"""High-level orchestration for the boannews security digest."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import Config, load_config
from .content import ContentExtractor
from .errors import PersistenceError, TransportError
from .fetchers import ListingSource, make_listing_source
from .llm import CompletionClient
from .models import Candidate, PersistedRecord, Report
from .relevance import RelevanceFilter
from .storage import NotionStore
from .summarizer import ReportGenerator
from .transport import HttpFetcher

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateOutcome:
    """Terminal state reached by one candidate."""

    candidate: Candidate
    stage: str
    status: str
    detail: str = ""

    @property
    def persisted(self) -> bool:
        return self.stage == "persisted" and self.status == "ok"


@dataclass
class PipelineResult:
    candidates: List[Candidate] = field(default_factory=list)
    outcomes: List[CandidateOutcome] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    @property
    def persisted(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.persisted)


class DigestPipeline:
    """Process listed candidates one at a time, isolating per-item failures."""

    def __init__(
        self,
        config: Config,
        source: ListingSource,
        fetcher: HttpFetcher,
        extractor: ContentExtractor,
        reporter: ReportGenerator,
        store: NotionStore,
        relevance: Optional[RelevanceFilter] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.source = source
        self.fetcher = fetcher
        self.extractor = extractor
        self.reporter = reporter
        self.store = store
        self.relevance = relevance
        self.sleep = sleep

    def run(self) -> PipelineResult:
        """Run one pass. Only a listing failure propagates to the caller."""

        LOGGER.info("Starting digest run with %s listing source", self.source.name)
        candidates = self.source.list_candidates(self.config, self.fetcher)
        result = PipelineResult(candidates=list(candidates))
        if not candidates:
            LOGGER.warning("No candidates listed, nothing to do")
            LOGGER.info("Digest run finished: %d processed, %d persisted", result.processed, result.persisted)
            return result

        for index, candidate in enumerate(candidates):
            if index and self.config.item_delay:
                self.sleep(self.config.item_delay)
            LOGGER.info("[%d/%d] Processing %s (%s)", index + 1, len(candidates), candidate.title, candidate.url)
            try:
                outcome = self.process(candidate)
            except Exception as exc:
                LOGGER.exception("Candidate %s failed unexpectedly: %s", candidate.url, exc)
                outcome = CandidateOutcome(candidate, "unexpected", "failed", str(exc))
            result.outcomes.append(outcome)

        LOGGER.info("Digest run finished: %d processed, %d persisted", result.processed, result.persisted)
        return result

    def process(self, candidate: Candidate) -> CandidateOutcome:
        if self.relevance is not None and not self.relevance.is_relevant(candidate.title):
            LOGGER.info("Not a security article, skipping: %s", candidate.title)
            return CandidateOutcome(candidate, "filtered", "dropped")

        try:
            article = self.extractor.extract_article(candidate, self.fetcher, self.config.site_encoding)
        except TransportError as exc:
            LOGGER.warning("Fetch failed for %s: %s", candidate.url, exc.reason)
            return CandidateOutcome(candidate, "fetched", "failed", exc.reason)

        if not article.usable:
            LOGGER.info("No usable body, skipping: %s", candidate.url)
            return CandidateOutcome(candidate, "extracted", "empty")

        report = Report(
            title=article.title,
            url=article.url,
            summary_text=self.reporter.summarize(article.title, article.body),
        )
        if report.failed:
            LOGGER.warning("Report generation failed, recording placeholder for %s", candidate.url)

        try:
            self.store.create(PersistedRecord.from_report(report))
        except PersistenceError as exc:
            LOGGER.error("Persistence failed for %s: %s", candidate.title, exc)
            return CandidateOutcome(candidate, "persisted", "failed", str(exc))

        LOGGER.info("Saved report: %s", candidate.title)
        return CandidateOutcome(candidate, "persisted", "ok", "summary failed" if report.failed else "")


def build_pipeline(config: Config) -> DigestPipeline:
    """Wire the production components from ``config``."""

    fetcher = HttpFetcher(config.user_agent, timeout=config.request_timeout)
    client = CompletionClient(
        config.openai_api_key,
        config.openai_model,
        max_output_tokens=config.max_output_tokens,
    )
    return DigestPipeline(
        config=config,
        source=make_listing_source(config),
        fetcher=fetcher,
        extractor=ContentExtractor(selectors=config.content_selectors),
        reporter=ReportGenerator(client),
        store=NotionStore(config.notion_api_key, config.notion_database_id, timeout=config.request_timeout),
        relevance=RelevanceFilter(client) if config.relevance_filter else None,
    )


def run(config: Config | None = None) -> PipelineResult:
    config = config or load_config()
    return build_pipeline(config).run()


__all__ = [
    "CandidateOutcome",
    "DigestPipeline",
    "PipelineResult",
    "build_pipeline",
    "run",
]
