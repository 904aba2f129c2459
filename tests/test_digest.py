from __future__ import annotations

import logging
from datetime import date

import pytest

from boannews_digest.config import Config
from boannews_digest.content import ContentExtractor
from boannews_digest.digest import DigestPipeline
from boannews_digest.errors import PersistenceError, TransportError
from boannews_digest.fetchers import ListingSource, StructuralHtmlSource
from boannews_digest.models import SUMMARY_FAILED, Candidate
from boannews_digest.relevance import RelevanceFilter
from boannews_digest.summarizer import ReportGenerator

CONFIG = Config(listing_date=date(2026, 10, 19), item_delay=0.5)

BODY = (
    "국내 제조기업을 노린 랜섬웨어 공격이 올해 들어 크게 늘어난 것으로 나타났다. "
    "공격자들은 패치되지 않은 VPN 장비의 취약점을 이용해 내부망에 침투했다. "
    "보안 업계는 백업 체계 점검과 다중 인증 적용을 서둘러야 한다고 강조했다."
)


def _article(body: str) -> bytes:
    return f"<html><body><div id='news_content'>{body}</div></body></html>".encode("euc-kr")


def _url(idx: int) -> str:
    return f"https://www.boannews.com/media/view.asp?idx={idx}"


class _StaticSource(ListingSource):
    name = "static"

    def __init__(self, candidates: list[Candidate]) -> None:
        self.candidates = candidates

    def list_candidates(self, config, fetcher):
        return list(self.candidates)


class _FailingSource(ListingSource):
    name = "failing"

    def list_candidates(self, config, fetcher):
        raise TransportError(config.listing_url, "connection refused")


class _Fetcher:
    def __init__(self, pages: dict[str, bytes]) -> None:
        self.pages = pages
        self.fetched: list[str] = []

    def fetch(self, url, params=None):
        self.fetched.append(url)
        if url not in self.pages:
            raise TransportError(url, "503 Service Unavailable")
        return self.pages[url]


class _Client:
    def __init__(self, answer: str = "요약 보고서", relevant: str = "예") -> None:
        self.answer = answer
        self.relevant = relevant

    def complete(self, prompt: str, max_output_tokens: int | None = None) -> str:
        if prompt.startswith("다음 기사 제목이"):
            return self.relevant
        return self.answer


class _Store:
    def __init__(self, fail_urls: tuple[str, ...] = ()) -> None:
        self.records = []
        self.fail_urls = fail_urls

    def create(self, record):
        if record.url in self.fail_urls:
            raise PersistenceError("validation_error")
        self.records.append(record)
        return f"page-{len(self.records)}"


def _pipeline(source, fetcher, store, client=None, relevance=True, sleeps=None):
    client = client or _Client()
    return DigestPipeline(
        config=CONFIG,
        source=source,
        fetcher=fetcher,
        extractor=ContentExtractor(),
        reporter=ReportGenerator(client),
        store=store,
        relevance=RelevanceFilter(client) if relevance else None,
        sleep=(sleeps.append if sleeps is not None else lambda _s: None),
    )


def test_one_failed_fetch_does_not_stop_the_run() -> None:
    candidates = [Candidate(f"보안 기사 {i}", _url(i)) for i in range(1, 6)]
    pages = {_url(i): _article(BODY) for i in (1, 2, 4, 5)}
    store = _Store()
    sleeps: list[float] = []

    result = _pipeline(_StaticSource(candidates), _Fetcher(pages), store, sleeps=sleeps).run()

    assert result.processed == 5
    assert result.persisted == 4
    assert [o.status for o in result.outcomes] == ["ok", "ok", "failed", "ok", "ok"]
    assert result.outcomes[2].stage == "fetched"
    assert [r.url for r in store.records] == [_url(i) for i in (1, 2, 4, 5)]
    assert sleeps == [0.5] * 4


def test_short_body_is_skipped_without_persisting() -> None:
    store = _Store()
    fetcher = _Fetcher({_url(1): _article("short notice.")})

    result = _pipeline(_StaticSource([Candidate("공지", _url(1))]), fetcher, store).run()

    assert result.outcomes[0].stage == "extracted"
    assert result.outcomes[0].status == "empty"
    assert store.records == []


def test_irrelevant_titles_are_dropped_before_fetching() -> None:
    fetcher = _Fetcher({_url(1): _article(BODY)})
    store = _Store()

    result = _pipeline(_StaticSource([Candidate("연예 소식", _url(1))]), fetcher, store, client=_Client(relevant="아니오")).run()

    assert result.outcomes[0].status == "dropped"
    assert fetcher.fetched == []
    assert store.records == []


def test_failed_summary_is_still_recorded() -> None:
    store = _Store()
    fetcher = _Fetcher({_url(1): _article(BODY)})

    result = _pipeline(_StaticSource([Candidate("랜섬웨어", _url(1))]), fetcher, store, client=_Client(answer="")).run()

    assert result.persisted == 1
    assert store.records[0].summary_text == SUMMARY_FAILED


def test_persistence_failure_is_isolated() -> None:
    candidates = [Candidate("A", _url(1)), Candidate("B", _url(2))]
    store = _Store(fail_urls=(_url(1),))
    fetcher = _Fetcher({_url(1): _article(BODY), _url(2): _article(BODY)})

    result = _pipeline(_StaticSource(candidates), fetcher, store, relevance=False).run()

    assert [o.status for o in result.outcomes] == ["failed", "ok"]
    assert result.persisted == 1


def test_empty_listing_is_not_an_error() -> None:
    store = _Store()
    result = _pipeline(_StaticSource([]), _Fetcher({}), store).run()
    assert result.processed == 0
    assert result.persisted == 0


def test_listing_failure_propagates() -> None:
    with pytest.raises(TransportError):
        _pipeline(_FailingSource(), _Fetcher({}), _Store()).run()


def test_featured_and_list_duplicates_are_processed_once() -> None:
    listing = (
        "<html><body>"
        "<div class='news_main'><div class='news_main_title'>"
        "<a href='../media/view.asp?idx=1'>랜섬웨어 공격 증가</a></div></div>"
        "<div class='news_list'><a href='/media/view.asp?idx=1'>"
        "<span class='news_txt'>랜섬웨어 공격 증가</span></a></div>"
        "</body></html>"
    ).encode("euc-kr")
    fetcher = _Fetcher({CONFIG.listing_url: listing, _url(1): _article(BODY)})
    store = _Store()

    result = _pipeline(StructuralHtmlSource(), fetcher, store).run()

    assert result.candidates == [Candidate("랜섬웨어 공격 증가", _url(1))]
    assert [r.title for r in store.records] == ["랜섬웨어 공격 증가"]


class _BrokenExtractor(ContentExtractor):
    def __init__(self, broken_url: str) -> None:
        super().__init__()
        self.broken_url = broken_url

    def extract_article(self, candidate, fetcher, encoding):
        if candidate.url == self.broken_url:
            raise RuntimeError("parser exploded")
        return super().extract_article(candidate, fetcher, encoding)


def test_unexpected_error_is_recorded_and_run_continues() -> None:
    candidates = [Candidate(f"보안 기사 {i}", _url(i)) for i in range(1, 4)]
    fetcher = _Fetcher({_url(i): _article(BODY) for i in range(1, 4)})
    store = _Store()
    pipeline = _pipeline(_StaticSource(candidates), fetcher, store, relevance=False)
    pipeline.extractor = _BrokenExtractor(_url(2))

    result = pipeline.run()

    assert [(o.stage, o.status) for o in result.outcomes] == [
        ("persisted", "ok"),
        ("unexpected", "failed"),
        ("persisted", "ok"),
    ]
    assert "parser exploded" in result.outcomes[1].detail
    assert [r.url for r in store.records] == [_url(1), _url(3)]


def test_empty_listing_still_logs_run_summary(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="boannews_digest.digest"):
        _pipeline(_StaticSource([]), _Fetcher({}), _Store()).run()
    assert caplog.records[-1].getMessage() == "Digest run finished: 0 processed, 0 persisted"
