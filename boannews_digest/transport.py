"""HTTP fetching, byte decoding and HTML parsing helpers."""

from __future__ import annotations

import codecs
import logging
from typing import Any, Dict, Mapping, Optional

import requests
from bs4 import BeautifulSoup

from .errors import TransportError

LOGGER = logging.getLogger(__name__)

# Labels the site and its proxies are known to send, mapped to Python codecs.
# EUC-KR pages routinely contain CP949 extension syllables, so both resolve
# to the superset codec.
ENCODINGS: Dict[str, str] = {
    "euc-kr": "cp949",
    "euc_kr": "cp949",
    "ks_c_5601-1987": "cp949",
    "ksc5601": "cp949",
    "cp949": "cp949",
    "ms949": "cp949",
    "utf-8": "utf-8",
    "utf8": "utf-8",
    "latin-1": "latin-1",
    "iso-8859-1": "latin-1",
}


class HttpFetcher:
    """Perform plain GET/POST requests with a browser-like identity."""

    def __init__(
        self,
        user_agent: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "User-Agent": user_agent,
            "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        }

    def fetch(self, url: str, params: Optional[Mapping[str, Any]] = None) -> bytes:
        """Return the raw response body of ``url``."""

        try:
            response = self.session.get(url, params=params, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(url, str(exc)) from exc
        LOGGER.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.content

    def post_json(self, url: str, payload: Mapping[str, Any], headers: Optional[Mapping[str, str]] = None) -> Any:
        """POST ``payload`` as JSON and return the decoded JSON response."""

        merged = dict(self.headers)
        if headers:
            merged.update(headers)
        try:
            response = self.session.post(url, json=dict(payload), headers=merged, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise TransportError(url, str(exc)) from exc
        except ValueError as exc:
            raise TransportError(url, f"invalid JSON response: {exc}") from exc


def resolve_encoding(encoding: str) -> str:
    """Map a declared charset label to the codec used for decoding."""

    label = (encoding or "").strip().lower()
    if label in ENCODINGS:
        return ENCODINGS[label]
    try:
        return codecs.lookup(label).name
    except LookupError as exc:
        raise ValueError(f"Unsupported encoding label: {encoding!r}") from exc


def decode(data: bytes, encoding: str) -> str:
    """Decode ``data`` with an explicitly stated ``encoding``.

    Undecodable byte sequences are replaced rather than raised; the result may
    be garbled but is always present.
    """

    return data.decode(resolve_encoding(encoding), errors="replace")


def parse_document(text: Optional[str]) -> BeautifulSoup:
    """Parse markup into a queryable tree; malformed or empty input never raises."""

    return BeautifulSoup(text or "", "html.parser")


def text_of(node: Any) -> str:
    """Return trimmed text of a parsed node, or an empty string for a missing one."""

    if node is None:
        return ""
    return node.get_text(" ", strip=True)


__all__ = ["ENCODINGS", "HttpFetcher", "decode", "parse_document", "resolve_encoding", "text_of"]
