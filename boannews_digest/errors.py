"""Exceptions raised across the digest pipeline.

Expected absences (no article body, a failed summary) are represented by the
sentinels in :mod:`boannews_digest.models`, not by exceptions.
"""

from __future__ import annotations


class DigestError(Exception):
    """Base class for pipeline errors."""


class TransportError(DigestError):
    """A network fetch failed or returned a non-success status."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class CompletionError(DigestError):
    """The language-model service failed to answer."""


class PersistenceError(DigestError):
    """The external store rejected a record."""


__all__ = ["CompletionError", "DigestError", "PersistenceError", "TransportError"]
