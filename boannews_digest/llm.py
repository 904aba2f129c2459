"""Thin single-shot wrapper around the OpenAI chat completion API."""

from __future__ import annotations

import logging
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from .errors import CompletionError

LOGGER = logging.getLogger(__name__)


class CompletionClient:
    """Send one prompt, return the model's text answer."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        max_output_tokens: int = 1000,
        timeout: float = 60.0,
        client: Any = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> Any:
        # Created on first use so a missing key surfaces as a CompletionError.
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def complete(self, prompt: str, max_output_tokens: Optional[int] = None) -> str:
        """Return the stripped completion text, possibly empty.

        Raises :class:`CompletionError` when the service call fails.
        """
        try:
            completion = self._get_client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_output_tokens or self.max_output_tokens,
            )
        except OpenAIError as exc:
            raise CompletionError(str(exc)) from exc
        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise CompletionError(f"Malformed completion response: {exc}") from exc
        return (content or "").strip()


__all__ = ["CompletionClient"]
