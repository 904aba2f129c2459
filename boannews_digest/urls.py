"""URL normalization used as candidate identity."""

from __future__ import annotations

from urllib.parse import urljoin, urlparse, urlunparse


def _remove_dot_segments(path: str) -> str:
    output = []
    for segment in path.split("/"):
        if segment == "..":
            if len(output) > 1:
                output.pop()
        elif segment != ".":
            output.append(segment)
    normalized = "/".join(output)
    if path.endswith(("/.", "/..")):
        normalized += "/"
    if not normalized.startswith("/"):
        normalized = "/" + normalized
    return normalized


def normalize_url(href: str, base_url: str) -> str:
    """Resolve ``href`` against ``base_url`` and collapse ``.``/``..`` segments.

    - Lowercase scheme + hostname
    - Remove fragments
    - Keep the query string untouched (article ids live there)

    Returns an empty string when ``href`` is blank or not an http(s) URL.
    """
    href = (href or "").strip()
    if not href:
        return ""
    absolute = urljoin(base_url, href)
    parsed = urlparse(absolute)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return ""
    path = _remove_dot_segments(parsed.path or "/")
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


__all__ = ["normalize_url"]
