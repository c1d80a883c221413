"""Link canonicalization used for URL-equality duplicate checks.

Rules:
- Keep ``scheme://host/path`` only; query string and fragment are dropped, so
  tracking parameters such as ``utm_source`` never distinguish two links.
- Lower-case scheme and host, drop default ports (80/443); an empty path becomes ``/``.
- Inputs that do not parse as an absolute URL (no scheme or no host, or a
  parser error) are returned unchanged. Canonicalization never raises.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Optional
from urllib.parse import urlsplit, urlunsplit

_DEFAULT_PORTS = {("http", 80), ("https", 443)}


def _canonicalize_link_impl(url: str) -> str:
    if not url:
        return url if isinstance(url, str) else ""

    try:
        parsed = urlsplit(url.strip())
        host = parsed.hostname
        port = parsed.port
    except ValueError:
        return url

    if not parsed.scheme or not parsed.netloc or not host:
        return url

    netloc = host.lower()
    if ":" in netloc:
        # IPv6 literal
        netloc = f"[{netloc}]"
    scheme = parsed.scheme.lower()
    if port is not None and (scheme, port) not in _DEFAULT_PORTS:
        netloc = f"{netloc}:{port}"

    path = parsed.path or "/"
    return urlunsplit((scheme, netloc, path, "", ""))


_CACHE_SIZE = -1
_canonicalize: Callable[[str], str] = _canonicalize_link_impl


def canonicalize_link(url: str) -> str:
    """Return ``scheme://host/path`` for ``url``, or ``url`` itself if it is not absolute."""

    return _canonicalize(url)


def configure_canonicalization_cache(size: int) -> None:
    """Configure the LRU cache used by :func:`canonicalize_link` (0 disables it)."""

    global _canonicalize, _CACHE_SIZE
    if size == _CACHE_SIZE:
        return
    if size <= 0:
        _canonicalize = _canonicalize_link_impl
    else:
        _canonicalize = lru_cache(maxsize=size)(_canonicalize_link_impl)
    _CACHE_SIZE = size


def clear_canonicalization_cache() -> None:
    """Clear the active canonicalization cache if enabled."""

    if hasattr(_canonicalize, "cache_clear"):
        _canonicalize.cache_clear()


def canonicalization_cache_info() -> Optional[Any]:
    """``functools`` cache statistics, or ``None`` when caching is disabled."""

    cache_info = getattr(_canonicalize, "cache_info", None)
    return cache_info() if cache_info else None


configure_canonicalization_cache(2048)


__all__ = [
    "canonicalization_cache_info",
    "canonicalize_link",
    "configure_canonicalization_cache",
    "clear_canonicalization_cache",
]
