"""HTTP GET helper used for devfile URLs, registry lookups and starter archives."""

from __future__ import annotations

from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from .context import RunContext
from .errors import FetchFailed
from .logging import get_logger

_CHUNK_SIZE = 64 * 1024
_USER_AGENT = "compinit"

logger = get_logger("net")

Fetcher = Callable[..., bytes]


def is_url(location: str) -> bool:
    """Return True for ``http``/``https`` locations."""
    return urlparse(location).scheme in {"http", "https"}


def fetch(
    url: str,
    *,
    timeout: Optional[float] = 60.0,
    ctx: RunContext | None = None,
) -> bytes:
    """GET ``url`` and return the body; redirects are followed by urllib.

    Failures raise ``FetchFailed`` and are never retried. Cancellation is
    checked between chunks.
    """
    if ctx is not None:
        ctx.raise_if_cancelled()
    request = Request(url, headers={"User-Agent": _USER_AGENT}, method="GET")
    logger.debug("GET %s", url)
    chunks = []
    try:
        with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
            while True:
                if ctx is not None:
                    ctx.raise_if_cancelled()
                chunk = response.read(_CHUNK_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
    except HTTPError as exc:
        raise FetchFailed(f"failed to retrieve {url}: HTTP {exc.code} {exc.reason}") from exc
    except URLError as exc:
        raise FetchFailed(f"failed to retrieve {url}: {exc.reason}") from exc
    except (OSError, ValueError) as exc:
        raise FetchFailed(f"failed to retrieve {url}: {exc}") from exc
    body = b"".join(chunks)
    logger.debug("Fetched %d bytes from %s", len(body), url)
    return body


class HttpFetcher:
    """Binds the configured request timeout to :func:`fetch`."""

    def __init__(self, *, timeout: Optional[float] = 60.0) -> None:
        self.timeout = timeout

    def __call__(self, url: str, *, ctx: RunContext | None = None) -> bytes:
        return fetch(url, timeout=self.timeout, ctx=ctx)


__all__ = ["Fetcher", "HttpFetcher", "fetch", "is_url"]
