"""
Source URL checks.

Research and verification cite web sources. Before the dashboard shows a
citation it can ask which URLs still resolve: each URL gets a HEAD request,
falling back to GET when HEAD is refused, under a per-request timeout.
A batch is checked concurrently and one failed check never fails the rest.
"""

import asyncio
import logging
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, Field

from outreach.pipeline.types import Source

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
USER_AGENT = "Mozilla/5.0 (compatible; OutreachBot/1.0)"
UNSUPPORTED_ERROR = "URL pattern not supported for validation"

UNSUPPORTED_SCHEMES = frozenset({"javascript", "mailto", "tel", "ftp"})
# Hosts that block automated requests
SKIPPED_HOSTS = ("facebook.com", "instagram.com", "twitter.com", "x.com")


class ValidatedSource(BaseModel):
    """Outcome of checking one source URL."""
    url: str
    title: str = ""
    is_valid: bool = False
    status_code: Optional[int] = None
    redirect_url: Optional[str] = Field(default=None, description="Final URL when the source redirected")
    error: Optional[str] = None


def rejection_reason(url: str) -> Optional[str]:
    """Return why ``url`` is not fetched at all, or None when it can be checked."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return "Invalid URL"
    scheme = parsed.scheme.lower()
    if scheme in UNSUPPORTED_SCHEMES:
        return UNSUPPORTED_ERROR
    if scheme not in ("http", "https") or not parsed.hostname:
        return "Invalid URL"
    host = parsed.hostname.lower()
    if any(host == skipped or host.endswith("." + skipped) for skipped in SKIPPED_HOSTS):
        return UNSUPPORTED_ERROR
    return None


class SourceValidator:
    """Checks that cited source URLs resolve."""

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            timeout_seconds: Deadline for each HEAD or GET request
            transport: Custom httpx transport (tests pass httpx.MockTransport)
        """
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        )

    async def validate_url(
        self,
        url: str,
        title: str = "",
        client: Optional[httpx.AsyncClient] = None,
    ) -> ValidatedSource:
        """Check one URL. Failures are reported on the result, never raised."""
        result = ValidatedSource(url=url, title=title)
        reason = rejection_reason(url)
        if reason:
            result.error = reason
            return result

        if client is None:
            async with self._client() as own_client:
                return await self._fetch(result, own_client)
        return await self._fetch(result, client)

    async def _fetch(self, result: ValidatedSource, client: httpx.AsyncClient) -> ValidatedSource:
        url = result.url.strip()
        try:
            response = await client.head(url)
            if not response.is_success:
                response = await client.get(url)
        except httpx.TimeoutException:
            result.error = f"timed out after {self.timeout_seconds}s"
            return result
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            result.error = str(e) or type(e).__name__
            return result

        result.is_valid = response.is_success
        result.status_code = response.status_code
        if response.url != httpx.URL(url):
            result.redirect_url = str(response.url)
        return result

    async def validate_sources(self, sources: Sequence[Source]) -> List[ValidatedSource]:
        """Check all sources concurrently, keeping input order."""
        async with self._client() as client:
            outcomes = await asyncio.gather(
                *(self.validate_url(source.url, source.title, client) for source in sources),
                return_exceptions=True,
            )

        results = []
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Source check failed for {source.url}: {outcome}")
                outcome = ValidatedSource(url=source.url, title=source.title, error="Validation failed")
            results.append(outcome)

        valid = sum(1 for r in results if r.is_valid)
        logger.info(f"Checked {len(results)} source URLs: {valid} valid")
        return results

    async def validate_urls(self, urls: Sequence[str]) -> List[ValidatedSource]:
        return await self.validate_sources([Source(url=url) for url in urls])

