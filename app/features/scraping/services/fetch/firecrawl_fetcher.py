import logging
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.features.scraping.exceptions import NetworkError, ScrapeTimeoutError, UpstreamError
from app.features.scraping.schemas.document import FetchedPage
from app.features.scraping.services.fetch.base import PageFetcher, ensure_fetchable_url
from app.platform.config import settings

logger = logging.getLogger(__name__)


class FirecrawlMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: Optional[str] = None
    source_url: Optional[str] = Field(default=None, alias="sourceURL")


class FirecrawlPage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    html: Optional[str] = None
    raw_html: Optional[str] = Field(default=None, alias="rawHtml")
    screenshot: Optional[str] = None
    metadata: FirecrawlMetadata = Field(default_factory=FirecrawlMetadata)


class FirecrawlScrapeResponse(BaseModel):
    """Envelope returned by ``POST /scrape``."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: Optional[FirecrawlPage] = None
    error: Optional[str] = None


class FirecrawlPageFetcher(PageFetcher):
    """Fetches pages through the Firecrawl managed scraping API."""

    name = "firecrawl"

    def __init__(
        self,
        api_key: Optional[str] = settings.FIRECRAWL_API_KEY,
        api_url: str = settings.FIRECRAWL_API_URL,
        timeout: float = settings.PAGE_LOAD_TIMEOUT,
        settle_seconds: float = settings.PAGE_SETTLE_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("FETCH_BACKEND=firecrawl requires FIRECRAWL_API_KEY to be set")
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.settle_seconds = settle_seconds
        self.transport = transport

    async def fetch(self, url: str) -> FetchedPage:
        url = ensure_fetchable_url(url)
        body = {
            "url": url,
            "formats": ["rawHtml", "screenshot@fullPage"],
            "waitFor": int(self.settle_seconds * 1000),
            "timeout": int(self.timeout * 1000),
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        # Leave the backend its own timeout budget plus a little slack for the round trip
        client_timeout = httpx.Timeout(self.timeout + 5)
        try:
            async with httpx.AsyncClient(timeout=client_timeout, transport=self.transport) as client:
                response = await client.post(f"{self.api_url}/scrape", json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise ScrapeTimeoutError(f"Scraping service timed out for URL: {url}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Could not reach scraping service: {e}") from e

        if response.status_code == 408:
            raise ScrapeTimeoutError(f"Scraping service timed out for URL: {url}")
        if response.status_code >= 400:
            raise UpstreamError(
                f"Scraping service returned status {response.status_code}: {response.text[:200]}"
            )

        return self._normalize(url, response)

    @staticmethod
    def _normalize(url: str, response: httpx.Response) -> FetchedPage:
        try:
            payload = FirecrawlScrapeResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Malformed scraping service payload for {url}: {e}")
            raise UpstreamError("Scraping service returned a malformed payload") from e

        if not payload.success or payload.data is None:
            raise UpstreamError(payload.error or "Scraping service reported a failure")

        page = payload.data
        raw_html = page.raw_html or page.html
        if not raw_html:
            raise UpstreamError("Scraping service returned no HTML")

        screenshot = page.screenshot or None
        if screenshot and not screenshot.startswith(("data:", "http://", "https://")):
            screenshot = f"data:image/png;base64,{screenshot}"

        return FetchedPage(
            url=page.metadata.source_url or url,
            title=page.metadata.title,
            raw_html=raw_html,
            screenshot=screenshot,
        )
