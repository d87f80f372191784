from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.scraping.services.analysis.content_analyzer import ContentAnalyzer, get_content_analyzer
from app.features.scraping.services.fetch.base import PageFetcher
from app.features.scraping.services.fetch.firecrawl_fetcher import FirecrawlPageFetcher
from app.features.scraping.services.fetch.mock_fetcher import MockPageFetcher
from app.features.scraping.services.fetch.selenium_fetcher import BrowserHandle, SeleniumPageFetcher
from app.features.scraping.services.pipeline import ResultAssembler, ScrapePipeline
from app.features.scraping.services.probing.link_prober import HttpLinkProber, LinkProber, MockLinkProber
from app.platform.config import settings
from app.platform.db.session import get_db


def build_fetcher(backend: str, browser: BrowserHandle | None = None) -> PageFetcher:
    if backend == "mock":
        return MockPageFetcher()
    if backend == "firecrawl":
        return FirecrawlPageFetcher()
    if backend == "selenium":
        if browser is None:
            raise ValueError("The selenium fetch backend needs a BrowserHandle")
        return SeleniumPageFetcher(browser)
    raise ValueError(f"Unknown FETCH_BACKEND: {backend}")


def build_prober(backend: str) -> LinkProber:
    if backend == "mock":
        return MockLinkProber()
    return HttpLinkProber()


def get_fetcher(request: Request) -> PageFetcher:
    return request.app.state.fetcher


def get_prober() -> LinkProber:
    return build_prober(settings.FETCH_BACKEND)


def get_analyzer() -> ContentAnalyzer:
    return get_content_analyzer()


def get_pipeline(
    fetcher: PageFetcher = Depends(get_fetcher),
    prober: LinkProber = Depends(get_prober),
    analyzer: ContentAnalyzer = Depends(get_analyzer),
) -> ScrapePipeline:
    return ScrapePipeline(fetcher=fetcher, prober=prober, content_analyzer=analyzer)


def get_assembler(db: AsyncSession = Depends(get_db)) -> ResultAssembler:
    return ResultAssembler(db)
