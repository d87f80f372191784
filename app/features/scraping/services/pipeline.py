import asyncio
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.features.scraping.exceptions import FetchError
from app.features.scraping.schemas.analysis import ContentAnalysis
from app.features.scraping.schemas.document import Document
from app.features.scraping.schemas.requests import ScrapeResult
from app.features.scraping.services import result_service
from app.features.scraping.services.analysis.content_analyzer import ContentAnalyzer
from app.features.scraping.services.analysis.issue_analyzer import IssueAnalyzer
from app.features.scraping.services.extraction.extractor_service import ExtractorService
from app.features.scraping.services.fetch.base import PageFetcher, ensure_fetchable_url
from app.features.scraping.services.probing.link_prober import LinkProber
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ScrapePipeline:
    """
    fetch -> extract -> probe links -> detect issues -> (optional) summarize.

    Fetch failures and the overall timeout produce a Document with ``error``
    set and no content instead of raising. Only an invalid URL raises.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        prober: LinkProber,
        content_analyzer: ContentAnalyzer,
        timeout: float = settings.PIPELINE_TIMEOUT_SECONDS,
    ):
        self.fetcher = fetcher
        self.prober = prober
        self.content_analyzer = content_analyzer
        self.timeout = timeout

    async def run(self, url: str, include_analysis: bool = False) -> Tuple[Document, Optional[ContentAnalysis]]:
        url = ensure_fetchable_url(url)
        logger.info(f"Processing scrape request for: {url} (backend={self.fetcher.name})")

        try:
            return await asyncio.wait_for(self._run_stages(url, include_analysis), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Scrape of {url} exceeded {self.timeout}s")
            return Document.failed(url, f"Timeout: scraping took longer than {self.timeout:g} seconds"), None
        except FetchError as e:
            logger.error(f"Scrape of {url} failed: {e}")
            return Document.failed(url, str(e)), None

    async def _run_stages(self, url: str, include_analysis: bool) -> Tuple[Document, Optional[ContentAnalysis]]:
        page = await self.fetcher.fetch(url)

        # Relative hrefs resolve against the final (post-redirect) URL
        extracted = ExtractorService.extract(page.raw_html, page.url, title=page.title)
        document = extracted.model_copy(update={"url": url, "screenshot": page.screenshot})

        document = await self._probe_links(document)
        document = document.model_copy(update={"issues": IssueAnalyzer.analyze(document)})

        analysis = None
        if include_analysis:
            analysis = await self.content_analyzer.summarize(document)

        logger.info(
            f"Scraped {url}: {len(document.headings)} headings, "
            f"{len(document.links)} links, {len(document.issues)} issues"
        )
        return document, analysis

    async def _probe_links(self, document: Document) -> Document:
        if not document.links:
            return document

        try:
            broken = await self.prober.probe(link.href for link in document.links)
        except Exception as e:
            # Fail open: unknown link status counts as not broken
            logger.warning(f"Link probing unavailable for {document.url}, assuming links are fine: {e}")
            broken = {}

        links = [
            link.model_copy(update={"is_broken": broken.get(link.href, False)})
            for link in document.links
        ]
        return document.model_copy(update={"links": links})


class ResultAssembler:
    """Combines a Document and optional analysis into a ScrapeResult, saving it on request."""

    def __init__(self, db: Optional[AsyncSession] = None):
        self.db = db

    async def assemble(
        self,
        document: Document,
        analysis: Optional[ContentAnalysis] = None,
        persist: bool = False,
    ) -> ScrapeResult:
        result = ScrapeResult(**document.model_dump(), analysis=analysis)

        # Failed scrapes are never stored
        if not persist or document.error:
            return result

        if self.db is None:
            raise ValueError("ResultAssembler needs a database session to persist results")

        record = await result_service.save_result(self.db, result)
        if record is None:
            logger.error(f"Scrape of {document.url} succeeded but the result could not be saved")
            return result

        return result.model_copy(update={"id": record.id, "created_at": record.created_at})
