import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

import httpx

from app.platform.config import settings

logger = logging.getLogger(__name__)

# Statuses meaning "this server does not do HEAD", retried with GET
HEAD_UNSUPPORTED = {405, 501}

USER_AGENT = "Mozilla/5.0 (compatible; SiteScraperLinkChecker/1.0)"


class LinkProber(ABC):
    @abstractmethod
    async def probe(self, hrefs: Iterable[str]) -> Dict[str, bool]:
        """Map each href to True when it is broken."""


class HttpLinkProber(LinkProber):
    """
    Checks links with HEAD requests (GET when HEAD is refused) in fixed-size
    batches. A batch must fully settle before the next one starts, so at most
    ``batch_size`` requests are in flight.
    """

    def __init__(
        self,
        batch_size: int = settings.LINK_PROBE_BATCH_SIZE,
        timeout: float = settings.LINK_PROBE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.batch_size = batch_size
        self.timeout = timeout
        self.transport = transport

    async def probe(self, hrefs: Iterable[str]) -> Dict[str, bool]:
        unique = list(dict.fromkeys(hrefs))
        results: Dict[str, bool] = {}
        if not unique:
            return results

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
        ) as client:
            for batch in self._batches(unique):
                outcomes = await asyncio.gather(*(self._check(client, href) for href in batch))
                results.update(zip(batch, outcomes))

        broken = sum(results.values())
        logger.info(f"Probed {len(results)} links, {broken} broken")
        return results

    def _batches(self, hrefs: List[str]) -> List[List[str]]:
        return [hrefs[i:i + self.batch_size] for i in range(0, len(hrefs), self.batch_size)]

    @staticmethod
    async def _check(client: httpx.AsyncClient, href: str) -> bool:
        try:
            response = await client.head(href)
            if response.status_code in HEAD_UNSUPPORTED:
                response = await client.get(href)
            return response.status_code >= 400
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Link check failed for {href}: {e!r}")
            return True


class MockLinkProber(LinkProber):
    """Deterministic stand-in: a link is broken when its URL mentions "broken"."""

    async def probe(self, hrefs: Iterable[str]) -> Dict[str, bool]:
        return {href: "broken" in href.lower() for href in hrefs}
