from abc import ABC, abstractmethod

from app.features.scraping.exceptions import InvalidInputError
from app.features.scraping.schemas.document import FetchedPage
from app.platform.utils.url_validator import validate_url


class PageFetcher(ABC):
    """Retrieves the rendered HTML, title and screenshot of a page."""

    name: str = "base"

    @abstractmethod
    async def fetch(self, url: str) -> FetchedPage:
        """
        Load ``url`` and return its rendered state.

        Raises:
            InvalidInputError: url is not an absolute http(s) URL
            ScrapeTimeoutError: the page did not finish loading in time
            NetworkError: DNS or connection failure
            UpstreamError: the backend answered with an error or malformed payload
        """

    async def close(self) -> None:
        """Release anything the fetcher holds. Most fetchers hold nothing."""


def ensure_fetchable_url(url: str) -> str:
    is_valid, normalized_url, error = validate_url(url)
    if not is_valid:
        raise InvalidInputError(error)
    return normalized_url
