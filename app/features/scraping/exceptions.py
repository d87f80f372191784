from fastapi import status


class ScraperError(Exception):
    """Base class for errors raised by the scraping pipeline and its collaborators."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Scraping failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class InvalidInputError(ScraperError):
    """The requested URL is not a well-formed absolute http(s) URL."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid URL format"


class FetchError(ScraperError):
    """Any failure retrieving the page from the fetch backend."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Failed to scrape website"


class ScrapeTimeoutError(FetchError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Timed out while loading the page"


class NetworkError(FetchError):
    default_message = "Network error while loading the page"


class UpstreamError(FetchError):
    """The fetch backend answered with an error or a payload we could not read."""

    default_message = "Scraping backend returned an invalid response"


class PersistenceError(ScraperError):
    default_message = "Failed to save data"
