import json

import httpx
import pytest

from app.features.scraping.exceptions import (
    InvalidInputError,
    NetworkError,
    ScrapeTimeoutError,
    UpstreamError,
)
from app.features.scraping.services.fetch.firecrawl_fetcher import FirecrawlPageFetcher

API_URL = "https://scrape.example.test/v1"


def make_fetcher(handler):
    return FirecrawlPageFetcher(
        api_key="fc-test",
        api_url=API_URL + "/",
        timeout=15,
        settle_seconds=1.5,
        transport=httpx.MockTransport(handler),
    )


class TestFirecrawlPageFetcher:
    async def test_fetch_success(self):
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "success": True,
                "data": {
                    "rawHtml": "<html><title>Hi there</title><h1>Hello</h1></html>",
                    "screenshot": "iVBORw0KGgo=",
                    "metadata": {"title": "Hi there", "sourceURL": "https://example.com/landing"},
                },
            })

        page = await make_fetcher(handler).fetch("https://example.com")

        assert captured["url"] == f"{API_URL}/scrape"
        assert captured["auth"] == "Bearer fc-test"
        assert captured["body"] == {
            "url": "https://example.com",
            "formats": ["rawHtml", "screenshot@fullPage"],
            "waitFor": 1500,
            "timeout": 15000,
        }
        assert page.url == "https://example.com/landing"
        assert page.title == "Hi there"
        assert "<h1>Hello</h1>" in page.raw_html
        assert page.screenshot == "data:image/png;base64,iVBORw0KGgo="

    async def test_falls_back_to_html_and_keeps_screenshot_urls(self):
        def handler(request):
            return httpx.Response(200, json={
                "success": True,
                "data": {"html": "<p>cleaned</p>", "screenshot": "https://cdn.example.test/shot.png"},
            })

        page = await make_fetcher(handler).fetch("https://example.com")

        assert page.url == "https://example.com"
        assert page.title is None
        assert page.raw_html == "<p>cleaned</p>"
        assert page.screenshot == "https://cdn.example.test/shot.png"

    @pytest.mark.parametrize(
        "response, error",
        [
            (httpx.Response(408), ScrapeTimeoutError),
            (httpx.Response(401, text="unauthorized"), UpstreamError),
            (httpx.Response(500, text="oops"), UpstreamError),
            (httpx.Response(200, text="not json"), UpstreamError),
            (httpx.Response(200, json={"success": False, "error": "blocked"}), UpstreamError),
            (httpx.Response(200, json={"success": True, "data": {"metadata": {}}}), UpstreamError),
        ],
    )
    async def test_error_responses(self, response, error):
        fetcher = make_fetcher(lambda request: response)

        with pytest.raises(error):
            await fetcher.fetch("https://example.com")

    async def test_transport_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ScrapeTimeoutError):
            await make_fetcher(handler).fetch("https://example.com")

    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NetworkError):
            await make_fetcher(handler).fetch("https://example.com")

    async def test_invalid_url_never_reaches_the_api(self):
        def handler(request):
            raise AssertionError("should not be called")

        with pytest.raises(InvalidInputError):
            await make_fetcher(handler).fetch("ftp://example.com")

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            FirecrawlPageFetcher(api_key=None)
