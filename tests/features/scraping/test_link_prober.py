import asyncio

import httpx
import pytest

from app.features.scraping.services.probing.link_prober import HttpLinkProber, MockLinkProber


class TestHttpLinkProber:
    async def test_status_codes(self):
        statuses = {
            "https://example.com/ok": 200,
            "https://example.com/redirected": 301,
            "https://example.com/missing": 404,
            "https://example.com/error": 500,
        }

        def handler(request):
            url = str(request.url)
            if url == "https://example.com/redirected":
                return httpx.Response(301, headers={"Location": "https://example.com/ok"})
            return httpx.Response(statuses[url])

        prober = HttpLinkProber(transport=httpx.MockTransport(handler))

        result = await prober.probe(statuses)

        assert result == {
            "https://example.com/ok": False,
            "https://example.com/redirected": False,
            "https://example.com/missing": True,
            "https://example.com/error": True,
        }

    async def test_head_refused_falls_back_to_get(self):
        seen = []

        def handler(request):
            seen.append(request.method)
            if request.method == "HEAD":
                return httpx.Response(405)
            return httpx.Response(200)

        prober = HttpLinkProber(transport=httpx.MockTransport(handler))

        result = await prober.probe(["https://example.com/no-head"])

        assert result == {"https://example.com/no-head": False}
        assert seen == ["HEAD", "GET"]

    async def test_failures_are_isolated(self):
        def handler(request):
            if request.url.host == "down.example.com":
                raise httpx.ConnectError("connection refused", request=request)
            if request.url.host == "slow.example.com":
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200)

        prober = HttpLinkProber(transport=httpx.MockTransport(handler))

        result = await prober.probe([
            "https://down.example.com/",
            "https://slow.example.com/",
            "https://up.example.com/",
        ])

        assert result == {
            "https://down.example.com/": True,
            "https://slow.example.com/": True,
            "https://up.example.com/": False,
        }

    async def test_batches_bound_concurrency(self):
        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return httpx.Response(200)

        prober = HttpLinkProber(batch_size=3, transport=httpx.MockTransport(handler))
        hrefs = [f"https://example.com/{i}" for i in range(10)]

        result = await prober.probe(hrefs)

        assert len(result) == 10
        assert peak == 3

    async def test_duplicates_are_checked_once(self):
        calls = []

        def handler(request):
            calls.append(str(request.url))
            return httpx.Response(200)

        prober = HttpLinkProber(transport=httpx.MockTransport(handler))

        result = await prober.probe(["https://example.com/a", "https://example.com/a"])

        assert result == {"https://example.com/a": False}
        assert calls == ["https://example.com/a"]

    async def test_no_links(self):
        assert await HttpLinkProber().probe([]) == {}

    def test_batch_size_must_be_positive(self):
        with pytest.raises(ValueError):
            HttpLinkProber(batch_size=0)


async def test_mock_prober_flags_urls_mentioning_broken():
    result = await MockLinkProber().probe(["https://example.com/broken", "https://example.com/about"])

    assert result == {"https://example.com/broken": True, "https://example.com/about": False}
