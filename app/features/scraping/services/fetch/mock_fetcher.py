from app.features.scraping.schemas.document import FetchedPage
from app.features.scraping.services.fetch.base import PageFetcher, ensure_fetchable_url

MOCK_SCREENSHOT = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)

MOCK_HTML = """<!DOCTYPE html>
<html>
<head><title>Mock Website Title</title></head>
<body>
  <h1>Main Heading</h1>
  <h2>Subheading 1</h2>
  <h2>Subheading 2</h2>
  <h3>Section 1</h3>
  <h3>Section 2</h3>
  <nav>
    <a href="https://example.com">Example Link</a>
    <a href="/about">About Us</a>
    <a href="/contact">Contact</a>
    <a href="/broken">Broken Link</a>
    <a href="/products">Products</a>
  </nav>
</body>
</html>
"""


class MockPageFetcher(PageFetcher):
    """Serves the same canned page for every URL. No network access."""

    name = "mock"

    async def fetch(self, url: str) -> FetchedPage:
        url = ensure_fetchable_url(url)
        return FetchedPage(
            url=url,
            title="Mock Website Title",
            raw_html=MOCK_HTML,
            screenshot=MOCK_SCREENSHOT,
        )
