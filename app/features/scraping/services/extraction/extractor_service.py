import re
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from app.features.scraping.schemas.document import Document, Heading, Link

HEADING_TAG = re.compile(r"^h[1-6]$")
LINK_SCHEMES = ("http", "https")


class ExtractorService:
    """
    Turns fetched HTML into a Document.

    Pure: no I/O, no clock, no randomness. The stdlib ``html.parser`` backend is
    always used so the same input parses the same way on every machine.
    """

    PARSER = "html.parser"

    @staticmethod
    def extract(raw_html: str, base_url: str, title: Optional[str] = None) -> Document:
        """
        Args:
            raw_html: rendered page HTML
            base_url: URL the HTML was served from, used to resolve relative hrefs
            title: title reported by the fetch backend, preferred over <title>

        Returns:
            Document with title, headings and links in document order
        """
        soup = BeautifulSoup(raw_html or "", ExtractorService.PARSER)

        return Document(
            url=base_url,
            title=ExtractorService.extract_title(soup, title),
            headings=ExtractorService.extract_headings(soup),
            links=ExtractorService.extract_links(soup, base_url),
        )

    @staticmethod
    def extract_title(soup: BeautifulSoup, fetched_title: Optional[str] = None) -> Optional[str]:
        if fetched_title and fetched_title.strip():
            return fetched_title.strip()
        if soup.title is None:
            return None
        return soup.title.get_text().strip() or None

    @staticmethod
    def extract_headings(soup: BeautifulSoup) -> List[Heading]:
        # Empty headings are kept; the issue analyzer reports them
        return [
            Heading(level=int(el.name[1]), text=el.get_text().strip())
            for el in soup.find_all(HEADING_TAG)
        ]

    @staticmethod
    def extract_links(soup: BeautifulSoup, base_url: str) -> List[Link]:
        links: List[Link] = []
        for anchor in soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if not href:
                continue

            resolved = ExtractorService.resolve_href(base_url, href)
            if resolved is None:
                continue

            text = anchor.get_text().strip()
            links.append(Link(href=resolved, text=text or resolved))
        return links

    @staticmethod
    def resolve_href(base_url: str, href: str) -> Optional[str]:
        """Absolute http(s) URL for ``href``, or None for other schemes and junk."""
        try:
            resolved = urljoin(base_url, href)
            parsed = urlparse(resolved)
        except ValueError:
            return None
        if parsed.scheme.lower() not in LINK_SCHEMES or not parsed.netloc:
            return None
        return resolved
