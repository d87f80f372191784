from urllib.parse import urlparse, urlunparse
from typing import Tuple

ALLOWED_SCHEMES = ("http", "https")


def normalize_url(url: str) -> str:
    """Trim whitespace and lowercase the scheme and host; path and query are kept as-is."""
    url = url.strip()
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return url
    return urlunparse(parsed._replace(scheme=parsed.scheme.lower(), netloc=parsed.netloc.lower()))


def validate_url(url: str) -> Tuple[bool, str, str]:
    if not url or not url.strip():
        return False, "", "URL cannot be empty"

    normalized_url = normalize_url(url)

    try:
        parsed = urlparse(normalized_url)

        if not parsed.scheme:
            return False, normalized_url, "Invalid URL format: missing scheme (e.g. https://)"

        if parsed.scheme not in ALLOWED_SCHEMES:
            return False, normalized_url, f"Invalid URL scheme: {parsed.scheme} (must be http or https)"

        if not parsed.hostname:
            return False, normalized_url, "Invalid URL format: missing domain"

        # Accessing .port raises ValueError for malformed ports
        parsed.port

        if any(ch.isspace() for ch in normalized_url):
            return False, normalized_url, "Invalid URL format: contains whitespace"

        return True, normalized_url, ""

    except ValueError as e:
        return False, normalized_url, f"URL parsing error: {str(e)}"
