import pytest

from app.platform.utils.url_validator import normalize_url, validate_url


class TestValidateUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com",
            "http://example.com/path?q=1",
            "https://sub.example.co.uk:8443/a/b",
            "http://localhost:8000",
        ],
    )
    def test_accepts_absolute_http_urls(self, url):
        is_valid, normalized, error = validate_url(url)

        assert is_valid
        assert error == ""
        assert normalized == url

    @pytest.mark.parametrize(
        "url, fragment",
        [
            ("", "empty"),
            ("   ", "empty"),
            ("example.com", "missing scheme"),
            ("ftp://example.com/file", "scheme"),
            ("javascript:alert(1)", "scheme"),
            ("https://", "missing domain"),
            ("https://example.com:99999", "parsing error"),
            ("https://exa mple.com", "whitespace"),
        ],
    )
    def test_rejects_malformed_urls(self, url, fragment):
        is_valid, _, error = validate_url(url)

        assert not is_valid
        assert fragment in error

    def test_normalizes_scheme_and_host_only(self):
        is_valid, normalized, _ = validate_url("  HTTPS://Example.COM/Path?Q=A  ")

        assert is_valid
        assert normalized == "https://example.com/Path?Q=A"


def test_normalize_url_leaves_relative_input_alone():
    assert normalize_url(" /about ") == "/about"
