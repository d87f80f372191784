from unittest.mock import AsyncMock, patch

import pytest

from app.features.scraping.dependencies import get_fetcher
from app.features.scraping.exceptions import ScrapeTimeoutError
from app.features.scraping.services.fetch.base import PageFetcher


class TimingOutFetcher(PageFetcher):
    name = "timing-out"

    async def fetch(self, url):
        raise ScrapeTimeoutError(f"Page load timeout after 25 seconds for URL: {url}")


class TestScrapeRoute:
    def test_scrape_mock_page(self, client):
        response = client.post("/api/v1/scrape", json={"url": "https://example.com"})

        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "success"
        assert payload["message"] == "Website scraped successfully"

        data = payload["data"]
        assert data["url"] == "https://example.com"
        assert data["title"] == "Mock Website Title"
        assert data["headings"][0] == {"level": 1, "text": "Main Heading", "tag": "h1"}
        assert len(data["links"]) == 5
        assert {"href": "https://example.com/broken", "text": "Broken Link", "isBroken": True} in data["links"]
        assert [issue["type"] for issue in data["issues"]] == ["Broken Links"]
        assert data["screenshot"].startswith("data:image/png;base64,")
        assert data["error"] is None
        assert data["id"] is None
        assert data["analysis"] is None

    def test_scrape_and_save(self, client):
        response = client.post("/api/v1/scrape", json={"url": "https://example.com/save-me", "save": True})

        data = response.json()["data"]
        assert data["id"]
        assert data["createdAt"]

        stored = client.get(f"/api/v1/results/{data['id']}")
        assert stored.status_code == 200
        assert stored.json()["data"]["url"] == "https://example.com/save-me"

    def test_scrape_with_analysis(self, client):
        response = client.post("/api/v1/scrape", json={"url": "https://example.com", "analyze": True})

        analysis = response.json()["data"]["analysis"]
        assert analysis["source"] == "heuristic"
        assert analysis["readabilityLevel"] in {"Easy", "Medium", "Hard"}
        assert analysis["summary"].startswith("This page is about Mock Website Title.")
        assert analysis["visualContent"]["hasScreenshot"] is True

    @pytest.mark.parametrize("url", ["not a url", "example.com", "ftp://example.com", ""])
    def test_invalid_url(self, client, url):
        response = client.post("/api/v1/scrape", json={"url": url})

        assert response.status_code == 400
        assert response.json()["status"] == "error"

    def test_missing_url_is_validation_error(self, client):
        response = client.post("/api/v1/scrape", json={})

        assert response.status_code == 422
        assert response.json()["message"] == "Validation failed"

    def test_failed_fetch_answers_with_error_document(self, client, test_app):
        test_app.dependency_overrides[get_fetcher] = lambda: TimingOutFetcher()

        response = client.post("/api/v1/scrape", json={"url": "https://slow.example.com", "save": True})

        assert response.status_code == 200
        payload = response.json()
        assert payload["message"].startswith("Scrape failed: Page load timeout")
        assert payload["data"]["error"].startswith("Page load timeout")
        assert payload["data"]["links"] == []
        # Failed scrapes are not stored
        assert payload["data"]["id"] is None


class TestAnalyzeRoute:
    def test_analyze(self, client):
        response = client.post(
            "/api/v1/analyze",
            json={
                "url": "https://example.com",
                "title": "Great Coffee",
                "headings": [{"tag": "h1", "text": "Excellent beans"}],
                "links": [{"href": "https://example.com/menu", "text": "Menu"}],
            },
        )

        assert response.status_code == 200
        payload = response.json()
        assert payload["message"] == "Content analyzed successfully"
        assert payload["data"]["sentimentAnalysis"] == "Very Positive"
        assert payload["data"]["topKeywords"][0] == "great"

    @pytest.mark.parametrize("body", [{"url": "https://example.com"}, {"title": "No url"}])
    def test_analyze_requires_url_and_title(self, client, body):
        response = client.post("/api/v1/analyze", json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "URL and title are required"


class TestResultsRoutes:
    def save(self, client, url="https://example.com/saved"):
        response = client.post(
            "/api/v1/results",
            json={
                "url": url,
                "title": "Saved page",
                "headings": [{"level": 1, "text": "Saved"}],
                "links": [{"href": "https://example.com/a", "text": "A", "isBroken": False}],
                "issues": [],
            },
        )
        assert response.status_code == 201
        return response.json()["data"]

    def test_save_and_get(self, client):
        saved = self.save(client)

        response = client.get(f"/api/v1/results/{saved['id']}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Saved page"
        assert data["headings"] == [{"level": 1, "text": "Saved", "tag": "h1"}]

    def test_save_requires_url(self, client):
        response = client.post("/api/v1/results", json={"title": "No url"})

        assert response.status_code == 400
        assert response.json()["message"] == "URL is required"

    def test_list_contains_saved_results_newest_first(self, client):
        older = self.save(client, "https://example.com/older")
        newer = self.save(client, "https://example.com/newer")

        response = client.get("/api/v1/results")

        assert response.status_code == 200
        ids = [item["id"] for item in response.json()["data"]]
        assert older["id"] in ids and newer["id"] in ids

    def test_get_missing(self, client):
        response = client.get("/api/v1/results/does-not-exist")

        assert response.status_code == 404
        assert response.json()["message"] == "Result not found"

    def test_delete_by_path(self, client):
        saved = self.save(client)

        assert client.delete(f"/api/v1/results/{saved['id']}").status_code == 200
        assert client.get(f"/api/v1/results/{saved['id']}").status_code == 404
        assert client.delete(f"/api/v1/results/{saved['id']}").status_code == 404

    def test_delete_by_body(self, client):
        one = self.save(client)
        many = [self.save(client)["id"], self.save(client)["id"]]

        single = client.request("DELETE", "/api/v1/results", json={"id": one["id"]})
        batch = client.request("DELETE", "/api/v1/results", json={"ids": many})

        assert single.status_code == 200
        assert single.json()["data"] == {"ids": [one["id"]]}
        assert batch.status_code == 200
        for result_id in [one["id"], *many]:
            assert client.get(f"/api/v1/results/{result_id}").status_code == 404

    def test_delete_missing_id_is_not_found_on_both_routes(self, client):
        by_path = client.delete("/api/v1/results/does-not-exist")
        by_body = client.request("DELETE", "/api/v1/results", json={"id": "does-not-exist"})

        assert by_path.status_code == 404
        assert by_body.status_code == 404
        assert by_body.json()["message"] == "Result not found"

    @pytest.mark.parametrize("via_body", [False, True])
    def test_delete_database_failure_is_server_error(self, client, via_body):
        saved = self.save(client)

        with patch(
            "app.features.scraping.routes.results_routes.delete_result_by_id",
            AsyncMock(return_value=False),
        ):
            if via_body:
                response = client.request("DELETE", "/api/v1/results", json={"id": saved["id"]})
            else:
                response = client.delete(f"/api/v1/results/{saved['id']}")

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to delete scraped data"
        assert client.get(f"/api/v1/results/{saved['id']}").status_code == 200

    def test_delete_requires_id_or_ids(self, client):
        response = client.request("DELETE", "/api/v1/results", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing id or ids parameter"
