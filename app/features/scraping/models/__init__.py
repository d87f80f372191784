from app.features.scraping.models.scraped_result import ScrapedResult

__all__ = ["ScrapedResult"]
