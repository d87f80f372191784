from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "Site Scraper"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./site_scraper.db"

    # ── Page fetching ───────────────────────────
    # "mock" serves a canned page and never touches the network
    FETCH_BACKEND: Literal["selenium", "firecrawl", "mock"] = "selenium"

    CHROMEDRIVER_PATH: Optional[str] = None
    USE_WEBDRIVER_MANAGER: bool = False
    PAGE_LOAD_TIMEOUT: int = 25
    PAGE_SETTLE_SECONDS: float = 2.0
    SCREENSHOT_MAX_HEIGHT: int = 10000

    FIRECRAWL_API_URL: str = "https://api.firecrawl.dev/v1"
    FIRECRAWL_API_KEY: Optional[str] = None

    # ── Link probing ────────────────────────────
    LINK_PROBE_BATCH_SIZE: int = 5
    LINK_PROBE_TIMEOUT: float = 10.0

    # Upper bound for one whole scrape request
    PIPELINE_TIMEOUT_SECONDS: float = 30.0

    # ── Content analysis (LLM) ──────────────────
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_TIMEOUT_SECONDS: float = 20.0

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
