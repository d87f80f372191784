import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.health.routes.health import router as health_router
from app.features.scraping.dependencies import build_fetcher
from app.features.scraping.services.fetch.selenium_fetcher import BrowserHandle
from app.platform.config import settings
from app.platform.db.session import init_db
from app.platform.exceptions import add_exception_handlers

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()

    # The browser is owned here and lent to the fetcher; it starts on first scrape
    browser = BrowserHandle() if settings.FETCH_BACKEND == "selenium" else None
    app.state.browser = browser
    app.state.fetcher = build_fetcher(settings.FETCH_BACKEND, browser)
    logger.info(f"Using '{settings.FETCH_BACKEND}' fetch backend")

    try:
        yield
    finally:
        await app.state.fetcher.close()
        if browser is not None:
            await asyncio.to_thread(browser.release)


app = FastAPI(
    title="Site Scraper API",
    description="Scrape a page's structure, flag basic issues and keep the results",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": "Site Scraper API",
        "description": "Extracts titles, headings, links and screenshots from web pages and flags basic issues.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
