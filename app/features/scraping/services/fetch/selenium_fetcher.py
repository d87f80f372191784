import asyncio
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.remote.webdriver import WebDriver
from webdriver_manager.chrome import ChromeDriverManager

from app.features.scraping.exceptions import NetworkError, ScrapeTimeoutError, UpstreamError
from app.features.scraping.schemas.document import FetchedPage
from app.features.scraping.services.fetch.base import PageFetcher, ensure_fetchable_url
from app.platform.config import settings

logger = logging.getLogger(__name__)

VIEWPORT_WIDTH = 1280
VIEWPORT_HEIGHT = 800


def build_driver() -> WebDriver:
    """Create a headless Chrome driver configured from settings."""
    chrome_options = Options()
    chrome_options.add_argument("--headless=new")
    chrome_options.add_argument("--disable-gpu")
    chrome_options.add_argument("--no-sandbox")
    chrome_options.add_argument("--disable-dev-shm-usage")
    chrome_options.add_argument("--disable-blink-features=AutomationControlled")
    chrome_options.add_argument(f"--window-size={VIEWPORT_WIDTH},{VIEWPORT_HEIGHT}")

    if settings.CHROMEDRIVER_PATH:
        service = Service(executable_path=settings.CHROMEDRIVER_PATH)
        return webdriver.Chrome(service=service, options=chrome_options)
    if settings.USE_WEBDRIVER_MANAGER:
        service = Service(ChromeDriverManager().install())
        return webdriver.Chrome(service=service, options=chrome_options)
    return webdriver.Chrome(options=chrome_options)


class BrowserHandle:
    """
    Owns one long-lived browser for the process.

    The driver is launched on first use and relaunched if it has died. Only one
    caller drives it at a time; each caller works in its own tab. ``release()``
    must be called on shutdown.
    """

    def __init__(self, driver_factory: Callable[[], WebDriver] = build_driver):
        self._driver_factory = driver_factory
        self._driver: Optional[WebDriver] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._driver is not None

    @contextmanager
    def session(self) -> Iterator[WebDriver]:
        with self._lock:
            yield self._acquire()

    def _acquire(self) -> WebDriver:
        if self._driver is not None and not self._is_alive(self._driver):
            logger.warning("Browser is no longer responding, relaunching")
            self._quit()

        if self._driver is None:
            logger.info("Launching headless browser")
            try:
                self._driver = self._driver_factory()
            except WebDriverException as e:
                raise UpstreamError(f"Could not start browser: {e.msg or e}") from e
        return self._driver

    @staticmethod
    def _is_alive(driver: WebDriver) -> bool:
        try:
            driver.window_handles
            return True
        except WebDriverException:
            return False

    def _quit(self) -> None:
        driver, self._driver = self._driver, None
        if driver is None:
            return
        try:
            driver.quit()
        except WebDriverException as e:
            logger.warning(f"Error while closing browser: {e}")

    def release(self) -> None:
        with self._lock:
            if self._driver is not None:
                logger.info("Releasing headless browser")
            self._quit()


class SeleniumPageFetcher(PageFetcher):
    """Loads pages in a headless Chrome tab and captures a full-page screenshot."""

    name = "selenium"

    def __init__(
        self,
        browser: BrowserHandle,
        page_load_timeout: int = settings.PAGE_LOAD_TIMEOUT,
        settle_seconds: float = settings.PAGE_SETTLE_SECONDS,
        screenshot_max_height: int = settings.SCREENSHOT_MAX_HEIGHT,
    ):
        self.browser = browser
        self.page_load_timeout = page_load_timeout
        self.settle_seconds = settle_seconds
        self.screenshot_max_height = screenshot_max_height

    async def fetch(self, url: str) -> FetchedPage:
        url = ensure_fetchable_url(url)
        return await asyncio.to_thread(self._fetch_sync, url)

    def _fetch_sync(self, url: str) -> FetchedPage:
        # Any driver failure, during or after the load (alerts, crashed tabs), is a FetchError
        try:
            with self.browser.session() as driver:
                return self._fetch_in_tab(driver, url)
        except TimeoutException as e:
            raise ScrapeTimeoutError(
                f"Page load timeout after {self.page_load_timeout} seconds for URL: {url}"
            ) from e
        except WebDriverException as e:
            message = e.msg or str(e)
            if "net::ERR_" in message:
                raise NetworkError(f"Could not reach {url}: {message}") from e
            raise UpstreamError(f"Browser error loading URL {url}: {message}") from e

    def _fetch_in_tab(self, driver: WebDriver, url: str) -> FetchedPage:
        driver.set_page_load_timeout(self.page_load_timeout)
        original_window = driver.current_window_handle
        driver.switch_to.new_window("tab")
        try:
            driver.get(url)

            # Fixed window for scripts to render dynamic content
            if self.settle_seconds > 0:
                time.sleep(self.settle_seconds)

            return FetchedPage(
                url=driver.current_url or url,
                title=driver.title or None,
                raw_html=driver.page_source,
                screenshot=self._capture_screenshot(driver),
            )
        finally:
            try:
                driver.close()
                driver.switch_to.window(original_window)
            except WebDriverException as e:
                logger.warning(f"Could not close tab for {url}: {e}")

    def _capture_screenshot(self, driver: WebDriver) -> Optional[str]:
        """Full-page PNG as a data URI, or None when capture fails."""
        try:
            height = driver.execute_script(
                "return Math.max(document.body.scrollHeight, document.documentElement.scrollHeight);"
            )
            height = min(max(int(height or 0), VIEWPORT_HEIGHT), self.screenshot_max_height)
            driver.set_window_size(VIEWPORT_WIDTH, height)
            encoded = driver.get_screenshot_as_base64()
        except (WebDriverException, TypeError, ValueError) as e:
            logger.warning(f"Screenshot capture failed: {e}")
            return None
        finally:
            try:
                driver.set_window_size(VIEWPORT_WIDTH, VIEWPORT_HEIGHT)
            except WebDriverException as e:
                logger.debug(f"Could not restore window size: {e}")
        return f"data:image/png;base64,{encoded}"
