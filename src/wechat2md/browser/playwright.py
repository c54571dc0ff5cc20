# ABOUTME: Playwright-backed BrowserSession for local Chromium or a remote CDP endpoint
# ABOUTME: Launch failures surface as BrowserUnavailableError instead of falling back silently

from typing import Any

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from wechat2md.browser.base import BrowserSessionFactory, WaitPolicy
from wechat2md.config import Config
from wechat2md.errors import BrowserSessionError, BrowserUnavailableError
from wechat2md.extraction.user_agents import UserAgentRotator
from wechat2md.utils.logging import get_logger, suppress_library_output

logger = get_logger(__name__)

LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
]


class PlaywrightBrowserSession:
    """One Playwright page plus the runtime that owns it.

    Page failures other than navigation wait timeouts are raised as BrowserSessionError.
    """

    def __init__(self, playwright: Playwright, browser: Browser, page: Page, navigation_timeout: float):
        self._playwright = playwright
        self._browser = browser
        self._page = page
        self._navigation_timeout_ms = navigation_timeout * 1000

    async def navigate(self, url: str, wait_policy: WaitPolicy = WaitPolicy.NETWORK_IDLE) -> None:
        try:
            await self._page.goto(url, wait_until=wait_policy.value, timeout=self._navigation_timeout_ms)
        except PlaywrightTimeout:
            # Long-polling album pages may never go idle; continue with what has rendered
            logger.warning("Navigation wait timed out, continuing with partial page", url=url)
        except PlaywrightError as e:
            raise BrowserSessionError(f"Could not open {url}: {e}", details={"step": "navigate", "url": url}) from e

    async def evaluate_in_page(self, script: str) -> Any:
        return await self._evaluate(script, step="evaluate")

    async def scroll_to_bottom(self) -> None:
        await self._evaluate("window.scrollTo(0, document.body.scrollHeight)", step="scroll")

    async def _evaluate(self, script: str, step: str) -> Any:
        try:
            return await self._page.evaluate(script)
        except PlaywrightError as e:
            raise BrowserSessionError(f"Browser page {step} failed: {e}", details={"step": step}) from e

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


async def open_playwright_session(config: Config) -> PlaywrightBrowserSession:
    """Start a browser page, locally or against ``config.browser_endpoint``.

    Raises:
        BrowserUnavailableError: If the runtime cannot be started or reached
    """
    playwright: Playwright | None = None
    try:
        playwright = await async_playwright().start()
        if config.browser_endpoint:
            browser = await playwright.chromium.connect_over_cdp(config.browser_endpoint)
        else:
            with suppress_library_output():
                browser = await playwright.chromium.launch(headless=config.headless, args=LAUNCH_ARGS)

        context = await browser.new_context(
            viewport={"width": 1280, "height": 2000},
            user_agent=UserAgentRotator(config.user_agents).next(),
            locale="zh-CN",
            timezone_id="Asia/Shanghai",
        )
        page = await context.new_page()
    except PlaywrightError as e:
        if playwright is not None:
            await playwright.stop()
        logger.error("Browser runtime unavailable", error=str(e), endpoint=config.browser_endpoint)
        raise BrowserUnavailableError(
            "No automatable browser runtime is available; install one with `playwright install chromium`, "
            "set WECHAT2MD_BROWSER_ENDPOINT, or use static mode",
            details={"error": str(e)},
        ) from e

    logger.info("Browser session started", remote=bool(config.browser_endpoint), headless=config.headless)
    return PlaywrightBrowserSession(playwright, browser, page, config.navigation_timeout)


def playwright_session_factory(config: Config) -> BrowserSessionFactory:
    """Bind ``config`` into a zero-argument factory for the harvester."""

    async def factory() -> PlaywrightBrowserSession:
        return await open_playwright_session(config)

    return factory
