import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from igscraper.adapters.base import RenderedPage
from igscraper.config import DEFAULT_RENDERER_CONFIG, RendererConfig
from igscraper.errors import NavigationTimeout, PageLoadFailed

logger = logging.getLogger(__name__)


async def open_page(
    config: RendererConfig = DEFAULT_RENDERER_CONFIG,
    playwright_factory: Callable = async_playwright,
):
    """
    Launches Playwright, opens a Chromium browser, creates a fresh browser
    context, and finally opens a new page. Returns all four objects for
    later cleanup.

    Nothing is shared between calls: every request gets its own runtime,
    browser process and cookie jar. If any step fails, whatever was already
    started is torn down before the error propagates.

    Returns:
        pw: Playwright instance
        browser: Chromium browser object
        context: Browser context (cookies, localStorage, cache)
        page: The tab used for navigation
    """
    pw = await playwright_factory().start()
    browser = context = None
    try:
        browser = await pw.chromium.launch(
            headless=config.headless,
            args=list(config.launch_args),
        )
        context = await browser.new_context(
            user_agent=config.user_agent,
            # Without a language header Instagram tends to serve the bare no-script shell.
            extra_http_headers={"Accept-Language": config.accept_language},
            locale="en-US",
            viewport={"width": config.viewport_width, "height": config.viewport_height},
            # Many sites switch to the mobile DOM below ~800px, which has different meta.
        )
        page = await context.new_page()
    except BaseException:
        await close_page(pw, browser, context)
        raise

    return pw, browser, context, page


async def close_page(pw, browser, context):
    """
    Closes Playwright resources in reverse order of creation.
    Every step runs even if an earlier one raised; a leaked Chromium process
    outlives the request and keeps eating memory.
    """
    try:
        if context is not None:
            await context.close()
    except Exception as exc:
        logger.warning("context.close failed: %s", exc)
    finally:
        try:
            if browser is not None:
                await browser.close()
        except Exception as exc:
            logger.warning("browser.close failed: %s", exc)
        finally:
            await pw.stop()


@asynccontextmanager
async def browser_session(
    config: RendererConfig = DEFAULT_RENDERER_CONFIG,
    playwright_factory: Callable = async_playwright,
) -> AsyncIterator:
    """Yields a page; the whole session is closed on every exit path, including cancellation."""
    pw, browser, context, page = await open_page(config, playwright_factory)
    try:
        yield page
    finally:
        await close_page(pw, browser, context)
        logger.debug("browser session closed")


async def load(page, url: str, config: RendererConfig = DEFAULT_RENDERER_CONFIG) -> RenderedPage:
    """
    Navigates and snapshots the DOM.

    Waits for DOMContentLoaded only: the post page keeps polling in the
    background, so "networkidle" may never arrive. No retries.
    """
    try:
        response = await page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=config.navigation_timeout_ms,
        )
    except PlaywrightTimeoutError as exc:
        raise NavigationTimeout(config.navigation_timeout_ms) from exc
    except PlaywrightError as exc:
        # DNS failure, connection reset, net::ERR_ABORTED: there is no response.
        logger.info("navigation to %s failed: %s", url, exc)
        raise PageLoadFailed(None) from exc

    if response is None or not response.ok:
        raise PageLoadFailed(response.status if response is not None else None)

    html = await page.content()
    return RenderedPage(url=page.url, status=response.status, html=html)


async def render_page(
    url: str,
    config: RendererConfig = DEFAULT_RENDERER_CONFIG,
    playwright_factory: Callable = async_playwright,
) -> RenderedPage:
    logger.info("rendering %s", url)
    async with browser_session(config, playwright_factory) as page:
        return await load(page, url, config)
