# tests/test_browser.py
from __future__ import annotations

import asyncio
import unittest

from fakes import POST_URL, FakePage, FakePlaywrightFactory, page_html
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from igscraper.browser import browser_session, render_page
from igscraper.config import RendererConfig
from igscraper.errors import NavigationTimeout, PageLoadFailed


class TestRenderPage(unittest.IsolatedAsyncioTestCase):
    async def test_success_returns_snapshot_and_releases_session(self) -> None:
        html = page_html(head="<title>Instagram</title>")
        factory = FakePlaywrightFactory(FakePage(html=html))

        page = await render_page(POST_URL, playwright_factory=factory)

        self.assertEqual(page.html, html)
        self.assertEqual(page.status, 200)
        self.assertEqual(page.url, POST_URL)
        self.assertTrue(factory.all_released())

    async def test_navigation_contract(self) -> None:
        fake = FakePage(html=page_html())
        factory = FakePlaywrightFactory(fake)

        await render_page(POST_URL, RendererConfig(navigation_timeout_ms=1234), playwright_factory=factory)

        call = fake.goto_calls[0]
        self.assertEqual(call["wait_until"], "domcontentloaded")
        self.assertEqual(call["timeout"], 1234)
        ctx = factory.browsers[0].contexts[0]
        self.assertIn("Chrome/", ctx.kwargs["user_agent"])
        self.assertNotIn("Headless", ctx.kwargs["user_agent"])
        self.assertEqual(ctx.kwargs["extra_http_headers"]["Accept-Language"], "en-US,en;q=0.9")

    async def test_timeout_maps_to_navigation_timeout_and_releases(self) -> None:
        factory = FakePlaywrightFactory(FakePage(goto_error=PlaywrightTimeoutError("Timeout 45000ms exceeded.")))

        with self.assertRaises(NavigationTimeout) as ctx:
            await render_page(POST_URL, playwright_factory=factory)

        self.assertEqual(ctx.exception.timeout_ms, 45_000)
        self.assertEqual(len(factory.sessions), 1)
        self.assertTrue(factory.all_released())

    async def test_error_status_is_page_load_failed(self) -> None:
        factory = FakePlaywrightFactory(FakePage(status=404))

        with self.assertRaises(PageLoadFailed) as ctx:
            await render_page(POST_URL, playwright_factory=factory)

        self.assertEqual(ctx.exception.status, 404)
        self.assertIn("404", str(ctx.exception))
        self.assertTrue(factory.all_released())

    async def test_missing_response_is_page_load_failed(self) -> None:
        factory = FakePlaywrightFactory(FakePage(status=None))

        with self.assertRaises(PageLoadFailed) as ctx:
            await render_page(POST_URL, playwright_factory=factory)

        self.assertIsNone(ctx.exception.status)
        self.assertTrue(factory.all_released())

    async def test_network_error_is_page_load_failed_and_releases(self) -> None:
        for message in ("net::ERR_CONNECTION_RESET", "net::ERR_ABORTED", "net::ERR_NAME_NOT_RESOLVED"):
            with self.subTest(message=message):
                factory = FakePlaywrightFactory(FakePage(goto_error=PlaywrightError(message)))

                with self.assertRaises(PageLoadFailed) as ctx:
                    await render_page(POST_URL, playwright_factory=factory)

                self.assertIsNone(ctx.exception.status)
                self.assertTrue(factory.all_released())

    async def test_unexpected_error_still_releases(self) -> None:
        factory = FakePlaywrightFactory(FakePage(goto_error=RuntimeError("renderer crashed")))

        with self.assertRaises(RuntimeError):
            await render_page(POST_URL, playwright_factory=factory)
        self.assertTrue(factory.all_released())

    async def test_cancellation_releases_session(self) -> None:
        factory = FakePlaywrightFactory(FakePage(hang=True))

        task = asyncio.create_task(render_page(POST_URL, playwright_factory=factory))
        while not factory.sessions or not factory.page.goto_calls:
            await asyncio.sleep(0)
        task.cancel()

        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertTrue(factory.all_released())

    async def test_launch_failure_stops_playwright(self) -> None:
        factory = FakePlaywrightFactory(FakePage(), launch_error=RuntimeError("no chromium"))

        with self.assertRaises(RuntimeError):
            await render_page(POST_URL, playwright_factory=factory)
        self.assertTrue(factory.sessions[0].stopped)

    async def test_teardown_continues_after_browser_close_error(self) -> None:
        factory = FakePlaywrightFactory(FakePage(html=page_html()), browser_close_error=RuntimeError("gone"))

        await render_page(POST_URL, playwright_factory=factory)
        self.assertTrue(factory.sessions[0].stopped)

    async def test_sessions_are_not_shared(self) -> None:
        factory = FakePlaywrightFactory(FakePage(html=page_html()))

        async with browser_session(playwright_factory=factory):
            pass
        async with browser_session(playwright_factory=factory):
            pass

        self.assertEqual(len(factory.sessions), 2)
        self.assertIsNot(factory.sessions[0], factory.sessions[1])
        self.assertTrue(factory.all_released())


if __name__ == "__main__":
    unittest.main()
