"""Playwright browser lifecycle for scenario runs."""

import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import structlog
from playwright.async_api import Browser, Error as PlaywrightError, Page, Playwright, async_playwright

from ..config import QAConfig, get_config

logger = structlog.get_logger(__name__)


def find_chromium_executable() -> str | None:
    """System Chromium/Chrome, or None to use Playwright's bundled build."""
    env_path = os.getenv("CHROMIUM_PATH")
    if env_path and Path(env_path).exists():
        return env_path

    candidates = [
        "/usr/bin/chromium",
        "/usr/bin/chromium-browser",
        "/usr/bin/google-chrome",
        "/usr/bin/google-chrome-stable",
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    ]
    for path in candidates:
        if Path(path).exists():
            return path
    return None


class BrowserSession:
    """Owns one Chromium instance; hands out a fresh context and page per scenario."""

    def __init__(self, config: QAConfig | None = None):
        self.config = config or get_config()
        self.playwright: Playwright | None = None
        self.browser: Browser | None = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()

    @property
    def launch_args(self) -> list[str]:
        args = [f"--window-size={self.config.window_width},{self.config.window_height}"]
        if self.config.browser_headless:
            args += ["--disable-gpu", "--no-sandbox", "--disable-dev-shm-usage"]
        return args

    async def start(self):
        """Start Playwright and launch Chromium, retrying failed launches."""
        logger.info("Starting browser session", headless=self.config.browser_headless)

        launch_kwargs: dict[str, Any] = {
            "headless": self.config.browser_headless,
            "args": self.launch_args,
            "timeout": self.config.connection_retry_timeout_seconds * 1000,
        }
        chromium_path = find_chromium_executable()
        if chromium_path:
            launch_kwargs["executable_path"] = chromium_path

        self.playwright = await async_playwright().start()
        attempts = max(1, self.config.connection_retry_count)
        for attempt in range(1, attempts + 1):
            try:
                self.browser = await self.playwright.chromium.launch(**launch_kwargs)
                return
            except PlaywrightError as e:
                logger.warning("Browser launch failed", attempt=attempt, attempts=attempts, error=str(e))
                if attempt == attempts:
                    await self.stop()
                    raise

    async def stop(self):
        """Cleanup browser resources."""
        logger.info("Stopping browser session")

        if self.browser:
            await self.browser.close()
            self.browser = None
        if self.playwright:
            await self.playwright.stop()
            self.playwright = None

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[Page]:
        if self.browser is None:
            raise RuntimeError("BrowserSession.start() has not been called")

        context = await self.browser.new_context(
            base_url=self.config.base_url,
            viewport={"width": self.config.window_width, "height": self.config.window_height},
            user_agent=self.config.user_agent,
        )
        page = await context.new_page()
        page.set_default_timeout(self.config.wait_timeout_seconds * 1000)
        try:
            yield page
        finally:
            await page.close()
            await context.close()
