"""
Browser session for one harness run.

Launches Chromium with the wallet extension loaded into a persistent,
pre-provisioned profile, and owns the page the bridge operation runs
on.
"""

from __future__ import annotations

from typing import Literal

from playwright import async_api

from bridge_e2e import config
from bridge_e2e.models import browser
from bridge_e2e.utils import errors, logger

log = logger.create_logger("BrowserSession")

DEFAULT_VIEWPORT = {"width": 1440, "height": 900}


class BrowserSession:
    """
    Manages the persistent browser context of a single harness run.
    """

    def __init__(self) -> None:
        self._playwright: async_api.Playwright | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None

    @property
    def page(self) -> async_api.Page:
        if self._page is None:
            raise RuntimeError("No browser session active")
        return self._page

    @property
    def context(self) -> async_api.BrowserContext:
        if self._context is None:
            raise RuntimeError("No browser session active")
        return self._context

    # ==========================================================================
    # Browser Lifecycle
    # ==========================================================================

    async def launch(self, settings: config.HarnessSettings) -> async_api.Page:
        """Start Chromium with the wallet extension and return its page.

        Extensions only load in a persistent context, so the wallet
        profile directory doubles as the browser's user data dir.
        """
        await self.close()
        extension = settings.extension_path
        log.info(
            "Launching browser",
            {"extensionPath": extension, "userDataDir": settings.user_data_dir, "headless": settings.headless},
        )

        self._playwright = await async_api.async_playwright().start()
        self._context = await self._playwright.chromium.launch_persistent_context(
            settings.user_data_dir,
            headless=settings.headless,
            viewport=DEFAULT_VIEWPORT,
            args=[
                f"--disable-extensions-except={extension}",
                f"--load-extension={extension}",
                "--no-first-run",
                "--no-default-browser-check",
            ],
        )
        pages = self._context.pages
        self._page = pages[0] if pages else await self._context.new_page()
        log.debug("Browser launched", {"pages": len(self._context.pages)})
        return self._page

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def navigate_to(
        self,
        url: str,
        wait_until: Literal["commit", "domcontentloaded", "load", "networkidle"] = "domcontentloaded",
        timeout: int = 60000,
    ) -> browser.NavigationResult:
        """Navigate the session page to *url* and wait for it to load."""
        page = self.page
        log.debug("Navigating", {"url": url, "waitUntil": wait_until, "timeout": timeout})
        try:
            response = await page.goto(url, wait_until=wait_until, timeout=timeout)
        except Exception as error:
            log.warn("Navigation error", {"url": url, "error": errors.get_error_message(error)})
            return browser.NavigationResult(success=False, error_message=errors.get_error_message(error))

        status_code = response.status if response else None
        status_text = response.status_text if response else None
        if status_code and status_code >= 400:
            return browser.NavigationResult(
                success=False,
                status_code=status_code,
                status_text=status_text,
                error_message=f"Server error ({status_code}: {status_text})",
            )
        if page.url != url:
            log.info("Redirected", {"from": url, "to": page.url})
        return browser.NavigationResult(success=True, status_code=status_code, status_text=status_text)

    async def close(self) -> None:
        """Close the context and stop Playwright; errors are non-fatal."""
        self._page = None
        if self._context:
            try:
                await self._context.close()
            except Exception as exc:
                log.debug("Context close error (non-fatal)", {"error": errors.get_error_message(exc)})
            self._context = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": errors.get_error_message(exc)})
            self._playwright = None
