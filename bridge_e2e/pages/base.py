"""
Base page object: capability-named interactions with one Playwright page.

Subclasses declare a ``selectors`` map from capability names
("amount_input", "submit_button", ...) to Playwright selectors.
Callers only ever use capability names.  Element lookups that fail
return ``False``/``None`` instead of raising.
"""

from __future__ import annotations

import asyncio
import pathlib
from typing import ClassVar, Literal

from playwright import async_api

from bridge_e2e.utils import errors, logger

log = logger.create_logger("Page")

_MODAL = 'div[role="dialog"], div.modal'
_MODAL_CLOSE = 'button:has-text("Close"), button.close-button'


class BasePage:
    """Shared helpers for the bridge application's page objects."""

    selectors: ClassVar[dict[str, str]] = {}

    def __init__(
        self,
        page: async_api.Page,
        context: async_api.BrowserContext,
        task_id: str = "0",
        screenshots_dir: str = "screenshots",
    ) -> None:
        self.page = page
        self.context = context
        self.task_id = task_id
        self.screenshots_dir = screenshots_dir

    def locator(self, capability: str) -> async_api.Locator:
        """Locator for a capability name, or a raw selector if unnamed."""
        return self.page.locator(self.selectors.get(capability, capability))

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def navigate(self, url: str, timeout_ms: int = 60000) -> bool:
        """Open *url* and wait for the DOM to load."""
        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            return True
        except Exception as error:
            log.warn("Navigation failed", {"url": url, "error": errors.get_error_message(error)})
            return False

    async def wait_for_load(
        self,
        timeout_ms: int = 10000,
        state: Literal["domcontentloaded", "load", "networkidle"] = "networkidle",
    ) -> bool:
        """Wait for a page load state; ``False`` on timeout."""
        try:
            await self.page.wait_for_load_state(state, timeout=timeout_ms)
            return True
        except Exception:
            log.debug("Load state timeout", {"state": state, "timeoutMs": timeout_ms})
            return False

    async def wait(self, ms: int) -> None:
        """Wait for a specified number of milliseconds.

        Uses ``asyncio.sleep`` instead of Playwright's
        ``page.wait_for_timeout`` which is intended only
        for debugging.
        """
        await asyncio.sleep(ms / 1000)

    # ==========================================================================
    # Element Capabilities
    # ==========================================================================

    async def is_visible(self, capability: str, timeout_ms: int = 2000) -> bool:
        """Whether the capability's first element becomes visible in time."""
        try:
            await self.locator(capability).first.wait_for(state="visible", timeout=timeout_ms)
            return True
        except Exception:
            return False

    async def is_enabled(self, capability: str, timeout_ms: int = 2000) -> bool:
        if not await self.is_visible(capability, timeout_ms):
            return False
        try:
            return await self.locator(capability).first.is_enabled()
        except Exception:
            return False

    async def click(self, capability: str, timeout_ms: int = 5000) -> bool:
        """Click the capability's first visible element."""
        if not await self.is_visible(capability, timeout_ms):
            log.debug(f"Not visible: {capability}")
            return False
        try:
            await self.locator(capability).first.click(timeout=timeout_ms)
            return True
        except Exception as error:
            log.debug(f"Click failed: {capability}", {"error": errors.get_error_message(error)})
            return False

    async def fill_input(self, capability: str, value: str, timeout_ms: int = 5000) -> bool:
        """Replace the content of an input with *value*."""
        if not await self.is_visible(capability, timeout_ms):
            return False
        try:
            field = self.locator(capability).first
            await field.click()
            await field.fill(value)
            return True
        except Exception as error:
            log.debug(f"Fill failed: {capability}", {"error": errors.get_error_message(error)})
            return False

    async def text_of(self, capability: str, timeout_ms: int = 2000) -> str | None:
        """Trimmed text content of the capability's first element."""
        if not await self.is_visible(capability, timeout_ms):
            return None
        try:
            text = await self.locator(capability).first.text_content()
        except Exception:
            return None
        return text.strip() if text else None

    async def press(self, key: str) -> None:
        await self.page.keyboard.press(key)

    async def click_first_of(self, candidates: tuple[str, ...], timeout_ms: int = 1000) -> str | None:
        """Click the first visible selector among *candidates*.

        Returns:
            The selector that was clicked, or ``None``.
        """
        for selector in candidates:
            if await self.click(selector, timeout_ms):
                return selector
        return None

    async def handle_possible_modals(self) -> bool:
        """Close a blocking dialog if one is open.

        Tries the dialog's close button first, then Escape.

        Returns:
            True if a dialog was found and is now closed.
        """
        if not await self.is_visible(_MODAL, 3000):
            return False
        await self.screenshot("modal-detected")
        if await self.click(_MODAL_CLOSE, 1000):
            await self.wait(1000)
            return True
        await self.press("Escape")
        await self.wait(1000)
        closed = not await self.is_visible(_MODAL, 1000)
        if not closed:
            log.debug("Dialog still open after Escape")
        return closed

    def extension_popup(self) -> async_api.Page | None:
        """An open wallet extension window in this context, if any."""
        for candidate in self.context.pages:
            if candidate is not self.page and "chrome-extension" in candidate.url:
                return candidate
        return None

    # ==========================================================================
    # Diagnostics
    # ==========================================================================

    def screenshot_path(self, name: str) -> str:
        return str(pathlib.Path(self.screenshots_dir) / f"{name}-task-{self.task_id}.png")

    async def screenshot(self, name: str) -> str | None:
        """Save a PNG checkpoint screenshot.

        Returns:
            The file path, or ``None`` if the capture failed.
        """
        path = self.screenshot_path(name)
        try:
            pathlib.Path(self.screenshots_dir).mkdir(parents=True, exist_ok=True)
            await self.page.screenshot(path=path)
            return path
        except Exception as error:
            log.warn("Screenshot failed", {"name": name, "error": errors.get_error_message(error)})
            return None
