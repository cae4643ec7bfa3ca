"""Navigation into the Bridge/Swap view and page-readiness checks."""

from __future__ import annotations

from typing import ClassVar

from bridge_e2e.pages import base
from bridge_e2e.utils import logger

log = logger.create_logger("BridgeNavigation")

_LOADING_SELECTORS = (
    'text="Loading..."',
    'text="Loading"',
    'div[role="progressbar"]',
    ".spinner",
    'div[class*="loading"]',
    'svg[class*="spin"]',
)

_FORM_READY_SELECTORS = (
    "button._root_1luwi_1",
    'input[inputmode="decimal"]',
    'button:has-text("Preview Route")',
    "form",
)

# Tried in order when the primary bridge button is missing.
_BRIDGE_BUTTON_FALLBACKS = (
    'button._item_zmlsm_7:has(path[d*="M11 3.5v-2l4 3-4 3v-2H2v-2z"])',
    '//button[contains(@class, "_item_")][.//span[text()="Bridge/Swap"]]',
    'button:has-text("Bridge/Swap")',
)


class BridgeNavigationPage(base.BasePage):
    """Moves from the wallet widget home into the Bridge/Swap form."""

    selectors: ClassVar[dict[str, str]] = {
        "home_button": "button._logo_1evmk_10",
        "bridge_button": 'button._item_zmlsm_7:has(span:text("Bridge/Swap"))',
        "overlay_button": "button._overlay_1dxcf_1",
    }

    async def is_wallet_ui_started(self) -> bool:
        return await self.is_visible("overlay_button", 2000)

    async def navigate_to_bridge_ui(self, base_url: str) -> bool:
        """Open the Bridge/Swap view.

        Clicks the widget's home button, then the bridge menu entry.
        Falls back to alternative selectors and finally to the
        ``/bridge`` URL under *base_url*.
        """
        if await self.click("home_button", 2000):
            await self.wait(2000)

        for selector in ("bridge_button", *_BRIDGE_BUTTON_FALLBACKS):
            if await self.click(selector, 3000):
                log.info("Opened Bridge/Swap view", {"selector": self.selectors.get(selector, selector)})
                await self.wait(2000)
                await self.wait_for_load(10000)
                return True

        bridge_url = f"{base_url.rstrip('/')}/bridge"
        log.warn("Bridge/Swap button not found, navigating directly", {"url": bridge_url})
        if not await self.navigate(bridge_url, 30000):
            return False
        await self.wait(2000)
        return True

    async def wait_for_bridge_page_loading(self, max_wait_ms: int = 15000) -> bool:
        """Wait for any visible loading indicator to disappear.

        Returns:
            True if the page finished loading, or if interactive
            controls are present after the wait timed out.
        """
        visible_selector = None
        for selector in _LOADING_SELECTORS:
            if await self.is_visible(selector, 200):
                visible_selector = selector
                break
        if visible_selector is None:
            return True

        log.debug("Waiting for loading indicator", {"selector": visible_selector})
        try:
            await self.page.wait_for_selector(visible_selector, state="hidden", timeout=max_wait_ms)
            await self.wait(1000)
            return True
        except Exception:
            await self.screenshot("bridge-loading-timeout")
            for selector in ("button:visible", "input:visible"):
                if await self.page.locator(selector).count() > 0:
                    return True
            return False

    async def check_form_elements_ready(self) -> bool:
        """Whether any key bridge form element is visible."""
        for selector in _FORM_READY_SELECTORS:
            if await self.is_visible(selector, 3000):
                return True
        await self.screenshot("form-elements-not-ready")
        return False
