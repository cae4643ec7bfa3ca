"""
Transaction approve page: fee display, approve button state and the
reason shown when approval is blocked.
"""

from __future__ import annotations

from typing import ClassVar

from bridge_e2e.pages import base
from bridge_e2e.utils import errors, logger

log = logger.create_logger("TransactionApprove")

_ERROR_SELECTORS = (
    'div[class*="error"], div[style*="color: red"]',
    'div:has(svg[class*="warning"]), div:has(svg[class*="error"])',
    'div:has-text("Insufficient balance")',
)

_APPROVE_FALLBACK_BUTTONS = (
    'button:has-text("Confirm")',
    'button:has-text("Agree")',
    'button:has-text("Accept")',
    'button:has-text("Yes")',
)

_DISABLED_SCRIPT = """el => el.disabled
    || el.hasAttribute('disabled')
    || el.classList.contains('disabled')
    || getComputedStyle(el).opacity === '0.5'
    || getComputedStyle(el).cursor === 'not-allowed'"""


class TransactionApprovePage(base.BasePage):
    selectors: ClassVar[dict[str, str]] = {
        "approve_button": 'button:has-text("Approve")',
        "fee_item": "div._item_13b0h_1",
        "fee_title": "div._title_13b0h_11",
        "fee_content": "div._content_13b0h_15",
        "fee_direct": 'div._title_13b0h_11:has-text("Fee") + div._content_13b0h_15',
    }

    async def extract_gas_fee(self) -> str | None:
        """Text of the "Fee" row on the approve page.

        Raises:
            playwright.async_api.Error: If the page cannot be read.
        """
        items = self.locator("fee_item")
        for index in range(await items.count()):
            item = items.nth(index)
            title = await item.locator(self.selectors["fee_title"]).text_content()
            if title and title.strip() == "Fee":
                content = await item.locator(self.selectors["fee_content"]).text_content()
                if content and content.strip():
                    return content.strip()
        return await self.text_of("fee_direct")

    async def is_approve_enabled(self) -> bool:
        if not await self.is_visible("approve_button", 3000):
            return False
        try:
            disabled = await self.locator("approve_button").first.evaluate(_DISABLED_SCRIPT)
        except Exception as error:
            log.debug("Approve button state check failed", {"error": errors.get_error_message(error)})
            return False
        return not disabled

    async def error_message(self) -> str | None:
        """First visible error text on the approve page, if any."""
        await self.screenshot("error-message-check")
        for selector in _ERROR_SELECTORS:
            elements = self.page.locator(selector)
            try:
                for index in range(await elements.count()):
                    element = elements.nth(index)
                    if not await element.is_visible():
                        continue
                    text = await element.text_content()
                    if text and text.strip():
                        return text.strip()
            except Exception:
                continue
        return None

    async def click_approve(self) -> bool:
        """Click Approve, or a confirm-style fallback button."""
        if await self.click("approve_button"):
            await self.wait(2000)
            await self.wait_for_load()
            return True
        if await self.click_first_of(_APPROVE_FALLBACK_BUTTONS) is not None:
            await self.wait(2000)
            return True
        log.warn("Approve button not found")
        return False
