"""Signing prompts in the wallet extension window."""

from __future__ import annotations

from typing import ClassVar

from playwright import async_api

from bridge_e2e.pages import base
from bridge_e2e.utils import errors, logger

log = logger.create_logger("Transaction")

_APPROVE_SELECTORS = (
    'button:has-text("Approve")',
    'button[color="primary"]',
)


class TransactionPage(base.BasePage):
    """Approves the pending request in the wallet extension popup."""

    selectors: ClassVar[dict[str, str]] = {}

    async def _wait_for_popup(self, timeout_ms: int) -> async_api.Page | None:
        popup = self.extension_popup()
        if popup is not None:
            return popup
        try:
            popup = await self.context.wait_for_event("page", timeout=timeout_ms)
        except Exception:
            return None
        return popup if "chrome-extension" in popup.url else None

    async def confirm_in_wallet(self, timeout_ms: int = 10000) -> bool:
        """Approve the request in the wallet popup.

        The popup closing on its own after the click counts as
        success.

        Returns:
            True if the request was approved.
        """
        popup = await self._wait_for_popup(timeout_ms)
        if popup is None:
            log.warn("Wallet popup not found", {"timeoutMs": timeout_ms})
            return False

        try:
            await popup.bring_to_front()
            await popup.wait_for_load_state("domcontentloaded", timeout=timeout_ms)
            for selector in _APPROVE_SELECTORS:
                button = popup.locator(selector).first
                if await button.is_visible():
                    await button.click()
                    break
            else:
                await popup.keyboard.press("Enter")
            await popup.wait_for_event("close", timeout=5000)
        except Exception as error:
            if not popup.is_closed():
                log.warn("Wallet confirmation failed", {"error": errors.get_error_message(error)})
                return False

        log.success("Wallet request approved")
        return True
