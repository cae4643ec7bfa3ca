"""
Wallet page: connect the browser wallet and open the wallet widget.

The wallet extension itself is already onboarded in the browser
profile; this page only drives the connection prompts.
"""

from __future__ import annotations

from typing import ClassVar

from bridge_e2e.pages import base
from bridge_e2e.utils import errors, logger

log = logger.create_logger("WalletPage")

# Any of these being visible means a wallet is connected.
_ADDRESS_SELECTORS = (
    ".wallet-address",
    ".address-display",
    "._address_1evmk_27",
    "button._copy_1evmk_15",
    "text=/init1\\w+/i",
)

_POPUP_APPROVE_SELECTORS = (
    'button:has-text("Approve")',
    "button.approve-button",
    "button.primary-button",
)


class WalletPage(base.BasePage):
    """Wallet connection and wallet widget launch."""

    selectors: ClassVar[dict[str, str]] = {
        "connect_button": 'button:has-text("Connect")',
        "keplr_option": "text=Keplr",
        "inline_approve": 'button:has-text("Approve"), button:has-text("Confirm")',
        "disconnect_button": "button._disconnect_1evmk_51",
        "overlay_button": "button._overlay_1dxcf_1",
        "wallet_ui_label": "span.mantine-Button-label",
        "wallet_ui_button": 'button:has-text("init"), button:has-text(".init")',
    }

    async def verify_connected(self) -> bool:
        """Whether the page shows a connected wallet address."""
        for selector in _ADDRESS_SELECTORS:
            if await self.is_visible(selector, 2000):
                return True
        return await self.is_visible("disconnect_button", 2000)

    async def connect(self) -> None:
        """Run the connect prompt and approve it in the extension.

        Failures are logged; callers re-check with
        :meth:`verify_connected`.
        """
        try:
            if await self.click("connect_button", 5000):
                await self.wait(2000)
            if not await self.is_visible("keplr_option", 2000):
                # Connect dialog opened in a stale state; reopen it.
                await self.press("Escape")
                await self.wait(1000)
                if await self.click("connect_button", 5000):
                    await self.wait(2000)
            if await self.click("keplr_option", 5000):
                await self.wait(2000)
            await self._approve_connection()
        except Exception as error:
            log.warn("Wallet connection flow failed", {"error": errors.get_error_message(error)})

    async def _approve_connection(self) -> None:
        popup = self.extension_popup()
        if popup is None:
            try:
                popup = await self.context.wait_for_event("page", timeout=5000)
                await popup.wait_for_load_state("domcontentloaded", timeout=10000)
            except Exception:
                popup = None

        if popup is not None:
            try:
                for selector in _POPUP_APPROVE_SELECTORS:
                    button = popup.locator(selector).first
                    if await button.is_visible():
                        await button.click()
                        break
                if not popup.is_closed():
                    await popup.close()
            except Exception as error:
                log.debug("Extension popup handling failed", {"error": errors.get_error_message(error)})

        # Some wallet versions approve inline on the page.
        if await self.click("inline_approve", 2000):
            await self.wait(2000)
        await self.screenshot("after-wallet-connection")

    async def launch_wallet_ui(self) -> bool:
        """Open the wallet widget unless it is already open.

        Returns:
            True once the widget's overlay or an address is visible.
        """
        if await self.is_visible("overlay_button", 2000):
            return True

        opened = False
        labels = self.locator("wallet_ui_label")
        try:
            for index in range(await labels.count()):
                label = labels.nth(index)
                text = await label.text_content() or ""
                if "init" not in text:
                    continue
                button = label.locator("xpath=ancestor::button")
                if await button.is_visible():
                    await button.click()
                    opened = True
                    break
        except Exception as error:
            log.debug("Wallet label lookup failed", {"error": errors.get_error_message(error)})

        if not opened:
            opened = await self.click("wallet_ui_button", 2000)
        if not opened:
            log.warn("Wallet widget launch button not found")
            return False

        await self.wait(2000)
        if await self.is_visible("overlay_button", 5000):
            return True
        return await self.verify_connected()
