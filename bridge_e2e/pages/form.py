"""
Bridge form page: chain/token selection, amount entry, route type and
the preview information shown under the form.
"""

from __future__ import annotations

import re
from typing import Any, ClassVar, Literal

from bridge_e2e.models import bridge
from bridge_e2e.pages import base
from bridge_e2e.utils import errors, logger

log = logger.create_logger("BridgeForm")

_DURATION_RE = re.compile(r"(\d+\s*(?:min|hour|day|second)s?)", re.IGNORECASE)
_SLIPPAGE_RE = re.compile(r"(\d+(?:\.\d+)?%)")

_PREVIEW_FALLBACK_BUTTONS = (
    'button:has-text("Continue")',
    'button:has-text("Next")',
    'button:has-text("Proceed")',
)

OPTIMISTIC_BRIDGE = "Optimistic bridge"


def chain_selector(chain: str) -> str:
    return f'img._circle_80nya_5[src*="/images/{chain}"]'


def token_selector(token: str) -> str:
    return f'img._logo_tqxo1_29[src*="/images/{token}"]'


class BridgeFormPage(base.BasePage):
    """Fills in the bridge form."""

    selectors: ClassVar[dict[str, str]] = {
        "from_to_button": "button._root_1luwi_1",
        "amount_input": 'input[inputmode="decimal"]',
        "preview_route_button": 'button:has-text("Preview Route")',
        "route_type_button": 'button:has-text("Route Type")',
        "optimistic_bridge_option": f'button:has(div:has-text("{OPTIMISTIC_BRIDGE}"))',
        "output_amount": 'p._input_v9z30_1, p[class*="_input_"]',
        "error_message": 'div._help_n8r7b_1._error_n8r7b_24, div[class*="_help_"][class*="_error_"]',
        "warning_message": 'div._help_n8r7b_1._warning_n8r7b_20, div[class*="_help_"][class*="_warning_"]',
        "estimated_duration": 'div._row_1kjze_45:has(span:has-text("Estimated route duration"))',
        "slippage": 'span._description_1kjze_55:has(button[class*="_edit_"])',
        "list_loading": 'div[class*="loading"], div[class*="spinner"]',
    }

    # ==========================================================================
    # Chain and Token Selection
    # ==========================================================================

    async def click_select_button(self, side: Literal["from", "to"]) -> bool:
        """Open the FROM (first) or TO (second) asset selector."""
        buttons = self.locator("from_to_button")
        try:
            if await buttons.count() >= 2:
                button = buttons.nth(0 if side == "from" else 1)
                await button.wait_for(state="visible", timeout=3000)
                await button.click()
                await self.wait(1000)
                return True
        except Exception as error:
            log.debug(f"Selector button click failed: {side}", {"error": errors.get_error_message(error)})
        log.warn(f"{side.upper()} selector button not found")
        return False

    async def _click_image(self, selector: str, label: str) -> bool:
        images = self.page.locator(selector)
        try:
            for index in range(await images.count()):
                image = images.nth(index)
                if not await image.is_visible():
                    continue
                parent = image.locator("xpath=ancestor::button")
                if await parent.count() > 0 and await parent.first.is_visible():
                    await parent.first.click()
                else:
                    await image.click()
                await self.wait(1000)
                return True
        except Exception as error:
            log.debug(f"Selecting {label} failed", {"error": errors.get_error_message(error)})
            return False
        log.warn(f"No visible {label}")
        return False

    async def select_chain(self, chain: str) -> bool:
        return await self._click_image(chain_selector(chain), f"chain {chain}")

    async def select_token(self, token: str) -> bool:
        return await self._click_image(token_selector(token), f"token {token}")

    async def wait_for_token_list(self, timeout_ms: int = 10000) -> None:
        await self.wait(1000)
        if await self.is_visible("list_loading", 500):
            try:
                await self.locator("list_loading").first.wait_for(state="hidden", timeout=timeout_ms)
            except Exception:
                log.debug("Token list still loading")

    async def select_chain_and_token(self, chain: str, token: str) -> bool:
        """Pick *chain* then *token* in the open selector.

        Returns:
            True only if both selections succeeded.
        """
        chain_ok = await self.select_chain(chain)
        await self.wait_for_token_list()
        token_ok = await self.select_token(token)
        return chain_ok and token_ok

    # ==========================================================================
    # Amount and Route Type
    # ==========================================================================

    async def enter_amount(self, amount: str) -> bool:
        if not await self.is_visible("amount_input", 5000):
            log.warn("Amount input not found")
            return False
        try:
            field = self.locator("amount_input").first
            await field.click()
            await self.press("Control+a")
            await self.press("Backspace")
            await field.fill(amount)
        except Exception as error:
            log.warn("Amount entry failed", {"error": errors.get_error_message(error)})
            return False
        await self.wait(1000)
        return True

    async def select_route_type(self, route_type: str) -> bool:
        """Choose the route type.

        Only the optimistic bridge needs a click; any other route
        type is the form's default and succeeds without action.
        """
        if route_type != OPTIMISTIC_BRIDGE:
            return True
        if await self.click("optimistic_bridge_option", 3000):
            await self.wait(1000)
            return True
        if not await self.click("route_type_button", 3000):
            return False
        await self.wait(1000)
        if await self.click("optimistic_bridge_option", 3000):
            await self.wait(1000)
            return True
        await self.press("Escape")
        return False

    # ==========================================================================
    # Preview
    # ==========================================================================

    async def get_preview_info(self) -> dict[str, Any]:
        """Read the preview fields shown under the form.

        Keys present only when found: ``outputAmount``, ``error``,
        ``warning``, ``estimatedDuration``, ``slippage``.
        """
        info: dict[str, Any] = {}
        for key, capability in (
            ("outputAmount", "output_amount"),
            ("error", "error_message"),
            ("warning", "warning_message"),
        ):
            text = await self.text_of(capability)
            if text:
                info[key] = text

        duration = await self.text_of("estimated_duration")
        if duration and (match := _DURATION_RE.search(duration)):
            info["estimatedDuration"] = match.group(1)
        slippage = await self.text_of("slippage")
        if slippage and (match := _SLIPPAGE_RE.search(slippage)):
            info["slippage"] = match.group(1)
        return info

    async def preview_button_status(self) -> bridge.PreviewButtonStatus:
        if not await self.is_visible("preview_route_button", 5000):
            return "not_found"
        return "enabled" if await self.is_enabled("preview_route_button", 1000) else "disabled"

    async def click_preview_route(self) -> bool:
        """Click Preview Route, or a Continue/Next/Proceed fallback."""
        status = await self.preview_button_status()
        if status == "disabled":
            log.warn("Preview Route button is disabled")
            return False
        if status == "enabled":
            clicked = await self.click("preview_route_button")
        else:
            clicked = await self.click_first_of(_PREVIEW_FALLBACK_BUTTONS) is not None
        if clicked:
            await self.wait(2000)
        return clicked
