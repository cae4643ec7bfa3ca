"""Route preview page: submitting the previewed route."""

from __future__ import annotations

from typing import ClassVar

from bridge_e2e.pages import base
from bridge_e2e.utils import logger

log = logger.create_logger("BridgeRoute")


class BridgeRoutePage(base.BasePage):
    selectors: ClassVar[dict[str, str]] = {
        "fetching_messages": 'div:has-text("Fetching messages...")',
        "submit_button": "button._button_1ey5t_1",
        "submit_fallback": 'button:has-text("Submit")',
    }

    async def click_submit(self) -> bool:
        """Wait for the route messages to load, then click Submit."""
        if await self.is_visible("fetching_messages", 2000):
            try:
                await self.locator("fetching_messages").first.wait_for(state="hidden", timeout=30000)
            except Exception:
                log.warn("Route messages still loading after 30s")
            await self.wait(1000)

        for capability in ("submit_button", "submit_fallback"):
            if await self.is_enabled(capability, 5000) and await self.click(capability):
                await self.wait(2000)
                return True
        log.warn("Submit button not found or disabled")
        return False
