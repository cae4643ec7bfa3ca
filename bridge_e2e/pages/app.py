"""
Bridge application facade.

Bundles the page objects behind the capability calls the bridge
operation pipeline makes, so the pipeline never sees a selector.
"""

from __future__ import annotations

from typing import Any, Literal

from playwright import async_api

from bridge_e2e.models import bridge
from bridge_e2e.pages import approve, base, form, navigation, route, transaction, wallet


class BridgeApp(base.BasePage):
    """All UI capabilities of the bridge application on one page."""

    def __init__(
        self,
        page: async_api.Page,
        context: async_api.BrowserContext,
        base_url: str,
        task_id: str = "0",
        screenshots_dir: str = "screenshots",
        wallet_timeout_ms: int = 10000,
    ) -> None:
        super().__init__(page, context, task_id, screenshots_dir)
        self.base_url = base_url
        self.wallet_timeout_ms = wallet_timeout_ms
        args = (page, context, task_id, screenshots_dir)
        self.wallet_page = wallet.WalletPage(*args)
        self.navigation_page = navigation.BridgeNavigationPage(*args)
        self.form_page = form.BridgeFormPage(*args)
        self.route_page = route.BridgeRoutePage(*args)
        self.transaction_page = transaction.TransactionPage(*args)
        self.approve_page = approve.TransactionApprovePage(*args)

    # Wallet

    async def verify_wallet_connected(self) -> bool:
        return await self.wallet_page.verify_connected()

    async def connect_wallet(self) -> None:
        await self.wallet_page.connect()

    async def confirm_in_wallet(self) -> bool:
        return await self.transaction_page.confirm_in_wallet(self.wallet_timeout_ms)

    # Navigation

    async def navigate_to_bridge(self) -> bool:
        """Open the wallet widget, then the Bridge/Swap view inside it."""
        if not await self.wallet_page.launch_wallet_ui():
            return False
        return await self.navigation_page.navigate_to_bridge_ui(self.base_url)

    async def wait_for_bridge_page_loading(self) -> bool:
        return await self.navigation_page.wait_for_bridge_page_loading()

    async def check_form_elements_ready(self) -> bool:
        return await self.navigation_page.check_form_elements_ready()

    # Form

    async def click_select_button(self, side: Literal["from", "to"]) -> bool:
        return await self.form_page.click_select_button(side)

    async def select_chain_and_token(self, chain: str, token: str) -> bool:
        return await self.form_page.select_chain_and_token(chain, token)

    async def dismiss_selector(self) -> None:
        await self.press("Escape")

    async def enter_amount(self, amount: str) -> bool:
        return await self.form_page.enter_amount(amount)

    async def get_preview_info(self) -> dict[str, Any]:
        return await self.form_page.get_preview_info()

    async def preview_button_status(self) -> bridge.PreviewButtonStatus:
        return await self.form_page.preview_button_status()

    async def select_route_type(self, route_type: str) -> bool:
        return await self.form_page.select_route_type(route_type)

    async def click_preview_route(self) -> bool:
        return await self.form_page.click_preview_route()

    # Route preview and approval

    async def click_submit(self) -> bool:
        return await self.route_page.click_submit()

    async def extract_gas_fee(self) -> str | None:
        return await self.approve_page.extract_gas_fee()

    async def is_approve_enabled(self) -> bool:
        return await self.approve_page.is_approve_enabled()

    async def approve_error_message(self) -> str | None:
        return await self.approve_page.error_message()

    async def click_approve(self) -> bool:
        return await self.approve_page.click_approve()
