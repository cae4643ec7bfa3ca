"""
Bridge operation pipeline.

Drives one end-to-end bridge transaction through its stages::

    Init → WalletConnected → BridgeConfigured → RouteValidated
         → RouteSubmitted → SimulationValidated → TransactionSigned
         → Broadcast → Terminal

Each stage registers its network monitor *before* the UI action that
triggers the traffic, then waits on it.  A failed stage sets
``error`` and stops forward progress; every path ends in exactly one
``finalize`` call, and nothing raises out of
:meth:`BridgeOperation.perform_bridge_operation`.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Literal, Protocol

from bridge_e2e.models import bridge
from bridge_e2e.models import monitor as monitor_models
from bridge_e2e.monitoring import registry as registry_mod
from bridge_e2e.responses import broadcast, interpreter, simulation
from bridge_e2e.utils import errors, logger

log = logger.create_logger("BridgeOperation")

PipelineStage = Literal[
    "Init",
    "WalletConnected",
    "BridgeConfigured",
    "RouteValidated",
    "RouteSubmitted",
    "SimulationValidated",
    "TransactionSigned",
    "Broadcast",
    "Terminal",
]

ROUTE_PATH = "route"
MESSAGES_PATH = "msgs"


class BridgeUI(Protocol):
    """UI capabilities the pipeline drives.

    Every method reports failure through its return value.  Only
    genuinely unexpected conditions raise.
    """

    async def screenshot(self, name: str) -> str | None: ...

    async def wait(self, ms: int) -> None: ...

    async def verify_wallet_connected(self) -> bool: ...

    async def connect_wallet(self) -> None: ...

    async def navigate_to_bridge(self) -> bool: ...

    async def wait_for_bridge_page_loading(self) -> bool: ...

    async def check_form_elements_ready(self) -> bool: ...

    async def click_select_button(self, side: Literal["from", "to"]) -> bool: ...

    async def select_chain_and_token(self, chain: str, token: str) -> bool: ...

    async def dismiss_selector(self) -> None: ...

    async def enter_amount(self, amount: str) -> bool: ...

    async def get_preview_info(self) -> dict[str, Any]: ...

    async def preview_button_status(self) -> bridge.PreviewButtonStatus: ...

    async def select_route_type(self, route_type: str) -> bool: ...

    async def click_preview_route(self) -> bool: ...

    async def click_submit(self) -> bool: ...

    async def confirm_in_wallet(self) -> bool: ...

    async def extract_gas_fee(self) -> str | None: ...

    async def is_approve_enabled(self) -> bool: ...

    async def approve_error_message(self) -> str | None: ...

    async def click_approve(self) -> bool: ...

    async def handle_possible_modals(self) -> bool: ...


@dataclasses.dataclass(frozen=True)
class StageTimeouts:
    """Monitor deadlines and waits per stage, in milliseconds."""

    route_monitor: int = 5000
    route_wait: int = 5000
    msgs_monitor: int = 5000
    msgs_wait: int = 10000
    simulate_monitor: int = 15000
    simulate_wait: int = 15000
    broadcast_monitor: int = 15000
    broadcast_wait: int = 15000
    form_settle: int = 5000
    fee_settle: int = 2000
    selector_settle: int = 1000


class _StageFailed(Exception):
    """Ends the stage sequence; the result already carries the outcome."""


class BridgeOperation:
    """Runs bridge operations against one page and its monitor registry.

    Usage::

        operation = BridgeOperation(app, registry)
        result = await operation.perform_bridge_operation("0.1")
    """

    def __init__(
        self,
        ui: BridgeUI,
        registry: registry_mod.MonitorRegistry,
        timeouts: StageTimeouts | None = None,
    ) -> None:
        self.ui = ui
        self.registry = registry
        self.timeouts = timeouts or StageTimeouts()
        self.handler = interpreter.ResponseHandler()
        self.stage: PipelineStage = "Init"

    def _enter(self, stage: PipelineStage) -> None:
        self.stage = stage
        log.subsection(stage)

    async def _screenshot(self, result: bridge.BridgeOperationResult, name: str) -> None:
        path = await self.ui.screenshot(name)
        if path:
            result.screenshots.append(path)

    def _fail(
        self,
        result: bridge.BridgeOperationResult,
        message: str,
        *,
        success: bool | None = None,
        test_progress: bridge.TestProgress | None = None,
        route_pass: bool | None = None,
    ) -> _StageFailed:
        result.error = message
        log.error(f"{self.stage} failed: {message}")
        result.finalize(success=success, test_progress=test_progress, route_pass=route_pass)
        return _StageFailed(message)

    # ==========================================================================
    # Entry Point
    # ==========================================================================

    async def perform_bridge_operation(
        self,
        amount: str,
        from_chain: str = "interwoven",
        from_token: str = "USDC",
        to_chain: str = "interwoven",
        to_token: str = "INIT",
        route_type: str = "Minitswap",
        target_address: str | None = None,
    ) -> bridge.BridgeOperationResult:
        """Run one bridge operation and return its finalized result.

        Never raises: every failure is recorded on the returned
        result.
        """
        params = bridge.BridgeOperationInput(
            amount=amount,
            from_chain=from_chain,
            from_token=from_token,
            to_chain=to_chain,
            to_token=to_token,
            route_type=route_type,
            target_address=target_address,
        )
        result = bridge.BridgeOperationResult()
        self.stage = "Init"

        log.section("Bridge Operation")
        log.info("Starting bridge operation", params.model_dump(by_alias=True, exclude_none=True))
        log.start_timer("bridge-operation")

        try:
            await self._screenshot(result, "bridge-operation-start")
            self.registry.cancel_all()
            await self._run_stages(result, params)
        except _StageFailed:
            pass
        except Exception as error:
            message = errors.get_error_message(error)
            log.error(f"Bridge operation failed at {self.stage}", {"error": message})
            result.error = message
            try:
                await self._screenshot(result, "bridge-operation-error")
            except Exception as screenshot_error:
                log.warn("Error screenshot failed", {"error": errors.get_error_message(screenshot_error)})
            if not result.finalized:
                result.finalize(success=False)
        finally:
            cancelled = self.registry.cancel_all()
            if cancelled:
                log.debug("Cancelled leftover monitors", {"count": cancelled})

        if not result.finalized:
            result.finalize()
        self.stage = "Terminal"
        log.end_timer("bridge-operation", "Bridge operation finished")
        return result

    async def _run_stages(
        self, result: bridge.BridgeOperationResult, params: bridge.BridgeOperationInput
    ) -> None:
        await self._connect_wallet(result)
        await self._configure_bridge(result, params)
        preview = await self._validate_route(result, params)
        await self._submit_route(result, params, preview)
        await self._validate_simulation(result)
        await self._sign_and_broadcast(result)
        self._enter("Terminal")

    # ==========================================================================
    # Stages
    # ==========================================================================

    async def _connect_wallet(self, result: bridge.BridgeOperationResult) -> None:
        if not await self.ui.verify_wallet_connected():
            log.info("Wallet not connected, connecting")
            await self.ui.connect_wallet()
            if not await self.ui.verify_wallet_connected():
                raise self._fail(result, "Wallet connection failed", success=False, test_progress="Untested")
        self._enter("WalletConnected")
        log.success("Wallet connected")

    async def _configure_bridge(
        self, result: bridge.BridgeOperationResult, params: bridge.BridgeOperationInput
    ) -> None:
        if not await self.ui.navigate_to_bridge():
            raise self._fail(result, "Unable to navigate to Bridge interface", success=False)

        await self.ui.wait_for_bridge_page_loading()
        if not await self.ui.check_form_elements_ready():
            log.warn("Form elements not ready, waiting")
            await self.ui.wait(self.timeouts.form_settle)
        await self._screenshot(result, "bridge-page-loaded")

        for side, chain, token in (
            ("from", params.from_chain, params.from_token),
            ("to", params.to_chain, params.to_token),
        ):
            await self.ui.click_select_button(side)
            await self.ui.wait(self.timeouts.selector_settle)
            if not await self.ui.select_chain_and_token(chain, token):
                log.warn(f"Could not select {side.upper()} {chain}/{token}")
                await self.ui.dismiss_selector()
                await self.ui.wait(self.timeouts.selector_settle)
        self._enter("BridgeConfigured")

    async def _validate_route(
        self, result: bridge.BridgeOperationResult, params: bridge.BridgeOperationInput
    ) -> dict[str, Any]:
        """Validate the route from the API reply, or from the UI if none arrives.

        Returns:
            The preview fields read from the UI.
        """
        route_monitor = self.registry.register_path(
            ROUTE_PATH,
            "POST",
            monitor_models.MonitorOptions(
                one_time=True,
                partial_match=True,
                timeout_ms=self.timeouts.route_monitor,
                silent_timeout=True,
            ),
        )
        await self.ui.enter_amount(params.amount)
        capture = await self.registry.wait(route_monitor, self.timeouts.route_wait)

        if capture.success:
            outcome = self.handler.handle_route(result, capture)
            if not outcome.ok:
                raise self._fail(result, outcome.error or "Route validation failed", route_pass=False)
            ui_preview: dict[str, Any] = {}
        else:
            # No route reply: the route may have been served from cache.
            log.info("No route API response, checking the UI", {"reason": capture.error})
            ui_preview = await self._check_route_in_ui(result)

        self._enter("RouteValidated")
        return ui_preview

    async def _check_route_in_ui(self, result: bridge.BridgeOperationResult) -> dict[str, Any]:
        await self._screenshot(result, "route-ui-check")
        ui_preview = await self.ui.get_preview_info()
        if ui_preview.get("error"):
            result.preview.update(ui_preview)
            raise self._fail(result, str(ui_preview["error"]), test_progress="RouteTested", route_pass=False)

        status = await self.ui.preview_button_status()
        if status == "not_found":
            raise self._fail(result, "Preview Route button not found", test_progress="RouteTested", route_pass=False)
        if status == "disabled":
            raise self._fail(result, "Preview Route button is disabled", test_progress="RouteTested", route_pass=False)

        result.advance_progress("RouteTested")
        result.route_pass = True
        log.success("Route validated from the UI")
        return ui_preview

    async def _submit_route(
        self,
        result: bridge.BridgeOperationResult,
        params: bridge.BridgeOperationInput,
        ui_preview: dict[str, Any],
    ) -> None:
        if not await self.ui.select_route_type(params.route_type):
            log.warn("Route type not selected", {"routeType": params.route_type})
        await self._screenshot(result, "bridge-form-filled")
        result.preview = {**ui_preview, **result.preview}

        msgs_monitor = self.registry.register_path(
            MESSAGES_PATH,
            "POST",
            monitor_models.MonitorOptions(
                one_time=True,
                partial_match=True,
                timeout_ms=self.timeouts.msgs_monitor,
                silent_timeout=True,
            ),
        )
        if not await self.ui.click_preview_route():
            raise self._fail(result, "Unable to click Preview Route button", route_pass=False)
        await self.ui.confirm_in_wallet()
        capture = await self.registry.wait(msgs_monitor, self.timeouts.msgs_wait)

        if capture.success:
            outcome = self.handler.handle_messages(result, capture)
            if not outcome.ok:
                raise self._fail(result, outcome.error or "Route messages failed", route_pass=False)
        else:
            log.warn("No messages API response", {"reason": capture.error})

        await self._screenshot(result, "route-preview-page")
        self._enter("RouteSubmitted")

    async def _validate_simulation(self, result: bridge.BridgeOperationResult) -> None:
        simulate_monitor = self.registry.register_rpc(
            simulation.SIMULATE_RPC_METHOD,
            simulation.SIMULATE_PARAM_PATH,
            monitor_models.MonitorOptions(
                one_time=True,
                partial_match=True,
                timeout_ms=self.timeouts.simulate_monitor,
                verbose=True,
            ),
        )
        if not await self.ui.click_submit():
            raise self._fail(result, "Unable to click Submit button", route_pass=False)
        await self.ui.confirm_in_wallet()
        capture = await self.registry.wait(simulate_monitor, self.timeouts.simulate_wait)

        if capture.success:
            outcome = self.handler.handle_simulation(result, capture)
            if not outcome.ok:
                raise self._fail(
                    result,
                    outcome.error or "Transaction simulation failed",
                    success=False,
                    test_progress="SignTested",
                    route_pass=True,
                )
        else:
            log.warn("No simulation response", {"reason": capture.error})
        self._enter("SimulationValidated")

    async def _sign_and_broadcast(self, result: bridge.BridgeOperationResult) -> None:
        try:
            await self.ui.wait(self.timeouts.fee_settle)
            await self._read_gas_fee(result)

            result.advance_progress("SignTested")
            result.route_pass = True

            if not await self.ui.is_approve_enabled():
                message = "Approve button is disabled"
                reason = await self.ui.approve_error_message()
                if reason:
                    message += f", reason might be: {reason}"
                raise self._fail(result, message, success=False)
            self._enter("TransactionSigned")

            broadcast_monitor = self.registry.register_broadcast(
                broadcast.BROADCAST_RPC_METHOD,
                monitor_models.MonitorOptions(
                    one_time=True, timeout_ms=self.timeouts.broadcast_monitor, verbose=True
                ),
            )
            if not await self.ui.click_approve():
                await self.ui.handle_possible_modals()
            await self.ui.confirm_in_wallet()
            capture = await self.registry.wait(broadcast_monitor, self.timeouts.broadcast_wait)
            self._enter("Broadcast")

            if capture.success:
                outcome = self.handler.handle_broadcast(result, capture)
                if not outcome.ok:
                    raise self._fail(result, outcome.error or "Transaction broadcast failed", success=False)
            else:
                log.warn("No broadcast response", {"reason": capture.error})
        except _StageFailed:
            raise
        except Exception as error:
            raise self._fail(
                result,
                f"Transaction confirmation failed: {errors.get_error_message(error)}",
                success=False,
                test_progress="SignTested",
                route_pass=True,
            ) from error

    async def _read_gas_fee(self, result: bridge.BridgeOperationResult) -> None:
        try:
            fee = await self.ui.extract_gas_fee()
        except Exception as error:
            result.error = f"Failed to extract Gas Fee information: {errors.get_error_message(error)}"
            log.warn(result.error)
            return
        if fee:
            result.preview["gasfee"] = fee
            log.info("Gas fee", {"gasfee": fee})
