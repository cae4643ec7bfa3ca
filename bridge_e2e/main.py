"""
Harness entry point: run one bridge operation in a fresh browser.

Launches the browser with the wallet extension, opens the bridge
application, runs the operation pipeline, then saves and prints the
result.  Exits 0 when the operation succeeded.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import dotenv

from bridge_e2e import config, results
from bridge_e2e.browser import session
from bridge_e2e.models import bridge
from bridge_e2e.monitoring import registry as registry_mod
from bridge_e2e.pages import app
from bridge_e2e.pipeline import bridge_operation
from bridge_e2e.utils import errors, logger

log = logger.create_logger("Main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bridge-e2e", description="Run one bridge operation end to end.")
    parser.add_argument("--amount", default="0.00002")
    parser.add_argument("--from-chain", default="BFB")
    parser.add_argument("--from-token", default="INIT")
    parser.add_argument("--to-chain", default="BFB")
    parser.add_argument("--to-token", default="BFB")
    parser.add_argument("--route-type", default="Optimistic bridge")
    parser.add_argument("--target-address", default=None)
    return parser


def input_from_args(args: argparse.Namespace) -> bridge.BridgeOperationInput:
    return bridge.BridgeOperationInput(
        amount=args.amount,
        from_chain=args.from_chain,
        from_token=args.from_token,
        to_chain=args.to_chain,
        to_token=args.to_token,
        route_type=args.route_type,
        target_address=args.target_address,
    )


async def run(params: bridge.BridgeOperationInput, settings: config.HarnessSettings) -> bridge.BridgeOperationResult:
    """Launch the browser, run the operation and persist its result."""
    browser_session = session.BrowserSession()
    registry = registry_mod.MonitorRegistry()
    try:
        page = await browser_session.launch(settings)
        registry.attach(page, show_verbose=settings.show_verbose)

        navigation = await browser_session.navigate_to(settings.test_url)
        if not navigation.success:
            log.warn("Initial navigation failed", {"url": settings.test_url, "error": navigation.error_message})

        ui = app.BridgeApp(
            page,
            browser_session.context,
            settings.test_url,
            task_id=settings.task_id,
            screenshots_dir=settings.screenshots_dir,
        )
        operation = bridge_operation.BridgeOperation(ui, registry)
        result = await operation.perform_bridge_operation(**params.model_dump())
    finally:
        await registry.close()
        await browser_session.close()

    result_file = results.save_result(result, params, settings)
    results.print_summary(result, params, result_file)
    return result


def main(argv: list[str] | None = None) -> int:
    dotenv.load_dotenv()
    args = build_parser().parse_args(argv)
    settings = config.get_settings()

    logger.set_task_id(settings.task_id)
    logger.start_log_file(settings.task_id, settings.logs_dir)
    log.section(f"Bridge E2E Task {settings.task_id}")
    if not settings.validate_config():
        logger.end_log_file()
        return 1

    try:
        result = asyncio.run(run(input_from_args(args), settings))
    except Exception as error:
        log.error("Harness run failed", {"error": errors.get_error_message(error)})
        return 1
    finally:
        logger.end_log_file()
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
