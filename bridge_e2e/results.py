"""
Result persistence and console summary for a bridge operation.
"""

from __future__ import annotations

import json
import pathlib

from bridge_e2e import config
from bridge_e2e.models import bridge
from bridge_e2e.utils import json_parsing, logger, serialization

log = logger.create_logger("Results")


def result_path(results_dir: str, task_id: str, timestamp_ms: int) -> pathlib.Path:
    return pathlib.Path(results_dir) / f"bridge-result-{task_id}-{timestamp_ms}.json"


def save_result(
    result: bridge.BridgeOperationResult,
    params: bridge.BridgeOperationInput,
    settings: config.HarnessSettings,
) -> str:
    """Write *result* as camelCase JSON and return the file path.

    The file also carries the input parameters and task id under
    ``input`` and ``taskId``.
    """
    path = result_path(settings.results_dir, settings.task_id, bridge.now_ms())
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "taskId": settings.task_id,
        "input": serialization.to_camel_dict(params),
        **serialization.to_camel_dict(result),
    }
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    log.success("Result saved", {"path": str(path)})
    return str(path)


def load_result(path: str | pathlib.Path) -> bridge.BridgeOperationResult:
    """Read a result file written by :func:`save_result`."""
    data = json.loads(pathlib.Path(path).read_text(encoding="utf-8"))
    return bridge.BridgeOperationResult.model_validate(data)


def print_summary(
    result: bridge.BridgeOperationResult,
    params: bridge.BridgeOperationInput,
    result_file: str | None = None,
) -> None:
    """Log a human-readable summary of one operation."""
    log.section("Bridge Operation Summary")

    log.subsection("Input Parameters")
    log.info("Input", serialization.to_camel_dict(params))

    log.subsection("Operation Status")
    status = {"testProgress": result.test_progress, "routePass": result.route_pass}
    if result.success:
        log.success("Operation succeeded", status)
    else:
        log.error("Operation failed", status)

    if result.error:
        log.subsection("Error")
        log.error(result.error)

    if result.transaction_hash:
        log.subsection("Transaction Hash")
        log.info(result.transaction_hash)

    if result.preview:
        log.subsection("Preview Information")
        log.info("Preview", dict(result.preview))

    if result.api_responses:
        log.subsection("API Responses Summary")
        for name, record in result.api_responses.items():
            log.info(
                f"{name}: {record.endpoint}",
                {
                    "status": record.status,
                    "success": record.success,
                    "responseTime": record.response_time,
                    "data": json_parsing.stringify(record.data)[:200],
                },
            )

    log.subsection("Timing")
    log.info(
        "Timing",
        {"startTime": result.timing.start_time, "endTime": result.timing.end_time, "durationMs": result.timing.duration},
    )

    if result.screenshots:
        log.subsection("Screenshots")
        for path in result.screenshots:
            log.info(path)

    if result_file:
        log.subsection("Result File")
        log.info(result_file)
