# Models package: re-export the commonly used records.
# Prefer importing from the specific submodule (e.g. bridge_e2e.models.monitor).

from bridge_e2e.models.bridge import (
    BridgeOperationInput as BridgeOperationInput,
    BridgeOperationResult as BridgeOperationResult,
    PreviewButtonStatus as PreviewButtonStatus,
    ResponseRecord as ResponseRecord,
    TestProgress as TestProgress,
    Timing as Timing,
)
from bridge_e2e.models.monitor import (
    ApiResponseResult as ApiResponseResult,
    Captured as Captured,
    Cancelled as Cancelled,
    Failed as Failed,
    MatchRule as MatchRule,
    MonitorOptions as MonitorOptions,
    MonitorOutcome as MonitorOutcome,
    TimedOut as TimedOut,
)
from bridge_e2e.models.traffic import (
    CapturedEvent as CapturedEvent,
    RpcEnvelope as RpcEnvelope,
)
