"""Bridge operation pipeline."""

from __future__ import annotations

from bridge_e2e.pipeline.bridge_operation import BridgeOperation, BridgeUI, StageTimeouts

__all__ = ["BridgeOperation", "BridgeUI", "StageTimeouts"]
