from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.preflight import validate_target
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "10_preflight"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        device = validate_target(ctx.device_name, dev_root=ctx.config.dev_root)

        exe = state.setdefault("execution", {})
        exe["device"] = {"name": device.name, "path": device.path}
        logger.info("Installing to %s", device.path)
        return state
