from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import ConfigError
from ..lib.mounts import mount_all
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class MountStep:
    step_id = "40_mount"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        exe = state.setdefault("execution", {})
        boot_part = (exe.get("device") or {}).get("boot_part")
        if not boot_part:
            raise ConfigError("execution.device.boot_part missing")

        logger.info("Mounting everything under %s", ctx.config.mount_root)
        specs = mount_all(ctx.config, boot_part, ctx.runner)

        exe["mounts"] = {spec.target: spec.source for spec in specs}
        return state
