from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import ConfigError
from ..lib.storage import PartitionPlan, partition_disk
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class PartitionStep:
    step_id = "20_partition"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        exe = state.setdefault("execution", {})
        disk = (exe.get("device") or {}).get("path")
        if not disk:
            raise ConfigError("execution.device.path missing; run preflight first")

        logger.info("Creating GPT, boot partition, and ZFS pool partition")
        plan = PartitionPlan(disk=disk, esp_start=ctx.config.esp_start, esp_end=ctx.config.esp_end)
        result = partition_disk(plan, ctx.runner)

        exe.setdefault("device", {})["boot_part"] = result.boot_part
        exe["device"]["data_part"] = result.data_part
        return state
