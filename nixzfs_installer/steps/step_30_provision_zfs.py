from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import ConfigError
from ..lib.storage import format_boot
from ..lib.zfs import create_dataset, create_pool, dataset_layout, snapshot
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class ProvisionZfsStep:
    step_id = "30_provision_zfs"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.config
        device = (state.get("execution") or {}).get("device") or {}
        boot_part = device.get("boot_part")
        data_part = device.get("data_part")
        if not boot_part or not data_part:
            raise ConfigError("Missing boot_part/data_part; run partition step first")

        logger.info("Formatting boot partition")
        format_boot(boot_part, cfg.boot_label, ctx.runner)

        logger.info("Creating ZFS pool '%s' for '%s'", cfg.pool_name, data_part)
        create_pool(cfg.pool_name, data_part, ctx.runner, ashift=cfg.ashift)

        logger.info("Creating ZFS datasets")
        root, *rest = dataset_layout(cfg)
        create_dataset(root, ctx.runner)
        # Must be taken before anything writes to root.
        snapshot(cfg.blank_snapshot, ctx.runner)
        for spec in rest:
            create_dataset(spec, ctx.runner)

        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["pool"] = cfg.pool_name
        decisions["blank_snapshot"] = cfg.blank_snapshot
        return state
