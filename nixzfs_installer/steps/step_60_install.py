from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.nixos import link_live_config, nixos_install
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class InstallStep:
    step_id = "60_install"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Installing NixOS to %s ...", ctx.config.mount_root)
        link_live_config(ctx.config, ctx.runner)
        nixos_install(ctx.config, ctx.runner)
        return state
