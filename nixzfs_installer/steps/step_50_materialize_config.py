from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..errors import UsageError
from ..lib.nixos import generate_config, relocate_artifacts, write_configuration
from ..pipeline import InstallCtx
from ..render import NixConfigContext, render_configuration

logger = logging.getLogger(__name__)


def _ask(ctx: InstallCtx, label: str, preset: Optional[str]) -> str:
    if preset is not None:
        logger.info("Using %s %s", label, preset)
        return preset
    logger.info("Enter %s", label)
    try:
        answer = ctx.ask("")
    except EOFError as e:
        raise UsageError(f"No {label} given: standard input is closed") from e
    # No validation: the operator is root and owns the result.
    return answer.rstrip("\n")


class MaterializeConfigStep:
    step_id = "50_materialize_config"

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.config

        logger.info("Generating NixOS configuration (%s/*.nix)", cfg.live_config_dir)
        generate_config(cfg.mount_root, ctx.runner)
        script_copy = relocate_artifacts(cfg, ctx.script_path, ctx.runner)

        user_name = _ask(ctx, "user name", cfg.user_name)
        host_name = _ask(ctx, "host name", cfg.host_name)

        context = NixConfigContext(
            user_name=user_name,
            host_name=host_name,
            host_id=ctx.host_id,
            blank_snapshot=cfg.blank_snapshot,
            state_version=cfg.state_version,
            initial_password=cfg.initial_password,
            system_packages=cfg.system_packages,
            gnome_exclude_packages=cfg.gnome_exclude_packages,
        )
        contents = render_configuration(context, ctx.template)

        logger.info("Writing NixOS configuration to %s", cfg.persisted_config_path)
        write_configuration(contents, cfg.persisted_config_path, dry_run=ctx.dry_run)

        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["user_name"] = user_name
        decisions["host_name"] = host_name
        decisions["host_id"] = context.host_id
        decisions["configuration"] = cfg.persisted_config_path
        decisions["installer_copy"] = script_copy
        return state
