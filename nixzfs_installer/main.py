from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from .errors import InstallerError
from .install_config import InstallConfig, load_install_config
from .lib.command import CommandRunner, SubprocessRunner
from .lib.nixos import read_host_id
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import InstallCtx, PipelineResult, run_pipeline
from .render import load_template
from .state_store import new_state, record_error, save_state
from .steps import (
    InstallStep,
    MaterializeConfigStep,
    MountStep,
    PartitionStep,
    PreflightStep,
    ProvisionZfsStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = "/var/lib/nixzfs-installer/state.json"


def build_steps():
    return [
        PreflightStep(),
        PartitionStep(),
        ProvisionZfsStep(),
        MountStep(),
        MaterializeConfigStep(),
        InstallStep(),
    ]


def installer_script() -> str:
    """Path of the running installer, copied into the target for provenance."""

    argv0 = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    if argv0 is not None and argv0.is_file():
        return str(argv0.resolve())
    return str(Path(__file__).resolve())


def build_ctx(
    config: InstallConfig,
    device: Optional[str],
    *,
    runner: CommandRunner,
    ask: Callable[[str], str] = input,
    script_path: str = "",
    dry_run: bool = False,
) -> InstallCtx:
    """Check config, template and machine id before any step can touch the disk."""

    config = config.validate()
    return InstallCtx(
        config=config,
        device_name=device,
        runner=runner,
        template=load_template(config.template_path),
        host_id=read_host_id(config.machine_id_path),
        ask=ask,
        script_path=script_path,
        dry_run=dry_run,
    )


def run(
    device: Optional[str],
    *,
    config_path: Optional[str] = None,
    user_name: Optional[str] = None,
    host_name: Optional[str] = None,
    state_path: str = DEFAULT_STATE_PATH,
    dry_run: bool = False,
    stop_after: Optional[str] = None,
    runner: Optional[CommandRunner] = None,
    ask: Callable[[str], str] = input,
    script_path: Optional[str] = None,
) -> PipelineResult:
    """Run the install pipeline once and persist the run record."""

    state = new_state()
    try:
        try:
            config = load_install_config(config_path).with_overrides(user_name=user_name, host_name=host_name)
            ctx = build_ctx(
                config,
                device,
                runner=runner or SubprocessRunner(dry_run=dry_run),
                ask=ask,
                script_path=script_path or installer_script(),
                dry_run=dry_run,
            )
        except InstallerError as e:
            record_error(state, None, e)
            return PipelineResult(state=state, ran_steps=[], error=e)
        return run_pipeline(ctx=ctx, state=state, steps=build_steps(), stop_after=stop_after)
    finally:
        try:
            save_state(state_path, state)
        except OSError as e:
            logger.warning("Unable to write run record %s: %s", state_path, e)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="nixzfs-installer",
        description="Partition a disk and install NixOS on an encrypted, erase-on-boot ZFS layout.",
    )
    p.add_argument("device", nargs="?", default=None, help="Block device name, e.g. sda or nvme0n1")
    p.add_argument("--config", default=None, help="Install config (yaml|json)")
    p.add_argument("--user", default=None, help="User name (skips the prompt)")
    p.add_argument("--host", default=None, help="Host name (skips the prompt)")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to run record (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("--stop-after", default=None, help="Stop after step_id (e.g. 40_mount)")
    p.add_argument("-v", "--verbose", action="store_true", help="Show debug output on the console")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        result = run(
            args.device,
            config_path=args.config,
            user_name=args.user,
            host_name=args.host,
            state_path=args.state,
            dry_run=bool(args.dry_run),
            stop_after=args.stop_after,
        )
    except Exception:
        logger.exception("Installer failed")
        raise

    if result.error is not None:
        logger.error("%s", result.error)
        return result.error.exit_code

    logger.info("Done")
    return 0
