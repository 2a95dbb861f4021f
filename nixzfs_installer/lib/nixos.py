from __future__ import annotations

import logging
import posixpath
from pathlib import Path

from ..errors import ConfigError
from ..install_config import InstallConfig
from .command import CommandRunner

logger = logging.getLogger(__name__)

HARDWARE_CONFIG = "hardware-configuration.nix"
MAIN_CONFIG = "configuration.nix"


def generate_config(mount_root: str, runner: CommandRunner) -> None:
    """Emit hardware-configuration.nix and configuration.nix under <root>/etc/nixos."""

    runner.run(["nixos-generate-config", "--root", mount_root])


def relocate_artifacts(config: InstallConfig, script_path: str, runner: CommandRunner) -> str:
    """Move generated files into persisted state and keep a copy of the installer.

    The generated configuration.nix is kept only for reference. Returns the
    path of the installer copy.
    """

    live = config.live_config_dir
    persist = config.persist_dir

    runner.run(["mkdir", "-p", persist])
    runner.run(["mv", posixpath.join(live, HARDWARE_CONFIG), persist + "/"])
    runner.run(
        [
            "mv",
            posixpath.join(live, MAIN_CONFIG),
            posixpath.join(persist, f"{MAIN_CONFIG}.original"),
        ]
    )

    script_copy = posixpath.join(persist, f"{posixpath.basename(script_path)}.original")
    runner.run(["cp", script_path, script_copy])
    return script_copy


def read_host_id(machine_id_path: str = "/etc/machine-id") -> str:
    """First 8 hex chars of the machine id, as ZFS wants for networking.hostId."""

    try:
        machine_id = Path(machine_id_path).read_text(encoding="utf-8").strip()
    except OSError as e:
        raise ConfigError(f"Unable to read machine id from {machine_id_path}: {e}") from e
    if len(machine_id) < 8:
        raise ConfigError(f"Machine id in {machine_id_path} is shorter than 8 characters")
    return machine_id[:8]


def write_configuration(contents: str, path: str, *, dry_run: bool = False) -> None:
    p = Path(path)
    if dry_run:
        logger.info("Would write %s", str(p))
        return
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")


def link_live_config(config: InstallConfig, runner: CommandRunner) -> None:
    runner.run(["ln", "-s", config.persisted_config_path, config.live_config_path])


def nixos_install(config: InstallConfig, runner: CommandRunner) -> None:
    # Root password is set by the rendered users block.
    runner.run(
        [
            "nixos-install",
            "--root",
            config.mount_root,
            "-I",
            f"nixos-config={config.persisted_config_path}",
            "--no-root-passwd",
        ],
        interactive=True,
    )
