from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import List

from ..install_config import InstallConfig
from .command import CommandRunner

logger = logging.getLogger(__name__)

SUBDIRS = ("boot", "nix", "home", "state")


@dataclass(frozen=True)
class MountSpec:
    source: str
    target: str
    fstype: str

    def argv(self) -> List[str]:
        return ["mount", "-t", self.fstype, self.source, self.target]


def mount_layout(config: InstallConfig, boot_part: str) -> List[MountSpec]:
    """Mounts below the root dataset, in mount order."""

    root = config.mount_root
    return [
        MountSpec(boot_part, posixpath.join(root, "boot"), "vfat"),
        MountSpec(config.nix_dataset, posixpath.join(root, "nix"), "zfs"),
        MountSpec(config.home_dataset, posixpath.join(root, "home"), "zfs"),
        MountSpec(config.state_dataset, posixpath.join(root, "state"), "zfs"),
    ]


def mount_all(config: InstallConfig, boot_part: str, runner: CommandRunner) -> List[MountSpec]:
    """Mount root, create the child mount points inside it, then mount the children.

    Mount points must be created after root is mounted or they land on the
    live filesystem underneath.
    """

    root = config.mount_root
    root_spec = MountSpec(config.root_dataset, root, "zfs")
    runner.run(root_spec.argv())
    runner.run(["mkdir", *[posixpath.join(root, d) for d in SUBDIRS]])

    children = mount_layout(config, boot_part)
    for spec in children:
        runner.run(spec.argv())
    logger.info("Mounted %d filesystems under %s", len(children) + 1, root)
    return [root_spec, *children]
