from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from ..install_config import InstallConfig
from .command import CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetSpec:
    name: str
    properties: Dict[str, str] = field(default_factory=dict)

    @property
    def encrypted(self) -> bool:
        return self.properties.get("encryption", "off") != "off"

    def create_args(self) -> List[str]:
        argv = ["zfs", "create", "-p"]
        for key, value in self.properties.items():
            argv += ["-o", f"{key}={value}"]
        argv.append(self.name)
        return argv


def dataset_layout(config: InstallConfig) -> List[DatasetSpec]:
    """Datasets in creation order: ephemeral root and nix, persistent home and state."""

    persistent = {
        "mountpoint": "legacy",
        "com.sun:auto-snapshot": "true",
        "encryption": config.encryption,
        "keyformat": config.keyformat,
    }
    return [
        DatasetSpec(
            config.root_dataset,
            {"mountpoint": "legacy", "xattr": "sa", "acltype": "posixacl"},
        ),
        DatasetSpec(config.nix_dataset, {"mountpoint": "legacy", "atime": "off"}),
        DatasetSpec(config.home_dataset, dict(persistent)),
        DatasetSpec(config.state_dataset, dict(persistent)),
    ]


def create_pool(name: str, device: str, runner: CommandRunner, *, ashift: int = 12) -> None:
    # Fails if a pool with this name is already imported.
    runner.run(["zpool", "create", "-o", f"ashift={ashift}", "-O", "compression=on", name, device])
    logger.info("Created pool %s on %s", name, device)


def create_dataset(spec: DatasetSpec, runner: CommandRunner) -> None:
    # keyformat=passphrase makes zfs prompt on the terminal
    runner.run(spec.create_args(), interactive=spec.encrypted)
    logger.info("Created dataset %s", spec.name)


def snapshot(name: str, runner: CommandRunner) -> None:
    runner.run(["zfs", "snapshot", name])
    logger.info("Created snapshot %s", name)
