from __future__ import annotations

import logging
from dataclasses import dataclass

from .command import CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartitionPlan:
    disk: str
    esp_start: str = "1MiB"
    esp_end: str = "512MiB"


@dataclass(frozen=True)
class PartitionResult:
    boot_part: str
    data_part: str


def part_path(disk: str, n: int) -> str:
    # nvme/mmcblk/loop devices use p suffix
    if disk.endswith(tuple("0123456789")):
        return f"{disk}p{n}"
    return f"{disk}{n}"


def partition_disk(plan: PartitionPlan, runner: CommandRunner) -> PartitionResult:
    """Write a GPT label with an ESP and a data partition filling the rest.

    Layout:
    - 1: ESP (FAT32, boot flag), esp_start..esp_end
    - 2: primary, esp_end..100%
    """

    disk = plan.disk
    logger.info("Partitioning disk=%s", disk)

    runner.run(["parted", disk, "--", "mklabel", "gpt"])
    runner.run(["parted", disk, "--", "mkpart", "ESP", "fat32", plan.esp_start, plan.esp_end])
    runner.run(["parted", disk, "--", "set", "1", "boot", "on"])
    runner.run(["parted", disk, "--", "mkpart", "primary", plan.esp_end, "100%"])

    return PartitionResult(boot_part=part_path(disk, 1), data_part=part_path(disk, 2))


def format_boot(part: str, label: str, runner: CommandRunner) -> None:
    runner.run(["mkfs.fat", "-F", "32", "-n", label, part])
