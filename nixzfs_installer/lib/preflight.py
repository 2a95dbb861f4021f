from __future__ import annotations

import logging
import os
import posixpath
import stat
from dataclasses import dataclass
from typing import Optional

from ..errors import PrivilegeError, UsageError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetDevice:
    name: str
    path: str


def is_block_device(path: str) -> bool:
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def effective_uid() -> int:
    return os.geteuid()


def validate_target(name: Optional[str], *, dev_root: str = "/dev") -> TargetDevice:
    """Check argument, device node and privileges, in that order.

    Nothing destructive may run unless this returns.
    """

    if not name:
        raise UsageError("Missing argument. Expected block device name, e.g. 'sda'")

    path = posixpath.join(dev_root, name)
    if not is_block_device(path):
        raise ValidationError(f"Invalid argument: '{path}' is not a block special file")

    if effective_uid() != 0:
        raise PrivilegeError("Must run as root")

    logger.debug("Validated target device %s", path)
    return TargetDevice(name=name, path=path)
