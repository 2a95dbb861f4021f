from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence

from ..errors import DelegateFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    """Runs one external command and reports how it went."""

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        interactive: bool = False,
    ) -> CmdResult:
        ...


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class SubprocessRunner:
    """CommandRunner backed by subprocess.

    - Always logs the command.
    - Captures stdout/stderr unless interactive, in which case the child
      shares the terminal (ZFS passphrase prompts, nixos-install progress).
    - dry_run logs but does not execute.
    """

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        interactive: bool = False,
    ) -> CmdResult:
        argv_list = list(argv)
        logger.info("CMD %s", fmt_argv(argv_list))

        if self.dry_run:
            return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

        pipe = None if interactive else subprocess.PIPE
        try:
            p = subprocess.run(
                argv_list,
                text=True,
                stdout=pipe,
                stderr=pipe,
                env=dict(os.environ),
            )
        except FileNotFoundError as e:
            raise DelegateFailure(argv_list, 127, f"{argv_list[0]}: command not found") from e

        stdout = p.stdout or ""
        stderr = p.stderr or ""
        if stdout:
            logger.debug("STDOUT %s", stdout.strip())
        if stderr:
            logger.debug("STDERR %s", stderr.strip())

        if check and p.returncode != 0:
            raise DelegateFailure(argv_list, p.returncode, stderr)

        return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
