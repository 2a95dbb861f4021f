from __future__ import annotations

from typing import Sequence


class InstallerError(RuntimeError):
    """Base class for failures that abort the install."""

    exit_code = 1


class UsageError(InstallerError):
    """Missing or malformed command-line argument."""


class ValidationError(InstallerError):
    """Target device is not usable."""


class PrivilegeError(InstallerError):
    """Installer is not running as root."""


class ConfigError(InstallerError):
    """Install config, template or generated artifact is unusable."""


class DelegateFailure(InstallerError):
    """An external command exited nonzero."""

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        # Shell exit statuses are 1..255; signals show up as negative codes.
        if 0 < self.returncode < 256:
            return self.returncode
        return 1
