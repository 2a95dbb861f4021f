"""
Shared fixtures for nixzfs-installer tests.

No test touches a real disk: external commands go through FakeRunner and the
block-device and root checks are patched.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

import pytest

from nixzfs_installer.errors import DelegateFailure
from nixzfs_installer.install_config import InstallConfig
from nixzfs_installer.lib import preflight
from nixzfs_installer.lib.command import CmdResult

MACHINE_ID = "8425e349c1d34b5e9e7f2a6f00c0ffee"


class FakeRunner:
    """Records every command; fails the first one matching ``fail_on``."""

    def __init__(
        self,
        events: Optional[List[Tuple[str, Any]]] = None,
        *,
        fail_on: Optional[Sequence[str]] = None,
        returncode: int = 1,
        stderr: str = "",
    ) -> None:
        self.events = events if events is not None else []
        self.calls: List[List[str]] = []
        self.interactive: List[bool] = []
        self.fail_on = list(fail_on) if fail_on else None
        self.returncode = returncode
        self.stderr = stderr

    def run(self, argv, *, check=True, interactive=False):
        argv = list(argv)
        self.calls.append(argv)
        self.interactive.append(interactive)
        self.events.append(("cmd", argv))

        if self.fail_on is not None and argv[: len(self.fail_on)] == self.fail_on:
            if check:
                raise DelegateFailure(argv, self.returncode, self.stderr)
            return CmdResult(argv=argv, returncode=self.returncode, stdout="", stderr=self.stderr)
        return CmdResult(argv=argv, returncode=0, stdout="", stderr="")


class ScriptedPrompt:
    """Stands in for input(), answering from a fixed list."""

    def __init__(self, answers: Sequence[str], events: Optional[List[Tuple[str, Any]]] = None) -> None:
        self.answers = list(answers)
        self.events = events if events is not None else []

    def __call__(self, prompt: str = "") -> str:
        answer = self.answers.pop(0)
        self.events.append(("ask", answer))
        return answer


@pytest.fixture
def events() -> List[Tuple[str, Any]]:
    return []


@pytest.fixture
def fake_runner(events) -> FakeRunner:
    return FakeRunner(events)


@pytest.fixture
def prompt(events) -> ScriptedPrompt:
    return ScriptedPrompt(["alice\n", "box1\n"], events)


@pytest.fixture
def machine_id_file(tmp_path):
    p = tmp_path / "machine-id"
    p.write_text(MACHINE_ID + "\n", encoding="utf-8")
    return p


@pytest.fixture
def mount_root(tmp_path):
    return tmp_path / "mnt"


@pytest.fixture
def install_config(mount_root, machine_id_file) -> InstallConfig:
    return InstallConfig(
        raw={
            "mount_root": str(mount_root),
            "machine_id_path": str(machine_id_file),
        }
    )


@pytest.fixture
def block_device(monkeypatch):
    """Pretend /dev/<anything> is a block device and we are root."""
    monkeypatch.setattr(preflight, "is_block_device", lambda path: True)
    monkeypatch.setattr(preflight, "effective_uid", lambda: 0)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() mutates the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in handlers and not type(h).__module__.startswith("_pytest"):
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    for attr in ("_nixzfs_configured", "_nixzfs_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
