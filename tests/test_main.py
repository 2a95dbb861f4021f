"""CLI exit codes and wiring."""

import json
from unittest.mock import patch

import pytest

from conftest import FakeRunner
from nixzfs_installer import main as main_module
from nixzfs_installer.lib import preflight


@pytest.fixture
def cli_args(tmp_path):
    return ["--state", str(tmp_path / "state.json"), "--log", str(tmp_path / "install.log")]


@pytest.fixture
def config_file(tmp_path, install_config):
    p = tmp_path / "install.json"
    p.write_text(json.dumps(install_config.raw))
    return p


@patch("nixzfs_installer.lib.command.subprocess.run")
def test_missing_device_exits_1(mock_run, cli_args, config_file, capsys):
    assert main_module.main(["--config", str(config_file), *cli_args]) == 1
    mock_run.assert_not_called()
    assert "ERROR: Missing argument" in capsys.readouterr().err


@patch("nixzfs_installer.lib.command.subprocess.run")
def test_invalid_device_exits_1(mock_run, cli_args, config_file, monkeypatch, capsys):
    monkeypatch.setattr(preflight, "is_block_device", lambda path: False)

    assert main_module.main(["sdq", "--config", str(config_file), *cli_args]) == 1
    mock_run.assert_not_called()
    assert "'/dev/sdq' is not a block special file" in capsys.readouterr().err


@patch("nixzfs_installer.lib.command.subprocess.run")
def test_not_root_exits_1(mock_run, cli_args, config_file, monkeypatch, capsys):
    monkeypatch.setattr(preflight, "is_block_device", lambda path: True)
    monkeypatch.setattr(preflight, "effective_uid", lambda: 1000)

    assert main_module.main(["sda", "--config", str(config_file), *cli_args]) == 1
    mock_run.assert_not_called()
    assert "ERROR: Must run as root" in capsys.readouterr().err


def test_delegate_exit_code_propagates(cli_args, config_file, block_device, monkeypatch):
    runner = FakeRunner(fail_on=["zpool", "create"], returncode=3)
    monkeypatch.setattr(main_module, "SubprocessRunner", lambda dry_run=False: runner)

    code = main_module.main(["sda", "--config", str(config_file), "--user", "a", "--host", "b", *cli_args])

    assert code == 3
    assert runner.calls[-1][:2] == ["zpool", "create"]


def test_missing_config_exits_1(cli_args, tmp_path, capsys):
    assert main_module.main(["sda", "--config", str(tmp_path / "nope.yaml"), *cli_args]) == 1
    assert "Install config not found" in capsys.readouterr().err


@patch("nixzfs_installer.lib.command.subprocess.run")
def test_bad_config_exits_1_before_any_command(mock_run, cli_args, tmp_path, block_device, capsys):
    p = tmp_path / "install.yaml"
    p.write_text("ashift: twelve\n")

    assert main_module.main(["sda", "--config", str(p), "--user", "a", "--host", "b", *cli_args]) == 1
    mock_run.assert_not_called()
    assert "ERROR: ashift must be an integer" in capsys.readouterr().err


@patch("nixzfs_installer.lib.command.subprocess.run")
def test_missing_template_exits_1_before_any_command(mock_run, cli_args, tmp_path, install_config, block_device):
    p = tmp_path / "install.json"
    p.write_text(json.dumps({**install_config.raw, "template_path": str(tmp_path / "gone.tmpl")}))

    assert main_module.main(["sda", "--config", str(p), "--user", "a", "--host", "b", *cli_args]) == 1
    mock_run.assert_not_called()
    saved = json.loads((tmp_path / "state.json").read_text())
    assert saved["execution"]["errors"][0]["type"] == "ConfigError"


@patch("nixzfs_installer.lib.command.subprocess.run")
def test_dry_run_executes_nothing(mock_run, cli_args, config_file, block_device, mount_root):
    code = main_module.main(
        ["nvme0n1", "--dry-run", "--config", str(config_file), "--user", "alice", "--host", "box1", *cli_args]
    )

    assert code == 0
    mock_run.assert_not_called()
    assert not (mount_root / "state/etc/nixos/configuration.nix").exists()


def test_state_file_written_on_failure(cli_args, config_file, tmp_path):
    main_module.main(["--config", str(config_file), *cli_args])

    saved = json.loads((tmp_path / "state.json").read_text())
    assert saved["execution"]["errors"][0]["type"] == "UsageError"


def test_unwritable_state_path_does_not_mask_result(config_file, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    code = main_module.main(
        ["--config", str(config_file), "--state", str(blocker / "state.json"), "--log", str(tmp_path / "install.log")]
    )

    assert code == 1


def test_installer_script_prefers_argv0(tmp_path, monkeypatch):
    script = tmp_path / "install.py"
    script.write_text("")
    monkeypatch.setattr(main_module.sys, "argv", [str(script)])

    assert main_module.installer_script() == str(script.resolve())


def test_installer_script_falls_back_to_module(monkeypatch):
    monkeypatch.setattr(main_module.sys, "argv", [""])

    assert main_module.installer_script().endswith("main.py")
