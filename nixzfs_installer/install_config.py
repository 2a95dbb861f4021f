from __future__ import annotations

import json
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

DEFAULT_SYSTEM_PACKAGES = ["vim", "wget", "git", "firefox"]

DEFAULT_GNOME_EXCLUDE_PACKAGES = [
    "gnome.cheese",
    "gnome-photos",
    "gnome.gnome-music",
    "gnome.gedit",
    "epiphany",
    "gnome.gnome-characters",
    "gnome.totem",
    "gnome.tali",
    "gnome.iagno",
    "gnome.hitori",
    "gnome.atomix",
    "gnome-tour",
    "gnome.geary",
]


@dataclass(frozen=True)
class InstallConfig:
    raw: Dict[str, Any]

    def _get(self, key: str, default: Any) -> Any:
        value = self.raw.get(key)
        return default if value is None else value

    # Disk layout

    @property
    def dev_root(self) -> str:
        return str(self._get("dev_root", "/dev"))

    @property
    def boot_label(self) -> str:
        return str(self._get("boot_label", "BOOT"))

    @property
    def esp_start(self) -> str:
        return str(self._get("esp_start", "1MiB"))

    @property
    def esp_end(self) -> str:
        return str(self._get("esp_end", "512MiB"))

    # ZFS

    @property
    def pool_name(self) -> str:
        return str(self._get("pool_name", "rpool"))

    @property
    def ashift(self) -> int:
        value = self._get("ashift", 12)
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"ashift must be an integer: {value!r}") from e

    @property
    def encryption(self) -> str:
        return str(self._get("encryption", "aes-256-gcm"))

    @property
    def keyformat(self) -> str:
        return str(self._get("keyformat", "passphrase"))

    @property
    def ephemeral_dataset(self) -> str:
        return f"{self.pool_name}/ephemeral"

    @property
    def root_dataset(self) -> str:
        return f"{self.ephemeral_dataset}/root"

    @property
    def nix_dataset(self) -> str:
        return f"{self.ephemeral_dataset}/nix"

    @property
    def persistent_dataset(self) -> str:
        return f"{self.pool_name}/persistent"

    @property
    def home_dataset(self) -> str:
        return f"{self.persistent_dataset}/home"

    @property
    def state_dataset(self) -> str:
        return f"{self.persistent_dataset}/state"

    @property
    def blank_snapshot(self) -> str:
        return f"{self.root_dataset}@blank"

    # Paths

    @property
    def mount_root(self) -> str:
        return str(self._get("mount_root", "/mnt"))

    @property
    def live_config_dir(self) -> str:
        return posixpath.join(self.mount_root, "etc/nixos")

    @property
    def persist_dir(self) -> str:
        return posixpath.join(self.mount_root, "state/etc/nixos")

    @property
    def live_config_path(self) -> str:
        return posixpath.join(self.live_config_dir, "configuration.nix")

    @property
    def persisted_config_path(self) -> str:
        return posixpath.join(self.persist_dir, "configuration.nix")

    @property
    def machine_id_path(self) -> str:
        return str(self._get("machine_id_path", "/etc/machine-id"))

    @property
    def template_path(self) -> Optional[str]:
        value = self.raw.get("template_path")
        return str(value) if value else None

    # Generated configuration.nix

    @property
    def user_name(self) -> Optional[str]:
        value = self.raw.get("user_name")
        return None if value is None else str(value)

    @property
    def host_name(self) -> Optional[str]:
        value = self.raw.get("host_name")
        return None if value is None else str(value)

    @property
    def state_version(self) -> str:
        return str(self._get("state_version", "21.11"))

    @property
    def initial_password(self) -> str:
        return str(self._get("initial_password", "password"))

    @property
    def system_packages(self) -> List[str]:
        return [str(p) for p in self._get("system_packages", DEFAULT_SYSTEM_PACKAGES)]

    @property
    def gnome_exclude_packages(self) -> List[str]:
        return [str(p) for p in self._get("gnome_exclude_packages", DEFAULT_GNOME_EXCLUDE_PACKAGES)]

    def with_overrides(self, **values: Any) -> "InstallConfig":
        """Return a copy with non-None values replacing the raw keys."""

        raw = dict(self.raw)
        raw.update({k: v for k, v in values.items() if v is not None})
        return InstallConfig(raw=raw)

    def validate(self) -> "InstallConfig":
        """Raise ConfigError for values that would otherwise fail mid-install."""

        # zpool accepts 512 B .. 64 KiB sectors
        if not 9 <= self.ashift <= 16:
            raise ConfigError(f"ashift must be between 9 and 16, got {self.ashift}")
        for key in ("system_packages", "gnome_exclude_packages"):
            if key in self.raw and not isinstance(self.raw[key], list):
                raise ConfigError(f"{key} must be a list of package names")
        return self


def load_install_config(path: Optional[str]) -> InstallConfig:
    if path is None:
        return InstallConfig(raw={})

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Install config not found: {path}")

    ext = p.suffix.lower()
    text = p.read_text(encoding="utf-8")
    try:
        if ext in {".yaml", ".yml"}:
            raw = yaml.safe_load(text) or {}
        elif ext == ".json":
            raw = json.loads(text)
        else:
            raise ConfigError(f"Install config must be YAML or JSON: {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Unable to parse install config {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Install config must contain a mapping, got {type(raw).__name__}")

    return InstallConfig(raw=raw).validate()
