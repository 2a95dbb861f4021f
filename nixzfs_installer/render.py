"""Render configuration.nix for the installed system.

The template is a ``string.Template`` so it can be swapped for a site
specific one (``template_path`` in the install config) without touching code.
Values are interpolated as given: user and host names come from the operator
running as root and are not escaped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Dict, List, Optional

from .errors import ConfigError

BUILTIN_TEMPLATE = "templates/configuration.nix.tmpl"


@dataclass(frozen=True)
class NixConfigContext:
    user_name: str
    host_name: str
    host_id: str
    blank_snapshot: str
    state_version: str = "21.11"
    initial_password: str = "password"
    system_packages: List[str] = field(default_factory=list)
    gnome_exclude_packages: List[str] = field(default_factory=list)

    def as_mapping(self) -> Dict[str, str]:
        return {
            "user_name": self.user_name,
            "host_name": self.host_name,
            "host_id": self.host_id,
            "blank_snapshot": self.blank_snapshot,
            "state_version": self.state_version,
            "initial_password": self.initial_password,
            "system_packages": " ".join(self.system_packages),
            "gnome_exclude_packages": _format_exclusions(self.gnome_exclude_packages),
        }


def _format_exclusions(packages: List[str], per_line: int = 4) -> str:
    items = [f"pkgs.{p}" for p in packages]
    lines = [" ".join(items[i : i + per_line]) for i in range(0, len(items), per_line)]
    return "\n".join(f"    {line}" for line in lines)


def _package_root() -> Path:
    # nixzfs_installer/render.py -> nixzfs_installer
    return Path(__file__).resolve().parent


def load_template(path: Optional[str] = None) -> Template:
    p = Path(path) if path else _package_root() / BUILTIN_TEMPLATE
    try:
        return Template(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Unable to read configuration template {p}: {e}") from e


def render_configuration(context: NixConfigContext, template: Optional[Template] = None) -> str:
    template = template or load_template()
    try:
        return template.substitute(context.as_mapping())
    except KeyError as e:
        raise ConfigError(f"Configuration template references unset variable {e}") from e
    except ValueError as e:
        raise ConfigError(f"Malformed configuration template: {e}") from e
