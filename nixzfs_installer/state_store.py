from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(state, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def new_state() -> Dict[str, Any]:
    """Fresh run record. Installs never resume, so nothing is carried over."""

    return {
        "version": 1,
        "execution": {
            "current_step": None,
            "completed_steps": [],
            "errors": [],
            "device": {},
            "mounts": {},
            "decisions": {},
        },
    }


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def record_error(state: Dict[str, Any], step_id: str | None, error: BaseException) -> None:
    state.setdefault("execution", {}).setdefault("errors", []).append(
        {
            "step": step_id,
            "type": type(error).__name__,
            "error": str(error),
        }
    )
