from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any


class SetupError(Exception):
    pass


class UsageError(SetupError):
    pass


class OpError(SetupError):
    pass


SHADCN_SETUP_LANGUAGE = "SHADCN_SETUP_LANGUAGE"
SHADCN_SETUP_PACKAGE_MANAGER = "SHADCN_SETUP_PACKAGE_MANAGER"
SHADCN_SETUP_SKIP_INIT = "SHADCN_SETUP_SKIP_INIT"
REPORT_KIND = "shadcn-setup.report.v1"


@dataclass(frozen=True)
class GlobalOpts:
    project_dir: Path
    language: str = ""
    package_manager: str = ""
    skip_init: bool = False
    quiet: bool = False
    json_output: bool = False


def _env_or_none(*names: str) -> str | None:
    for n in names:
        v = (os.environ.get(n) or "").strip()
        if v:
            return v
    return None


def _truthy(raw: str | None) -> bool:
    return str(raw or "").strip().lower() in {"1", "true", "yes", "on"}


def _apply_global_env(
    *,
    project_dir: Path | str | None,
    language: str | None,
    quiet: bool = False,
    json_output: bool = False,
) -> GlobalOpts:
    root = Path(project_dir or ".").expanduser().resolve()
    if not root.is_dir():
        raise UsageError(f"project directory not found: {root}")
    return GlobalOpts(
        project_dir=root,
        language=(language or _env_or_none(SHADCN_SETUP_LANGUAGE) or "").strip(),
        package_manager=(_env_or_none(SHADCN_SETUP_PACKAGE_MANAGER) or "").strip().lower(),
        skip_init=_truthy(os.environ.get(SHADCN_SETUP_SKIP_INIT)),
        quiet=quiet,
        json_output=json_output,
    )


def _print_json(obj: Any, *, pretty: bool = True) -> None:
    if pretty:
        sys.stdout.write(json.dumps(obj, indent=2, sort_keys=True) + "\n")
    else:
        sys.stdout.write(json.dumps(obj, separators=(",", ":"), sort_keys=True) + "\n")


def _read_text(path: Path) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _write_text(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)
