"""Ensure the `@/*` compiler path alias in tsconfig/jsconfig files."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from . import jsonc
from .cli_shared import _read_text, _write_text

ALIAS_KEY = "@/*"
ALIAS_TARGETS = ("./src/*",)
BASE_URL = "."
COMPILER_OPTIONS = "compilerOptions"


@dataclass(frozen=True)
class Reconciliation:
    needed: bool
    plan: jsonc.EditPlan
    compiler_options: dict[str, Any]


def _is_falsy(value: Any) -> bool:
    # Empty lists and objects still count as a configured alias.
    if isinstance(value, (list, dict)):
        return False
    return not value


def reconcile(doc: jsonc.ConfigDocument) -> Reconciliation:
    current = doc.data.get(COMPILER_OPTIONS)
    options: dict[str, Any] = copy.deepcopy(current) if isinstance(current, dict) else {}
    needed = False

    if "baseUrl" not in options:
        options["baseUrl"] = BASE_URL
        needed = True

    paths = options.get("paths")
    if not isinstance(paths, dict):
        options["paths"] = {ALIAS_KEY: list(ALIAS_TARGETS)}
        needed = True
    elif _is_falsy(paths.get(ALIAS_KEY)):
        paths[ALIAS_KEY] = list(ALIAS_TARGETS)
        needed = True

    plan = jsonc.EditPlan()
    if needed:
        # A single edit replaces the whole compilerOptions subtree.
        plan.set([COMPILER_OPTIONS], options)
    return Reconciliation(needed=needed, plan=plan, compiler_options=options)


def ensure_alias(path: Path, *, log: Callable[[str], None] | None = None) -> bool:
    """Patch or create `path` so it carries the alias. Returns True if written."""
    try:
        text = _read_text(path) if path.exists() else "{}"
    except UnicodeDecodeError:
        # Undecodable bytes are handled like malformed JSON: start from an empty document.
        text = "{}"
    result = reconcile(jsonc.parse(text))
    if not result.needed:
        if log is not None:
            log(f"{path.name} already has the path alias.")
        return False
    _write_text(path, jsonc.apply_plan(text, result.plan))
    if log is not None:
        log(f"Updated {path.name} with required alias.")
    return True
