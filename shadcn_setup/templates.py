from __future__ import annotations

import shutil
from enum import Enum
from pathlib import Path

from .cli_shared import OpError, UsageError, _read_text

TEMPLATES_ROOT = Path(__file__).resolve().parent / "assets"

INDEX_CSS = '@import "tailwindcss";\n'

_LANGUAGE_ALIASES = {
    "ts": "TypeScript",
    "typescript": "TypeScript",
    "js": "JavaScript",
    "javascript": "JavaScript",
}


class Language(str, Enum):
    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"

    @property
    def is_typescript(self) -> bool:
        return self is Language.TYPESCRIPT

    @property
    def template_dir(self) -> Path:
        return TEMPLATES_ROOT / ("ts" if self.is_typescript else "js")

    @property
    def vite_config_name(self) -> str:
        return "vite.config.ts" if self.is_typescript else "vite.config.js"

    @classmethod
    def parse(cls, raw: str) -> Language:
        name = _LANGUAGE_ALIASES.get(str(raw or "").strip().lower())
        if name is None:
            raise UsageError(f"unsupported language {raw!r} (expected TypeScript or JavaScript)")
        return cls(name)


def template_path(language: Language, name: str) -> Path:
    return language.template_dir / name


def template_text(language: Language, name: str) -> str:
    path = template_path(language, name)
    try:
        return _read_text(path)
    except OSError as e:
        raise OpError(f"failed to read template {path}: {e}") from e


def vite_config_template(language: Language) -> str:
    return template_text(language, language.vite_config_name)


def materialize(target: Path, template: Path) -> bool:
    """Copy `template` to `target` unless `target` already exists.

    Returns True when the file was created.
    """
    if target.exists():
        return False
    if not template.is_file():
        raise OpError(f"missing template: {template}")
    shutil.copyfile(template, target)
    return True
