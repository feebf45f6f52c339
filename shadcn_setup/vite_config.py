from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .cli_shared import _read_text, _write_text
from .templates import Language, vite_config_template

STYLING_PLUGIN_RE = re.compile(r"@tailwindcss/vite")
ALIAS_ENTRY_RE = re.compile(r"alias\s*:\s*{[^}]*@")

TemplateProvider = Callable[[Language], str]


@dataclass(frozen=True)
class ViteConfigFeatures:
    has_styling_plugin: bool
    has_alias_entry: bool

    @property
    def complete(self) -> bool:
        return self.has_styling_plugin and self.has_alias_entry


@dataclass(frozen=True)
class PatchResult:
    changed: bool
    text: str


def classify(text: str) -> ViteConfigFeatures:
    return ViteConfigFeatures(
        has_styling_plugin=bool(STYLING_PLUGIN_RE.search(text)),
        has_alias_entry=bool(ALIAS_ENTRY_RE.search(text)),
    )


def patch(
    existing_text: str,
    language: Language,
    template_provider: TemplateProvider = vite_config_template,
) -> PatchResult:
    # Regex detection cannot support a safe partial merge, so an incomplete
    # config is replaced wholesale by the template.
    if classify(existing_text).complete:
        return PatchResult(changed=False, text=existing_text)
    return PatchResult(changed=True, text=template_provider(language))


def patch_file(
    path: Path,
    language: Language,
    template_provider: TemplateProvider = vite_config_template,
    *,
    log: Callable[[str], None] | None = None,
) -> bool:
    if not path.exists():
        return False
    try:
        existing = _read_text(path)
    except UnicodeDecodeError:
        existing = ""
    result = patch(existing, language, template_provider)
    if result.changed:
        _write_text(path, result.text)
        if log is not None:
            log(f"Updated {path.name} with required plugins and alias.")
    elif log is not None:
        log(f"{path.name} already contains plugins and alias. No changes needed.")
    return result.changed
