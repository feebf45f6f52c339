"""Linear setup pipeline for a Vite project.

Steps run in a fixed order and any failure is terminal: files already written
stay written and nothing is retried. External commands go through an injected
`CommandRunner` so the pipeline can run without a package manager.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Sequence

from .alias_config import ensure_alias
from .cli_shared import REPORT_KIND, OpError, _write_text
from .commands import (
    RUNTIME_PACKAGES,
    TYPESCRIPT_DEV_PACKAGES,
    CommandRunner,
    format_command,
    initializer_command,
    install_command,
    resolve_package_manager,
    run_command,
)
from .templates import INDEX_CSS, Language, materialize, template_path, vite_config_template
from .vite_config import patch_file

Log = Callable[[str], None]
LanguagePrompt = Callable[[], Language]

LANGUAGE_PROBES = (
    ("src/App.tsx", Language.TYPESCRIPT),
    ("src/App.jsx", Language.JAVASCRIPT),
)


class Step(str, Enum):
    SELECT_LANGUAGE = "SelectLanguage"
    INSTALL_DEPENDENCIES = "InstallDependencies"
    WRITE_STYLESHEET = "WriteStylesheet"
    RECONCILE_ALIAS_CONFIG = "ReconcileAliasConfig"
    PATCH_BUNDLER_CONFIG = "PatchOrMaterializeBundlerConfig"
    RUN_INITIALIZER = "RunExternalInitializer"

    @property
    def label(self) -> str:
        return _STEP_LABELS[self]


_STEP_LABELS = {
    Step.SELECT_LANGUAGE: "select language",
    Step.INSTALL_DEPENDENCIES: "install dependencies",
    Step.WRITE_STYLESHEET: "write stylesheet",
    Step.RECONCILE_ALIAS_CONFIG: "configure path alias",
    Step.PATCH_BUNDLER_CONFIG: "configure vite",
    Step.RUN_INITIALIZER: "initialize shadcn/ui",
}


class StepFailed(OpError):
    def __init__(self, step: Step, reason: str) -> None:
        super().__init__(f"{step.label} failed: {reason}")
        self.step = step
        self.reason = reason


@dataclass
class SetupReport:
    language: Language
    package_manager: str
    files_written: list[str] = field(default_factory=list)
    commands: list[list[str]] = field(default_factory=list)
    initializer_skipped: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": REPORT_KIND,
            "language": self.language.value,
            "packageManager": self.package_manager,
            "filesWritten": list(self.files_written),
            "commands": [format_command(c) for c in self.commands],
            "initializerSkipped": self.initializer_skipped,
        }


def _noop(_msg: str) -> None:
    return None


def detect_language(root: Path) -> Language | None:
    for rel, language in LANGUAGE_PROBES:
        if (root / rel).is_file():
            return language
    return None


def select_language(
    root: Path,
    requested: Language | None = None,
    *,
    prompt: LanguagePrompt | None = None,
) -> Language:
    if requested is not None:
        return requested
    detected = detect_language(root)
    if detected is not None:
        return detected
    if prompt is None:
        raise StepFailed(
            Step.SELECT_LANGUAGE,
            "could not detect src/App.tsx or src/App.jsx; pass --language",
        )
    return prompt()


def _run_external(
    step: Step,
    argv: Sequence[str],
    *,
    root: Path,
    runner: CommandRunner,
    report: SetupReport,
) -> None:
    report.commands.append(list(argv))
    try:
        code = runner(argv, root)
    except OSError as e:
        raise StepFailed(step, f"could not run `{format_command(argv)}`: {e}") from e
    if code != 0:
        raise StepFailed(step, f"`{format_command(argv)}` exited with status {code}")


def _install_dependencies(
    language: Language, *, root: Path, runner: CommandRunner, report: SetupReport, log: Log
) -> None:
    log("Installing TailwindCSS, shadcn/ui, and related dependencies...")
    pm = report.package_manager
    step = Step.INSTALL_DEPENDENCIES
    _run_external(step, install_command(pm, RUNTIME_PACKAGES), root=root, runner=runner, report=report)
    if language.is_typescript:
        _run_external(
            step,
            install_command(pm, TYPESCRIPT_DEV_PACKAGES, dev=True),
            root=root,
            runner=runner,
            report=report,
        )


def _write_stylesheet(root: Path, report: SetupReport, log: Log) -> None:
    src = root / "src"
    target = src / "index.css"
    if not src.is_dir():
        raise StepFailed(
            Step.WRITE_STYLESHEET,
            "could not write to src/index.css. Make sure you are in the root of a Vite app.",
        )
    try:
        _write_text(target, INDEX_CSS)
    except OSError as e:
        raise StepFailed(
            Step.WRITE_STYLESHEET,
            f"could not write to src/index.css ({e}). Make sure you are in the root of a Vite app.",
        ) from e
    report.files_written.append("src/index.css")
    log("Updated src/index.css.")


def _materialize_then_alias(root: Path, name: str, language: Language, report: SetupReport, log: Log) -> None:
    target = root / name
    created = materialize(target, template_path(language, name))
    if created:
        log(f"Created {name} from template.")
    if ensure_alias(target, log=log) or created:
        report.files_written.append(name)


def _reconcile_alias_config(root: Path, language: Language, report: SetupReport, log: Log) -> None:
    try:
        if language.is_typescript:
            if ensure_alias(root / "tsconfig.json", log=log):
                report.files_written.append("tsconfig.json")
            _materialize_then_alias(root, "tsconfig.app.json", language, report, log)
        else:
            _materialize_then_alias(root, "jsconfig.json", language, report, log)
    except (OSError, OpError, UnicodeError) as e:
        raise StepFailed(Step.RECONCILE_ALIAS_CONFIG, str(e)) from e


def _patch_bundler_config(root: Path, language: Language, report: SetupReport, log: Log) -> None:
    name = language.vite_config_name
    target = root / name
    try:
        if target.exists():
            changed = patch_file(target, language, vite_config_template, log=log)
        else:
            changed = materialize(target, template_path(language, name))
            if changed:
                log(f"Created {name}")
    except (OSError, OpError, UnicodeError) as e:
        raise StepFailed(Step.PATCH_BUNDLER_CONFIG, str(e)) from e
    if changed:
        report.files_written.append(name)


def setup_project(
    root: Path,
    language: Language | None = None,
    *,
    prompt: LanguagePrompt | None = None,
    runner: CommandRunner = run_command,
    package_manager: str | None = None,
    skip_init: bool = False,
    log: Log | None = None,
) -> SetupReport:
    """Install and configure Tailwind CSS and shadcn/ui in the Vite app at `root`."""
    log = log or _noop
    chosen = select_language(root, language, prompt=prompt)
    report = SetupReport(
        language=chosen,
        package_manager=resolve_package_manager(root, package_manager),
    )

    _install_dependencies(chosen, root=root, runner=runner, report=report, log=log)
    _write_stylesheet(root, report, log)
    _reconcile_alias_config(root, chosen, report, log)
    _patch_bundler_config(root, chosen, report, log)

    if skip_init:
        report.initializer_skipped = True
        log("Skipping shadcn/ui init.")
        return report
    log("Initializing shadcn/ui...")
    _run_external(
        Step.RUN_INITIALIZER,
        initializer_command(report.package_manager),
        root=root,
        runner=runner,
        report=report,
    )
    return report
