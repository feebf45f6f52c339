from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from shadcn_setup import jsonc
from shadcn_setup.setup_project import (
    Step,
    StepFailed,
    detect_language,
    select_language,
    setup_project,
)
from shadcn_setup.templates import INDEX_CSS, Language, template_path

INSTALL = ["npm", "install", "tailwindcss", "@tailwindcss/vite", "@shadcn/ui"]
INSTALL_TYPES = ["npm", "install", "-D", "@types/node"]
INIT = ["npx", "shadcn@latest", "init", "-y"]


class _FakeRunner:
    def __init__(self, *, fail_on: str = "", code: int = 1, error: OSError | None = None) -> None:
        self.fail_on = fail_on
        self.code = code
        self.error = error
        self.calls: list[list[str]] = []
        self.cwds: list[Path] = []

    def __call__(self, argv: Sequence[str], cwd: Path) -> int:
        self.calls.append(list(argv))
        self.cwds.append(cwd)
        if self.fail_on and self.fail_on in argv:
            if self.error is not None:
                raise self.error
            return self.code
        return 0


def _vite_project(root: Path, *, app: str = "App.tsx") -> Path:
    src = root / "src"
    src.mkdir()
    (src / app).write_text("export default function App() { return null }\n", encoding="utf-8")
    (src / "index.css").write_text(":root { color: red; }\n", encoding="utf-8")
    return root


def test_detect_language_probes_root_component(tmp_path: Path) -> None:
    assert detect_language(tmp_path) is None
    _vite_project(tmp_path, app="App.jsx")
    assert detect_language(tmp_path) is Language.JAVASCRIPT
    (tmp_path / "src" / "App.tsx").write_text("", encoding="utf-8")
    assert detect_language(tmp_path) is Language.TYPESCRIPT


def test_select_language_prefers_request_then_probe_then_prompt(tmp_path: Path) -> None:
    asked: list[bool] = []

    def prompt() -> Language:
        asked.append(True)
        return Language.JAVASCRIPT

    assert select_language(tmp_path, Language.TYPESCRIPT, prompt=prompt) is Language.TYPESCRIPT
    assert select_language(tmp_path, prompt=prompt) is Language.JAVASCRIPT
    assert asked == [True]

    _vite_project(tmp_path)
    assert select_language(tmp_path, prompt=prompt) is Language.TYPESCRIPT
    assert asked == [True]


def test_select_language_without_prompt_fails(tmp_path: Path) -> None:
    with pytest.raises(StepFailed) as exc:
        select_language(tmp_path)

    assert exc.value.step is Step.SELECT_LANGUAGE


def test_typescript_project_end_to_end(tmp_path: Path) -> None:
    root = _vite_project(tmp_path)
    (root / "tsconfig.json").write_text(
        '{\n  // solution file\n  "files": [],\n  "references": [{ "path": "./tsconfig.app.json" }]\n}\n',
        encoding="utf-8",
    )
    runner = _FakeRunner()
    messages: list[str] = []

    report = setup_project(root, runner=runner, log=messages.append)

    assert report.language is Language.TYPESCRIPT
    assert runner.calls == [INSTALL, INSTALL_TYPES, INIT]
    assert runner.cwds == [root, root, root]
    assert (root / "src" / "index.css").read_text(encoding="utf-8") == INDEX_CSS

    tsconfig = (root / "tsconfig.json").read_text(encoding="utf-8")
    assert "// solution file" in tsconfig
    assert jsonc.parse(tsconfig).data["compilerOptions"]["paths"] == {"@/*": ["./src/*"]}

    app_template = template_path(Language.TYPESCRIPT, "tsconfig.app.json")
    assert (root / "tsconfig.app.json").read_bytes() == app_template.read_bytes()
    vite_template = template_path(Language.TYPESCRIPT, "vite.config.ts")
    assert (root / "vite.config.ts").read_bytes() == vite_template.read_bytes()

    assert report.files_written == [
        "src/index.css",
        "tsconfig.json",
        "tsconfig.app.json",
        "vite.config.ts",
    ]
    assert "Created vite.config.ts" in messages


def test_javascript_project_replaces_incomplete_vite_config(tmp_path: Path) -> None:
    root = _vite_project(tmp_path, app="App.jsx")
    (root / "vite.config.js").write_text(
        'export default defineConfig({ resolve: { alias: { "@": "/src" } } })\n',
        encoding="utf-8",
    )
    runner = _FakeRunner()

    report = setup_project(root, runner=runner)

    assert report.language is Language.JAVASCRIPT
    assert runner.calls == [INSTALL, INIT]
    assert (root / "vite.config.js").read_bytes() == template_path(
        Language.JAVASCRIPT, "vite.config.js"
    ).read_bytes()
    assert (root / "jsconfig.json").read_bytes() == template_path(
        Language.JAVASCRIPT, "jsconfig.json"
    ).read_bytes()
    assert not (root / "tsconfig.json").exists()
    assert report.files_written == ["src/index.css", "jsconfig.json", "vite.config.js"]


def test_existing_jsconfig_is_patched_in_place(tmp_path: Path) -> None:
    root = _vite_project(tmp_path, app="App.jsx")
    (root / "jsconfig.json").write_text('{\n  "extra": 1\n}\n', encoding="utf-8")

    setup_project(root, runner=_FakeRunner())

    data = jsonc.parse((root / "jsconfig.json").read_text(encoding="utf-8")).data
    assert data["extra"] == 1
    assert data["compilerOptions"]["paths"]["@/*"] == ["./src/*"]


def test_complete_vite_config_is_left_alone(tmp_path: Path) -> None:
    root = _vite_project(tmp_path)
    original = (
        'import tailwindcss from "@tailwindcss/vite"\n'
        "export default defineConfig({\n"
        "  plugins: [tailwindcss()],\n"
        '  resolve: { alias: { "@": "/src" } },\n'
        "})\n"
    )
    (root / "vite.config.ts").write_text(original, encoding="utf-8")

    report = setup_project(root, runner=_FakeRunner())

    assert (root / "vite.config.ts").read_text(encoding="utf-8") == original
    assert "vite.config.ts" not in report.files_written


def test_install_failure_aborts_before_any_write(tmp_path: Path) -> None:
    root = _vite_project(tmp_path)
    runner = _FakeRunner(fail_on="install")

    with pytest.raises(StepFailed) as exc:
        setup_project(root, runner=runner)

    assert exc.value.step is Step.INSTALL_DEPENDENCIES
    assert "exited with status 1" in str(exc.value)
    assert runner.calls == [INSTALL]
    assert (root / "src" / "index.css").read_text(encoding="utf-8") == ":root { color: red; }\n"
    assert not (root / "tsconfig.json").exists()
    assert not (root / "tsconfig.app.json").exists()
    assert not (root / "vite.config.ts").exists()


def test_missing_package_manager_binary_is_a_step_failure(tmp_path: Path) -> None:
    root = _vite_project(tmp_path)
    runner = _FakeRunner(fail_on="install", error=FileNotFoundError(2, "No such file", "npm"))

    with pytest.raises(StepFailed) as exc:
        setup_project(root, runner=runner)

    assert exc.value.step is Step.INSTALL_DEPENDENCIES
    assert "could not run `npm install" in str(exc.value)


def test_missing_src_directory_fails_stylesheet_step(tmp_path: Path) -> None:
    runner = _FakeRunner()

    with pytest.raises(StepFailed) as exc:
        setup_project(tmp_path, Language.TYPESCRIPT, runner=runner)

    assert exc.value.step is Step.WRITE_STYLESHEET
    assert "root of a Vite app" in str(exc.value)
    assert runner.calls == [INSTALL, INSTALL_TYPES]
    assert not (tmp_path / "tsconfig.json").exists()


def test_initializer_failure_is_fatal(tmp_path: Path) -> None:
    root = _vite_project(tmp_path)
    runner = _FakeRunner(fail_on="init", code=2)

    with pytest.raises(StepFailed) as exc:
        setup_project(root, runner=runner)

    assert exc.value.step is Step.RUN_INITIALIZER
    assert "exited with status 2" in str(exc.value)
    assert (root / "vite.config.ts").exists()


def test_skip_init_reports_skipped_initializer(tmp_path: Path) -> None:
    root = _vite_project(tmp_path)
    runner = _FakeRunner()

    report = setup_project(root, runner=runner, skip_init=True)

    assert report.initializer_skipped is True
    assert INIT not in runner.calls


def test_lockfile_selects_package_manager_commands(tmp_path: Path) -> None:
    root = _vite_project(tmp_path)
    (root / "pnpm-lock.yaml").write_text("", encoding="utf-8")
    runner = _FakeRunner()

    report = setup_project(root, runner=runner)

    assert report.package_manager == "pnpm"
    assert runner.calls == [
        ["pnpm", "add", "tailwindcss", "@tailwindcss/vite", "@shadcn/ui"],
        ["pnpm", "add", "-D", "@types/node"],
        ["pnpm", "dlx", "shadcn@latest", "init", "-y"],
    ]


def test_second_run_only_rewrites_the_stylesheet(tmp_path: Path) -> None:
    root = _vite_project(tmp_path)
    setup_project(root, runner=_FakeRunner())
    snapshot = {p.name: p.read_bytes() for p in root.glob("*.json")}

    report = setup_project(root, runner=_FakeRunner())

    assert report.files_written == ["src/index.css"]
    assert {p.name: p.read_bytes() for p in root.glob("*.json")} == snapshot


def test_report_serializes_commands(tmp_path: Path) -> None:
    root = _vite_project(tmp_path, app="App.jsx")

    doc = setup_project(root, runner=_FakeRunner()).to_dict()

    assert doc["kind"] == "shadcn-setup.report.v1"
    assert doc["language"] == "JavaScript"
    assert doc["packageManager"] == "npm"
    assert doc["commands"] == [
        "npm install tailwindcss @tailwindcss/vite @shadcn/ui",
        "npx shadcn@latest init -y",
    ]
    assert doc["initializerSkipped"] is False
