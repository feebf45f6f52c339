from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Sequence

from .cli_shared import UsageError

CommandRunner = Callable[[Sequence[str], Path], int]

PACKAGE_MANAGERS = ("npm", "pnpm", "yarn", "bun")
RUNTIME_PACKAGES = ("tailwindcss", "@tailwindcss/vite", "@shadcn/ui")
TYPESCRIPT_DEV_PACKAGES = ("@types/node",)

_LOCKFILES = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
)


def run_command(argv: Sequence[str], cwd: Path) -> int:
    """Run `argv` in `cwd` with inherited stdio and return its exit status."""
    args = list(argv)
    # npm/npx are .cmd shims on Windows; resolve them so no shell is needed.
    args[0] = shutil.which(args[0]) or args[0]
    completed = subprocess.run(args, cwd=str(cwd), check=False)
    return int(completed.returncode)


def format_command(argv: Sequence[str]) -> str:
    return shlex.join(list(argv))


def detect_package_manager(root: Path) -> str:
    for lockfile, name in _LOCKFILES:
        if (root / lockfile).exists():
            return name
    return "npm"


def resolve_package_manager(root: Path, requested: str | None = None) -> str:
    name = str(requested or "").strip().lower()
    if not name:
        return detect_package_manager(root)
    if name not in PACKAGE_MANAGERS:
        raise UsageError(
            f"unsupported package manager {requested!r} (expected one of {', '.join(PACKAGE_MANAGERS)})"
        )
    return name


def install_command(package_manager: str, packages: Sequence[str], *, dev: bool = False) -> list[str]:
    if package_manager == "npm":
        cmd = ["npm", "install"]
        if dev:
            cmd.append("-D")
    elif package_manager == "bun":
        cmd = ["bun", "add"]
        if dev:
            cmd.append("-d")
    else:
        cmd = [package_manager, "add"]
        if dev:
            cmd.append("-D")
    return cmd + list(packages)


def initializer_command(package_manager: str) -> list[str]:
    if package_manager == "pnpm":
        return ["pnpm", "dlx", "shadcn@latest", "init", "-y"]
    if package_manager == "bun":
        return ["bunx", "--bun", "shadcn@latest", "init", "-y"]
    return ["npx", "shadcn@latest", "init", "-y"]
