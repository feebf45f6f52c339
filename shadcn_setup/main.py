from __future__ import annotations

import sys
from pathlib import Path

import click
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from . import __version__
from .cli_shared import (
    SHADCN_SETUP_LANGUAGE,
    GlobalOpts,
    OpError,
    UsageError,
    _apply_global_env,
    _print_json,
)
from .commands import run_command
from .setup_project import SetupReport, setup_project
from .templates import Language

app = typer.Typer(
    name="shadcn-setup",
    help="Install and wire up Tailwind CSS and shadcn/ui in a Vite app.",
    add_completion=False,
)

_ERROR_CONSOLE = Console(stderr=True)


def _rich_error(msg: str) -> None:
    _ERROR_CONSOLE.print(f"[bold red]error:[/bold red] {escape(msg)}", highlight=False)


def _bootstrap_env() -> None:
    # Discover and load .env without overriding exported process environment values.
    load_dotenv()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"shadcn-setup {__version__}")
        raise typer.Exit(code=0)


def _prompt_language() -> Language:
    choice = typer.prompt(
        "Which language does your project use?",
        type=click.Choice([Language.JAVASCRIPT.value, Language.TYPESCRIPT.value]),
    )
    return Language(choice)


def _status_printer(g: GlobalOpts):
    console = Console(stderr=True, quiet=g.quiet)

    def emit(msg: str) -> None:
        console.print(msg, markup=False, highlight=False)

    return emit


def _print_success(report: SetupReport) -> None:
    typer.echo("")
    typer.echo("All set! shadcn/ui and TailwindCSS are installed and configured.")
    if report.initializer_skipped:
        typer.echo("shadcn/ui init was skipped; run 'npx shadcn@latest init' when ready.")
    typer.echo("You can now use 'npx shadcn add [component]' to install individual components as needed.")
    typer.echo("")
    typer.echo("Example:")
    typer.echo("  npx shadcn add button")


@app.command(help="Set up Tailwind CSS and shadcn/ui in the current Vite project.")
def setup(
    language: str | None = typer.Option(
        None,
        "--language",
        "-l",
        help=f"TypeScript or JavaScript (default: detect from src/App.*, env {SHADCN_SETUP_LANGUAGE}, or prompt)",
    ),
    project_dir: Path = typer.Option(
        Path("."),
        "--project-dir",
        help="Root of the Vite app (default: current directory)",
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit a JSON report instead of the summary"),
    quiet: bool = typer.Option(False, "--quiet", help="Reduce stderr logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    del version
    g = _apply_global_env(
        project_dir=project_dir,
        language=language,
        quiet=quiet,
        json_output=json_output,
    )
    requested = Language.parse(g.language) if g.language else None
    report = setup_project(
        g.project_dir,
        requested,
        prompt=_prompt_language,
        runner=run_command,
        package_manager=g.package_manager or None,
        skip_init=g.skip_init,
        log=_status_printer(g),
    )
    if g.json_output:
        _print_json(report.to_dict())
        return
    _print_success(report)


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        _bootstrap_env()
        result = app(args=argv, prog_name="shadcn-setup", standalone_mode=False)
        if result is None:
            return 0
        return int(result)
    except typer.Exit as e:
        return int(e.exit_code)
    except click.exceptions.Abort:
        _rich_error("aborted")
        return 1
    except click.ClickException as e:
        _rich_error(e.format_message())
        return int(e.exit_code)
    except UsageError as e:
        _rich_error(str(e))
        return 2
    except OpError as e:
        _rich_error(str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
