from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from npub import __version__
from npub.cli.context import build_context
from npub.core.errors import ErrorCode
from npub.core.result import Err
from npub.output import ConsoleProtocol, RichConsole, Style
from npub.services.release.config import ReleaseOptions, resolve_config
from npub.services.release.errors import ReleaseError, ReleaseErrorKind
from npub.services.release.model import DEFAULT_TASK, RunReport
from npub.services.release.pipeline import run_release


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


EXIT_CODES: dict[ReleaseErrorKind, ErrorCode] = {
    "config_not_found": ErrorCode.USER_ERROR,
    "config_invalid": ErrorCode.USER_ERROR,
    "task_parse": ErrorCode.USER_ERROR,
    "invalid_input": ErrorCode.USER_ERROR,
    "cancelled": ErrorCode.USER_ERROR,
    "version_invalid": ErrorCode.USER_ERROR,
    "dirty_worktree": ErrorCode.ENV_ERROR,
    "manifest_invalid": ErrorCode.ENV_ERROR,
    "source_control": ErrorCode.ENV_ERROR,
    "build_failed": ErrorCode.BUILD_ERROR,
    "version_bump_failed": ErrorCode.BUILD_ERROR,
    "process_failed": ErrorCode.BUILD_ERROR,
    "publish_failed": ErrorCode.NETWORK_ERROR,
    "unpublish_failed": ErrorCode.NETWORK_ERROR,
    "manifest_read": ErrorCode.IO_ERROR,
    "manifest_write": ErrorCode.IO_ERROR,
}


def exit_code_for(error: ReleaseError) -> ErrorCode:
    return EXIT_CODES.get(error.kind, ErrorCode.BUILD_ERROR)


def _fail(console: ConsoleProtocol, error: ReleaseError) -> NoReturn:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(exit_code_for(error)))


def _print_summary(console: ConsoleProtocol, report: RunReport) -> None:
    console.newline()
    prefix = "dry run: " if report.dry_run else ""
    if report.published:
        console.success(f"{prefix}{report.package}@{report.version} released")
    else:
        console.success(f"{prefix}{report.package}@{report.version}: done")
    for warning in report.warnings:
        console.warning(warning)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_show_version,
        is_eager=True,
    ),
) -> None:
    del version


@app.command()
def run(
    config: str | None = typer.Option(
        None, "--config", help="JSON build config (default: build.config.json)"
    ),
    config_ignore: bool = typer.Option(
        False, "--configIgnore", help="Ignore the config file; use built-in defaults"
    ),
    quick_beta: bool = typer.Option(
        False, "--quickBeta", help="Skip prompts: next beta prerelease to the first mirror"
    ),
    reverse: bool = typer.Option(False, "--reverse", help="Unpublish a version instead"),
    task: str = typer.Option(
        DEFAULT_TASK, "--task", help="Dash-joined stages to run, in pipeline order"
    ),
    project_dir: str | None = typer.Option(
        None, "--projectDir", help="Package directory, relative to the current one"
    ),
    packager: str | None = typer.Option(None, "--packager", help="npm, pnpm or yarn"),
    dry_run: bool = typer.Option(False, "--dryRun", help="Print commands without running them"),
    allow_dirty: bool = typer.Option(
        False, "--allowDirty", help="Skip the uncommitted-changes check"
    ),
) -> None:
    """Version, tag, build and publish the package in the current directory."""
    console = RichConsole()
    options = ReleaseOptions(
        config=config,
        config_ignore=config_ignore,
        quick_beta=quick_beta,
        reverse=reverse,
        task=task,
        project_dir=project_dir,
        packager=packager,
        dry_run=dry_run,
        allow_dirty=allow_dirty,
    )

    resolved = resolve_config(options, cwd=Path.cwd())
    if isinstance(resolved, Err):
        _fail(console, resolved.error)

    ctx = build_context(resolved.value.build, console=console)
    report = run_release(
        resolved.value,
        console=ctx.console,
        answerer=ctx.answerer,
        executor=ctx.executor,
    )
    if isinstance(report, Err):
        _fail(console, report.error)

    _print_summary(console, report.value)


def main() -> None:
    app()
