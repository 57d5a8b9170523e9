from __future__ import annotations

from dataclasses import dataclass

from npub.cli.prompts import TerminalAnswerer
from npub.core.config import BuildConfig
from npub.output.console import ConsoleProtocol, RichConsole
from npub.platform.process import ExecutorProtocol, ShellExecutor
from npub.services.release.prompts import AnswererProtocol


@dataclass(frozen=True, slots=True)
class CLIContext:
    console: ConsoleProtocol
    answerer: AnswererProtocol
    executor: ExecutorProtocol


def build_context(build: BuildConfig, *, console: ConsoleProtocol | None = None) -> CLIContext:
    """Wire the terminal console, prompts and shell for one run."""
    out = console if console is not None else RichConsole()
    return CLIContext(
        console=out,
        answerer=TerminalAnswerer(console=out),
        executor=ShellExecutor(timeout=build.command_timeout, fail_on_stderr=build.fail_on_stderr),
    )
