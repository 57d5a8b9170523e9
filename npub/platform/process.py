"""Shell command execution with Result-based error handling.

Release commands are compound POSIX shell strings (``git add . && git commit
...``), so they run through ``/bin/sh`` rather than as argument vectors.

Usage:
    result = run_shell("git rev-parse --abbrev-ref HEAD", cwd=Path("."))
    match result:
        case Ok(stdout):
            print(stdout.strip())
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from npub.core.result import Err, Ok, Result

__all__ = [
    "ExecutorProtocol",
    "ProcessError",
    "RecordingExecutor",
    "ShellExecutor",
    "run_shell",
]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed shell command.

    Attributes:
        command: The shell command string.
        returncode: Exit code, or -1 when the command could not run or timed out.
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: str
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = self.command if len(self.command) <= 60 else self.command[:57] + "..."
        if self.returncode == 0:
            return f"{cmd_str} wrote to stderr"
        return f"{cmd_str} failed (exit {self.returncode})"

    @property
    def detail(self) -> str | None:
        text = self.stderr.strip() or self.stdout.strip()
        return text or None


def run_shell(
    command: str,
    cwd: Path,
    *,
    timeout: float | None = None,
    fail_on_stderr: bool = True,
) -> Result[str, ProcessError]:
    """Run a shell command and return its stdout.

    Args:
        command: Command line passed to the shell.
        cwd: Working directory for the command.
        timeout: Maximum seconds to wait (None for no limit).
        fail_on_stderr: Treat any stderr output as failure even on exit 0.

    Returns:
        Ok(stdout) on success, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            command,
            shell=True,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        stdout = e.stdout if isinstance(e.stdout, str) else ""
        return Err(
            ProcessError(
                command=command,
                returncode=-1,
                stdout=stdout,
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=command, returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0 or (fail_on_stderr and proc.stderr.strip()):
        return Err(
            ProcessError(
                command=command,
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


class ExecutorProtocol(Protocol):
    """Capability to run one shell command to completion."""

    def run(self, command: str, *, cwd: Path) -> Result[str, ProcessError]: ...


@dataclass(frozen=True, slots=True)
class ShellExecutor:
    """Production executor backed by ``run_shell``."""

    timeout: float | None = None
    fail_on_stderr: bool = True

    def run(self, command: str, *, cwd: Path) -> Result[str, ProcessError]:
        return run_shell(
            command,
            cwd,
            timeout=self.timeout,
            fail_on_stderr=self.fail_on_stderr,
        )


Responder = Callable[[str], Result[str, ProcessError]]


def _no_calls() -> list[tuple[str, Path]]:
    return []


def _no_responses() -> dict[str, Result[str, ProcessError]]:
    return {}


@dataclass
class RecordingExecutor:
    """Executor that records commands instead of running them.

    ``responses`` maps a command prefix to the result returned for commands
    starting with it (longest prefix wins); everything else succeeds with
    empty output.
    """

    responses: dict[str, Result[str, ProcessError]] = field(default_factory=_no_responses)
    calls: list[tuple[str, Path]] = field(default_factory=_no_calls)
    responder: Responder | None = None

    def run(self, command: str, *, cwd: Path) -> Result[str, ProcessError]:
        self.calls.append((command, cwd))
        if self.responder is not None:
            return self.responder(command)
        matches = [p for p in self.responses if command.startswith(p)]
        if not matches:
            return Ok("")
        return self.responses[max(matches, key=len)]

    @property
    def commands(self) -> list[str]:
        return [c for c, _ in self.calls]

    def fail(self, prefix: str, *, returncode: int = 1, stderr: str = "boom") -> None:
        """Make commands starting with prefix fail."""
        self.responses[prefix] = Err(
            ProcessError(command=prefix, returncode=returncode, stdout="", stderr=stderr)
        )

    def reply(self, prefix: str, stdout: str) -> None:
        self.responses[prefix] = Ok(stdout)
