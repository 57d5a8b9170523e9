"""Platform adapters: shell execution and filesystem writes."""

from .files import replace_text, write_json
from .process import ExecutorProtocol, ProcessError, RecordingExecutor, ShellExecutor, run_shell

__all__ = [
    "ExecutorProtocol",
    "ProcessError",
    "RecordingExecutor",
    "ShellExecutor",
    "replace_text",
    "run_shell",
    "write_json",
]
