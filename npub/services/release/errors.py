from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "config_not_found",
    "config_invalid",
    "task_parse",
    "manifest_read",
    "manifest_invalid",
    "manifest_write",
    "version_invalid",
    "source_control",
    "dirty_worktree",
    "build_failed",
    "version_bump_failed",
    "publish_failed",
    "unpublish_failed",
    "process_failed",
    "cancelled",
    "invalid_input",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
