"""What a failed command means for the run, per command group.

Source-control publication is best effort once the manifest is written; a
broken build must stop the run before anything is published.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Literal

from npub.output.console import ConsoleProtocol, Style
from npub.platform.process import ProcessError
from npub.services.release.errors import ReleaseError, ReleaseErrorKind


class OnError(Enum):
    ABORT = "abort"
    LOG_AND_CONTINUE = "log"
    SILENT = "silent"


CommandGroup = Literal[
    "preflight",
    "version_bump",
    "commit",
    "tag",
    "build",
    "publish",
    "unpublish",
]


@dataclass(frozen=True, slots=True)
class GroupPolicy:
    on_error: OnError
    error_kind: ReleaseErrorKind
    message: str


STAGE_POLICIES: Mapping[CommandGroup, GroupPolicy] = MappingProxyType(
    {
        "preflight": GroupPolicy(OnError.ABORT, "process_failed", "git status check failed"),
        "version_bump": GroupPolicy(OnError.ABORT, "version_bump_failed", "npm version failed"),
        "commit": GroupPolicy(
            OnError.LOG_AND_CONTINUE, "source_control", "version commit/push failed"
        ),
        "tag": GroupPolicy(OnError.SILENT, "source_control", "version tag/push failed"),
        "build": GroupPolicy(OnError.ABORT, "build_failed", "build failed"),
        "publish": GroupPolicy(OnError.LOG_AND_CONTINUE, "publish_failed", "publish failed"),
        "unpublish": GroupPolicy(OnError.ABORT, "unpublish_failed", "unpublish failed"),
    }
)


@dataclass(frozen=True, slots=True)
class Absorbed:
    """A non-fatal failure; ``warning`` is None when it was silent."""

    warning: str | None


def apply_policy(
    group: CommandGroup,
    error: ProcessError,
    *,
    console: ConsoleProtocol,
    policies: Mapping[CommandGroup, GroupPolicy] = STAGE_POLICIES,
) -> ReleaseError | Absorbed:
    """Decide the outcome of a failed command.

    Returns the ReleaseError to abort with, or ``Absorbed`` when the run goes on.
    """
    policy = policies[group]
    match policy.on_error:
        case OnError.ABORT:
            return ReleaseError(
                kind=policy.error_kind,
                message=f"{policy.message}: {error}",
                hint=error.detail,
            )
        case OnError.LOG_AND_CONTINUE:
            console.error(f"{policy.message}: {error}")
            if error.detail:
                console.print(error.detail, Style.DIM)
            return Absorbed(warning=policy.message)
        case OnError.SILENT:
            return Absorbed(warning=None)
