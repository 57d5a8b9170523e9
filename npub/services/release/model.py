from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from npub.core.manifest import Manifest


ReleaseKind = Literal[
    "prerelease",
    "patch",
    "prepatch",
    "minor",
    "preminor",
    "major",
    "premajor",
    "manual",
]
BumpKind = Literal["prerelease", "patch", "prepatch", "minor", "preminor", "major", "premajor"]

StageName = Literal["selectVersion", "selectMirror", "commitTag", "build", "publish"]
ReverseStageName = Literal["inputRelease", "selectMirror", "unpublish"]

FORWARD_STAGES: tuple[StageName, ...] = (
    "selectVersion",
    "selectMirror",
    "commitTag",
    "build",
    "publish",
)
REVERSE_STAGES: tuple[ReverseStageName, ...] = ("inputRelease", "selectMirror", "unpublish")

DEFAULT_TASK = "-".join(FORWARD_STAGES)

# Prompt label -> npm dist-tag; also used as the pre-release identifier.
CHANNELS: Mapping[str, str] = MappingProxyType(
    {
        "beta": "beta",
        "private": "private",
        "release": "latest",
    }
)
STABLE_CHANNEL = "latest"

QUICK_BETA_CHANNEL = "beta"
QUICK_BETA_KIND: BumpKind = "prerelease"


@dataclass(frozen=True, slots=True)
class TaskConfig:
    """Which forward stages are enabled for this run."""

    enabled: frozenset[StageName]

    def is_enabled(self, stage: StageName) -> bool:
        return stage in self.enabled

    def as_dict(self) -> dict[StageName, bool]:
        return {stage: stage in self.enabled for stage in FORWARD_STAGES}

    def ordered(self) -> tuple[StageName, ...]:
        """Enabled stages in fixed pipeline order."""
        return tuple(s for s in FORWARD_STAGES if s in self.enabled)


@dataclass(frozen=True, slots=True)
class CommandConfig:
    config_path: str | None
    config_ignore: bool
    quick_beta: bool
    reverse: bool
    task: str
    task_config: TaskConfig
    dry_run: bool = False
    allow_dirty: bool = False


@dataclass(frozen=True, slots=True)
class VersionCandidate:
    kind: ReleaseKind
    label: str
    value: str | None  # None for "manual"


@dataclass(frozen=True, slots=True)
class UserSelection:
    channel: str | None = None
    release: str | None = None  # a BumpKind or a literal version
    mirror: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseState:
    """Value threaded through the pipeline; each stage returns a new one."""

    manifest: Manifest
    selection: UserSelection = field(default_factory=UserSelection)
    next_version: str | None = None
    published: bool = False
    warnings: tuple[str, ...] = ()

    @property
    def current_version(self) -> str:
        return self.manifest.version

    @property
    def target_version(self) -> str:
        return self.next_version or self.manifest.version


@dataclass(frozen=True, slots=True)
class RunReport:
    package: str
    version: str
    stages: tuple[str, ...]
    published: bool
    warnings: tuple[str, ...]
    dry_run: bool
