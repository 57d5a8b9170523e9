from __future__ import annotations

from npub.core.result import Err, Ok, Result
from npub.output.console import ConsoleProtocol
from npub.services.release.errors import ReleaseError
from npub.services.release.model import (
    CHANNELS,
    STABLE_CHANNEL,
    BumpKind,
    ReleaseKind,
    VersionCandidate,
)
from npub.services.release.prompts import AnswererProtocol, Choice
from npub.services.release.semver import parse_version, validate_version


BUMP_ORDER: tuple[BumpKind, ...] = (
    "prerelease",
    "patch",
    "prepatch",
    "minor",
    "preminor",
    "major",
    "premajor",
)
STABLE_BUMPS: frozenset[BumpKind] = frozenset({"patch", "minor", "major"})

_KIND_HINTS: dict[ReleaseKind, str] = {
    "prerelease": "next pre-release build",
    "patch": "bug fixes",
    "prepatch": "pre-release of the next patch",
    "minor": "new features",
    "preminor": "pre-release of the next minor",
    "major": "breaking changes",
    "premajor": "pre-release of the next major",
    "manual": "type a version",
}

VERSION_FORMAT_HINT = "Expected MAJOR.MINOR.PATCH or MAJOR.MINOR.PATCH-<tag>.<build>"


def next_version_candidates(
    current: str, channel: str
) -> Result[tuple[VersionCandidate, ...], ReleaseError]:
    """Candidate versions for each bump kind, with ``manual`` last.

    The stable channel only offers patch/minor/major; pre-release kinds
    would contradict the request for a stable release.
    """
    base = parse_version(current)
    if base is None:
        return Err(
            ReleaseError(
                kind="manifest_invalid",
                message=f"current version is not a supported semver: {current}",
                hint=VERSION_FORMAT_HINT,
            )
        )

    kinds = BUMP_ORDER
    if channel == STABLE_CHANNEL:
        kinds = tuple(k for k in BUMP_ORDER if k in STABLE_BUMPS)

    out: list[VersionCandidate] = []
    for kind in kinds:
        value = str(base.inc(kind, channel))
        out.append(VersionCandidate(kind=kind, label=f"{kind} ({value})", value=value))
    out.append(VersionCandidate(kind="manual", label="manual", value=None))
    return Ok(tuple(out))


def candidate_choices(candidates: tuple[VersionCandidate, ...]) -> list[Choice[VersionCandidate]]:
    return [Choice(value=c, label=c.label, detail=_KIND_HINTS[c.kind]) for c in candidates]


def channel_choices() -> list[Choice[str]]:
    return [
        Choice(value=tag, label=label, detail=f"npm dist-tag '{tag}'")
        for label, tag in CHANNELS.items()
    ]


def resolve_manual_version(
    *,
    answerer: AnswererProtocol,
    console: ConsoleProtocol,
    prompt: str,
) -> Result[str, ReleaseError]:
    """Ask for a literal version until it passes the grammar check."""
    while True:
        raw = answerer.text(prompt=prompt)
        if raw is None:
            return Err(ReleaseError(kind="cancelled", message="version entry cancelled"))
        version = raw.strip()
        if validate_version(version):
            return Ok(version)
        console.warning(f"invalid version: {version or '(empty)'}")
        console.print(VERSION_FORMAT_HINT)
