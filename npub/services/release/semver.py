from __future__ import annotations

import re
from dataclasses import dataclass, replace

from npub.services.release.model import BumpKind


_OFFICIAL_RE = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")
_PRERELEASE_RE = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)-([A-Za-z]+)\.([0-9]+)")


def validate_version(version: str) -> bool:
    """True iff version is MAJOR.MINOR.PATCH or MAJOR.MINOR.PATCH-<tag>.<build>."""
    return (
        _OFFICIAL_RE.fullmatch(version) is not None
        or _PRERELEASE_RE.fullmatch(version) is not None
    )


@dataclass(frozen=True, slots=True)
class PreRelease:
    tag: str
    build: int

    def __str__(self) -> str:
        return f"{self.tag}.{self.build}"


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    pre: PreRelease | None = None

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre is None:
            return base
        return f"{base}-{self.pre}"

    @property
    def is_prerelease(self) -> bool:
        return self.pre is not None

    def _start_pre(self, preid: str) -> SemVer:
        return replace(self, pre=PreRelease(preid, 0))

    def _bump_pre(self, preid: str) -> SemVer:
        if self.pre is None or self.pre.tag != preid:
            return self._start_pre(preid)
        return replace(self, pre=PreRelease(preid, self.pre.build + 1))

    def inc(self, kind: BumpKind, preid: str) -> SemVer:
        """Increment following npm's semver.inc rules.

        ``preid`` is the pre-release identifier used by the ``pre*`` kinds
        and ignored by the plain ones.
        """
        match kind:
            case "major":
                # 2.0.0-beta.1 -> 2.0.0, 2.1.0 -> 3.0.0
                if self.minor != 0 or self.patch != 0 or self.pre is None:
                    return SemVer(self.major + 1, 0, 0)
                return SemVer(self.major, 0, 0)
            case "minor":
                if self.patch != 0 or self.pre is None:
                    return SemVer(self.major, self.minor + 1, 0)
                return SemVer(self.major, self.minor, 0)
            case "patch":
                if self.pre is None:
                    return SemVer(self.major, self.minor, self.patch + 1)
                return SemVer(self.major, self.minor, self.patch)
            case "premajor":
                return SemVer(self.major + 1, 0, 0)._start_pre(preid)
            case "preminor":
                return SemVer(self.major, self.minor + 1, 0)._start_pre(preid)
            case "prepatch":
                return SemVer(self.major, self.minor, self.patch + 1)._start_pre(preid)
            case "prerelease":
                if self.pre is None:
                    return self.inc("prepatch", preid)
                return self._bump_pre(preid)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


def parse_version(version: str) -> SemVer | None:
    m = _OFFICIAL_RE.fullmatch(version)
    if m is not None:
        return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _PRERELEASE_RE.fullmatch(version)
    if m is None:
        return None
    return SemVer(
        int(m.group(1)),
        int(m.group(2)),
        int(m.group(3)),
        PreRelease(m.group(4), int(m.group(5))),
    )


def channel_of(version: str, *, stable: str) -> str:
    """Dist-tag implied by a version: its pre-release tag, else ``stable``."""
    parsed = parse_version(version)
    if parsed is None or parsed.pre is None:
        return stable
    return parsed.pre.tag
