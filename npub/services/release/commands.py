"""Shell command synthesis for release stages.

Every function here is pure: it only builds strings. Free-text arguments
(commit messages, tag names, registry URLs) are quoted for a POSIX shell.
"""

from __future__ import annotations

import re
import shlex

GIT_ADD = "git add ."
GIT_TAG_PUSH = "git push --tags"
GIT_STATUS = "git status --porcelain"
GIT_CURRENT_BRANCH = "git rev-parse --abbrev-ref HEAD"

VERSION_PLACEHOLDER = "%s"
NAME_PLACEHOLDER = "%n"

_PLACEHOLDER_RE = re.compile(r"%[sn]")

# Packagers that accept --no-git-checks on publish.
_GIT_CHECK_PACKAGERS = frozenset({"pnpm"})


def expand_template(template: str, *, version: str, name: str) -> str:
    """Replace ``%s`` with the version and ``%n`` with the package name.

    One left-to-right pass: substituted text is never rescanned, so a name
    containing a literal ``%s`` stays as is. There is no escape syntax.
    """
    values = {VERSION_PLACEHOLDER: version, NAME_PLACEHOLDER: name}
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(0)], template)


def and_then(*commands: str) -> str:
    return " && ".join(commands)


def commit_command(message: str) -> str:
    return f"git commit -m {shlex.quote(message)}"


def push_command(branch: str) -> str:
    return f"git push --set-upstream origin {shlex.quote(branch)}"


def tag_command(tag_name: str, message: str) -> str:
    """Annotated tag."""
    return f"git tag -a {shlex.quote(tag_name)} -m {shlex.quote(message)}"


def commit_push_command(message: str, branch: str) -> str:
    return and_then(GIT_ADD, commit_command(message), push_command(branch))


def tag_push_command(tag_name: str, message: str) -> str:
    return and_then(tag_command(tag_name, message), GIT_TAG_PUSH)


def version_bump_command(release: str, channel: str | None, message: str) -> str:
    """``npm version`` invocation; npm commits and tags by itself.

    ``release`` is a bump kind (``minor``, ``prerelease``...) or a literal
    version. ``--preid`` only matters for kinds, so it is omitted for literals.
    """
    parts = ["npm", "version", shlex.quote(release)]
    if channel and not release[:1].isdigit():
        parts.append(f"--preid={shlex.quote(channel)}")
    parts.extend(["-m", shlex.quote(message)])
    return " ".join(parts)


def build_command(packager: str, build_script: str | None) -> str | None:
    """``<packager> <script>``, or None when no build script is configured."""
    if not build_script:
        return None
    return f"{packager} {build_script}"


def publish_command(packager: str, channel: str, mirror_url: str) -> str:
    parts = [
        packager,
        "publish",
        "--tag",
        shlex.quote(channel),
        "--registry",
        shlex.quote(mirror_url),
        "--access",
        "public",
    ]
    if packager in _GIT_CHECK_PACKAGERS:
        parts.append("--no-git-checks")
    return " ".join(parts)


def unpublish_command(packager: str, name: str, version: str, mirror_url: str) -> str:
    return " ".join(
        [
            packager,
            "unpublish",
            shlex.quote(f"{name}@{version}"),
            "--registry",
            shlex.quote(mirror_url),
            "--force",
        ]
    )
