"""Typed build configuration loading and merging.

This module provides the ``BuildConfig`` dataclass for the optional
``build.config.json`` project file, its built-in defaults, and the layered
merge (defaults < file < command-line overrides).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Literal, cast

from .result import Err, Ok, Result
from .structured import MISSING, StrDict, as_str_dict, get_str_map, lookup

__all__ = [
    "BuildConfig",
    "BumpStrategy",
    "ConfigError",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_MIRROR_MAP",
    "load_config_file",
    "merge_config",
    "merge_mirror_map",
]

DEFAULT_CONFIG_NAME = "build.config.json"

BumpStrategy = Literal["manifest", "packager"]

# Built-in registries. Project files may add mirrors but never replace these.
DEFAULT_MIRROR_MAP: Mapping[str, str] = MappingProxyType(
    {"NPM": "https://registry.npmjs.org/"},
)

DEFAULT_BUILD_SCRIPT = "build"
DEFAULT_PACKAGER = "pnpm"
DEFAULT_TAG_NAME_TEMPLATE = "v%s"
DEFAULT_COMMIT_MESSAGE_TEMPLATE = "feat: Publish Release Version: %s [#000000]"
DEFAULT_PROJECT_NAME = "Project"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the config file cannot be loaded or has the wrong shape."""

    message: str
    path: Path | None = None
    missing: bool = False


def _default_mirrors() -> Mapping[str, str]:
    return DEFAULT_MIRROR_MAP


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Project-level release configuration, immutable for one run."""

    build_script: str | None = DEFAULT_BUILD_SCRIPT
    build_dir: str = "."
    project_dir: str = "."
    packager: str = DEFAULT_PACKAGER
    mirror_map: Mapping[str, str] = field(default_factory=_default_mirrors)
    tag_name_template: str = DEFAULT_TAG_NAME_TEMPLATE
    project_name: str = DEFAULT_PROJECT_NAME
    commit_message_template: str = DEFAULT_COMMIT_MESSAGE_TEMPLATE
    bump_strategy: BumpStrategy = "manifest"
    fail_on_stderr: bool = True
    command_timeout: float | None = None

    @property
    def first_mirror(self) -> str:
        return next(iter(self.mirror_map))

    def as_dict(self) -> dict[str, object]:
        """JSON-shaped view (camelCase keys), as written in build.config.json."""
        return {
            "buildScript": self.build_script,
            "buildDir": self.build_dir,
            "projectDir": self.project_dir,
            "packager": self.packager,
            "mirrorMap": dict(self.mirror_map),
            "tagNameTemplate": self.tag_name_template,
            "projectName": self.project_name,
            "commitMessageTemplate": self.commit_message_template,
            "bumpStrategy": self.bump_strategy,
            "failOnStderr": self.fail_on_stderr,
            "commandTimeout": self.command_timeout,
        }


# camelCase file key -> dataclass field, for plain string settings.
_STR_FIELDS: dict[str, str] = {
    "buildDir": "build_dir",
    "projectDir": "project_dir",
    "packager": "packager",
    "tagNameTemplate": "tag_name_template",
    "projectName": "project_name",
    "commitMessageTemplate": "commit_message_template",
}


def merge_mirror_map(
    defaults: Mapping[str, str], overlay: Mapping[str, str] | None
) -> Mapping[str, str]:
    """Overlay project mirrors, then re-apply the built-ins so they always win.

    Built-in labels keep their position first, so "first mirror" is stable.
    """
    merged: dict[str, str] = dict(defaults)
    for label, url in (overlay or {}).items():
        merged[label] = url
    merged.update(defaults)
    return MappingProxyType(merged)


def _invalid(key: str, expected: str, path: Path | None) -> Err[ConfigError]:
    return Err(ConfigError(f"config key '{key}' must be {expected}", path=path))


def merge_config(
    base: BuildConfig,
    data: Mapping[str, object],
    *,
    path: Path | None = None,
) -> Result[BuildConfig, ConfigError]:
    """Shallow-merge a JSON-shaped mapping over ``base``.

    Missing keys keep the base value. ``buildScript`` may be ``null`` or ``""``
    to disable the build stage.
    """
    updates: dict[str, object] = {}

    for key, attr in _STR_FIELDS.items():
        value = lookup(data, key)
        if value is MISSING:
            continue
        if not isinstance(value, str) or not value.strip():
            return _invalid(key, "a non-empty string", path)
        updates[attr] = value.strip()

    script = lookup(data, "buildScript")
    if script is not MISSING:
        if script is not None and not isinstance(script, str):
            return _invalid("buildScript", "a string or null", path)
        updates["build_script"] = (script or "").strip() or None

    strategy = lookup(data, "bumpStrategy")
    if strategy is not MISSING:
        if strategy not in ("manifest", "packager"):
            return _invalid("bumpStrategy", "'manifest' or 'packager'", path)
        updates["bump_strategy"] = cast(BumpStrategy, strategy)

    strict = lookup(data, "failOnStderr")
    if strict is not MISSING:
        if not isinstance(strict, bool):
            return _invalid("failOnStderr", "a boolean", path)
        updates["fail_on_stderr"] = strict

    timeout = lookup(data, "commandTimeout")
    if timeout is not MISSING:
        if timeout is not None and (
            isinstance(timeout, bool) or not isinstance(timeout, int | float) or timeout <= 0
        ):
            return _invalid("commandTimeout", "a positive number or null", path)
        updates["command_timeout"] = float(timeout) if timeout is not None else None

    if lookup(data, "mirrorMap") is not MISSING:
        mirrors = get_str_map(data, "mirrorMap")
        if mirrors is None:
            return _invalid("mirrorMap", "an object of label -> registry URL", path)
        updates["mirror_map"] = merge_mirror_map(DEFAULT_MIRROR_MAP, mirrors)

    return Ok(replace(base, **updates))  # type: ignore[arg-type]


def load_config_file(path: Path) -> Result[StrDict, ConfigError]:
    """Read and parse a JSON config file into a string-keyed mapping."""
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"config file not found: {path}", path=path, missing=True))
    except PermissionError:
        return Err(ConfigError(f"permission denied reading: {path}", path=path))
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"invalid JSON syntax: {e}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"error reading config: {e}", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(ConfigError("config root must be a JSON object", path=path))
    return Ok(data)
