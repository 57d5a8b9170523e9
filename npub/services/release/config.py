from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from npub.core.config import (
    DEFAULT_CONFIG_NAME,
    BuildConfig,
    ConfigError,
    load_config_file,
    merge_config,
)
from npub.core.manifest import MANIFEST_NAME, Manifest, load_manifest
from npub.core.result import Err, Ok, Result
from npub.core.structured import StrDict
from npub.services.release.errors import ReleaseError
from npub.services.release.model import DEFAULT_TASK, CommandConfig
from npub.services.release.tasks import parse_task


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    """Raw command-line input for one run."""

    config: str | None = None
    config_ignore: bool = False
    quick_beta: bool = False
    reverse: bool = False
    task: str = DEFAULT_TASK
    project_dir: str | None = None
    packager: str | None = None
    dry_run: bool = False
    allow_dirty: bool = False

    def overrides(self) -> StrDict:
        """Flags that override build config keys, in config-file shape."""
        out: StrDict = {}
        if self.project_dir is not None:
            out["projectDir"] = self.project_dir
        if self.packager is not None:
            out["packager"] = self.packager
        return out


@dataclass(frozen=True, slots=True)
class ResolvedConfig:
    command: CommandConfig
    build: BuildConfig
    manifest: Manifest
    project_root: Path

    @property
    def current_version(self) -> str:
        return self.manifest.version

    @property
    def package_name(self) -> str:
        return self.manifest.name

    @property
    def build_root(self) -> Path:
        return self.project_root / self.build.build_dir


def _config_error(e: ConfigError) -> ReleaseError:
    return ReleaseError(kind="config_invalid", message=e.message)


def _read_file_config(
    options: ReleaseOptions, path: Path
) -> Result[StrDict | None, ReleaseError]:
    """File values; None when the default file is absent or ignored."""
    if options.config_ignore:
        return Ok(None)

    explicit = options.config is not None

    loaded = load_config_file(path)
    if isinstance(loaded, Ok):
        return loaded

    e = loaded.error
    if e.missing and not explicit:
        return Ok(None)
    return Err(
        ReleaseError(
            kind="config_not_found",
            message=e.message,
            hint="Fix the path, or pass --configIgnore to use the built-in defaults.",
        )
    )


def resolve_config(options: ReleaseOptions, *, cwd: Path) -> Result[ResolvedConfig, ReleaseError]:
    """Layer defaults < config file < flags, then load the manifest.

    Nothing is written; every failure here happens before any mutation.
    """
    if options.quick_beta and options.reverse:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="--quickBeta cannot be combined with --reverse",
            )
        )

    task = parse_task(options.task)
    if isinstance(task, Err):
        return task

    config_path = cwd / (options.config or DEFAULT_CONFIG_NAME)
    file_data = _read_file_config(options, config_path)
    if isinstance(file_data, Err):
        return file_data

    build = merge_config(BuildConfig(), file_data.value or {}, path=config_path)
    if isinstance(build, Err):
        return Err(_config_error(build.error))

    build = merge_config(build.value, options.overrides())
    if isinstance(build, Err):
        return Err(_config_error(build.error))

    project_root = cwd / build.value.project_dir
    manifest = load_manifest(project_root / MANIFEST_NAME)
    if isinstance(manifest, Err):
        return Err(
            ReleaseError(
                kind="manifest_read",
                message=manifest.error.message,
                hint="Run from the package root or pass --projectDir.",
            )
        )

    command = CommandConfig(
        config_path=None if file_data.value is None else (options.config or DEFAULT_CONFIG_NAME),
        config_ignore=options.config_ignore,
        quick_beta=options.quick_beta,
        reverse=options.reverse,
        task=options.task,
        task_config=task.value,
        dry_run=options.dry_run,
        allow_dirty=options.allow_dirty,
    )
    return Ok(
        ResolvedConfig(
            command=command,
            build=build.value,
            manifest=manifest.value,
            project_root=project_root,
        )
    )
