"""Release pipeline: stage handlers and the top-level run.

Each handler takes the current ``ReleaseState`` and returns a new one (or a
fatal ``ReleaseError``). Failed commands are routed through the policy table
in ``policy``; only ABORT groups end the run.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from functools import partial
from pathlib import Path

from npub.core.config import BuildConfig
from npub.core.manifest import Manifest, load_manifest, save_manifest_version
from npub.core.result import Err, Ok, Result
from npub.output.console import ConsoleProtocol, Style
from npub.platform.process import ExecutorProtocol
from npub.services.release import commands
from npub.services.release.config import ResolvedConfig
from npub.services.release.errors import ReleaseError
from npub.services.release.fsm import StageHandler, run_stages
from npub.services.release.model import (
    QUICK_BETA_CHANNEL,
    QUICK_BETA_KIND,
    REVERSE_STAGES,
    STABLE_CHANNEL,
    ReleaseState,
    RunReport,
    UserSelection,
)
from npub.services.release.planner import (
    VERSION_FORMAT_HINT,
    candidate_choices,
    channel_choices,
    next_version_candidates,
    resolve_manual_version,
)
from npub.services.release.policy import STAGE_POLICIES, CommandGroup, GroupPolicy, apply_policy
from npub.services.release.prompts import AnswererProtocol, Choice
from npub.services.release.semver import channel_of, parse_version


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    config: ResolvedConfig
    console: ConsoleProtocol
    answerer: AnswererProtocol
    executor: ExecutorProtocol
    policies: Mapping[CommandGroup, GroupPolicy] = STAGE_POLICIES

    @property
    def build(self) -> BuildConfig:
        return self.config.build

    @property
    def dry_run(self) -> bool:
        return self.config.command.dry_run


@dataclass(frozen=True, slots=True)
class _Ran:
    state: ReleaseState
    ok: bool
    stdout: str = ""


def _cancelled(what: str) -> Err[ReleaseError]:
    return Err(ReleaseError(kind="cancelled", message=f"{what} cancelled"))


def _run(
    ctx: ReleaseContext,
    state: ReleaseState,
    *,
    group: CommandGroup,
    command: str,
    cwd: Path,
) -> Result[_Ran, ReleaseError]:
    """Run a mutating command under its group's failure policy."""
    ctx.console.print(f"$ {command}", Style.DIM)
    if ctx.dry_run:
        return Ok(_Ran(state=state, ok=True))

    result = ctx.executor.run(command, cwd=cwd)
    if isinstance(result, Ok):
        return Ok(_Ran(state=state, ok=True, stdout=result.value))

    decided = apply_policy(group, result.error, console=ctx.console, policies=ctx.policies)
    if isinstance(decided, ReleaseError):
        return Err(decided)
    if decided.warning is not None:
        state = replace(state, warnings=(*state.warnings, decided.warning))
    return Ok(_Ran(state=state, ok=False))


def _show_output(ctx: ReleaseContext, stdout: str) -> None:
    text = stdout.strip()
    if text:
        ctx.console.print(text, Style.DIM)


# -----------------------------------------------------------------------------
# Preflight
# -----------------------------------------------------------------------------


def ensure_clean_worktree(ctx: ReleaseContext) -> Result[None, ReleaseError]:
    """Refuse to release from a working tree with uncommitted changes.

    Read-only, so it also runs in dry-run mode.
    """
    ctx.console.print(f"$ {commands.GIT_STATUS}", Style.DIM)
    status = ctx.executor.run(commands.GIT_STATUS, cwd=ctx.config.project_root)
    if isinstance(status, Err):
        decided = apply_policy(
            "preflight", status.error, console=ctx.console, policies=ctx.policies
        )
        if isinstance(decided, ReleaseError):
            return Err(decided)
        return Ok(None)

    changed = [line for line in status.value.splitlines() if line.strip()]
    if changed:
        shown = ", ".join(line[3:] for line in changed[:5])
        if len(changed) > 5:
            shown += ", ..."
        return Err(
            ReleaseError(
                kind="dirty_worktree",
                message=f"working tree has uncommitted changes: {shown}",
                hint="Commit or stash them first, or pass --allowDirty.",
            )
        )
    return Ok(None)


# -----------------------------------------------------------------------------
# Forward stages
# -----------------------------------------------------------------------------


def select_version(ctx: ReleaseContext, state: ReleaseState) -> Result[ReleaseState, ReleaseError]:
    if ctx.config.command.quick_beta:
        ctx.console.info(f"quick beta: {state.selection.release} -> {state.next_version}")
        return Ok(state)

    channel = ctx.answerer.choose(
        title=f"Release channel for {ctx.build.project_name}",
        subtitle=f"{state.manifest.name} is at {state.current_version}",
        choices=channel_choices(),
    )
    if channel is None:
        return _cancelled("channel selection")

    candidates = next_version_candidates(state.current_version, channel)
    if isinstance(candidates, Err):
        return candidates

    picked = ctx.answerer.choose(
        title="Next version",
        subtitle=f"current {state.current_version}, channel {channel}",
        choices=candidate_choices(candidates.value),
    )
    if picked is None:
        return _cancelled("version selection")

    if picked.value is None:
        manual = resolve_manual_version(
            answerer=ctx.answerer,
            console=ctx.console,
            prompt=f"Version to release ({VERSION_FORMAT_HINT})",
        )
        if isinstance(manual, Err):
            return manual
        release, version = manual.value, manual.value
    else:
        release, version = picked.kind, picked.value

    ctx.console.success(f"next version: {version} ({channel})")
    return Ok(
        replace(
            state,
            selection=replace(state.selection, channel=channel, release=release),
            next_version=version,
        )
    )


def select_mirror(ctx: ReleaseContext, state: ReleaseState) -> Result[ReleaseState, ReleaseError]:
    if state.selection.mirror is not None:
        ctx.console.info(f"mirror: {state.selection.mirror}")
        return Ok(state)

    mirror = ctx.answerer.choose(
        title="Registry mirror",
        choices=[
            Choice(value=label, label=label, detail=url)
            for label, url in ctx.build.mirror_map.items()
        ],
    )
    if mirror is None:
        return _cancelled("mirror selection")

    ctx.console.success(f"mirror: {mirror} ({ctx.build.mirror_map[mirror]})")
    return Ok(replace(state, selection=replace(state.selection, mirror=mirror)))


def _write_manifest(
    ctx: ReleaseContext, manifest: Manifest, version: str
) -> Result[Manifest, ReleaseError]:
    if ctx.dry_run:
        ctx.console.print(f"would write version {version} to {manifest.path}", Style.DIM)
        return Ok(manifest.with_version(version))

    saved = save_manifest_version(manifest, version)
    if isinstance(saved, Err):
        return Err(ReleaseError(kind="manifest_write", message=saved.error.message))
    ctx.console.success(f"{manifest.path.name}: {manifest.version} -> {version}")
    return saved


def _current_branch(ctx: ReleaseContext) -> Result[str, ReleaseError | None]:
    """Branch to push; Err(None) when the failure was absorbed by policy."""
    ctx.console.print(f"$ {commands.GIT_CURRENT_BRANCH}", Style.DIM)
    result = ctx.executor.run(commands.GIT_CURRENT_BRANCH, cwd=ctx.config.project_root)
    if isinstance(result, Err):
        decided = apply_policy("commit", result.error, console=ctx.console, policies=ctx.policies)
        return Err(decided if isinstance(decided, ReleaseError) else None)

    branch = result.value.strip()
    if not branch:
        # dry-run executors and detached checkouts report nothing useful
        branch = "HEAD"
    return Ok(branch)


def _commit_and_tag(
    ctx: ReleaseContext, state: ReleaseState, version: str
) -> Result[ReleaseState, ReleaseError]:
    name = state.manifest.name
    template = ctx.build.commit_message_template
    message = commands.expand_template(template, version=version, name=name)
    tag_name = commands.expand_template(ctx.build.tag_name_template, version=version, name=name)
    root = ctx.config.project_root

    manifest = _write_manifest(ctx, state.manifest, version)
    if isinstance(manifest, Err):
        return manifest
    state = replace(state, manifest=manifest.value)

    branch = _current_branch(ctx)
    if isinstance(branch, Err):
        if branch.error is not None:
            return Err(branch.error)
        state = replace(state, warnings=(*state.warnings, ctx.policies["commit"].message))
    else:
        committed = _run(
            ctx,
            state,
            group="commit",
            command=commands.commit_push_command(message, branch.value),
            cwd=root,
        )
        if isinstance(committed, Err):
            return committed
        state = committed.value.state
        if committed.value.ok:
            ctx.console.success(f"committed and pushed {version} to {branch.value}")

    tagged = _run(
        ctx,
        state,
        group="tag",
        command=commands.tag_push_command(tag_name, message),
        cwd=root,
    )
    if isinstance(tagged, Err):
        return tagged
    if tagged.value.ok:
        ctx.console.success(f"tagged {tag_name}")
    return Ok(tagged.value.state)


def _bump_with_packager(
    ctx: ReleaseContext, state: ReleaseState, version: str
) -> Result[ReleaseState, ReleaseError]:
    """Let ``npm version`` write, commit and tag, then push."""
    name = state.manifest.name
    template = ctx.build.commit_message_template
    message = commands.expand_template(template, version=version, name=name)
    release = state.selection.release or version
    root = ctx.config.project_root

    bumped = _run(
        ctx,
        state,
        group="version_bump",
        command=commands.version_bump_command(release, state.selection.channel, message),
        cwd=root,
    )
    if isinstance(bumped, Err):
        return bumped
    state = bumped.value.state

    if ctx.dry_run:
        state = replace(state, manifest=state.manifest.with_version(version))
    else:
        reloaded = load_manifest(state.manifest.path)
        if isinstance(reloaded, Err):
            return Err(ReleaseError(kind="manifest_read", message=reloaded.error.message))
        state = replace(state, manifest=reloaded.value, next_version=reloaded.value.version)
        ctx.console.success(f"npm version: {reloaded.value.version}")

    branch = _current_branch(ctx)
    if isinstance(branch, Err):
        if branch.error is not None:
            return Err(branch.error)
        state = replace(state, warnings=(*state.warnings, ctx.policies["commit"].message))
    else:
        pushed = _run(
            ctx, state, group="commit", command=commands.push_command(branch.value), cwd=root
        )
        if isinstance(pushed, Err):
            return pushed
        state = pushed.value.state

    tags = _run(ctx, state, group="tag", command=commands.GIT_TAG_PUSH, cwd=root)
    if isinstance(tags, Err):
        return tags
    return Ok(tags.value.state)


def commit_tag(ctx: ReleaseContext, state: ReleaseState) -> Result[ReleaseState, ReleaseError]:
    version = state.next_version
    if version is None:
        ctx.console.info("no new version selected; manifest, commit and tag left unchanged")
        return Ok(state)

    if ctx.build.bump_strategy == "packager":
        return _bump_with_packager(ctx, state, version)
    return _commit_and_tag(ctx, state, version)


def build(ctx: ReleaseContext, state: ReleaseState) -> Result[ReleaseState, ReleaseError]:
    command = commands.build_command(ctx.build.packager, ctx.build.build_script)
    if command is None:
        ctx.console.info("no build script configured; skipping build")
        return Ok(state)

    built = _run(ctx, state, group="build", command=command, cwd=ctx.config.project_root)
    if isinstance(built, Err):
        return built
    _show_output(ctx, built.value.stdout)
    ctx.console.success(f"built {ctx.build.project_name}")
    return Ok(built.value.state)


def _mirror_url(ctx: ReleaseContext, state: ReleaseState) -> Result[tuple[str, str], ReleaseError]:
    mirror = state.selection.mirror or ctx.build.first_mirror
    url = ctx.build.mirror_map.get(mirror)
    if url is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"unknown mirror: {mirror}",
                hint="Known mirrors: " + ", ".join(ctx.build.mirror_map),
            )
        )
    return Ok((mirror, url))


def publish(ctx: ReleaseContext, state: ReleaseState) -> Result[ReleaseState, ReleaseError]:
    resolved = _mirror_url(ctx, state)
    if isinstance(resolved, Err):
        return resolved
    mirror, url = resolved.value

    # npm publishes what the manifest holds, not what was selected
    version = state.manifest.version
    if state.next_version is not None and state.next_version != version:
        warning = f"version {state.next_version} was not written to {state.manifest.path.name}"
        ctx.console.warning(f"{warning}; publishing {version}")
        state = replace(state, warnings=(*state.warnings, warning))
    channel = state.selection.channel or channel_of(version, stable=STABLE_CHANNEL)
    command = commands.publish_command(ctx.build.packager, channel, url)

    ran = _run(ctx, state, group="publish", command=command, cwd=ctx.config.build_root)
    if isinstance(ran, Err):
        return ran
    if not ran.value.ok:
        return Ok(ran.value.state)

    _show_output(ctx, ran.value.stdout)
    ctx.console.success(f"published {state.manifest.name}@{version} to {mirror} ({channel})")
    return Ok(replace(ran.value.state, published=True))


# -----------------------------------------------------------------------------
# Reverse stages
# -----------------------------------------------------------------------------


def input_release(ctx: ReleaseContext, state: ReleaseState) -> Result[ReleaseState, ReleaseError]:
    version = resolve_manual_version(
        answerer=ctx.answerer,
        console=ctx.console,
        prompt=f"Version of {state.manifest.name} to unpublish",
    )
    if isinstance(version, Err):
        return version
    return Ok(replace(state, selection=replace(state.selection, release=version.value)))


def unpublish(ctx: ReleaseContext, state: ReleaseState) -> Result[ReleaseState, ReleaseError]:
    version = state.selection.release
    if version is None:
        return Err(ReleaseError(kind="invalid_input", message="no version to unpublish"))

    resolved = _mirror_url(ctx, state)
    if isinstance(resolved, Err):
        return resolved
    mirror, url = resolved.value

    command = commands.unpublish_command(ctx.build.packager, state.manifest.name, version, url)
    ran = _run(ctx, state, group="unpublish", command=command, cwd=ctx.config.project_root)
    if isinstance(ran, Err):
        return ran

    ctx.console.success(f"unpublished {state.manifest.name}@{version} from {mirror}")
    return Ok(ran.value.state)


# -----------------------------------------------------------------------------
# Run
# -----------------------------------------------------------------------------


def _forward_handlers(ctx: ReleaseContext) -> dict[str, StageHandler[ReleaseState]]:
    return {
        "selectVersion": partial(select_version, ctx),
        "selectMirror": partial(select_mirror, ctx),
        "commitTag": partial(commit_tag, ctx),
        "build": partial(build, ctx),
        "publish": partial(publish, ctx),
    }


def _reverse_handlers(ctx: ReleaseContext) -> dict[str, StageHandler[ReleaseState]]:
    return {
        "inputRelease": partial(input_release, ctx),
        "selectMirror": partial(select_mirror, ctx),
        "unpublish": partial(unpublish, ctx),
    }


def initial_state(config: ResolvedConfig) -> Result[ReleaseState, ReleaseError]:
    """Starting state; quick beta pre-fills the whole selection."""
    state = ReleaseState(manifest=config.manifest)
    if not config.command.quick_beta:
        return Ok(state)

    current = parse_version(config.current_version)
    if current is None:
        return Err(
            ReleaseError(
                kind="manifest_invalid",
                message=f"current version is not a supported semver: {config.current_version}",
                hint=VERSION_FORMAT_HINT,
            )
        )
    return Ok(
        replace(
            state,
            selection=UserSelection(
                channel=QUICK_BETA_CHANNEL,
                release=QUICK_BETA_KIND,
                mirror=config.build.first_mirror,
            ),
            next_version=str(current.inc(QUICK_BETA_KIND, QUICK_BETA_CHANNEL)),
        )
    )


def run_release(
    config: ResolvedConfig,
    *,
    console: ConsoleProtocol,
    answerer: AnswererProtocol,
    executor: ExecutorProtocol,
) -> Result[RunReport, ReleaseError]:
    ctx = ReleaseContext(config=config, console=console, answerer=answerer, executor=executor)
    command = config.command

    if command.reverse:
        stages: tuple[str, ...] = REVERSE_STAGES
        handlers = _reverse_handlers(ctx)
        title = "Unpublish"
    else:
        stages = command.task_config.ordered()
        handlers = _forward_handlers(ctx)
        title = "Release"

    console.header(f"{title} {config.package_name} ({config.build.project_name})")
    console.print(f"current version: {config.current_version}")
    console.print("stages: " + (" -> ".join(stages) or "(none)"), Style.DIM)
    if command.config_path is None and not command.config_ignore:
        console.print("no config file found; using defaults", Style.DIM)
    if command.dry_run:
        console.warning("dry run: commands are printed, not executed")

    start = initial_state(config)
    if isinstance(start, Err):
        return start

    if not command.reverse and "commitTag" in stages and not command.allow_dirty:
        clean = ensure_clean_worktree(ctx)
        if isinstance(clean, Err):
            return clean

    total = len(stages)
    position = {name: i + 1 for i, name in enumerate(stages)}

    def enter(stage: str) -> None:
        console.header(f"[{position[stage]}/{total}] {stage}")

    final = run_stages(initial_state=start.value, stages=stages, handlers=handlers, on_enter=enter)
    if isinstance(final, Err):
        return final

    state = final.value
    return Ok(
        RunReport(
            package=state.manifest.name,
            version=(state.selection.release or state.target_version)
            if command.reverse
            else state.manifest.version,
            stages=stages,
            published=state.published,
            warnings=state.warnings,
            dry_run=command.dry_run,
        )
    )
