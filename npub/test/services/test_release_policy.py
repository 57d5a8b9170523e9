from __future__ import annotations

from types import MappingProxyType
from typing import get_args

from npub.output.console import MockConsole, Style
from npub.platform.process import ProcessError
from npub.services.release.errors import ReleaseError
from npub.services.release.policy import (
    STAGE_POLICIES,
    Absorbed,
    CommandGroup,
    GroupPolicy,
    OnError,
    apply_policy,
)


def _failure(command: str = "pnpm build") -> ProcessError:
    return ProcessError(command=command, returncode=1, stdout="", stderr="it broke")


def test_every_group_has_exactly_one_policy() -> None:
    assert set(STAGE_POLICIES) == set(get_args(CommandGroup))


def test_policy_table() -> None:
    table = {group: p.on_error for group, p in STAGE_POLICIES.items()}
    assert table == {
        "preflight": OnError.ABORT,
        "version_bump": OnError.ABORT,
        "commit": OnError.LOG_AND_CONTINUE,
        "tag": OnError.SILENT,
        "build": OnError.ABORT,
        "publish": OnError.LOG_AND_CONTINUE,
        "unpublish": OnError.ABORT,
    }


def test_abort_returns_error_with_detail() -> None:
    console = MockConsole()
    decided = apply_policy("build", _failure(), console=console)
    assert isinstance(decided, ReleaseError)
    assert decided.kind == "build_failed"
    assert decided.message == "build failed: pnpm build failed (exit 1)"
    assert decided.hint == "it broke"
    assert console.outputs == []


def test_log_and_continue_reports_and_absorbs() -> None:
    console = MockConsole()
    decided = apply_policy("publish", _failure("npm publish"), console=console)
    assert decided == Absorbed(warning="publish failed")
    assert console.has_error()
    assert console.find("it broke")[0].style == Style.DIM


def test_silent_absorbs_without_output() -> None:
    console = MockConsole()
    decided = apply_policy("tag", _failure("git tag -a v1"), console=console)
    assert decided == Absorbed(warning=None)
    assert console.outputs == []


def test_custom_table_overrides_defaults() -> None:
    strict = MappingProxyType(
        {**STAGE_POLICIES, "tag": GroupPolicy(OnError.ABORT, "source_control", "tag failed")}
    )
    decided = apply_policy("tag", _failure("git tag"), console=MockConsole(), policies=strict)
    assert isinstance(decided, ReleaseError)
    assert decided.kind == "source_control"
