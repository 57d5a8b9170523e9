from __future__ import annotations

from dataclasses import dataclass, replace

from npub.core.result import Err, Ok, Result
from npub.services.release.errors import ReleaseError
from npub.services.release.fsm import run_stages


@dataclass(frozen=True, slots=True)
class _State:
    trail: tuple[str, ...] = ()


def _mark(name: str):
    def handler(s: _State) -> Result[_State, ReleaseError]:
        return Ok(replace(s, trail=(*s.trail, name)))

    return handler


def test_run_stages_threads_state_in_order() -> None:
    entered: list[str] = []
    result = run_stages(
        initial_state=_State(),
        stages=("a", "b", "c"),
        handlers={"a": _mark("a"), "b": _mark("b"), "c": _mark("c")},
        on_enter=entered.append,
    )

    assert result == Ok(_State(trail=("a", "b", "c")))
    assert entered == ["a", "b", "c"]


def test_unlisted_handlers_are_never_called() -> None:
    def boom(_: _State) -> Result[_State, ReleaseError]:
        raise AssertionError("should not run")

    result = run_stages(
        initial_state=_State(),
        stages=("a",),
        handlers={"a": _mark("a"), "b": boom},
    )
    assert result == Ok(_State(trail=("a",)))


def test_no_stages_returns_initial_state() -> None:
    start = _State(trail=("x",))
    assert run_stages(initial_state=start, stages=(), handlers={}) == Ok(start)


def test_unknown_stage_fails() -> None:
    result = run_stages(initial_state=_State(), stages=("missing",), handlers={})
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_input"


def test_first_error_stops_the_run() -> None:
    def bad(_: _State) -> Result[_State, ReleaseError]:
        return Err(ReleaseError(kind="build_failed", message="boom"))

    def after(_: _State) -> Result[_State, ReleaseError]:
        raise AssertionError("should not run")

    result = run_stages(
        initial_state=_State(),
        stages=("a", "bad", "after"),
        handlers={"a": _mark("a"), "bad": bad, "after": after},
    )
    assert isinstance(result, Err)
    assert result.error.message == "boom"
