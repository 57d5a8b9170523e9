from __future__ import annotations

from npub.core.result import Err, Ok
from npub.output.console import MockConsole
from npub.services.release.planner import (
    candidate_choices,
    channel_choices,
    next_version_candidates,
    resolve_manual_version,
)
from npub.services.release.prompts import ScriptedAnswerer


def test_latest_channel_offers_only_stable_bumps() -> None:
    result = next_version_candidates("1.2.3", "latest")
    assert isinstance(result, Ok)
    assert [c.kind for c in result.value] == ["patch", "minor", "major", "manual"]
    assert [c.value for c in result.value] == ["1.2.4", "1.3.0", "2.0.0", None]


def test_beta_channel_offers_all_kinds() -> None:
    result = next_version_candidates("1.2.3", "beta")
    assert isinstance(result, Ok)
    kinds = [c.kind for c in result.value]
    assert kinds == [
        "prerelease",
        "patch",
        "prepatch",
        "minor",
        "preminor",
        "major",
        "premajor",
        "manual",
    ]
    values = [c.value for c in result.value if c.value is not None]
    assert values == [
        "1.2.4-beta.0",
        "1.2.4",
        "1.2.4-beta.0",
        "1.3.0",
        "1.3.0-beta.0",
        "2.0.0",
        "2.0.0-beta.0",
    ]


def test_pre_release_kinds_differ_on_a_pre_release() -> None:
    result = next_version_candidates("1.2.4-beta.0", "beta")
    assert isinstance(result, Ok)
    by_kind = {c.kind: c.value for c in result.value}
    assert by_kind["prerelease"] == "1.2.4-beta.1"
    assert by_kind["prepatch"] == "1.2.5-beta.0"
    assert len({v for v in by_kind.values() if v is not None}) == 7


def test_labels_show_computed_value() -> None:
    result = next_version_candidates("1.0.0", "private")
    assert isinstance(result, Ok)
    assert result.value[0].label == "prerelease (1.0.1-private.0)"
    assert result.value[-1].label == "manual"


def test_unsupported_current_version() -> None:
    result = next_version_candidates("1.0", "beta")
    assert isinstance(result, Err)
    assert result.error.kind == "manifest_invalid"


def test_candidate_choices_carry_candidates() -> None:
    result = next_version_candidates("1.2.3", "latest")
    assert isinstance(result, Ok)
    choices = candidate_choices(result.value)
    assert [c.value for c in choices] == list(result.value)
    assert all(c.detail for c in choices)


def test_channel_choices_map_release_to_latest() -> None:
    assert [(c.label, c.value) for c in channel_choices()] == [
        ("beta", "beta"),
        ("private", "private"),
        ("release", "latest"),
    ]


class TestResolveManualVersion:
    def test_accepts_valid_version(self) -> None:
        answerer = ScriptedAnswerer.of(["1.3.0"])
        result = resolve_manual_version(
            answerer=answerer, console=MockConsole(), prompt="Version"
        )
        assert result == Ok("1.3.0")

    def test_reprompts_until_valid(self) -> None:
        console = MockConsole()
        answerer = ScriptedAnswerer.of(["1.3", "banana", " 1.3.0-rc.1 "])
        result = resolve_manual_version(answerer=answerer, console=console, prompt="Version")
        assert result == Ok("1.3.0-rc.1")
        assert len(console.find("invalid version")) == 2
        assert answerer.asked == ["Version", "Version", "Version"]

    def test_rejects_non_ascii_digits(self) -> None:
        console = MockConsole()
        answerer = ScriptedAnswerer.of(["\u0661.3.0", "1.3.0"])
        result = resolve_manual_version(answerer=answerer, console=console, prompt="Version")
        assert result == Ok("1.3.0")
        assert len(console.find("invalid version")) == 1

    def test_cancel(self) -> None:
        answerer = ScriptedAnswerer.of([None])
        result = resolve_manual_version(
            answerer=answerer, console=MockConsole(), prompt="Version"
        )
        assert isinstance(result, Err)
        assert result.error.kind == "cancelled"
