from __future__ import annotations

import pytest
import typer

from npub.cli import prompts as prompts_mod
from npub.cli.prompts import TerminalAnswerer
from npub.cli.selector import SelectorResult, render_rows
from npub.output import MockConsole
from npub.services.release.prompts import Choice

_CHOICES = [
    Choice(value="beta", label="beta", detail="npm dist-tag 'beta'"),
    Choice(value="latest", label="release", detail="npm dist-tag 'latest'"),
]


def _feed(monkeypatch: pytest.MonkeyPatch, answers: list[str]) -> None:
    queue = list(answers)

    def fake_prompt(text: str, default: str | None = None) -> str:
        del text, default
        if not queue:
            raise typer.Abort()
        return queue.pop(0)

    monkeypatch.setattr(prompts_mod.typer, "prompt", fake_prompt)


def test_numbered_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    console = MockConsole()
    _feed(monkeypatch, ["x", "9", "2"])
    answerer = TerminalAnswerer(console=console, use_selector=False)

    assert answerer.choose(title="Release channel", choices=_CHOICES) == "latest"
    assert console.find(" 2. release  npm dist-tag 'latest'")
    assert console.find("invalid number")
    assert console.find("out of range")


def test_numbered_fallback_abort_is_cancel(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed(monkeypatch, [])
    answerer = TerminalAnswerer(console=MockConsole(), use_selector=False)
    assert answerer.choose(title="Release channel", choices=_CHOICES) is None


def test_text(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed(monkeypatch, ["1.3.0"])
    answerer = TerminalAnswerer(console=MockConsole(), use_selector=False)
    assert answerer.text(prompt="Version") == "1.3.0"
    assert answerer.text(prompt="Version") is None


def test_selector_path(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_select(*, title: str, options: list[object], subtitle: str | None = None):
        del title, subtitle
        return SelectorResult(action="select", value="latest", index=len(options) - 1)

    monkeypatch.setattr(prompts_mod, "select_one", fake_select)
    answerer = TerminalAnswerer(console=MockConsole(), use_selector=True)
    assert answerer.choose(title="Release channel", choices=_CHOICES) == "latest"


def test_selector_cancel(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_select(*, title: str, options: list[object], subtitle: str | None = None):
        del title, options, subtitle
        return SelectorResult(action="cancel", value=None, index=0)

    monkeypatch.setattr(prompts_mod, "select_one", fake_select)
    answerer = TerminalAnswerer(console=MockConsole(), use_selector=True)
    assert answerer.choose(title="Release channel", choices=_CHOICES) is None


def test_render_rows_marks_selection() -> None:
    lines = render_rows([("beta", "pre-release"), ("release", "stable")], 1, cols=80)
    assert lines[0].startswith("+")
    assert "Option" in lines[1]
    assert ">>02" in lines[4]
    assert "  01" in lines[3]
    assert len({len(line) for line in lines}) == 1
