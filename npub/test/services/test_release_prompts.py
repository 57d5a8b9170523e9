from __future__ import annotations

import pytest

from npub.services.release.prompts import Choice, ScriptedAnswerer, ScriptExhausted

_CHOICES = [
    Choice(value="latest", label="release"),
    Choice(value="beta", label="beta"),
]


def test_choose_by_label_or_value() -> None:
    answerer = ScriptedAnswerer.of(["release", "beta"])
    assert answerer.choose(title="Channel", choices=_CHOICES) == "latest"
    assert answerer.choose(title="Channel", choices=_CHOICES) == "beta"
    assert answerer.asked == ["Channel", "Channel"]
    assert answerer.remaining == 0


def test_none_means_cancel() -> None:
    answerer = ScriptedAnswerer.of([None, None])
    assert answerer.choose(title="Channel", choices=_CHOICES) is None
    assert answerer.text(prompt="Version") is None


def test_unknown_answer_fails_loudly() -> None:
    answerer = ScriptedAnswerer.of(["stable"])
    with pytest.raises(AssertionError, match="not a choice"):
        answerer.choose(title="Channel", choices=_CHOICES)


def test_exhausted_feed() -> None:
    answerer = ScriptedAnswerer.of([])
    with pytest.raises(ScriptExhausted):
        answerer.text(prompt="Version")
