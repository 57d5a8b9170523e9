from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Choice[T]:
    value: T
    label: str
    detail: str | None = None


class AnswererProtocol(Protocol):
    """Capability to ask the maintainer questions.

    Both methods return None when the user cancels.
    """

    def choose[T](
        self, *, title: str, choices: Sequence[Choice[T]], subtitle: str | None = None
    ) -> T | None: ...

    def text(self, *, prompt: str) -> str | None: ...


class ScriptExhausted(AssertionError):
    """A scripted answer feed ran out of answers."""


def _empty_feed() -> deque[str | None]:
    return deque()


@dataclass
class ScriptedAnswerer:
    """Answers questions from a fixed feed, in order.

    ``choose`` accepts an answer matching either a choice label or its value
    (compared as strings). ``None`` in the feed means "cancel".
    """

    feed: deque[str | None] = field(default_factory=_empty_feed)
    asked: list[str] = field(default_factory=list)

    @classmethod
    def of(cls, answers: Iterable[str | None]) -> ScriptedAnswerer:
        return cls(feed=deque(answers))

    def _next(self, question: str) -> str | None:
        self.asked.append(question)
        if not self.feed:
            raise ScriptExhausted(f"no scripted answer for: {question}")
        return self.feed.popleft()

    def choose[T](
        self, *, title: str, choices: Sequence[Choice[T]], subtitle: str | None = None
    ) -> T | None:
        answer = self._next(title)
        if answer is None:
            return None
        for c in choices:
            if answer in (c.label, str(c.value)):
                return c.value
        raise AssertionError(
            f"scripted answer {answer!r} is not a choice for {title!r}: "
            + ", ".join(c.label for c in choices)
        )

    def text(self, *, prompt: str) -> str | None:
        return self._next(prompt)

    @property
    def remaining(self) -> int:
        return len(self.feed)
