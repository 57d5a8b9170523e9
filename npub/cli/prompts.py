from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import typer

from npub.cli.selector import SelectorOption, is_interactive_terminal, select_one
from npub.output.console import ConsoleProtocol, Style
from npub.services.release.prompts import Choice


@dataclass(frozen=True, slots=True)
class TerminalAnswerer:
    """Asks the maintainer on the terminal.

    Uses the arrow-key selector on a TTY and a numbered list otherwise.
    Ctrl-C, EOF and ``q`` in the selector all count as cancel.
    """

    console: ConsoleProtocol
    use_selector: bool | None = None

    def _selector_enabled(self) -> bool:
        if self.use_selector is None:
            return is_interactive_terminal()
        return self.use_selector

    def choose[T](
        self, *, title: str, choices: Sequence[Choice[T]], subtitle: str | None = None
    ) -> T | None:
        if not choices:
            return None

        if self._selector_enabled():
            options = [
                SelectorOption(value=c.value, label=c.label, detail=c.detail) for c in choices
            ]
            picked = select_one(title=title, subtitle=subtitle, options=options)
            if picked.action != "select":
                return None
            return picked.value

        return self._choose_numbered(title=title, choices=choices, subtitle=subtitle)

    def _choose_numbered[T](
        self, *, title: str, choices: Sequence[Choice[T]], subtitle: str | None
    ) -> T | None:
        self.console.header(title)
        if subtitle:
            self.console.print(subtitle, Style.DIM)
        for i, c in enumerate(choices, start=1):
            detail = f"  {c.detail}" if c.detail else ""
            self.console.print(f"{i:2}. {c.label}{detail}")

        while True:
            try:
                raw = typer.prompt("Pick a number", default="1")
            except typer.Abort:
                return None
            try:
                idx = int(raw)
            except ValueError:
                self.console.error("invalid number")
                continue
            if idx < 1 or idx > len(choices):
                self.console.error("out of range")
                continue
            return choices[idx - 1].value

    def text(self, *, prompt: str) -> str | None:
        try:
            return typer.prompt(prompt)
        except typer.Abort:
            return None
